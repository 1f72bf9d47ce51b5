"""
Tests for the CAPTCHA login loop and session bootstrap.

The backend is a scripted stand-in; prompts come from scripted_ask().
"""

import pytest

from erp_core.auth import LoginFlow, LoginState, ensure_session
from erp_core.errors import BackendError, TransportError
from erp_core.models import CaptchaChallenge, LoginResult, StudentRecord
from erp_core.session_store import load_session, save_session

from .conftest import make_png, scripted_ask

STUDENT = StudentRecord(name="Asha Verma", rollNo="21CS001", branch="CSE", semester=5)


class ScriptedBackend:
    """Rejects the first `rejections` CAPTCHA submissions, then accepts."""

    def __init__(self, rejections=0, success_value=True, submit_error=None,
                 refresh_error=None, captcha_error=None, dashboard_error=None):
        self.rejections = rejections
        self.success_value = success_value
        self.submit_error = submit_error
        self.refresh_error = refresh_error
        self.captcha_error = captcha_error
        self.dashboard_error = dashboard_error
        self.submits = []
        self.refreshes = []
        self.dashboard_calls = []

    def get_captcha(self, roll_no, password):
        if self.captcha_error:
            raise self.captcha_error
        self.credentials = (roll_no, password)
        return CaptchaChallenge(session_id="sess-1", image=make_png())

    def submit_captcha(self, session_id, captcha_text):
        self.submits.append((session_id, captcha_text))
        if len(self.submits) <= self.rejections:
            if self.submit_error:
                raise self.submit_error
            return LoginResult(success=False, message="Invalid CAPTCHA")
        return LoginResult(success=self.success_value, student=STUDENT)

    def refresh_captcha(self, session_id):
        if self.refresh_error:
            raise self.refresh_error
        self.refreshes.append(session_id)
        return CaptchaChallenge(session_id=session_id, image=make_png(color="black"))

    def get_dashboard(self, session_id):
        self.dashboard_calls.append(session_id)
        if self.dashboard_error:
            raise self.dashboard_error
        return {"name": "Asha Verma"}


def _flow(backend, console, session_path, tmp_path, ask):
    return LoginFlow(backend, console, ask=ask, inline_ok=False,
                     session_path=session_path, captcha_file=tmp_path / "captcha.png")


# ── LoginFlow ─────────────────────────────────────────────────────

class TestLoginFlow:

    def test_two_rejections_then_success(self, console, session_path, tmp_path):
        backend = ScriptedBackend(rejections=2)
        ask = scripted_ask("21CS001", "secret", "aaaa", "bbbb", "cccc")
        flow = _flow(backend, console, session_path, tmp_path, ask)

        session = flow.run()

        assert backend.refreshes == ["sess-1", "sess-1"], "expected exactly two refreshes"
        assert flow.refreshes == 2
        assert flow.state is LoginState.LOGGED_IN
        assert [text for _, text in backend.submits] == ["aaaa", "bbbb", "cccc"]
        assert session.session_id == "sess-1"
        stored = load_session(session_path)
        assert stored.session_id == "sess-1"
        assert stored.student.roll_no == "21CS001"

    def test_submit_errors_count_as_wrong_captcha(self, console, session_path, tmp_path):
        backend = ScriptedBackend(rejections=1, submit_error=TransportError("timed out"))
        ask = scripted_ask("21CS001", "secret", "aaaa", "bbbb")
        session = _flow(backend, console, session_path, tmp_path, ask).run()
        assert len(backend.refreshes) == 1
        assert session.session_id == "sess-1"
        assert "Login failed: timed out" in console.file.getvalue()

    def test_string_true_is_success(self, console, session_path, tmp_path):
        backend = ScriptedBackend(success_value="true")
        ask = scripted_ask("21CS001", "secret", "aaaa")
        _flow(backend, console, session_path, tmp_path, ask).run()
        assert backend.refreshes == []
        assert load_session(session_path) is not None

    def test_string_false_is_rejection(self, console, session_path, tmp_path):
        backend = ScriptedBackend()
        backend.submit_captcha = _first_then(backend.submit_captcha, LoginResult(success="false"))
        ask = scripted_ask("21CS001", "secret", "aaaa", "bbbb")
        _flow(backend, console, session_path, tmp_path, ask).run()
        assert len(backend.refreshes) == 1

    def test_empty_inputs_are_reprompted(self, console, session_path, tmp_path):
        backend = ScriptedBackend()
        ask = scripted_ask("", "  21CS001 ", "", "secret", "   ", "x7Kp")
        _flow(backend, console, session_path, tmp_path, ask).run()
        assert backend.credentials == ("21CS001", "secret")
        assert backend.submits == [("sess-1", "x7Kp")]
        out = console.file.getvalue()
        assert "Roll number is required" in out
        assert "Password is required" in out
        assert "CAPTCHA is required" in out

    def test_credentials_passed_in_skip_prompts(self, console, session_path, tmp_path):
        backend = ScriptedBackend()
        ask = scripted_ask("x7Kp")
        _flow(backend, console, session_path, tmp_path, ask).run(roll_no="21CS001", password="pw")
        assert backend.credentials == ("21CS001", "pw")

    def test_initial_captcha_failure_is_fatal(self, console, session_path, tmp_path):
        backend = ScriptedBackend(captcha_error=BackendError("Invalid credentials", status_code=401))
        ask = scripted_ask("21CS001", "wrong")
        with pytest.raises(BackendError, match="Invalid credentials"):
            _flow(backend, console, session_path, tmp_path, ask).run()
        assert backend.submits == []
        assert load_session(session_path) is None

    def test_refresh_failure_is_fatal(self, console, session_path, tmp_path):
        backend = ScriptedBackend(rejections=1, refresh_error=TransportError("connection reset"))
        ask = scripted_ask("21CS001", "secret", "aaaa")
        with pytest.raises(TransportError):
            _flow(backend, console, session_path, tmp_path, ask).run()
        assert load_session(session_path) is None
        assert "Refresh failed: connection reset" in console.file.getvalue()

    def test_captcha_file_written_each_round(self, console, session_path, tmp_path, _no_image_viewer):
        backend = ScriptedBackend(rejections=1)
        ask = scripted_ask("21CS001", "secret", "aaaa", "bbbb")
        _flow(backend, console, session_path, tmp_path, ask).run()
        assert (tmp_path / "captcha.png").exists()
        assert len(_no_image_viewer) == 2

    def test_numeric_student_fields_log_in(self, console, session_path, tmp_path):
        backend = ScriptedBackend()
        backend.submit_captcha = lambda session_id, text: LoginResult.model_validate(
            {"success": True, "student": {"crn": 2201234, "rollNo": 2115001}})
        flow = _flow(backend, console, session_path, tmp_path, scripted_ask("2115001", "secret", "x7Kp"))
        flow.run()
        assert flow.state is LoginState.LOGGED_IN
        assert backend.refreshes == []
        assert load_session(session_path).student.crn == 2201234
        assert "2201234" in console.file.getvalue()


def _first_then(real, first):
    calls = []

    def submit(session_id, text):
        calls.append(text)
        if len(calls) == 1:
            return first
        return real(session_id, text)

    return submit


# ── ensure_session ────────────────────────────────────────────────

class TestEnsureSession:

    def test_reuses_valid_saved_session(self, console, session_path):
        save_session("saved-1", STUDENT, path=session_path)
        backend = ScriptedBackend()
        session = ensure_session(backend, console, session_path=session_path,
                                 ask=scripted_ask(), inline_ok=False)
        assert session.session_id == "saved-1"
        assert backend.dashboard_calls == ["saved-1"]
        assert "Welcome back, Asha Verma" in console.file.getvalue()

    def test_stale_session_triggers_login(self, console, session_path, tmp_path):
        save_session("stale", STUDENT, path=session_path)
        backend = ScriptedBackend(dashboard_error=BackendError("Session not found", status_code=404))
        session = ensure_session(
            backend, console, session_path=session_path,
            ask=scripted_ask("21CS001", "secret", "x7Kp"), inline_ok=False,
            captcha_file=tmp_path / "captcha.png",
        )
        assert session.session_id == "sess-1"
        assert load_session(session_path).session_id == "sess-1"

    def test_unreachable_backend_propagates(self, console, session_path):
        save_session("saved-1", STUDENT, path=session_path)
        backend = ScriptedBackend(dashboard_error=TransportError("Name or service not known"))
        with pytest.raises(TransportError):
            ensure_session(backend, console, session_path=session_path,
                           ask=scripted_ask(), inline_ok=False)
        assert load_session(session_path).session_id == "saved-1"

    def test_no_saved_session_logs_in(self, console, session_path, tmp_path):
        backend = ScriptedBackend()
        session = ensure_session(
            backend, console, session_path=session_path,
            ask=scripted_ask("21CS001", "secret", "x7Kp"), inline_ok=False,
            captcha_file=tmp_path / "captcha.png",
        )
        assert session.session_id == "sess-1"
        assert backend.dashboard_calls == []
