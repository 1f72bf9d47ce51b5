"""
ERP backend calls — one method per endpoint.

Every call goes through ErpClient._call(): GET for the health check, POST
with a JSON body for everything else. The client keeps no login state;
authenticated methods take the session id as their first argument.
Failures raise TransportError / BackendError (errors.py). No retries here.
"""

import requests
from pydantic import ValidationError

from .config import log, BASE_URL
from .constants import API_TIMEOUT_GET, API_TIMEOUT_POST, HEALTH_ENDPOINT
from .errors import ErpError, TransportError, BackendError
from .models import CaptchaChallenge, LoginResult, AttendanceSummary, AllAttendance
from .captcha import decode_data_uri
from . import http_client


def _short(session_id):
    return (session_id or "")[:8] + "..."


def _backend_message(data):
    if isinstance(data, dict):
        for key in ("message", "error"):
            value = data.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return None


def _parse(model, data, what):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        log.warning("Unexpected %s payload: %s", what, e)
        raise BackendError(f"Unexpected {what} response from server") from e


class ErpClient:
    def __init__(self, base_url=None, http=None):
        self.base_url = (base_url or BASE_URL).rstrip("/")
        self.http = http or http_client.create_session()

    # ─── Transport ───────────────────────────────────────────────

    def _call(self, method, endpoint, payload=None):
        """Send one request and return the decoded JSON object."""
        url = f"{self.base_url}{endpoint}"
        try:
            if method == "GET":
                resp = self.http.get(url, timeout=API_TIMEOUT_GET)
            else:
                resp = self.http.post(url, json=payload or {}, timeout=API_TIMEOUT_POST)
        except requests.RequestException as e:
            log.warning("%s %s network error: %s", method, endpoint, e)
            raise TransportError(str(e)) from e

        try:
            data = resp.json()
        except ValueError:
            data = None

        if not resp.ok:
            message = _backend_message(data) or f"HTTP {resp.status_code} {resp.reason or ''}".strip()
            log.warning("%s %s failed: HTTP %d — %s", method, endpoint, resp.status_code, message)
            raise BackendError(message, status_code=resp.status_code)

        if not isinstance(data, dict):
            log.warning("%s %s returned a non-JSON body: %s", method, endpoint, resp.text[:200])
            raise BackendError("Invalid response from server", status_code=resp.status_code)

        log.info("%s %s OK", method, endpoint)
        return data

    def _post(self, endpoint, session_id, **params):
        return self._call("POST", endpoint, {"sessionId": session_id, **params})

    @staticmethod
    def _keyed(data, key):
        """Pull the keyed success payload, or raise with the backend's message."""
        if key not in data or data[key] is None:
            raise BackendError(_backend_message(data) or f"Response is missing '{key}'")
        return data[key]

    # ─── Health ──────────────────────────────────────────────────

    def health_check(self):
        """Soft check: {"ok": True, "health": {...}} or {"ok": False, "error": msg}."""
        try:
            return {"ok": True, "health": self._call("GET", HEALTH_ENDPOINT)}
        except ErpError as e:
            return {"ok": False, "error": e.message}

    # ─── Login handshake ─────────────────────────────────────────

    def _challenge(self, data, session_id=None):
        # A refresh keeps the caller's session id; a fresh login takes the backend's.
        session_id = session_id or data.get("sessionId")
        image = self._keyed(data, "captchaImage")
        if not session_id:
            raise BackendError(_backend_message(data) or "Response is missing 'sessionId'")
        try:
            png = decode_data_uri(image)
        except ValueError as e:
            raise BackendError(f"Could not decode CAPTCHA image: {e}") from e
        return CaptchaChallenge(session_id=session_id, image=png)

    def get_captcha(self, roll_no, password):
        """Start a login: returns the first CaptchaChallenge (with a new session id)."""
        data = self._call("POST", "/api/get-captcha", {"username": roll_no, "password": password})
        challenge = self._challenge(data)
        log.info("CAPTCHA issued for session %s", _short(challenge.session_id))
        return challenge

    def submit_captcha(self, session_id, captcha_text):
        data = self._post("/api/submit-captcha", session_id, captcha=captcha_text)
        return _parse(LoginResult, data, "login")

    def refresh_captcha(self, session_id):
        data = self._post("/api/refresh-captcha", session_id)
        return self._challenge(data, session_id)

    def close_session(self, session_id):
        """Best-effort logout notification. Never raises."""
        if not session_id:
            return False
        try:
            self._post("/api/close-session", session_id)
            log.info("Session %s closed", _short(session_id))
            return True
        except ErpError as e:
            log.warning("Close session failed (ignored): %s", e)
            return False

    # ─── Student data ────────────────────────────────────────────

    def get_profile(self, session_id):
        return self._keyed(self._post("/api/profile", session_id), "profile")

    def get_dashboard(self, session_id):
        return self._keyed(self._post("/api/dashboard", session_id), "dashboard")

    def get_attendance(self, session_id):
        data = self._keyed(self._post("/api/attendance", session_id), "attendance")
        return _parse(AttendanceSummary, data, "attendance")

    def get_all_attendance(self, session_id):
        data = self._post("/api/attendance/all", session_id)
        self._keyed(data, "subjects")
        return _parse(AllAttendance, data, "attendance")

    def get_subject_attendance(self, session_id, subject_id):
        data = self._keyed(
            self._post("/api/attendance/subject", session_id, subjectId=subject_id),
            "attendance",
        )
        return _parse(AttendanceSummary, data, "subject attendance")

    def get_subjects(self, session_id):
        return self._keyed(self._post("/api/subjects", session_id), "subjects")

    def get_timetable(self, session_id):
        return self._keyed(self._post("/api/timetable", session_id), "timetable")

    def get_last_visit(self, session_id):
        return self._keyed(self._post("/api/last-visit", session_id), "lastVisit")

    def get_today(self, session_id):
        data = self._post("/api/today", session_id)
        self._keyed(data, "periods")
        return data
