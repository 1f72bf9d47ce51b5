"""
Login: credentials → CAPTCHA → submit, refreshing the CAPTCHA until the
backend accepts it.

  AWAITING_CREDENTIALS → AWAITING_CAPTCHA → SUBMITTED → LOGGED_IN
                              ↑                 │
                              └── refreshed ────┘  (wrong CAPTCHA / submit error)

Errors fetching the first CAPTCHA or refreshing one are fatal and propagate.
Errors while submitting only mean "try another CAPTCHA".
"""

from enum import Enum

from rich.markup import escape
from rich.prompt import Prompt

from .config import log
from .errors import ErpError, BackendError
from .models import StudentRecord
from .session_store import load_session, save_session, clear_session
from .captcha import show_captcha, console_supports_inline
from .tables import student_panel


class LoginState(Enum):
    AWAITING_CREDENTIALS = "awaiting_credentials"
    AWAITING_CAPTCHA = "awaiting_captcha"
    SUBMITTED = "submitted"
    LOGGED_IN = "logged_in"


def ask_required(ask, console, label, error, password=False):
    """Prompt until the answer is non-empty. Non-password answers are stripped."""
    while True:
        value = ask(label, password=password) or ""
        if value.strip():
            return value if password else value.strip()
        console.print(f"[error]{error}[/]")


class LoginFlow:
    """
    One login attempt. `ask(label, password=False)` is the prompt function;
    it defaults to rich's Prompt on the given console.
    """

    def __init__(self, client, console, ask=None, inline_ok=None,
                 session_path=None, captcha_file=None):
        self.client = client
        self.console = console
        self.ask = ask or self._rich_ask
        self.inline_ok = console_supports_inline(console) if inline_ok is None else inline_ok
        self.session_path = session_path
        self.captcha_file = captcha_file
        self.state = LoginState.AWAITING_CREDENTIALS
        self.refreshes = 0

    def _rich_ask(self, label, password=False):
        return Prompt.ask(label, console=self.console, password=password)

    def prompt_credentials(self):
        roll_no = ask_required(self.ask, self.console, "Enter your roll number",
                               "Roll number is required")
        password = ask_required(self.ask, self.console, "Enter your password",
                                "Password is required", password=True)
        return roll_no, password

    def _submit(self, session_id, captcha_text):
        """Returns the LoginResult, or None if the submit itself failed."""
        try:
            with self.console.status("Submitting CAPTCHA..."):
                result = self.client.submit_captcha(session_id, captcha_text)
        except ErpError as e:
            log.warning("CAPTCHA submit failed: %s", e)
            self.console.print(f"[error]Login failed: {escape(e.message)}[/]")
            return None
        if not result.succeeded:
            reason = result.message or "wrong CAPTCHA"
            log.info("CAPTCHA rejected: %s", reason)
            self.console.print(f"[error]Login failed: {escape(reason)}[/]")
        return result

    def run(self, roll_no=None, password=None):
        """Drive the login to completion. Returns the saved Session."""
        self.state = LoginState.AWAITING_CREDENTIALS
        if not (roll_no and password):
            roll_no, password = self.prompt_credentials()

        try:
            with self.console.status("Getting CAPTCHA..."):
                challenge = self.client.get_captcha(roll_no, password)
        except ErpError as e:
            log.error("Could not start login: %s", e)
            self.console.print(f"[error]Error: {escape(e.message)}[/]")
            raise
        self.console.print(f"[success]Session: {escape(challenge.session_id)}[/]")

        title = "CAPTCHA"
        while True:
            self.state = LoginState.AWAITING_CAPTCHA
            inline = show_captcha(self.console, challenge, self.inline_ok,
                                  path=self.captcha_file, title=title)
            label = "Enter the CAPTCHA you see above" if inline else "Enter the CAPTCHA you see"
            captcha_text = ask_required(self.ask, self.console, label, "CAPTCHA is required")

            self.state = LoginState.SUBMITTED
            result = self._submit(challenge.session_id, captcha_text)
            if result is not None and result.succeeded:
                break

            try:
                with self.console.status("Refreshing CAPTCHA..."):
                    challenge = self.client.refresh_captcha(challenge.session_id)
            except ErpError as e:
                log.error("CAPTCHA refresh failed: %s", e)
                self.console.print(f"[error]Refresh failed: {escape(e.message)}[/]")
                raise
            self.refreshes += 1
            title = "New CAPTCHA"

        self.state = LoginState.LOGGED_IN
        student = result.student or StudentRecord()
        self.console.print("[success]Login successful![/]")
        self.console.print(student_panel(student))
        log.info("Logged in as %s after %d refresh(es)", student.roll_no or "?", self.refreshes)
        return save_session(challenge.session_id, student, path=self.session_path)


def ensure_session(client, console, session_path=None, **flow_kwargs):
    """
    Reuse the saved session if the backend still accepts it, otherwise log in.
    A BackendError on the probe means the session is stale; a TransportError
    propagates (the server is unreachable, logging in would fail too).
    """
    session = load_session(session_path)
    if session:
        try:
            with console.status("Checking saved session..."):
                client.get_dashboard(session.session_id)
        except BackendError as e:
            log.info("Saved session rejected (%s) — logging in again", e)
            clear_session(session_path)
            console.print("[warn]Saved session has expired. Please log in again.[/]")
        else:
            name = session.student.name or session.student.roll_no or "student"
            console.print(f"[success]Welcome back, {escape(str(name))}![/]")
            return session

    return LoginFlow(client, console, session_path=session_path, **flow_kwargs).run()
