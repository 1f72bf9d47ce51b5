"""
ErpApp — the interactive menu.

Each menu action makes one backend call (Attendance makes two at once),
renders the result and comes back to the menu. Action errors are shown
and never end the program; only Logout / Exit leave the loop.
"""

from rich.markup import escape
from rich.prompt import Prompt

from .config import log
from .constants import MENU_OPTIONS, DEFAULT_TARGET_PERCENT
from .errors import ErpError
from .session_store import clear_session
from .attendance import bunk_calc, fetch_attendance_bundle
from .auth import ask_required
from .banner import render_help, render_goodbye
from . import tables


class ErpApp:
    """
    Owns the menu loop for one logged-in session.

    `ask(label, **kwargs)` is the prompt function (rich Prompt.ask by default).
    """

    def __init__(self, client, session, console, ask=None, session_path=None):
        self.client = client
        self.session = session
        self.console = console
        self.ask = ask or self._rich_ask
        self.session_path = session_path
        self._handlers = {
            "profile": self.show_profile,
            "dashboard": self.show_dashboard,
            "attendance": self.show_attendance,
            "subjects": self.show_subjects,
            "subject": self.show_subject_attendance,
            "timetable": self.show_timetable,
            "today": self.show_today,
            "bunk": self.show_bunk_calculator,
            "lastvisit": self.show_last_visit,
            "help": self.show_help,
        }

    @property
    def session_id(self):
        return self.session.session_id

    def _rich_ask(self, label, **kwargs):
        return Prompt.ask(label, console=self.console, **kwargs)

    def _heading(self, title):
        self.console.print(f"\n[accent]=== {title} ===[/]")

    # ─── Menu loop ───────────────────────────────────────────────

    def show_menu(self):
        """Print the menu and return the chosen action key."""
        self.console.print()
        for i, (_key, name, _desc) in enumerate(MENU_OPTIONS, start=1):
            self.console.print(f"  [accent.bright]{i:>2}[/]  {name}")
        choices = [str(i) for i in range(1, len(MENU_OPTIONS) + 1)]
        choice = self.ask("Choose an option", choices=choices, show_choices=False)
        return MENU_OPTIONS[int(choice) - 1][0]

    def dispatch(self, key):
        """Run one action. Returns False when the loop should end."""
        if key == "logout":
            self.logout()
            return False
        if key == "exit":
            self.console.print("[muted]Session kept. Run again to continue where you left off.[/]")
            self.console.print(render_goodbye())
            return False

        handler = self._handlers[key]
        try:
            handler()
        except ErpError as e:
            log.warning("Action %s failed: %s", key, e)
            self.console.print(f"[error]Error: {escape(e.message)}[/]")
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            log.exception("Action %s got an unexpected payload", key)
            self.console.print(f"[error]Error: unexpected response from server ({escape(str(e))})[/]")
        except KeyboardInterrupt:
            log.info("Action %s cancelled", key)
            self.console.print("\n[warn]Cancelled.[/]")
        return True

    def run(self):
        """Loop until Logout / Exit. Returns the process exit code."""
        running = True
        while running:
            try:
                key = self.show_menu()
            except (KeyboardInterrupt, EOFError):
                self.console.print()
                key = "exit"
            running = self.dispatch(key)
            if running:
                try:
                    self.ask("Press Enter to continue", default="", show_default=False)
                except (KeyboardInterrupt, EOFError):
                    running = self.dispatch("exit")
        return 0

    def logout(self):
        self.console.print("\n[accent]Closing session...[/]")
        with self.console.status("Logging out..."):
            self.client.close_session(self.session_id)
        clear_session(self.session_path)
        log.info("Logged out")
        self.console.print(render_goodbye())

    # ─── Actions ─────────────────────────────────────────────────

    def show_profile(self):
        self._heading("Profile")
        with self.console.status("Fetching profile..."):
            profile = self.client.get_profile(self.session_id)
        self.console.print(tables.profile_table(profile))

    def show_dashboard(self):
        self._heading("Dashboard")
        with self.console.status("Fetching dashboard..."):
            dashboard = self.client.get_dashboard(self.session_id)
        self.console.print(tables.dashboard_table(dashboard))

    def show_attendance(self):
        self._heading("Attendance")
        with self.console.status("Fetching attendance..."):
            overall, per_subject = fetch_attendance_bundle(self.client, self.session_id)
        self.console.print(tables.attendance_table(overall))
        self.console.print(tables.all_attendance_table(per_subject))

    def show_subjects(self):
        self._heading("Subjects")
        with self.console.status("Fetching subjects..."):
            subjects = self.client.get_subjects(self.session_id)
        if not subjects:
            self.console.print("[muted]No subjects found.[/]")
        else:
            self.console.print(tables.subjects_table(subjects))
        return subjects

    def show_subject_attendance(self):
        subjects = self.show_subjects()
        if not subjects:
            return
        subject_id = ask_required(self.ask, self.console, "Enter subject ID", "Subject ID is required")

        self._heading("Subject Attendance")
        with self.console.status("Fetching subject attendance..."):
            summary = self.client.get_subject_attendance(self.session_id, subject_id)
        self.console.print(tables.attendance_table(summary))

    def show_timetable(self):
        self._heading("Timetable")
        with self.console.status("Fetching timetable..."):
            timetable = self.client.get_timetable(self.session_id)
        self.console.print(tables.timetable_view(timetable))

    def show_today(self):
        self._heading("Today's Timetable + Attendance")
        with self.console.status("Fetching today's schedule..."):
            today = self.client.get_today(self.session_id)
        self.console.print(tables.today_view(today))

    def show_last_visit(self):
        self._heading("Last Visit")
        with self.console.status("Fetching last visit..."):
            visit = self.client.get_last_visit(self.session_id)
        self.console.print(tables.last_visit_table(visit))

    def show_help(self):
        self.console.print(render_help())

    def ask_target(self):
        """Target attendance %, re-prompted until it is a number in (0, 100]."""
        while True:
            raw = self.ask("Target attendance %", default=str(DEFAULT_TARGET_PERCENT))
            try:
                target = float(str(raw).strip().rstrip("%"))
            except ValueError:
                target = None
            if target is not None and 0 < target <= 100:
                return target
            self.console.print("[error]Enter a percentage between 0 and 100.[/]")

    def show_bunk_calculator(self):
        self._heading("Bunk Calculator")
        with self.console.status("Fetching attendance..."):
            data = self.client.get_all_attendance(self.session_id)
        target = self.ask_target()

        overall = data.overall
        results = [("OVERALL", bunk_calc(overall.classes_attended, overall.total_classes, target))]
        for s in data.subjects:
            results.append((s.code or s.name, bunk_calc(s.classes_attended, s.total_classes, target)))
        self.console.print(tables.bunk_table(results))
