"""
Renderables for every data view. Pure formatting: takes already-fetched
data, returns rich objects; nothing here talks to the network.

Backend strings always go through _cell() (a Text), never through markup.
"""

from rich import box
from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .palette import percent_style


def _value(v):
    if v is None or v == "":
        return "-"
    return str(v)


def _cell(v, style=None):
    return Text(_value(v), style=style or "")


def _pct(pct):
    if pct is None:
        return Text("-", style="muted")
    return Text(f"{pct:g}%", style=percent_style(pct))


def key_value_table(rows):
    grid = Table.grid(padding=(0, 2))
    grid.add_column(style="muted", no_wrap=True)
    grid.add_column()
    for label, value in rows:
        grid.add_row(f"{label}:", value if isinstance(value, Text) else _cell(value))
    return grid


# ─── Student ─────────────────────────────────────────────────────

def student_panel(student):
    rows = [
        ("Name", student.name),
        ("CRN", student.crn),
        ("Roll No", student.roll_no),
        ("Program", student.program),
        ("Branch", student.branch),
        ("Semester", student.semester),
    ]
    return Panel(key_value_table(rows), title="Logged in", border_style="success",
                 box=box.ROUNDED, expand=False, padding=(1, 2))


def profile_table(profile):
    bank = profile.get("bank") or {}
    documents = profile.get("documents") or {}
    bank_str = f"{bank.get('bankName', '-')} ({bank.get('ifsc', '-')})" if bank else None
    rows = [
        ("Name", profile.get("name")),
        ("CRN", profile.get("crn")),
        ("DOB", profile.get("dob")),
        ("Email", profile.get("email")),
        ("Personal Email", profile.get("personalEmail")),
        ("Phone", profile.get("phone")),
        ("Father", profile.get("fatherName")),
        ("Mother", profile.get("motherName")),
        ("Bank", bank_str),
        ("Aadhar", documents.get("aadhar")),
    ]
    return key_value_table(rows)


def dashboard_table(dashboard):
    rows = [
        ("Name", dashboard.get("name")),
        ("CRN", dashboard.get("crn")),
        ("Roll No", dashboard.get("rollNo")),
        ("Program", dashboard.get("program")),
        ("Branch", dashboard.get("branch")),
        ("Section", dashboard.get("section")),
        ("Semester", dashboard.get("semester")),
    ]
    return key_value_table(rows)


def last_visit_table(visit):
    greeting = visit.get("greeting") or "Hello"
    name = visit.get("name") or ""
    return key_value_table([
        ("Greeting", f"{greeting}, {name}".rstrip(", ")),
        ("Last visit", visit.get("lastVisitTime")),
    ])


# ─── Attendance ──────────────────────────────────────────────────

def attendance_table(summary):
    return key_value_table([
        ("Total", summary.total_classes),
        ("Present", _cell(summary.classes_attended, "success")),
        ("Absent", _cell(summary.classes_absent, "error")),
        ("Percentage", _pct(summary.percentage)),
    ])


def all_attendance_table(data):
    table = Table(box=box.SIMPLE_HEAD, header_style="accent", show_footer=False)
    table.add_column("Code", no_wrap=True)
    table.add_column("Attended", justify="right")
    table.add_column("%", justify="right")
    table.add_column("Subject")

    overall = data.overall
    table.add_row(
        Text("OVERALL", style="accent"),
        f"{overall.classes_attended}/{overall.total_classes}",
        _pct(overall.percentage),
        "",
        end_section=True,
    )
    for s in data.subjects:
        table.add_row(
            _cell(s.code),
            f"{s.classes_attended}/{s.total_classes}",
            _pct(s.percentage),
            _cell(s.name),
        )
    return table


def subjects_table(subjects):
    table = Table(box=box.SIMPLE_HEAD, header_style="accent")
    table.add_column("ID", justify="right", style="muted")
    table.add_column("Code", no_wrap=True)
    table.add_column("Subject")
    for s in subjects:
        table.add_row(_cell(s.get("id")), _cell(s.get("code")), _cell(s.get("name")))
    return table


def bunk_table(results):
    """results: list of (label, BunkResult)."""
    table = Table(box=box.SIMPLE_HEAD, header_style="accent")
    table.add_column("Subject")
    table.add_column("Attended", justify="right")
    table.add_column("Min", justify="right")
    table.add_column("Result")
    for label, r in results:
        if r.no_classes:
            style = "muted"
        elif r.must_attend:
            style = "error"
        else:
            style = "success"
        table.add_row(
            _cell(label),
            f"{r.attended}/{r.total}",
            _value(r.min_attended if not r.no_classes else None),
            Text(r.message, style=style),
        )
    return table


# ─── Timetable ───────────────────────────────────────────────────

def _period_row(p, with_status=False):
    kind = p.get("type")
    if kind == "lunch":
        return [_cell(p.get("time")), Text("LUNCH", style="muted")], None
    if kind == "free":
        return [_cell(p.get("time")), Text("Free", style="muted")], None

    subject = Text(f"{_value(p.get('subject'))} ({_value(p.get('code'))})")
    detail = _value(p.get("classType"))
    if p.get("isSuspended"):
        detail += " [SUSPENDED]"
    subject.append(f"  {detail}", style="muted")
    status = None
    if with_status:
        raw = p.get("attendanceStatus")
        status_style = {"present": "success", "absent": "error", "suspended": "warn"}.get(raw, "")
        status = Text(raw.upper() if raw else "-", style=status_style)
    return [_cell(p.get("time")), subject], status


def timetable_view(timetable):
    parts = []
    for day in timetable:
        table = Table(box=None, show_header=False, padding=(0, 2), pad_edge=False)
        table.add_column(no_wrap=True)
        table.add_column()
        for p in day.get("periods") or []:
            cells, _ = _period_row(p)
            table.add_row(*cells)
        parts.append(Text(f"\n{_value(day.get('day'))}", style="accent"))
        parts.append(table)
    return Group(*parts)


def today_view(data):
    parts = [Text(f"Day: {_value(data.get('day'))}  |  Date: {_value(data.get('date'))}", style="warn")]
    if data.get("message"):
        parts.append(Text(str(data["message"]), style="muted"))

    table = Table(box=None, show_header=False, padding=(0, 2), pad_edge=False)
    table.add_column(no_wrap=True)
    table.add_column()
    table.add_column()
    for p in data.get("periods") or []:
        cells, status = _period_row(p, with_status=True)
        table.add_row(*cells, status or "")
    parts.append(table)

    s = data.get("summary")
    if s:
        parts.append(Text(
            f"Summary: {_value(s.get('totalPeriods'))} classes | Present: {_value(s.get('present'))}"
            f" | Absent: {_value(s.get('absent'))} | Not Marked: {_value(s.get('notMarked'))}",
            style="info",
        ))
    return Group(*parts)
