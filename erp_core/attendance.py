"""
Attendance helpers: the bunk calculator and the two-request attendance fetch.
"""

import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from .constants import DEFAULT_TARGET_PERCENT


@dataclass(frozen=True)
class BunkResult:
    attended: int
    total: int
    target: float
    min_attended: int = 0
    can_bunk: int = 0
    must_attend: int = 0
    message: str = ""

    @property
    def no_classes(self) -> bool:
        return self.total == 0


def _fmt_target(target):
    return f"{target:g}%"


def bunk_calc(attended, total, target=DEFAULT_TARGET_PERCENT):
    """
    How many more classes can be skipped while staying at/above `target` %.

    min_attended = ceil(target/100 * total); the surplus over that is the
    bunk margin, a shortfall is the number of classes still to attend.
    """
    if total == 0:
        return BunkResult(attended, 0, target, message="No classes held yet.")

    # target * total first keeps whole-number products exact
    min_attended = math.ceil(target * total / 100)
    diff = attended - min_attended
    if diff >= 0:
        message = f"You can bunk {diff} more classes and stay above {_fmt_target(target)}."
    else:
        message = f"You need to attend {-diff} more classes to reach {_fmt_target(target)}."
    return BunkResult(
        attended=attended,
        total=total,
        target=target,
        min_attended=min_attended,
        can_bunk=max(0, diff),
        must_attend=max(0, -diff),
        message=message,
    )


def fetch_attendance_bundle(client, session_id):
    """
    Fetch overall and per-subject attendance side by side.
    Returns (AttendanceSummary, AllAttendance); an error from either call propagates.
    """
    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="attendance") as pool:
        overall = pool.submit(client.get_attendance, session_id)
        per_subject = pool.submit(client.get_all_attendance, session_id)
        return overall.result(), per_subject.result()
