"""
Wire models for the ERP backend's JSON contract.

The backend is not under our control and its shapes are undocumented, so
every model tolerates extra fields and missing optional ones. Validation
happens once, where a response enters the program (api.py / session_store.py).
"""

import time
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Wire(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


# ─── Student / session ───────────────────────────────────────────

class StudentRecord(_Wire):
    # Opaque: stored and shown as received, numbers included.
    name: Any = None
    crn: Any = None
    roll_no: Any = Field(default=None, alias="rollNo")
    program: Any = None
    branch: Any = None
    semester: Any = None


class Session(_Wire):
    session_id: str = Field(alias="sessionId", min_length=1)
    student: StudentRecord = Field(default_factory=StudentRecord)
    saved_at: int = Field(default_factory=lambda: int(time.time() * 1000), alias="savedAt")

    def to_json_dict(self):
        return self.model_dump(by_alias=True, mode="json")


# ─── Login handshake ─────────────────────────────────────────────

class CaptchaChallenge(BaseModel):
    """One CAPTCHA image bound to a backend login session."""
    session_id: str
    image: bytes


class LoginResult(_Wire):
    success: Union[bool, str, None] = None
    student: Optional[StudentRecord] = None
    message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        # The backend has been seen sending both true and "true".
        return self.success is True or self.success == "true"


# ─── Attendance ──────────────────────────────────────────────────

class AttendanceSummary(_Wire):
    total_classes: int = Field(default=0, alias="totalClasses")
    classes_attended: int = Field(default=0, alias="classesAttended")
    classes_absent: Optional[int] = Field(default=None, alias="classesAbsent")
    percentage: Optional[float] = None

    @field_validator("percentage", mode="before")
    @classmethod
    def _lenient_percentage(cls, value: Any):
        if value is None or isinstance(value, (int, float)):
            return value
        try:
            return float(str(value).strip().rstrip("%"))
        except ValueError:
            return None


class SubjectAttendance(AttendanceSummary):
    id: Optional[Union[int, str]] = None
    code: Optional[str] = None
    name: Optional[str] = None


class AllAttendance(_Wire):
    overall: AttendanceSummary = Field(default_factory=AttendanceSummary)
    subjects: list[SubjectAttendance] = Field(default_factory=list)
