from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Sequence

from ..common.datetime_utils import to_iso
from ..common.validators import require_bool, require_fingerprint, require_int
from ..core.enums import AttendanceState
from ..core.exceptions import ValidationError
from ..directory.model import Student
from ..geo.model import GeoPoint


@dataclass(frozen=True)
class AttendanceRecord:
    """One student's attendance in one session."""

    attendance_id: int
    session_id: int
    student_id: int
    is_present: bool
    fingerprint: Optional[str]
    marked_at: datetime

    @property
    def state(self) -> AttendanceState:
        return AttendanceState.from_presence(self.is_present)

    def to_dict(self) -> dict:
        return {
            "_id": self.attendance_id,
            "session": self.session_id,
            "student": self.student_id,
            "isPresent": self.is_present,
            "state": self.state.value,
            "timestamp": to_iso(self.marked_at),
        }

    def to_event(self) -> dict:
        return {"session": self.session_id, "student": self.student_id, "isPresent": self.is_present}


@dataclass(frozen=True)
class MarkRequest:
    """A student's attendance submission (socket `markAttendance` or HTTP)."""

    session_id: int
    student_id: int
    is_present: bool
    fingerprint: str
    location: Optional[GeoPoint] = None

    @classmethod
    def from_payload(cls, data: Any) -> "MarkRequest":
        if not isinstance(data, dict):
            raise ValidationError("Attendance payload must be an object")

        location = data.get("location")
        return cls(
            session_id=require_int(data.get("sessionId"), "sessionId"),
            student_id=require_int(data.get("studentId"), "studentId"),
            is_present=require_bool(data.get("isPresent", True), "isPresent"),
            fingerprint=require_fingerprint(data.get("fingerprint")),
            location=None if location is None else GeoPoint.from_mapping(location),
        )


@dataclass(frozen=True)
class RosterEntry:
    student: Student
    state: AttendanceState
    record: Optional[AttendanceRecord] = None

    def to_dict(self) -> dict:
        return {
            "student": self.student.student_id,
            "fullName": self.student.full_name,
            "state": self.state.value,
            "isPresent": None if self.record is None else self.record.is_present,
            "timestamp": None if self.record is None else to_iso(self.record.marked_at),
        }


@dataclass(frozen=True)
class AttendancePage:
    records: Sequence[AttendanceRecord]
    has_more: bool

    def to_dict(self) -> dict:
        return {"attendanceRecords": [r.to_dict() for r in self.records], "hasMore": self.has_more}


@dataclass(frozen=True)
class FinishResult:
    session_id: int
    enrolled: int
    backfilled: int
