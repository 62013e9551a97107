from __future__ import annotations

from enum import Enum


class AttendanceState(str, Enum):
    """State of one student within one session.

    UNMARKED is never stored: it is the absence of a row.
    """

    UNMARKED = "UNMARKED"
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"

    @classmethod
    def from_presence(cls, is_present: bool) -> "AttendanceState":
        return cls.PRESENT if is_present else cls.ABSENT


class ProximityMode(str, Enum):
    FIXED = "fixed"
    ACCURACY = "accuracy"


class MemberStatus(str, Enum):
    ACTIVE = "active"
    LEFT = "left"
    PASS_OUT = "pass_out"
    RETIRED = "retired"


class RejectionReason(str, Enum):
    """Machine-readable reasons sent with attendanceRejected."""

    NOT_FOUND = "not_found"
    PROXIMITY_REJECTED = "proximity_rejected"
    LOCATION_UNAVAILABLE = "location_unavailable"
    DUPLICATE_FINGERPRINT = "duplicate_fingerprint"
    SESSION_FINISHED = "session_finished"
    INVALID_REQUEST = "invalid_request"
    SERVER_ERROR = "server_error"
