from __future__ import annotations

from typing import Optional

from .enums import RejectionReason


class DomainError(Exception):
    """Base exception for business rule violations."""

    reason = RejectionReason.INVALID_REQUEST


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a session, student, teacher, course or record is missing."""

    reason = RejectionReason.NOT_FOUND


class LocationUnavailable(DomainError):
    """Raised when a device has not reported a usable location yet."""

    reason = RejectionReason.LOCATION_UNAVAILABLE


class ProximityRejected(DomainError):
    """Raised when a device is farther from the session anchor than allowed."""

    reason = RejectionReason.PROXIMITY_REJECTED

    def __init__(self, distance_meters: float, allowed_meters: float):
        self.distance_meters = float(distance_meters)
        self.allowed_meters = float(allowed_meters)
        super().__init__(
            f"Device is {self.distance_meters:.1f} m from the session, "
            f"at most {self.allowed_meters:.1f} m is allowed"
        )


class DuplicateFingerprint(DomainError):
    """Raised when a device already marked another student in the session."""

    reason = RejectionReason.DUPLICATE_FINGERPRINT

    def __init__(self, session_id: int, fingerprint: str):
        self.session_id = int(session_id)
        self.fingerprint = fingerprint
        super().__init__("This device has already been used to mark attendance in this session")


class SessionFinished(DomainError):
    """Raised when writing to a finished session while finished sessions are locked."""

    reason = RejectionReason.SESSION_FINISHED


class StorageConflict(DomainError):
    """A unique key rejected a write.

    `key` names the violated key: "student" for (session, student) and
    "fingerprint" for (session, fingerprint).
    """

    reason = RejectionReason.SERVER_ERROR

    STUDENT_KEY = "student"
    FINGERPRINT_KEY = "fingerprint"

    def __init__(self, key: str, message: Optional[str] = None):
        self.key = key
        super().__init__(message or f"Unique key conflict on {key}")
