from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Storage for attendance records.

    Implementations must enforce unique (session, student) and unique
    (session, fingerprint) for non-null fingerprints, and report violations
    as StorageConflict with the violated key.
    """

    def get(self, *, session_id: int, student_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def find_by_fingerprint(self, *, session_id: int, fingerprint: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def insert(
        self,
        *,
        session_id: int,
        student_id: int,
        is_present: bool,
        fingerprint: Optional[str],
        marked_at: datetime,
    ) -> AttendanceRecord:
        raise NotImplementedError

    def update(
        self,
        *,
        session_id: int,
        student_id: int,
        is_present: bool,
        fingerprint: Optional[str],
        marked_at: datetime,
    ) -> Optional[AttendanceRecord]:
        """Overwrite presence of an existing row. A None fingerprint keeps the stored one.

        Returns None when there is no row to update.
        """

        raise NotImplementedError

    def toggle(self, *, session_id: int, student_id: int, marked_at: datetime) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def insert_absent(self, *, session_id: int, student_ids: Iterable[int], marked_at: datetime) -> int:
        """Create is_present=false rows, skipping students that already have one.

        Returns the number of rows created.
        """

        raise NotImplementedError

    def list_for_session(
        self, session_id: int, *, offset: int = 0, limit: Optional[int] = None
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def count_for_session(self, session_id: int) -> int:
        raise NotImplementedError

    def list_for_student(self, student_id: int, *, course_id: Optional[int] = None) -> Sequence[AttendanceRecord]:
        """A student's records, newest first; `course_id` keeps only that course's sessions."""

        raise NotImplementedError
