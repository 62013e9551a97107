from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import now_utc
from ..core.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from ..core.enums import AttendanceState
from ..core.exceptions import DuplicateFingerprint, NotFoundError, SessionFinished, StorageConflict, ValidationError
from ..directory.model import Student
from ..directory.repository import StudentRepository
from ..sessions.model import Session
from .fingerprint import FingerprintGuard
from .model import AttendancePage, AttendanceRecord, RosterEntry
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceLedger:
    """Authoritative per-(session, student) attendance state.

    Transitions:
      UNMARKED -> PRESENT/ABSENT   first accepted mark or teacher set
      PRESENT <-> ABSENT           later marks by the same student, teacher set/toggle
      UNMARKED -> ABSENT           finish (backfill)

    Every write is a single keyed statement; concurrent writers are resolved
    by the unique keys, never by in-process locks.
    """

    def __init__(
        self,
        records: AttendanceRepository,
        students: StudentRepository,
        *,
        guard: FingerprintGuard | None = None,
        lock_finished: bool = False,
    ):
        self._records = records
        self._students = students
        self._guard = guard or FingerprintGuard(records)
        self._lock_finished = bool(lock_finished)

    @property
    def lock_finished(self) -> bool:
        return self._lock_finished

    def ensure_writable(self, session: Session) -> None:
        if self._lock_finished and session.is_finished:
            raise SessionFinished("Session is finished; attendance can no longer change")

    def _write(
        self,
        session: Session,
        *,
        student_id: int,
        is_present: bool,
        fingerprint: Optional[str],
        at: datetime,
    ) -> AttendanceRecord:
        # Insert first; a (session, student) conflict means the row exists and
        # is overwritten. If the row vanishes in between, the insert is retried once.
        for attempt in range(2):
            try:
                return self._records.insert(
                    session_id=session.session_id,
                    student_id=student_id,
                    is_present=is_present,
                    fingerprint=fingerprint,
                    marked_at=at,
                )
            except StorageConflict as e:
                self._raise_if_foreign_claim(e, session, student_id, fingerprint)

            try:
                updated = self._records.update(
                    session_id=session.session_id,
                    student_id=student_id,
                    is_present=is_present,
                    fingerprint=fingerprint,
                    marked_at=at,
                )
            except StorageConflict as e:
                self._raise_if_foreign_claim(e, session, student_id, fingerprint)
                raise
            if updated is not None:
                return updated
            logger.debug("Attendance row for session=%s student=%s vanished, retrying", session.session_id, student_id)

        raise StorageConflict(StorageConflict.STUDENT_KEY, "Concurrent attendance writes did not settle")

    def _raise_if_foreign_claim(
        self, conflict: StorageConflict, session: Session, student_id: int, fingerprint: Optional[str]
    ) -> None:
        if conflict.key != StorageConflict.FINGERPRINT_KEY or fingerprint is None:
            return
        if not self._guard.owns_claim(session_id=session.session_id, student_id=student_id, fingerprint=fingerprint):
            raise DuplicateFingerprint(session.session_id, fingerprint) from conflict

    def record_mark(
        self,
        session: Session,
        *,
        student_id: int,
        is_present: bool,
        fingerprint: str,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        """Upsert a student's own mark. Last write wins for the same student."""

        self.ensure_writable(session)
        return self._write(
            session,
            student_id=int(student_id),
            is_present=bool(is_present),
            fingerprint=fingerprint,
            at=now or now_utc(),
        )

    def set_presence(
        self, session: Session, *, student_id: int, is_present: bool, now: datetime | None = None
    ) -> AttendanceRecord:
        """Teacher override: idempotent set, creates the row if unmarked."""

        self.ensure_writable(session)
        return self._write(
            session,
            student_id=int(student_id),
            is_present=bool(is_present),
            fingerprint=None,
            at=now or now_utc(),
        )

    def toggle(self, session: Session, *, student_id: int, now: datetime | None = None) -> AttendanceRecord:
        self.ensure_writable(session)
        record = self._records.toggle(session_id=session.session_id, student_id=int(student_id), marked_at=now or now_utc())
        if record is None:
            raise NotFoundError("Attendance record not found")
        return record

    def bulk_set(
        self, session: Session, entries: Iterable[tuple[int, bool]], *, now: datetime | None = None
    ) -> list[AttendanceRecord]:
        at = now or now_utc()
        return [self.set_presence(session, student_id=sid, is_present=present, now=at) for sid, present in entries]

    def enrolled(self, session: Session) -> list[Student]:
        """Active students of the session's course. Students who left are not expected in class."""

        return [s for s in self._students.list_for_course(session.course_id) if s.is_active]

    def finish(self, session: Session, *, now: datetime | None = None) -> int:
        """Mark every enrolled student without a record absent. Returns how many were created."""

        enrolled = self.enrolled(session)
        marked = {r.student_id for r in self._records.list_for_session(session.session_id)}
        missing = [s.student_id for s in enrolled if s.student_id not in marked]
        if not missing:
            return 0
        created = self._records.insert_absent(session_id=session.session_id, student_ids=missing, marked_at=now or now_utc())
        logger.info("Session %s: backfilled %d absent of %d enrolled", session.session_id, created, len(enrolled))
        return created

    def state_of(self, session_id: int, student_id: int) -> AttendanceState:
        record = self._records.get(session_id=session_id, student_id=student_id)
        return AttendanceState.UNMARKED if record is None else record.state

    def roster(self, session: Session) -> list[RosterEntry]:
        records = {r.student_id: r for r in self._records.list_for_session(session.session_id)}
        entries = []
        for student in self.enrolled(session):
            record = records.get(student.student_id)
            state = AttendanceState.UNMARKED if record is None else record.state
            entries.append(RosterEntry(student=student, state=state, record=record))
        return entries

    def page(self, session_id: int, *, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT) -> AttendancePage:
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive")
        limit = min(int(limit), MAX_PAGE_LIMIT)
        offset = (int(page) - 1) * limit
        records = self._records.list_for_session(session_id, offset=offset, limit=limit)
        total = self._records.count_for_session(session_id)
        return AttendancePage(records=records, has_more=page * limit < total)

    def history_for_student(self, student_id: int, *, course_id: Optional[int] = None) -> Sequence[AttendanceRecord]:
        return self._records.list_for_student(student_id, course_id=course_id)
