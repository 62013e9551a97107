from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional, Protocol

from ..core.exceptions import LocationUnavailable, NotFoundError, ValidationError
from ..directory.repository import StudentRepository
from ..geo.proximity import ProximityValidator
from ..sessions.model import Session
from ..sessions.service import SessionRegistry
from .fingerprint import FingerprintGuard
from .ledger import AttendanceLedger
from .model import AttendanceRecord, FinishResult, MarkRequest

logger = logging.getLogger(__name__)


class AttendanceNotifier(Protocol):
    def attendance_marked(self, record: AttendanceRecord) -> None:
        raise NotImplementedError

    def session_finished(self, result: FinishResult) -> None:
        raise NotImplementedError


class AttendanceService:
    """Runs attendance writes end to end: validate, commit, then notify.

    Rejections are raised as DomainError subclasses and never broadcast;
    the transport decides how to report them to the submitter.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        students: StudentRepository,
        ledger: AttendanceLedger,
        guard: FingerprintGuard,
        validator: ProximityValidator,
        notifier: Optional[AttendanceNotifier] = None,
        *,
        require_location: bool = True,
    ):
        self._registry = registry
        self._students = students
        self._ledger = ledger
        self._guard = guard
        self._validator = validator
        self._notifier = notifier
        self._require_location = bool(require_location)

    def _notify(self, record: AttendanceRecord) -> None:
        if self._notifier is not None:
            self._notifier.attendance_marked(record)

    def _enrolled_student(self, session: Session, student_id: int) -> None:
        student = self._students.get_by_id(student_id)
        if not student:
            raise NotFoundError("Student not found")
        if not student.is_active:
            raise ValidationError("Student is no longer active")
        if not self._students.is_enrolled(student_id=student_id, course_id=session.course_id):
            raise ValidationError("Student is not enrolled in this course")

    def _check_location(self, request: MarkRequest, session: Session) -> None:
        location = request.location
        if location is None:
            if self._require_location:
                raise LocationUnavailable("Device location is required to mark attendance")
            return
        if location.is_unset:
            raise LocationUnavailable("Device location is not available yet")
        self._validator.check(location, session.anchor)

    def mark(self, request: MarkRequest, *, now: datetime | None = None) -> AttendanceRecord:
        session = self._registry.get_session(request.session_id)
        self._enrolled_student(session, request.student_id)
        self._ledger.ensure_writable(session)

        if request.is_present:
            self._check_location(request, session)

        self._guard.check(
            session_id=session.session_id,
            student_id=request.student_id,
            fingerprint=request.fingerprint,
        )
        record = self._ledger.record_mark(
            session,
            student_id=request.student_id,
            is_present=request.is_present,
            fingerprint=request.fingerprint,
            now=now,
        )
        logger.info(
            "Attendance marked: session=%s student=%s present=%s",
            record.session_id,
            record.student_id,
            record.is_present,
        )
        self._notify(record)
        return record

    def set_presence(
        self, session_id: int, student_id: int, is_present: bool, *, now: datetime | None = None
    ) -> AttendanceRecord:
        session = self._registry.get_session(session_id)
        self._enrolled_student(session, student_id)
        record = self._ledger.set_presence(session, student_id=student_id, is_present=is_present, now=now)
        self._notify(record)
        return record

    def toggle(self, session_id: int, student_id: int, *, now: datetime | None = None) -> AttendanceRecord:
        session = self._registry.get_session(session_id)
        record = self._ledger.toggle(session, student_id=student_id, now=now)
        self._notify(record)
        return record

    def bulk_update(
        self, session_id: int, entries: Iterable[tuple[int, bool]], *, now: datetime | None = None
    ) -> list[AttendanceRecord]:
        session = self._registry.get_session(session_id)
        entries = list(entries)
        for student_id, _ in entries:
            self._enrolled_student(session, student_id)
        records = self._ledger.bulk_set(session, entries, now=now)
        for record in records:
            self._notify(record)
        return records

    def finish_session(self, session_id: int, *, now: datetime | None = None) -> FinishResult:
        session = self._registry.get_session(session_id)
        backfilled = self._ledger.finish(session, now=now)
        self._registry.mark_finished(session.session_id, now=now)
        result = FinishResult(
            session_id=session.session_id,
            enrolled=len(self._ledger.enrolled(session)),
            backfilled=backfilled,
        )
        if self._notifier is not None:
            self._notifier.session_finished(result)
        return result
