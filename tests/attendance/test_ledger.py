from __future__ import annotations

from datetime import timedelta

import pytest

from src.qr_attendance.qr_attendance.core.enums import AttendanceState
from src.qr_attendance.qr_attendance.core.exceptions import NotFoundError, SessionFinished, ValidationError

from tests.fakes import ANCHOR


def test_first_mark_moves_unmarked_to_present(container, session):
    ledger = container.ledger
    assert ledger.state_of(session.session_id, 1) == AttendanceState.UNMARKED

    ledger.record_mark(session, student_id=1, is_present=True, fingerprint="dev-1")

    assert ledger.state_of(session.session_id, 1) == AttendanceState.PRESENT


def test_same_mark_twice_is_idempotent(container, session, fixed_now):
    ledger = container.ledger

    first = ledger.record_mark(session, student_id=1, is_present=True, fingerprint="dev-1", now=fixed_now)
    second = ledger.record_mark(session, student_id=1, is_present=True, fingerprint="dev-1", now=fixed_now)

    assert first == second
    assert container.attendance_repo.count_for_session(session.session_id) == 1


def test_later_mark_by_same_student_wins(container, session):
    ledger = container.ledger

    ledger.record_mark(session, student_id=1, is_present=True, fingerprint="F1")
    record = ledger.record_mark(session, student_id=1, is_present=False, fingerprint="F1")

    assert record.is_present is False
    assert ledger.state_of(session.session_id, 1) == AttendanceState.ABSENT


def test_teacher_set_is_idempotent_and_keeps_fingerprint(container, session):
    ledger = container.ledger
    ledger.record_mark(session, student_id=1, is_present=True, fingerprint="dev-1")

    ledger.set_presence(session, student_id=1, is_present=False)
    record = ledger.set_presence(session, student_id=1, is_present=False)

    assert record.is_present is False
    assert record.fingerprint == "dev-1"


def test_teacher_set_creates_row_for_unmarked_student(container, session):
    record = container.ledger.set_presence(session, student_id=2, is_present=True)

    assert record.is_present is True
    assert record.fingerprint is None


def test_toggle_flips_existing_record(container, session):
    ledger = container.ledger
    ledger.record_mark(session, student_id=1, is_present=True, fingerprint="dev-1")

    assert ledger.toggle(session, student_id=1).is_present is False
    assert ledger.toggle(session, student_id=1).is_present is True


def test_toggle_unmarked_student_is_not_found(container, session):
    with pytest.raises(NotFoundError):
        container.ledger.toggle(session, student_id=2)


def test_finish_backfills_only_missing_students(container, session):
    ledger = container.ledger
    ledger.record_mark(session, student_id=1, is_present=True, fingerprint="dev-1")

    created = ledger.finish(session)

    # 3 enrolled, 1 already marked
    assert created == 2
    assert container.attendance_repo.count_for_session(session.session_id) == 3
    assert ledger.state_of(session.session_id, 1) == AttendanceState.PRESENT
    assert ledger.state_of(session.session_id, 2) == AttendanceState.ABSENT
    assert ledger.state_of(session.session_id, 3) == AttendanceState.ABSENT


def test_finish_twice_creates_nothing_new(container, session):
    container.ledger.finish(session)
    assert container.ledger.finish(session) == 0
    assert container.attendance_repo.count_for_session(session.session_id) == 3


def test_roster_lists_every_enrolled_student_with_state(container, session):
    ledger = container.ledger
    ledger.record_mark(session, student_id=2, is_present=True, fingerprint="dev-2")

    roster = {entry.student.student_id: entry.state for entry in ledger.roster(session)}

    assert roster == {
        1: AttendanceState.UNMARKED,
        2: AttendanceState.PRESENT,
        3: AttendanceState.UNMARKED,
    }


def test_page_reports_has_more(container, session):
    ledger = container.ledger
    for student_id in (1, 2, 3):
        ledger.set_presence(session, student_id=student_id, is_present=True)

    first = ledger.page(session.session_id, page=1, limit=2)
    second = ledger.page(session.session_id, page=2, limit=2)

    assert [r.student_id for r in first.records] == [1, 2]
    assert first.has_more
    assert [r.student_id for r in second.records] == [3]
    assert not second.has_more


def test_page_rejects_non_positive_page(container, session):
    with pytest.raises(ValidationError):
        container.ledger.page(session.session_id, page=0)


def test_finished_session_stays_writable_by_default(container, session, fixed_now):
    container.ledger.finish(session)
    finished = container.session_registry.mark_finished(session.session_id, now=fixed_now + timedelta(hours=1))

    record = container.ledger.set_presence(finished, student_id=2, is_present=True)

    assert record.is_present is True


def test_locked_finished_session_rejects_writes(make_container, fixed_now):
    container = make_container(lock_finished=True)
    registry = container.session_registry
    session = registry.create_session(course_code="CSE101", room_number="A", teacher_id=1, anchor=ANCHOR, now=fixed_now)
    container.ledger.record_mark(session, student_id=1, is_present=True, fingerprint="dev-1")
    finished = registry.mark_finished(session.session_id, now=fixed_now)

    with pytest.raises(SessionFinished):
        container.ledger.set_presence(finished, student_id=2, is_present=True)
    with pytest.raises(SessionFinished):
        container.ledger.toggle(finished, student_id=1)
    with pytest.raises(SessionFinished):
        container.ledger.record_mark(finished, student_id=3, is_present=True, fingerprint="dev-3")


def test_students_who_left_are_neither_rostered_nor_backfilled(container, session):
    ledger = container.ledger

    assert [s.student_id for s in ledger.enrolled(session)] == [1, 2, 3]
    assert ledger.finish(session) == 3
    assert ledger.state_of(session.session_id, 5) == AttendanceState.UNMARKED


def test_student_history_filtered_by_course(container, session, fixed_now):
    container.directory_service.enroll(student_id=1, course_code="MTH201")
    other = container.session_registry.create_session(
        course_code="MTH201", room_number="M-1", teacher_id=1, anchor=ANCHOR, now=fixed_now
    )
    container.ledger.record_mark(session, student_id=1, is_present=True, fingerprint="dev-1", now=fixed_now)
    container.ledger.record_mark(
        other, student_id=1, is_present=False, fingerprint="dev-1", now=fixed_now + timedelta(days=1)
    )

    everything = container.ledger.history_for_student(1)
    cse = container.ledger.history_for_student(1, course_id=1)

    assert [r.session_id for r in everything] == [other.session_id, session.session_id]
    assert [r.session_id for r in cse] == [session.session_id]
