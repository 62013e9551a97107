from __future__ import annotations

import pytest

from src.qr_attendance.qr_attendance.attendance.model import MarkRequest
from src.qr_attendance.qr_attendance.core.enums import AttendanceState
from src.qr_attendance.qr_attendance.core.exceptions import (
    DuplicateFingerprint,
    LocationUnavailable,
    NotFoundError,
    ProximityRejected,
    ValidationError,
)
from src.qr_attendance.qr_attendance.geo.model import GeoPoint

from tests.fakes import ANCHOR


def _request(session_id, student_id=1, *, is_present=True, fingerprint="dev-1", location=ANCHOR):
    return MarkRequest(
        session_id=session_id,
        student_id=student_id,
        is_present=is_present,
        fingerprint=fingerprint,
        location=location,
    )


def test_mark_commits_and_broadcasts_to_session_room(container, session, socket_server, fixed_now):
    record = container.attendance_service.mark(_request(session.session_id), now=fixed_now)

    assert record.is_present is True
    assert record.marked_at == fixed_now
    assert socket_server.events("attendanceMarked") == [
        {
            "event": "attendanceMarked",
            "data": {"session": session.session_id, "student": 1, "isPresent": True},
            "to": f"session:{session.session_id}",
        }
    ]


def test_mark_unknown_session_is_not_found(container):
    with pytest.raises(NotFoundError):
        container.attendance_service.mark(_request(999))


def test_mark_unknown_student_is_not_found(container, session):
    with pytest.raises(NotFoundError):
        container.attendance_service.mark(_request(session.session_id, student_id=42))


def test_mark_requires_enrollment(container, session):
    with pytest.raises(ValidationError):
        container.attendance_service.mark(_request(session.session_id, student_id=4))


def test_mark_without_location_is_rejected(container, session, socket_server):
    with pytest.raises(LocationUnavailable):
        container.attendance_service.mark(_request(session.session_id, location=None))

    assert container.ledger.state_of(session.session_id, 1) == AttendanceState.UNMARKED
    assert socket_server.emitted == []


def test_mark_without_location_allowed_when_not_required(make_container, fixed_now):
    container = make_container(require_location=False)
    session = container.session_registry.create_session(
        course_code="CSE101", room_number="A", teacher_id=1, anchor=ANCHOR, now=fixed_now
    )

    record = container.attendance_service.mark(_request(session.session_id, location=None))

    assert record.is_present is True


def test_mark_with_unresolved_location_is_rejected(container, session):
    with pytest.raises(LocationUnavailable):
        container.attendance_service.mark(
            _request(session.session_id, location=GeoPoint(latitude=0.0, longitude=0.0))
        )


def test_mark_far_from_anchor_is_rejected(container, session, socket_server):
    far = GeoPoint(latitude=ANCHOR.latitude + 0.001, longitude=ANCHOR.longitude)

    with pytest.raises(ProximityRejected) as exc:
        container.attendance_service.mark(_request(session.session_id, location=far))

    assert exc.value.distance_meters > 100
    assert exc.value.allowed_meters == 10.0
    assert container.ledger.state_of(session.session_id, 1) == AttendanceState.UNMARKED
    assert socket_server.emitted == []


def test_absent_mark_skips_location_check(container, session):
    record = container.attendance_service.mark(_request(session.session_id, is_present=False, location=None))

    assert record.is_present is False


def test_second_student_on_same_device_is_rejected(container, session, socket_server):
    service = container.attendance_service
    service.mark(_request(session.session_id, student_id=1, fingerprint="F"))

    with pytest.raises(DuplicateFingerprint):
        service.mark(_request(session.session_id, student_id=2, fingerprint="F"))

    assert container.ledger.state_of(session.session_id, 2) == AttendanceState.UNMARKED
    assert len(socket_server.events("attendanceMarked")) == 1


def test_teacher_set_and_toggle_notify(container, session, socket_server):
    service = container.attendance_service

    service.set_presence(session.session_id, 2, True)
    record = service.toggle(session.session_id, 2)

    assert record.is_present is False
    assert [e["data"]["isPresent"] for e in socket_server.events("attendanceMarked")] == [True, False]


def test_bulk_update_validates_every_student_first(container, session):
    with pytest.raises(ValidationError):
        container.attendance_service.bulk_update(session.session_id, [(1, True), (4, True)])

    assert container.attendance_repo.count_for_session(session.session_id) == 0


def test_bulk_update_writes_all_entries(container, session):
    records = container.attendance_service.bulk_update(session.session_id, [(1, True), (2, False)])

    assert [(r.student_id, r.is_present) for r in records] == [(1, True), (2, False)]


def test_finish_session_backfills_and_announces(container, session, socket_server, fixed_now):
    service = container.attendance_service
    service.mark(_request(session.session_id, student_id=1))

    result = service.finish_session(session.session_id, now=fixed_now)

    assert (result.enrolled, result.backfilled) == (3, 2)
    assert container.session_registry.get_session(session.session_id).finished_at == fixed_now
    assert socket_server.events("sessionFinished") == [
        {
            "event": "sessionFinished",
            "data": {"session": session.session_id, "backfilled": 2},
            "to": f"session:{session.session_id}",
        }
    ]


def test_from_payload_defaults_to_present_and_parses_location():
    request = MarkRequest.from_payload(
        {
            "sessionId": "7",
            "studentId": 3,
            "fingerprint": "abc",
            "location": {"latitude": 1.5, "longitude": 2.5, "accuracy": 4},
        }
    )

    assert request.session_id == 7
    assert request.is_present is True
    assert request.location == GeoPoint(latitude=1.5, longitude=2.5, accuracy=4.0)


@pytest.mark.parametrize(
    "payload",
    [
        None,
        {"sessionId": 1, "studentId": 1},
        {"sessionId": 1, "studentId": 1, "fingerprint": "  "},
        {"sessionId": 1, "studentId": 1, "fingerprint": "x", "isPresent": "yes"},
        {"sessionId": "abc", "studentId": 1, "fingerprint": "x"},
    ],
)
def test_from_payload_rejects_invalid_input(payload):
    with pytest.raises(ValidationError):
        MarkRequest.from_payload(payload)


def test_student_who_left_cannot_mark(container, session):
    with pytest.raises(ValidationError, match="no longer active"):
        container.attendance_service.mark(_request(session.session_id, student_id=5))


def test_finish_counts_only_active_students(container, session):
    result = container.attendance_service.finish_session(session.session_id)

    assert (result.enrolled, result.backfilled) == (3, 3)
