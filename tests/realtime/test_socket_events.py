from __future__ import annotations

import pytest

from src.qr_attendance.qr_attendance.realtime.events import register

from tests.fakes import ANCHOR


def _payload(session_id, student_id=1, fingerprint="dev-1", **extra):
    data = {
        "sessionId": session_id,
        "studentId": student_id,
        "isPresent": True,
        "fingerprint": fingerprint,
        "location": {"latitude": ANCHOR.latitude, "longitude": ANCHOR.longitude},
    }
    data.update(extra)
    return data


def _wire(container):
    register(container.socket_server, container.attendance_service, container.notifier)
    return container.socket_server


def test_handlers_are_registered(container):
    server = _wire(container)

    assert {"connect", "disconnect", "joinSession", "leaveSession", "markAttendance"} <= set(server.handlers)


def test_join_and_leave_session_room(container, session):
    server = _wire(container)
    room = f"session:{session.session_id}"

    assert server.trigger("joinSession", "sid-t", {"sessionId": session.session_id}) == {"ok": True}
    assert server.rooms[room] == {"sid-t"}

    server.trigger("leaveSession", "sid-t", {"sessionId": session.session_id})
    assert server.rooms[room] == set()


def test_join_without_session_id_is_refused(container):
    server = _wire(container)

    ack = server.trigger("joinSession", "sid-t", {})

    assert ack["ok"] is False
    assert ack["reason"] == "invalid_request"
    assert server.rooms == {}


@pytest.mark.parametrize("event", ["joinSession", "leaveSession"])
@pytest.mark.parametrize("payload", ["5", None, [5]])
def test_room_events_answer_non_object_payloads(container, event, payload):
    server = _wire(container)

    ack = server.trigger(event, "sid-t", payload)

    assert ack["ok"] is False
    assert ack["reason"] == "invalid_request"
    assert server.rooms == {}


def test_mark_joins_submitter_and_broadcasts(container, session):
    server = _wire(container)

    ack = server.trigger("markAttendance", "sid-a", _payload(session.session_id))

    room = f"session:{session.session_id}"
    assert ack["ok"] is True
    assert ack["attendance"]["isPresent"] is True
    assert "sid-a" in server.rooms[room]
    assert server.events("attendanceMarked") == [
        {"event": "attendanceMarked", "data": {"session": session.session_id, "student": 1, "isPresent": True}, "to": room}
    ]


def test_rejection_goes_only_to_submitter(container, session):
    server = _wire(container)
    server.trigger("markAttendance", "sid-a", _payload(session.session_id, student_id=1, fingerprint="F"))

    ack = server.trigger("markAttendance", "sid-b", _payload(session.session_id, student_id=2, fingerprint="F"))

    assert ack["ok"] is False
    assert ack["reason"] == "duplicate_fingerprint"
    assert len(server.events("attendanceMarked")) == 1
    rejected = server.events("attendanceRejected")
    assert len(rejected) == 1
    assert rejected[0]["to"] == "sid-b"
    assert rejected[0]["data"]["reason"] == "duplicate_fingerprint"
    assert rejected[0]["data"]["student"] == 2


def test_proximity_rejection_reason(container, session):
    server = _wire(container)
    far = {"latitude": ANCHOR.latitude + 0.01, "longitude": ANCHOR.longitude}

    ack = server.trigger("markAttendance", "sid-a", _payload(session.session_id, location=far))

    assert ack["reason"] == "proximity_rejected"
    assert server.events("attendanceRejected")[0]["to"] == "sid-a"
    assert server.events("attendanceMarked") == []


def test_invalid_payload_is_rejected_without_joining(container):
    server = _wire(container)

    ack = server.trigger("markAttendance", "sid-a", {"sessionId": 1})

    assert ack == {"ok": False, "reason": "invalid_request", "message": "studentId must be an integer"}
    assert server.rooms == {}
    assert server.events("attendanceRejected")[0]["to"] == "sid-a"


def test_unknown_session_reason_is_not_found(container):
    server = _wire(container)

    ack = server.trigger("markAttendance", "sid-a", _payload(404))

    assert ack["reason"] == "not_found"


def test_unexpected_error_is_reported_as_server_error(container, session, monkeypatch):
    server = _wire(container)

    def broken(*args, **kwargs):
        raise RuntimeError("db down")

    monkeypatch.setattr(container.attendance_repo, "get", broken)
    monkeypatch.setattr(container.attendance_repo, "find_by_fingerprint", broken)

    ack = server.trigger("markAttendance", "sid-a", _payload(session.session_id))

    assert ack["reason"] == "server_error"
    assert server.events("attendanceRejected")[0]["data"]["message"] == "Internal server error"
