"""Example: drive the service layer directly (no Flask, no socket clients).

Starts a session for the seeded demo course, marks one student from the
classroom, finishes the session and prints the roster.
"""

import importlib

import socketio

from config import get_settings_module

from src.qr_attendance.qr_attendance.attendance.model import MarkRequest
from src.qr_attendance.qr_attendance.container import build_container
from src.qr_attendance.qr_attendance.geo.model import GeoPoint


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, socket_server=socketio.Server())

    classroom = GeoPoint(latitude=24.8607, longitude=67.0011, accuracy=5)
    session = container.session_registry.create_session(
        course_code="CSE101", room_number="A-101", teacher_id=1, anchor=classroom
    )
    container.attendance_service.mark(
        MarkRequest(session_id=session.session_id, student_id=1, is_present=True, fingerprint="demo-device", location=classroom)
    )
    container.attendance_service.finish_session(session.session_id)

    for entry in container.ledger.roster(session):
        print(entry.to_dict())


if __name__ == "__main__":
    main()
