from __future__ import annotations

from datetime import datetime

import pytest

from src.qr_attendance.qr_attendance.container import assemble_container
from src.qr_attendance.qr_attendance.core.enums import MemberStatus
from src.qr_attendance.qr_attendance.directory.model import Course, Student, Teacher

from tests.fakes import (
    ANCHOR,
    FakeSocketServer,
    InMemoryAttendance,
    InMemoryCourses,
    InMemorySessions,
    InMemoryStudents,
    InMemoryTeachers,
)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 2, 8, 30, 0)


@pytest.fixture
def socket_server() -> FakeSocketServer:
    return FakeSocketServer()


@pytest.fixture
def directory():
    courses = InMemoryCourses(
        {
            1: Course(course_id=1, course_code="CSE101", name="Programming", department="CS"),
            2: Course(course_id=2, course_code="MTH201", name="Linear Algebra", department="Math"),
        },
        {(1, 1), (1, 2)},
    )
    students = InMemoryStudents(
        {
            1: Student(student_id=1, full_name="Student One"),
            2: Student(student_id=2, full_name="Student Two"),
            3: Student(student_id=3, full_name="Student Three"),
            4: Student(student_id=4, full_name="Not Enrolled"),
            5: Student(student_id=5, full_name="Left Student", status=MemberStatus.LEFT),
        },
        {(1, 1), (2, 1), (3, 1), (5, 1)},
    )
    teachers = InMemoryTeachers(
        {
            1: Teacher(teacher_id=1, full_name="Teacher"),
            2: Teacher(teacher_id=2, full_name="Retired Teacher", status=MemberStatus.RETIRED),
        }
    )
    return courses, students, teachers


@pytest.fixture
def make_container(directory, socket_server):
    def _make(**options):
        courses, students, teachers = directory
        sessions = InMemorySessions()
        return assemble_container(
            socket_server=socket_server,
            courses=courses,
            students=students,
            teachers=teachers,
            sessions=sessions,
            attendance=InMemoryAttendance(sessions),
            **options,
        )

    return _make


@pytest.fixture
def container(make_container):
    return make_container()


@pytest.fixture
def session(container, fixed_now):
    return container.session_registry.create_session(
        course_code="CSE101",
        room_number="A-101",
        teacher_id=1,
        anchor=ANCHOR,
        now=fixed_now,
    )
