from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .attendance.fingerprint import FingerprintGuard
from .attendance.ledger import AttendanceLedger
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_PROXIMITY_THRESHOLD_METERS
from .database.connection import DBConfig, DatabaseConnection
from .directory.mysql_course_repository import MySQLCourseRepository
from .directory.mysql_student_repository import MySQLStudentRepository
from .directory.mysql_teacher_repository import MySQLTeacherRepository
from .directory.repository import CourseRepository, StudentRepository, TeacherRepository
from .directory.service import DirectoryService
from .geo.factory import ThresholdPolicyFactory
from .geo.proximity import ProximityValidator
from .realtime.notifier import SocketIONotifier
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.repository import SessionRepository
from .sessions.service import SessionRegistry


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    socket_server: Any

    courses_repo: CourseRepository
    students_repo: StudentRepository
    teachers_repo: TeacherRepository
    sessions_repo: SessionRepository
    attendance_repo: AttendanceRepository

    notifier: SocketIONotifier
    directory_service: DirectoryService
    session_registry: SessionRegistry
    proximity_validator: ProximityValidator
    fingerprint_guard: FingerprintGuard
    ledger: AttendanceLedger
    attendance_service: AttendanceService


def assemble_container(
    *,
    socket_server: Any,
    courses: CourseRepository,
    students: StudentRepository,
    teachers: TeacherRepository,
    sessions: SessionRepository,
    attendance: AttendanceRepository,
    conn: Optional[DatabaseConnection] = None,
    proximity_mode: str = "fixed",
    threshold_meters: float = DEFAULT_PROXIMITY_THRESHOLD_METERS,
    max_slack_meters: Optional[float] = None,
    require_location: bool = True,
    lock_finished: bool = False,
) -> Container:
    """Wire services over any repository implementations (MySQL or in-memory)."""

    notifier = SocketIONotifier(socket_server)
    directory_service = DirectoryService(courses, students, teachers)
    session_registry = SessionRegistry(sessions, courses, teachers)
    policy = ThresholdPolicyFactory().for_mode(
        proximity_mode,
        threshold_meters=threshold_meters,
        max_slack_meters=max_slack_meters,
    )
    proximity_validator = ProximityValidator(policy)
    fingerprint_guard = FingerprintGuard(attendance)
    ledger = AttendanceLedger(attendance, students, guard=fingerprint_guard, lock_finished=lock_finished)
    attendance_service = AttendanceService(
        session_registry,
        students,
        ledger,
        fingerprint_guard,
        proximity_validator,
        notifier,
        require_location=require_location,
    )

    return Container(
        conn=conn,
        socket_server=socket_server,
        courses_repo=courses,
        students_repo=students,
        teachers_repo=teachers,
        sessions_repo=sessions,
        attendance_repo=attendance,
        notifier=notifier,
        directory_service=directory_service,
        session_registry=session_registry,
        proximity_validator=proximity_validator,
        fingerprint_guard=fingerprint_guard,
        ledger=ledger,
        attendance_service=attendance_service,
    )


def build_container(*, db_config: dict, socket_server: Any, **options: Any) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return assemble_container(
        socket_server=socket_server,
        courses=MySQLCourseRepository(conn),
        students=MySQLStudentRepository(conn),
        teachers=MySQLTeacherRepository(conn),
        sessions=MySQLSessionRepository(conn),
        attendance=MySQLAttendanceRepository(conn),
        conn=conn,
        **options,
    )
