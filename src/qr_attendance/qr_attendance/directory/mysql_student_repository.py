from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import MemberStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Student
from .repository import StudentRepository


def _to_student(r: dict) -> Student:
    return Student(
        student_id=int(r["student_id"]),
        full_name=r["full_name"],
        status=MemberStatus(r.get("status") or MemberStatus.ACTIVE.value),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT student_id, full_name, status FROM students WHERE student_id=%s",
                (int(student_id),),
            )
            r = fetchone(cur)
            return _to_student(r) if r else None

    def list_for_course(self, course_id: int) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT s.student_id, s.full_name, s.status
                FROM students s
                JOIN enrollments e ON e.student_id = s.student_id
                WHERE e.course_id=%s
                ORDER BY s.student_id ASC
                """,
                (int(course_id),),
            )
            return [_to_student(r) for r in fetchall(cur)]

    def is_enrolled(self, *, student_id: int, course_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS ok FROM enrollments WHERE student_id=%s AND course_id=%s",
                (int(student_id), int(course_id)),
            )
            return fetchone(cur) is not None

    def enroll(self, *, student_id: int, course_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT IGNORE INTO enrollments(student_id, course_id) VALUES(%s,%s)",
                (int(student_id), int(course_id)),
            )
            return cur.rowcount == 1
