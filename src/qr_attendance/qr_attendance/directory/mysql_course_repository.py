from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Course
from .repository import CourseRepository

_COLUMNS = "c.course_id, c.course_code, c.name, c.department"


def _to_course(r: dict) -> Course:
    return Course(
        course_id=int(r["course_id"]),
        course_code=r["course_code"],
        name=r["name"],
        department=r["department"],
    )


class MySQLCourseRepository(CourseRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _query_one(self, where: str, value) -> Optional[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM courses c WHERE c.{where}=%s", (value,))
            r = fetchone(cur)
            return _to_course(r) if r else None

    def get_by_id(self, course_id: int) -> Optional[Course]:
        return self._query_one("course_id", int(course_id))

    def get_by_code(self, course_code: str) -> Optional[Course]:
        return self._query_one("course_code", course_code)

    def list_for_teacher(self, teacher_id: int) -> Sequence[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM courses c
                JOIN teacher_courses tc ON tc.course_id = c.course_id
                WHERE tc.teacher_id=%s
                ORDER BY c.course_code ASC
                """,
                (int(teacher_id),),
            )
            return [_to_course(r) for r in fetchall(cur)]
