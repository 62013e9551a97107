from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..geo.model import GeoPoint
from .model import Session
from .repository import SessionRepository

_COLUMNS = """
    session_id, course_id, teacher_id, room_number,
    anchor_latitude, anchor_longitude, anchor_accuracy, created_at, finished_at
"""


def _to_session(r: dict) -> Session:
    accuracy = r.get("anchor_accuracy")
    return Session(
        session_id=int(r["session_id"]),
        course_id=int(r["course_id"]),
        teacher_id=int(r["teacher_id"]),
        room_number=r["room_number"],
        anchor=GeoPoint(
            latitude=float(r["anchor_latitude"]),
            longitude=float(r["anchor_longitude"]),
            accuracy=None if accuracy is None else float(accuracy),
        ),
        created_at=r["created_at"],
        finished_at=r.get("finished_at"),
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        course_id: int,
        teacher_id: int,
        room_number: str,
        anchor: GeoPoint,
        created_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO sessions(course_id, teacher_id, room_number,
                                     anchor_latitude, anchor_longitude, anchor_accuracy, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(course_id),
                    int(teacher_id),
                    room_number,
                    anchor.latitude,
                    anchor.longitude,
                    anchor.accuracy,
                    created_at,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, session_id: int) -> Optional[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM sessions WHERE session_id=%s", (int(session_id),))
            r = fetchone(cur)
            return _to_session(r) if r else None

    def list_for_teacher(self, teacher_id: int) -> Sequence[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM sessions WHERE teacher_id=%s ORDER BY created_at DESC, session_id DESC",
                (int(teacher_id),),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def list_for_course(self, course_id: int) -> Sequence[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM sessions WHERE course_id=%s ORDER BY created_at DESC, session_id DESC",
                (int(course_id),),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def mark_finished(self, *, session_id: int, finished_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE sessions SET finished_at=%s WHERE session_id=%s AND finished_at IS NULL",
                (finished_at, int(session_id)),
            )
            return cur.rowcount > 0
