from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.exceptions import StorageConflict
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, duplicate_key_name, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "attendance_id, session_id, student_id, is_present, fingerprint, marked_at"

_KEY_TO_CONFLICT = {
    "uq_attendance_session_student": StorageConflict.STUDENT_KEY,
    "uq_attendance_session_fingerprint": StorageConflict.FINGERPRINT_KEY,
}


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        session_id=int(r["session_id"]),
        student_id=int(r["student_id"]),
        is_present=bool(r["is_present"]),
        fingerprint=r.get("fingerprint"),
        marked_at=r["marked_at"],
    )


def _as_conflict(err: IntegrityError) -> Optional[StorageConflict]:
    key = _KEY_TO_CONFLICT.get(duplicate_key_name(err) or "")
    return StorageConflict(key) if key else None


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select_one(self, cur, session_id: int, student_id: int) -> Optional[AttendanceRecord]:
        cur.execute(
            f"SELECT {_COLUMNS} FROM attendance_records WHERE session_id=%s AND student_id=%s",
            (int(session_id), int(student_id)),
        )
        r = fetchone(cur)
        return _to_record(r) if r else None

    def get(self, *, session_id: int, student_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_one(cur, session_id, student_id)

    def find_by_fingerprint(self, *, session_id: int, fingerprint: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE session_id=%s AND fingerprint=%s",
                (int(session_id), fingerprint),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def insert(
        self,
        *,
        session_id: int,
        student_id: int,
        is_present: bool,
        fingerprint: Optional[str],
        marked_at: datetime,
    ) -> AttendanceRecord:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(session_id, student_id, is_present, fingerprint, marked_at)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (int(session_id), int(student_id), int(bool(is_present)), fingerprint, marked_at),
                )
                return AttendanceRecord(
                    attendance_id=int(cur.lastrowid),
                    session_id=int(session_id),
                    student_id=int(student_id),
                    is_present=bool(is_present),
                    fingerprint=fingerprint,
                    marked_at=marked_at,
                )
        except IntegrityError as e:
            conflict = _as_conflict(e)
            if conflict is None:
                raise
            raise conflict from e

    def update(
        self,
        *,
        session_id: int,
        student_id: int,
        is_present: bool,
        fingerprint: Optional[str],
        marked_at: datetime,
    ) -> Optional[AttendanceRecord]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    UPDATE attendance_records
                    SET is_present=%s, fingerprint=COALESCE(%s, fingerprint), marked_at=%s
                    WHERE session_id=%s AND student_id=%s
                    """,
                    (int(bool(is_present)), fingerprint, marked_at, int(session_id), int(student_id)),
                )
                return self._select_one(cur, session_id, student_id)
        except IntegrityError as e:
            conflict = _as_conflict(e)
            if conflict is None:
                raise
            raise conflict from e

    def toggle(self, *, session_id: int, student_id: int, marked_at: datetime) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET is_present = NOT is_present, marked_at=%s
                WHERE session_id=%s AND student_id=%s
                """,
                (marked_at, int(session_id), int(student_id)),
            )
            return self._select_one(cur, session_id, student_id)

    def insert_absent(self, *, session_id: int, student_ids: Iterable[int], marked_at: datetime) -> int:
        created = 0
        with db_cursor(self._conn_factory) as (_, cur):
            for student_id in student_ids:
                # No-op update: an existing row for the student wins.
                cur.execute(
                    """
                    INSERT INTO attendance_records(session_id, student_id, is_present, fingerprint, marked_at)
                    VALUES(%s,%s,0,NULL,%s)
                    ON DUPLICATE KEY UPDATE attendance_id=attendance_id
                    """,
                    (int(session_id), int(student_id), marked_at),
                )
                created += 1 if cur.rowcount == 1 else 0
        return created

    def list_for_session(
        self, session_id: int, *, offset: int = 0, limit: Optional[int] = None
    ) -> Sequence[AttendanceRecord]:
        sql = f"SELECT {_COLUMNS} FROM attendance_records WHERE session_id=%s ORDER BY attendance_id ASC"
        params: list[object] = [int(session_id)]
        if limit is not None:
            sql += " LIMIT %s OFFSET %s"
            params.extend([int(limit), int(offset)])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_record(r) for r in fetchall(cur)]

    def count_for_session(self, session_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM attendance_records WHERE session_id=%s", (int(session_id),))
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def list_for_student(self, student_id: int, *, course_id: Optional[int] = None) -> Sequence[AttendanceRecord]:
        if course_id is None:
            sql = f"SELECT {_COLUMNS} FROM attendance_records WHERE student_id=%s ORDER BY marked_at DESC"
            params: tuple = (int(student_id),)
        else:
            sql = """
                SELECT a.attendance_id, a.session_id, a.student_id, a.is_present, a.fingerprint, a.marked_at
                FROM attendance_records a
                JOIN sessions s ON s.session_id = a.session_id
                WHERE a.student_id=%s AND s.course_id=%s
                ORDER BY a.marked_at DESC
                """
            params = (int(student_id), int(course_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [_to_record(r) for r in fetchall(cur)]
