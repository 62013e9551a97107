from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def duplicate_key_name(err: IntegrityError) -> Optional[str]:
    """Name of the unique key behind a duplicate-entry error, else None.

    MySQL 8 reports keys as 'table.key', older servers as 'key'.
    """

    if err.errno != errorcode.ER_DUP_ENTRY:
        return None
    msg = str(getattr(err, "msg", "") or err)
    marker = "for key '"
    pos = msg.rfind(marker)
    if pos < 0:
        return None
    key = msg[pos + len(marker):].rstrip("'")
    return key.split(".")[-1]
