from __future__ import annotations

import logging
from typing import Any

from ..attendance.model import AttendanceRecord, FinishResult
from ..core.constants import SESSION_ROOM_PREFIX
from ..core.enums import RejectionReason

logger = logging.getLogger(__name__)

ATTENDANCE_MARKED = "attendanceMarked"
ATTENDANCE_REJECTED = "attendanceRejected"
SESSION_FINISHED = "sessionFinished"


def session_room(session_id: int) -> str:
    return f"{SESSION_ROOM_PREFIX}{int(session_id)}"


class SocketIONotifier:
    """Broadcasts ledger changes to the sessions' Socket.IO rooms.

    Delivery is best effort: a client that is not connected at emit time
    misses the event and has to pull the ledger over HTTP.
    """

    def __init__(self, server: Any):
        self._server = server

    def attendance_marked(self, record: AttendanceRecord) -> None:
        self._server.emit(ATTENDANCE_MARKED, record.to_event(), room=session_room(record.session_id))

    def session_finished(self, result: FinishResult) -> None:
        self._server.emit(
            SESSION_FINISHED,
            {"session": result.session_id, "backfilled": result.backfilled},
            room=session_room(result.session_id),
        )

    def reject(self, sid: str, *, reason: RejectionReason, message: str, payload: Any = None) -> None:
        """Tell one client its submission was refused. Never broadcast."""

        data = payload if isinstance(payload, dict) else {}
        self._server.emit(
            ATTENDANCE_REJECTED,
            {
                "session": data.get("sessionId"),
                "student": data.get("studentId"),
                "reason": reason.value,
                "message": message,
            },
            to=sid,
        )
