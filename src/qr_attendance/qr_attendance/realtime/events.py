from __future__ import annotations

import logging
from typing import Any

from ..attendance.model import MarkRequest
from ..attendance.service import AttendanceService
from ..common.validators import require_int
from ..core.enums import RejectionReason
from ..core.exceptions import DomainError, ValidationError
from .notifier import SocketIONotifier, session_room

logger = logging.getLogger(__name__)


def _session_id(data: Any) -> int:
    if not isinstance(data, dict):
        raise ValidationError("Payload must be an object with sessionId")
    return require_int(data.get("sessionId"), "sessionId")


def register(server: Any, service: AttendanceService, notifier: SocketIONotifier) -> None:
    """Attach the attendance event handlers to a python-socketio server."""

    def connect(sid, environ, auth=None):
        logger.debug("Socket connected: %s", sid)

    def disconnect(sid, *args):
        logger.debug("Socket disconnected: %s", sid)

    def join_session(sid, data):
        try:
            session_id = _session_id(data)
        except DomainError as e:
            return {"ok": False, "reason": e.reason.value, "message": str(e)}
        server.enter_room(sid, session_room(session_id))
        return {"ok": True}

    def leave_session(sid, data):
        try:
            session_id = _session_id(data)
        except DomainError as e:
            return {"ok": False, "reason": e.reason.value, "message": str(e)}
        server.leave_room(sid, session_room(session_id))
        return {"ok": True}

    def mark_attendance(sid, data):
        try:
            request = MarkRequest.from_payload(data)
            # Join before committing so the submitter receives the broadcast.
            server.enter_room(sid, session_room(request.session_id))
            record = service.mark(request)
        except DomainError as e:
            notifier.reject(sid, reason=e.reason, message=str(e), payload=data)
            return {"ok": False, "reason": e.reason.value, "message": str(e)}
        except Exception:
            logger.exception("markAttendance failed for sid=%s", sid)
            notifier.reject(sid, reason=RejectionReason.SERVER_ERROR, message="Internal server error", payload=data)
            return {"ok": False, "reason": RejectionReason.SERVER_ERROR.value, "message": "Internal server error"}
        return {"ok": True, "attendance": record.to_dict()}

    server.on("connect", connect)
    server.on("disconnect", disconnect)
    server.on("joinSession", join_session)
    server.on("leaveSession", leave_session)
    server.on("markAttendance", mark_attendance)
