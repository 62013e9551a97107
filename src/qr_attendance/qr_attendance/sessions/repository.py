from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..geo.model import GeoPoint
from .model import Session


class SessionRepository(Protocol):
    def create(
        self,
        *,
        course_id: int,
        teacher_id: int,
        room_number: str,
        anchor: GeoPoint,
        created_at: datetime,
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, session_id: int) -> Optional[Session]:
        raise NotImplementedError

    def list_for_teacher(self, teacher_id: int) -> Sequence[Session]:
        raise NotImplementedError

    def list_for_course(self, course_id: int) -> Sequence[Session]:
        raise NotImplementedError

    def mark_finished(self, *, session_id: int, finished_at: datetime) -> bool:
        """Set finished_at if still open. Returns True if this call finished it."""

        raise NotImplementedError
