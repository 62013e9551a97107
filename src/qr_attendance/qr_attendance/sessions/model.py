from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_iso
from ..geo.model import GeoPoint


@dataclass(frozen=True)
class Session:
    """One class meeting during which attendance may be marked."""

    session_id: int
    course_id: int
    teacher_id: int
    room_number: str
    anchor: GeoPoint
    created_at: datetime
    finished_at: Optional[datetime] = None

    @property
    def is_finished(self) -> bool:
        return self.finished_at is not None

    def to_dict(self) -> dict:
        return {
            "_id": self.session_id,
            "course": self.course_id,
            "teacher": self.teacher_id,
            "roomNumber": self.room_number,
            "geoLocations": self.anchor.to_lon_lat(),
            "accuracy": self.anchor.accuracy,
            "sessionTime": to_iso(self.created_at),
            "finishedAt": to_iso(self.finished_at),
        }
