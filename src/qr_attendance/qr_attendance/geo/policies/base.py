from __future__ import annotations

from abc import ABC, abstractmethod

from ..model import GeoPoint


class ThresholdPolicy(ABC):
    """Strategy Pattern: decide how far a device may be from the session anchor."""

    @abstractmethod
    def allowed_distance(self, *, device: GeoPoint, anchor: GeoPoint) -> float:
        raise NotImplementedError
