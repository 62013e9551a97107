from __future__ import annotations

from ...core.constants import DEFAULT_PROXIMITY_THRESHOLD_METERS
from ..model import GeoPoint
from .base import ThresholdPolicy


class FixedThresholdPolicy(ThresholdPolicy):
    """Same radius for every device."""

    def __init__(self, threshold_meters: float = DEFAULT_PROXIMITY_THRESHOLD_METERS):
        self.threshold_meters = float(threshold_meters)

    def allowed_distance(self, *, device: GeoPoint, anchor: GeoPoint) -> float:
        return self.threshold_meters
