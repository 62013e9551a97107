from __future__ import annotations

from typing import Optional

from ...core.constants import DEFAULT_PROXIMITY_THRESHOLD_METERS
from ..model import GeoPoint
from .base import ThresholdPolicy


class AccuracyAdjustedPolicy(ThresholdPolicy):
    """Widen the radius by the reported accuracy of both fixes.

    `max_slack_meters` caps how much a poor fix can widen the radius.
    """

    def __init__(
        self,
        threshold_meters: float = DEFAULT_PROXIMITY_THRESHOLD_METERS,
        *,
        max_slack_meters: Optional[float] = None,
    ):
        self.threshold_meters = float(threshold_meters)
        self.max_slack_meters = None if max_slack_meters is None else float(max_slack_meters)

    def allowed_distance(self, *, device: GeoPoint, anchor: GeoPoint) -> float:
        slack = (device.accuracy or 0.0) + (anchor.accuracy or 0.0)
        if self.max_slack_meters is not None:
            slack = min(slack, self.max_slack_meters)
        return self.threshold_meters + slack
