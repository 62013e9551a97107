from __future__ import annotations

import logging
from dataclasses import dataclass
from math import atan2, cos, radians, sin, sqrt
from typing import Optional

from ..core.constants import EARTH_RADIUS_METERS
from ..core.exceptions import LocationUnavailable, ProximityRejected
from .model import GeoPoint
from .policies.base import ThresholdPolicy
from .policies.fixed_policy import FixedThresholdPolicy

logger = logging.getLogger(__name__)


def haversine_distance(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points, in meters."""

    lat1 = radians(a.latitude)
    lat2 = radians(b.latitude)
    d_lat = radians(b.latitude - a.latitude)
    d_lon = radians(b.longitude - a.longitude)

    h = sin(d_lat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(d_lon / 2) ** 2
    return EARTH_RADIUS_METERS * 2 * atan2(sqrt(h), sqrt(1 - h))


@dataclass(frozen=True)
class ProximityVerdict:
    distance_meters: float
    allowed_meters: float

    @property
    def accepted(self) -> bool:
        return self.distance_meters <= self.allowed_meters


class ProximityValidator:
    def __init__(self, policy: ThresholdPolicy | None = None):
        self._policy = policy or FixedThresholdPolicy()

    @property
    def policy(self) -> ThresholdPolicy:
        return self._policy

    def evaluate(self, device: GeoPoint, anchor: GeoPoint) -> ProximityVerdict:
        return ProximityVerdict(
            distance_meters=haversine_distance(device, anchor),
            allowed_meters=self._policy.allowed_distance(device=device, anchor=anchor),
        )

    def check(self, device: Optional[GeoPoint], anchor: GeoPoint) -> ProximityVerdict:
        """Raise unless `device` is within the allowed distance of `anchor`."""

        if device is None:
            raise LocationUnavailable("Device location is not available yet")

        verdict = self.evaluate(device, anchor)
        if not verdict.accepted:
            logger.info(
                "Proximity rejected: %.1f m > %.1f m allowed",
                verdict.distance_meters,
                verdict.allowed_meters,
            )
            raise ProximityRejected(verdict.distance_meters, verdict.allowed_meters)
        return verdict
