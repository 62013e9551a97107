from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from ..common.validators import require_float
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class GeoPoint:
    """A WGS84 position in degrees, with an optional accuracy radius in meters."""

    latitude: float
    longitude: float
    accuracy: Optional[float] = None

    def __post_init__(self):
        if not -90.0 <= self.latitude <= 90.0:
            raise ValidationError("latitude must be between -90 and 90")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValidationError("longitude must be between -180 and 180")
        if self.accuracy is not None and self.accuracy < 0:
            raise ValidationError("accuracy must not be negative")

    @property
    def is_unset(self) -> bool:
        """(0, 0) is what clients report before geolocation has resolved."""
        return self.latitude == 0 and self.longitude == 0

    @classmethod
    def from_lon_lat(cls, values: Any, accuracy: Any = None) -> "GeoPoint":
        """Build from a `[longitude, latitude]` pair (strings or numbers)."""

        if not isinstance(values, (list, tuple)) or len(values) != 2:
            raise ValidationError("geoLocations must be [longitude, latitude]")
        return cls(
            latitude=require_float(values[1], "latitude"),
            longitude=require_float(values[0], "longitude"),
            accuracy=None if accuracy is None else require_float(accuracy, "accuracy"),
        )

    @classmethod
    def from_mapping(cls, data: Any) -> "GeoPoint":
        if not isinstance(data, dict):
            raise ValidationError("location must be an object with latitude and longitude")
        accuracy = data.get("accuracy")
        return cls(
            latitude=require_float(data.get("latitude"), "latitude"),
            longitude=require_float(data.get("longitude"), "longitude"),
            accuracy=None if accuracy is None else require_float(accuracy, "accuracy"),
        )

    def to_lon_lat(self) -> list[float]:
        return [self.longitude, self.latitude]

    def to_dict(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude, "accuracy": self.accuracy}
