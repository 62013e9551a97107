from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import ProximityMode
from ..core.exceptions import ValidationError
from .policies.accuracy_policy import AccuracyAdjustedPolicy
from .policies.base import ThresholdPolicy
from .policies.fixed_policy import FixedThresholdPolicy


@dataclass
class ThresholdPolicyFactory:
    """Factory Pattern: choose the threshold policy from configuration."""

    def for_mode(
        self,
        mode: str | ProximityMode,
        *,
        threshold_meters: float,
        max_slack_meters: Optional[float] = None,
    ) -> ThresholdPolicy:
        try:
            mode = ProximityMode(str(getattr(mode, "value", mode)).lower())
        except ValueError:
            raise ValidationError(f"Unknown proximity mode: {mode!r}") from None

        if mode == ProximityMode.ACCURACY:
            return AccuracyAdjustedPolicy(threshold_meters, max_slack_meters=max_slack_meters)
        return FixedThresholdPolicy(threshold_meters)
