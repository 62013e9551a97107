from __future__ import annotations

from typing import Any

from ..core.constants import MAX_FINGERPRINT_LENGTH
from ..core.exceptions import ValidationError


def require_non_empty(value: Any, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer") from None


def require_float(value: Any, field_name: str) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number") from None


def require_bool(value: Any, field_name: str) -> bool:
    if isinstance(value, bool):
        return value
    raise ValidationError(f"{field_name} must be true or false")


def require_fingerprint(value: Any) -> str:
    fingerprint = require_non_empty(value, "fingerprint")
    if len(fingerprint) > MAX_FINGERPRINT_LENGTH:
        raise ValidationError(f"fingerprint is limited to {MAX_FINGERPRINT_LENGTH} characters")
    return fingerprint
