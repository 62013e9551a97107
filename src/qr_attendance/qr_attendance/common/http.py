from __future__ import annotations

from typing import Any

from flask import jsonify, request

from ..core.exceptions import (
    DomainError,
    DuplicateFingerprint,
    NotFoundError,
    ProximityRejected,
    SessionFinished,
    StorageConflict,
    ValidationError,
)

_STATUS_BY_ERROR = (
    (NotFoundError, 404),
    (DuplicateFingerprint, 409),
    (SessionFinished, 409),
    (StorageConflict, 409),
)


def status_for(error: DomainError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 400


def json_object() -> dict[str, Any]:
    """The request's JSON body as a dict. A missing or empty body reads as {}."""

    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def error_response(error: DomainError):
    body = {"success": False, "message": str(error), "reason": error.reason.value}
    if isinstance(error, ProximityRejected):
        body["distanceMeters"] = round(error.distance_meters, 2)
        body["allowedMeters"] = round(error.allowed_meters, 2)
    return jsonify(body), status_for(error)


def server_error_response():
    return jsonify({"success": False, "message": "Internal server error"}), 500
