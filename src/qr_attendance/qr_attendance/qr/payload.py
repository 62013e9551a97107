from __future__ import annotations

import io
import json
from dataclasses import dataclass
from typing import Any, BinaryIO

import qrcode
from PIL import Image

from ..common.validators import require_int, require_non_empty
from ..core.exceptions import ValidationError
from ..geo.model import GeoPoint
from ..sessions.model import Session


@dataclass(frozen=True)
class SessionQRPayload:
    """What the session QR code carries.

    Wire form: {"geoLocations": [lon, lat], "sessionId", "courseId", "roomNumber", "teacher"}.
    """

    session_id: int
    course_code: str
    room_number: str
    teacher_id: int
    anchor: GeoPoint

    @classmethod
    def from_session(cls, session: Session, *, course_code: str) -> "SessionQRPayload":
        return cls(
            session_id=session.session_id,
            course_code=course_code,
            room_number=session.room_number,
            teacher_id=session.teacher_id,
            anchor=session.anchor,
        )

    def to_dict(self) -> dict:
        return {
            "geoLocations": self.anchor.to_lon_lat(),
            "sessionId": self.session_id,
            "courseId": self.course_code,
            "roomNumber": self.room_number,
            "teacher": self.teacher_id,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: Any) -> "SessionQRPayload":
        if not isinstance(data, dict):
            raise ValidationError("QR payload must be a JSON object")
        return cls(
            session_id=require_int(data.get("sessionId"), "sessionId"),
            course_code=require_non_empty(data.get("courseId"), "courseId"),
            room_number=require_non_empty(data.get("roomNumber"), "roomNumber"),
            teacher_id=require_int(data.get("teacher"), "teacher"),
            anchor=GeoPoint.from_lon_lat(data.get("geoLocations")),
        )

    @classmethod
    def from_json(cls, text: str | bytes) -> "SessionQRPayload":
        try:
            data = json.loads(text)
        except ValueError:
            raise ValidationError("QR code does not contain a session payload") from None
        return cls.from_dict(data)


def render_png(payload: SessionQRPayload, *, box_size: int = 10, border: int = 2) -> bytes:
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(payload.to_json())
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def decode_image(stream: BinaryIO) -> SessionQRPayload:
    """Read the first QR symbol of an uploaded image."""
    from pyzbar.pyzbar import decode as pyzbar_decode

    try:
        img = Image.open(stream).convert("RGB")
    except OSError:
        raise ValidationError("Uploaded file is not an image") from None

    decoded = pyzbar_decode(img)
    if not decoded:
        raise ValidationError("No QR code found in image")
    return SessionQRPayload.from_json(decoded[0].data)
