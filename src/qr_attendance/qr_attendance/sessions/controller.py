from __future__ import annotations

import io
import logging

from flask import Flask, jsonify, send_file

from ..common.http import error_response, json_object, server_error_response
from ..common.validators import require_int
from ..container import Container
from ..core.exceptions import DomainError
from ..geo.model import GeoPoint
from ..qr.payload import SessionQRPayload, render_png

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    registry = container.session_registry

    def _qr_payload(session_id: int) -> SessionQRPayload:
        session = registry.get_session(session_id)
        course = registry.get_course(session.course_id)
        return SessionQRPayload.from_session(session, course_code=course.course_code)

    @app.route("/api/sessions", methods=["POST"], endpoint="api_sessions_create")
    def api_sessions_create():
        """Teacher starts a class: the request location becomes the session anchor."""
        try:
            data = json_object()
            anchor = GeoPoint.from_lon_lat(data.get("geoLocations"), data.get("accuracy"))
            session = registry.create_session(
                course_code=data.get("courseId"),
                room_number=data.get("roomNumber"),
                teacher_id=require_int(data.get("teacher"), "teacher"),
                anchor=anchor,
            )
            return jsonify(session.to_dict()), 201
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Creating session failed")
            return server_error_response()

    @app.route("/api/sessions/<int:session_id>", methods=["GET"], endpoint="api_sessions_get")
    def api_sessions_get(session_id: int):
        try:
            return jsonify(registry.get_session(session_id).to_dict()), 200
        except DomainError as e:
            return error_response(e)

    @app.route("/api/sessions/teacher/<int:teacher_id>", methods=["GET"], endpoint="api_sessions_for_teacher")
    def api_sessions_for_teacher(teacher_id: int):
        try:
            return jsonify([s.to_dict() for s in registry.list_for_teacher(teacher_id)]), 200
        except DomainError as e:
            return error_response(e)

    @app.route("/api/courses/<int:course_id>/history", methods=["GET"], endpoint="api_course_history")
    def api_course_history(course_id: int):
        try:
            return jsonify([s.to_dict() for s in registry.list_for_course(course_id)]), 200
        except DomainError as e:
            return error_response(e)

    @app.route("/api/sessions/<int:session_id>/qr", methods=["GET"], endpoint="api_session_qr_image")
    def api_session_qr_image(session_id: int):
        try:
            png = render_png(_qr_payload(session_id))
            return send_file(io.BytesIO(png), mimetype="image/png")
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Rendering QR for session %s failed", session_id)
            return server_error_response()

    @app.route("/api/sessions/<int:session_id>/qr.json", methods=["GET"], endpoint="api_session_qr_payload")
    def api_session_qr_payload(session_id: int):
        try:
            return jsonify(_qr_payload(session_id).to_dict()), 200
        except DomainError as e:
            return error_response(e)

    @app.route("/finishSession/<int:session_id>", methods=["POST"], endpoint="finish_session")
    def finish_session(session_id: int):
        try:
            result = container.attendance_service.finish_session(session_id)
            return jsonify({
                "success": True,
                "message": "Successfully marked absent students",
                "backfilled": result.backfilled,
                "enrolled": result.enrolled,
            }), 200
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Finishing session %s failed", session_id)
            return server_error_response()
