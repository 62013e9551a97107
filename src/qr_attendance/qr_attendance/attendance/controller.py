from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..common.http import error_response, json_object, server_error_response
from ..common.validators import require_bool, require_int
from ..container import Container
from ..core.constants import DEFAULT_PAGE_LIMIT
from ..core.exceptions import DomainError, ValidationError
from ..qr.payload import decode_image
from .model import MarkRequest

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service
    ledger = container.ledger
    registry = container.session_registry

    @app.route("/api/attendance", methods=["POST"], endpoint="api_attendance_mark")
    def api_attendance_mark():
        """Same contract as the markAttendance socket event, over HTTP."""
        try:
            record = service.mark(MarkRequest.from_payload(request.get_json(silent=True)))
            return jsonify({"success": True, "attendance": record.to_dict()}), 201
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Marking attendance over HTTP failed")
            return server_error_response()

    @app.route("/api/attendance/session/<int:session_id>", methods=["GET"], endpoint="api_attendance_for_session")
    def api_attendance_for_session(session_id: int):
        try:
            registry.get_session(session_id)
            page = request.args.get("page", 1, type=int)
            limit = request.args.get("limit", DEFAULT_PAGE_LIMIT, type=int)
            return jsonify(ledger.page(session_id, page=page, limit=limit).to_dict()), 200
        except DomainError as e:
            return error_response(e)

    @app.route("/api/attendance/session/<int:session_id>/roster", methods=["GET"], endpoint="api_attendance_roster")
    def api_attendance_roster(session_id: int):
        try:
            session = registry.get_session(session_id)
            return jsonify([entry.to_dict() for entry in ledger.roster(session)]), 200
        except DomainError as e:
            return error_response(e)

    @app.route("/api/attendance/student/<int:student_id>", methods=["GET"], endpoint="api_attendance_for_student")
    def api_attendance_for_student(student_id: int):
        if not container.students_repo.get_by_id(student_id):
            return jsonify({"success": False, "message": "Student not found", "reason": "not_found"}), 404
        return jsonify([r.to_dict() for r in ledger.history_for_student(student_id)]), 200

    @app.route(
        "/api/studentattendance/<int:student_id>/<int:course_id>",
        methods=["GET"],
        endpoint="api_student_course_attendance",
    )
    def api_student_course_attendance(student_id: int, course_id: int):
        """One student's records in one course, for the student portal."""
        try:
            container.directory_service.get_student(student_id)
            container.directory_service.get_course(course_id)
            records = ledger.history_for_student(student_id, course_id=course_id)
            return jsonify([r.to_dict() for r in records]), 200
        except DomainError as e:
            return error_response(e)

    @app.route(
        "/api/attendance/modify/<int:session_id>/<int:student_id>",
        methods=["PUT"],
        endpoint="api_attendance_modify",
    )
    def api_attendance_modify(session_id: int, student_id: int):
        """Teacher override. `{"isPresent": bool}` sets the value; an empty body flips it."""
        try:
            data = json_object()
            if "isPresent" in data:
                record = service.set_presence(session_id, student_id, require_bool(data["isPresent"], "isPresent"))
            else:
                record = service.toggle(session_id, student_id)
            return jsonify(record.to_dict()), 200
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Modifying attendance failed: session=%s student=%s", session_id, student_id)
            return server_error_response()

    @app.route("/updateAttendance", methods=["PUT"], endpoint="update_attendance")
    def update_attendance():
        try:
            data = json_object()
            session_id = require_int(data.get("sessionId"), "sessionId")
            items = data.get("attendance")
            if not isinstance(items, list):
                raise ValidationError("attendance must be a list")

            entries = [
                (require_int(item.get("studentId"), "studentId"), require_bool(item.get("isPresent"), "isPresent"))
                for item in items
                if isinstance(item, dict)
            ]
            if len(entries) != len(items):
                raise ValidationError("attendance entries must be objects")

            records = service.bulk_update(session_id, entries)
            return jsonify({"success": True, "message": "Successfully updated attendance", "updated": len(records)}), 200
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Bulk attendance update failed")
            return server_error_response()

    @app.route("/api/qr/decode", methods=["POST"], endpoint="api_qr_decode")
    def api_qr_decode():
        """Decode an uploaded photo of a session QR code."""
        file = request.files.get("file")
        if file is None:
            return jsonify({"success": False, "message": "file is required", "reason": "invalid_request"}), 400
        try:
            return jsonify(decode_image(file.stream).to_dict()), 200
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Decoding QR image failed")
            return server_error_response()
