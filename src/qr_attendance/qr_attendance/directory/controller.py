from __future__ import annotations

import logging

from flask import Flask, jsonify

from ..common.http import error_response, server_error_response
from ..container import Container
from ..core.exceptions import DomainError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    directory = container.directory_service

    @app.route(
        "/api/registercourse/<int:student_id>/<course_code>",
        methods=["POST"],
        endpoint="api_register_course",
    )
    def api_register_course(student_id: int, course_code: str):
        try:
            course = directory.enroll(student_id=student_id, course_code=course_code)
            return jsonify({
                "success": True,
                "message": "Student registered in the course successfully",
                "course": course.to_dict(),
            }), 200
        except DomainError as e:
            return error_response(e)
        except Exception:
            logger.exception("Course registration failed: student=%s course=%s", student_id, course_code)
            return server_error_response()

    @app.route("/api/teachercourses/<int:teacher_id>", methods=["GET"], endpoint="api_teacher_courses")
    def api_teacher_courses(teacher_id: int):
        try:
            return jsonify([c.to_dict() for c in directory.courses_for_teacher(teacher_id)]), 200
        except DomainError as e:
            return error_response(e)
