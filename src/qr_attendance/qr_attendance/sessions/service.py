from __future__ import annotations

import logging
from datetime import datetime
from typing import Sequence

from ..common.datetime_utils import now_utc
from ..common.validators import require_non_empty
from ..core.exceptions import LocationUnavailable, NotFoundError, ValidationError
from ..directory.model import Course
from ..directory.repository import CourseRepository, TeacherRepository
from ..geo.model import GeoPoint
from .model import Session
from .repository import SessionRepository

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Creates and looks up attendance sessions."""

    def __init__(self, sessions: SessionRepository, courses: CourseRepository, teachers: TeacherRepository):
        self._sessions = sessions
        self._courses = courses
        self._teachers = teachers

    def create_session(
        self,
        *,
        course_code: str,
        room_number: str,
        teacher_id: int,
        anchor: GeoPoint,
        now: datetime | None = None,
    ) -> Session:
        course_code = require_non_empty(course_code, "courseId")
        room_number = require_non_empty(room_number, "roomNumber")

        course = self._courses.get_by_code(course_code)
        if not course:
            raise NotFoundError("Course not found")
        teacher = self._teachers.get_by_id(teacher_id)
        if not teacher:
            raise NotFoundError("Teacher not found")
        if not teacher.is_active:
            raise ValidationError("Teacher is no longer active")
        if anchor.is_unset:
            raise LocationUnavailable("Teacher location is not available yet")

        session_id = self._sessions.create(
            course_id=course.course_id,
            teacher_id=teacher.teacher_id,
            room_number=room_number,
            anchor=anchor,
            created_at=now or now_utc(),
        )
        logger.info(
            "Session %s started: course=%s room=%s teacher=%s",
            session_id,
            course.course_code,
            room_number,
            teacher.teacher_id,
        )
        return self.get_session(session_id)

    def get_session(self, session_id: int) -> Session:
        session = self._sessions.get_by_id(session_id)
        if not session:
            raise NotFoundError("Session not found")
        return session

    def get_course(self, course_id: int) -> Course:
        course = self._courses.get_by_id(course_id)
        if not course:
            raise NotFoundError("Course not found")
        return course

    def list_for_teacher(self, teacher_id: int) -> Sequence[Session]:
        if not self._teachers.get_by_id(teacher_id):
            raise NotFoundError("Teacher not found")
        return self._sessions.list_for_teacher(teacher_id)

    def list_for_course(self, course_id: int) -> Sequence[Session]:
        """The course's session list (its attendance history)."""

        self.get_course(course_id)
        return self._sessions.list_for_course(course_id)

    def mark_finished(self, session_id: int, *, now: datetime | None = None) -> Session:
        if self._sessions.mark_finished(session_id=session_id, finished_at=now or now_utc()):
            logger.info("Session %s finished", session_id)
        return self.get_session(session_id)
