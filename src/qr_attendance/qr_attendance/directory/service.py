from __future__ import annotations

import logging
from typing import Sequence

from ..common.validators import require_non_empty
from ..core.exceptions import NotFoundError, ValidationError
from .model import Course, Student
from .repository import CourseRepository, StudentRepository, TeacherRepository

logger = logging.getLogger(__name__)


class DirectoryService:
    """Use case: course registration and the portals' course lists."""

    def __init__(self, courses: CourseRepository, students: StudentRepository, teachers: TeacherRepository):
        self._courses = courses
        self._students = students
        self._teachers = teachers

    def get_student(self, student_id: int) -> Student:
        student = self._students.get_by_id(student_id)
        if not student:
            raise NotFoundError("Student not found")
        return student

    def get_course(self, course_id: int) -> Course:
        course = self._courses.get_by_id(course_id)
        if not course:
            raise NotFoundError("Course not found")
        return course

    def enroll(self, *, student_id: int, course_code: str) -> Course:
        student = self.get_student(student_id)
        course = self._courses.get_by_code(require_non_empty(course_code, "course_code"))
        if not course:
            raise NotFoundError("Course not found")
        if not student.is_active:
            raise ValidationError("Student is no longer active")

        if not self._students.enroll(student_id=student.student_id, course_id=course.course_id):
            raise ValidationError("Student is already enrolled in this course")
        logger.info("Student %s enrolled in %s", student.student_id, course.course_code)
        return course

    def courses_for_teacher(self, teacher_id: int) -> Sequence[Course]:
        if not self._teachers.get_by_id(teacher_id):
            raise NotFoundError("Teacher not found")
        return self._courses.list_for_teacher(teacher_id)
