from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Course, Student, Teacher


class CourseRepository(Protocol):
    def get_by_id(self, course_id: int) -> Optional[Course]:
        raise NotImplementedError

    def get_by_code(self, course_code: str) -> Optional[Course]:
        raise NotImplementedError

    def list_for_teacher(self, teacher_id: int) -> Sequence[Course]:
        """Courses assigned to the teacher, ordered by course code."""

        raise NotImplementedError


class StudentRepository(Protocol):
    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def list_for_course(self, course_id: int) -> Sequence[Student]:
        """Students enrolled in the course, ordered by id."""

        raise NotImplementedError

    def is_enrolled(self, *, student_id: int, course_id: int) -> bool:
        raise NotImplementedError

    def enroll(self, *, student_id: int, course_id: int) -> bool:
        """Add the enrollment. Returns False when it already existed."""

        raise NotImplementedError


class TeacherRepository(Protocol):
    def get_by_id(self, teacher_id: int) -> Optional[Teacher]:
        raise NotImplementedError
