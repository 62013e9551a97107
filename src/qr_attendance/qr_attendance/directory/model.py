from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import MemberStatus


@dataclass(frozen=True)
class Course:
    course_id: int
    course_code: str
    name: str
    department: str

    def to_dict(self) -> dict:
        return {
            "_id": self.course_id,
            "course_code": self.course_code,
            "name": self.name,
            "department": self.department,
        }


@dataclass(frozen=True)
class Student:
    student_id: int
    full_name: str
    status: MemberStatus = MemberStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status == MemberStatus.ACTIVE


@dataclass(frozen=True)
class Teacher:
    teacher_id: int
    full_name: str
    status: MemberStatus = MemberStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status == MemberStatus.ACTIVE
