from enum import Enum
from typing import Dict, Optional
from pydantic import BaseModel, model_validator


class Role(str, Enum):
    """Closed set of account roles the policy tables dispatch over"""
    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


def role_from_name(name: Optional[str], aliases: Dict[str, str]) -> Optional[Role]:
    """Map a stored role name onto the Role enumeration (case-insensitive)"""
    if not name:
        return None
    value = aliases.get(name.strip().lower())
    if value is None:
        return None
    try:
        return Role(value)
    except ValueError:
        return None


class Principal(BaseModel):
    """The authenticated actor of one request, resolved fresh per request"""

    user_id: int
    role: Role
    teacher_profile_id: Optional[int] = None
    student_profile_id: Optional[int] = None

    model_config = {"frozen": True}

    @model_validator(mode='after')
    def check_profile_matches_role(self):
        """Exactly the profile id belonging to the role is set"""
        if self.role == Role.ADMIN:
            if self.teacher_profile_id is not None or self.student_profile_id is not None:
                raise ValueError("admin principal carries no profile id")
        elif self.role == Role.TEACHER:
            if self.teacher_profile_id is None or self.student_profile_id is not None:
                raise ValueError("teacher principal requires exactly a teacher profile id")
        elif self.role == Role.STUDENT:
            if self.student_profile_id is None or self.teacher_profile_id is not None:
                raise ValueError("student principal requires exactly a student profile id")
        return self

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_teacher(self) -> bool:
        return self.role == Role.TEACHER

    @property
    def is_student(self) -> bool:
        return self.role == Role.STUDENT

    @classmethod
    def admin(cls, user_id: int) -> "Principal":
        return cls(user_id=user_id, role=Role.ADMIN)

    @classmethod
    def teacher(cls, user_id: int, teacher_profile_id: int) -> "Principal":
        return cls(user_id=user_id, role=Role.TEACHER, teacher_profile_id=teacher_profile_id)

    @classmethod
    def student(cls, user_id: int, student_profile_id: int) -> "Principal":
        return cls(user_id=user_id, role=Role.STUDENT, student_profile_id=student_profile_id)
