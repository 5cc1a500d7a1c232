"""
Academic repository: the read-only data-access boundary of the permission core.

Each method is a point lookup (or a small join) returning id-only rows.
"""

from typing import NamedTuple, Optional
from sqlalchemy.orm import Session

from .base import BaseRepository, NotFoundError
from ..model.auth import Role, User
from ..model.academics import Attendance, Grade, Student, Teacher, TeachingAssignment


class TeacherProfile(NamedTuple):
    id: int
    user_id: int


class StudentProfile(NamedTuple):
    id: int
    user_id: int
    group_id: Optional[int]


class AssignmentRow(NamedTuple):
    id: int
    teacher_id: int
    subject_id: int
    group_id: Optional[int]
    semester_id: int


class AnchoredRow(NamedTuple):
    """A grade or attendance row reduced to its anchors."""
    id: int
    student_id: int
    assignment_id: int


class AcademicRepository(BaseRepository):
    """Repository for the academic graph consulted by permission checks."""

    def __init__(self, db: Session):
        super().__init__(db)

    def get_user_role(self, user_id: int) -> Optional[str]:
        """
        Get the stored role name of a user account.

        Returns:
            Role name, or None if the account has no role

        Raises:
            NotFoundError: If the account does not exist
        """
        row = (
            self.db.query(User.id, Role.name)
            .outerjoin(Role, Role.id == User.role_id)
            .filter(User.id == user_id)
            .first()
        )
        if row is None:
            raise NotFoundError(User.__name__, user_id)
        return row[1]

    def get_teacher_profile(self, user_id: int) -> Optional[TeacherProfile]:
        row = (
            self.db.query(Teacher.id, Teacher.user_id)
            .filter(Teacher.user_id == user_id)
            .first()
        )
        return TeacherProfile(*row) if row is not None else None

    def get_student_profile(self, user_id: int) -> Optional[StudentProfile]:
        row = (
            self.db.query(Student.id, Student.user_id, Student.group_id)
            .filter(Student.user_id == user_id)
            .first()
        )
        return StudentProfile(*row) if row is not None else None

    def get_student(self, student_id: int) -> Optional[StudentProfile]:
        row = self.get_row(Student, student_id, Student.id, Student.user_id, Student.group_id)
        return StudentProfile(*row) if row is not None else None

    def get_assignment(self, assignment_id: int) -> Optional[AssignmentRow]:
        row = self.get_row(
            TeachingAssignment, assignment_id,
            TeachingAssignment.id,
            TeachingAssignment.teacher_id,
            TeachingAssignment.subject_id,
            TeachingAssignment.group_id,
            TeachingAssignment.semester_id,
        )
        return AssignmentRow(*row) if row is not None else None

    def get_grade(self, grade_id: int) -> Optional[AnchoredRow]:
        row = self.get_row(Grade, grade_id, Grade.id, Grade.student_id, Grade.assignment_id)
        return AnchoredRow(*row) if row is not None else None

    def get_attendance(self, attendance_id: int) -> Optional[AnchoredRow]:
        row = self.get_row(
            Attendance, attendance_id,
            Attendance.id, Attendance.student_id, Attendance.assignment_id
        )
        return AnchoredRow(*row) if row is not None else None

    def has_assignment(self, teacher_id: int, group_id: int,
                       subject_id: Optional[int] = None,
                       semester_id: Optional[int] = None) -> bool:
        """
        Check whether a teacher holds an assignment bound to a group.

        Args:
            teacher_id: Teacher profile id
            group_id: Group the assignment must be bound to
            subject_id: Restrict to this subject if given
            semester_id: Restrict to this semester if given
        """
        query = self.db.query(TeachingAssignment.id).filter(
            TeachingAssignment.teacher_id == teacher_id,
            TeachingAssignment.group_id == group_id,
        )
        if subject_id is not None:
            query = query.filter(TeachingAssignment.subject_id == subject_id)
        if semester_id is not None:
            query = query.filter(TeachingAssignment.semester_id == semester_id)
        return query.first() is not None
