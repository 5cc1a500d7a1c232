"""
Relationship graph: id-keyed read queries over the academic records.

Every query goes straight to the repository; nothing is cached, so each
answer reflects the store at call time. Absence of the queried record raises
``NotFoundError``; ``None`` is only ever returned for a legitimately absent
group.
"""

from typing import Optional

from studentperf_backend.model.auth import Role, User
from studentperf_backend.model.academics import (
    Attendance, Grade, Group, Semester, Student, Subject, Teacher, TeachingAssignment
)
from studentperf_backend.permissions.verdict import EntityKind
from studentperf_backend.repositories.academics import (
    AcademicRepository, AnchoredRow, AssignmentRow
)
from studentperf_backend.repositories.base import NotFoundError


ENTITY_MODELS = {
    EntityKind.USER: User,
    EntityKind.TEACHER: Teacher,
    EntityKind.STUDENT: Student,
    EntityKind.GROUP: Group,
    EntityKind.SUBJECT: Subject,
    EntityKind.SEMESTER: Semester,
    EntityKind.ROLE: Role,
    EntityKind.TEACHING_ASSIGNMENT: TeachingAssignment,
    EntityKind.GRADE: Grade,
    EntityKind.ATTENDANCE: Attendance,
}


class RelationshipGraph:

    def __init__(self, repository: AcademicRepository):
        self.repository = repository

    # Core queries

    def assignment_owner(self, assignment_id: int) -> int:
        return self.assignment_binding(assignment_id).teacher_id

    def assignment_group(self, assignment_id: int) -> Optional[int]:
        return self.assignment_binding(assignment_id).group_id

    def student_group(self, student_id: int) -> Optional[int]:
        student = self.repository.get_student(student_id)
        if student is None:
            raise NotFoundError(Student.__name__, student_id)
        return student.group_id

    def grade_assignment(self, grade_id: int) -> int:
        return self.record_anchor(EntityKind.GRADE, grade_id).assignment_id

    def attendance_assignment(self, attendance_id: int) -> int:
        return self.record_anchor(EntityKind.ATTENDANCE, attendance_id).assignment_id

    # Supplementary queries used by the policy tables

    def assignment_binding(self, assignment_id: int) -> AssignmentRow:
        assignment = self.repository.get_assignment(assignment_id)
        if assignment is None:
            raise NotFoundError(TeachingAssignment.__name__, assignment_id)
        return assignment

    def grade_student(self, grade_id: int) -> int:
        return self.record_anchor(EntityKind.GRADE, grade_id).student_id

    def attendance_student(self, attendance_id: int) -> int:
        return self.record_anchor(EntityKind.ATTENDANCE, attendance_id).student_id

    def record_anchor(self, kind: EntityKind, record_id: int) -> AnchoredRow:
        """Student and assignment a grade or attendance row is anchored to"""
        if kind == EntityKind.GRADE:
            record = self.repository.get_grade(record_id)
        elif kind == EntityKind.ATTENDANCE:
            record = self.repository.get_attendance(record_id)
        else:
            raise ValueError(f"{kind} rows are not anchored to a teaching assignment")
        if record is None:
            raise NotFoundError(ENTITY_MODELS[kind].__name__, record_id)
        return record

    def teaches_group(self, teacher_id: int, group_id: Optional[int],
                      subject_id: Optional[int] = None,
                      semester_id: Optional[int] = None) -> bool:
        if group_id is None:
            return False
        return self.repository.has_assignment(teacher_id, group_id, subject_id, semester_id)

    def exists(self, kind: EntityKind, entity_id: int) -> bool:
        return self.repository.exists(ENTITY_MODELS[kind], entity_id)
