from typing import Any, Type
from sqlalchemy import and_, false, or_, select, true
from sqlalchemy.orm import Query, aliased
from sqlalchemy.sql.elements import ColumnElement

from studentperf_backend.model.academics import Student, TeachingAssignment
from studentperf_backend.permissions.graph import ENTITY_MODELS
from studentperf_backend.permissions.verdict import EntityKind, ListScope


ANCHORED_KINDS = (EntityKind.GRADE, EntityKind.ATTENDANCE)


class ScopeQueryBuilder:
    """Turns a ListScope into SQL so list endpoints filter in the database"""

    @classmethod
    def model_for(cls, kind: EntityKind) -> Type[Any]:
        return ENTITY_MODELS[EntityKind(kind)]

    @classmethod
    def owned_assignments_subquery(cls, teacher_id: int):
        """Ids of the teaching assignments a teacher owns"""
        return select(TeachingAssignment.id).where(TeachingAssignment.teacher_id == teacher_id)

    @classmethod
    def visible_to_teacher(cls, entity: Type[Any], teacher_id: int) -> ColumnElement:
        """Grade/attendance rows a teacher may view.

        Rows under an owned assignment, or rows of a student whose group the
        teacher teaches for the same subject and semester.
        """
        anchor = aliased(TeachingAssignment)
        taught = aliased(TeachingAssignment)
        member = aliased(Student)

        teaches_student = (
            select(taught.id)
            .where(
                taught.teacher_id == teacher_id,
                member.id == entity.student_id,
                taught.group_id == member.group_id,
                anchor.id == entity.assignment_id,
                taught.subject_id == anchor.subject_id,
                taught.semester_id == anchor.semester_id,
            )
            .exists()
        )

        return or_(
            entity.assignment_id.in_(cls.owned_assignments_subquery(teacher_id)),
            teaches_student
        )

    @classmethod
    def predicate(cls, scope: ListScope) -> ColumnElement:
        """Build the WHERE clause for a scope; fields combine with AND"""
        if scope.unrestricted:
            return true()

        entity = cls.model_for(scope.kind)
        clauses = []

        if scope.only_id is not None:
            clauses.append(entity.id == scope.only_id)

        if scope.teacher_id is not None:
            if scope.kind == EntityKind.TEACHING_ASSIGNMENT:
                clauses.append(entity.teacher_id == scope.teacher_id)
            elif scope.kind in ANCHORED_KINDS:
                clauses.append(cls.visible_to_teacher(entity, scope.teacher_id))
            else:
                raise ValueError(f"teacher scope is not defined for {scope.kind.value}")

        if scope.student_id is not None:
            if scope.kind not in ANCHORED_KINDS:
                raise ValueError(f"student scope is not defined for {scope.kind.value}")
            clauses.append(entity.student_id == scope.student_id)

        if scope.group_id is not None:
            if scope.kind != EntityKind.TEACHING_ASSIGNMENT:
                raise ValueError(f"group scope is not defined for {scope.kind.value}")
            if scope.include_ungrouped:
                clauses.append(or_(entity.group_id == scope.group_id, entity.group_id.is_(None)))
            else:
                clauses.append(entity.group_id == scope.group_id)

        if not clauses:
            return false()

        return and_(*clauses)

    @classmethod
    def apply(cls, query: Query, scope: ListScope) -> Query:
        """Filter a query over the scope's entity"""
        if scope.unrestricted:
            return query
        return query.filter(cls.predicate(scope))
