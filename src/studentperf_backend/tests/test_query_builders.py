"""
List scopes applied as SQL over the seeded SQLite academic graph.
"""

import pytest

from studentperf_backend.model import Attendance, Grade, TeachingAssignment, User
from studentperf_backend.permissions.query_builders import ScopeQueryBuilder
from studentperf_backend.permissions.verdict import Action, EntityKind, ListScope


def scoped_ids(db, scope: ListScope):
    entity = ScopeQueryBuilder.model_for(scope.kind)
    query = ScopeQueryBuilder.apply(db.query(entity), scope)
    return sorted(row.id for row in query.all())


class TestScopeQueryBuilder:
    def test_everything(self, test_db, academic_graph):
        assert scoped_ids(test_db, ListScope.everything(EntityKind.GRADE)) == [1, 2]

    def test_nothing(self, test_db, academic_graph):
        assert scoped_ids(test_db, ListScope.nothing(EntityKind.TEACHING_ASSIGNMENT)) == []

    def test_only_id(self, test_db, academic_graph):
        scope = ListScope(kind=EntityKind.USER, only_id=academic_graph.x_user)
        assert scoped_ids(test_db, scope) == [academic_graph.x_user]

    def test_teacher_assignments(self, test_db, academic_graph):
        scope = ListScope(kind=EntityKind.TEACHING_ASSIGNMENT, teacher_id=academic_graph.t2)
        assert scoped_ids(test_db, scope) == [academic_graph.a2, academic_graph.a3]

    def test_group_assignments(self, test_db, academic_graph):
        ids = academic_graph
        closed = ListScope(kind=EntityKind.TEACHING_ASSIGNMENT, group_id=ids.g1)
        opened = ListScope(kind=EntityKind.TEACHING_ASSIGNMENT, group_id=ids.g1, include_ungrouped=True)
        assert scoped_ids(test_db, closed) == [ids.a1, ids.a5]
        assert scoped_ids(test_db, opened) == [ids.a1, ids.a3, ids.a5]

    def test_student_records(self, test_db, academic_graph):
        ids = academic_graph
        assert scoped_ids(test_db, ListScope(kind=EntityKind.GRADE, student_id=ids.y)) == [ids.grade_g2]
        assert scoped_ids(test_db, ListScope(kind=EntityKind.ATTENDANCE, student_id=ids.x)) == [ids.attendance_x]

    @pytest.mark.parametrize("teacher,expected", [
        ("t1", ["grade_g1"]),
        ("t2", ["grade_g2"]),
        ("t3", ["grade_g1"]),
    ])
    def test_teacher_grades(self, test_db, academic_graph, teacher, expected):
        scope = ListScope(kind=EntityKind.GRADE, teacher_id=getattr(academic_graph, teacher))
        assert scoped_ids(test_db, scope) == [getattr(academic_graph, name) for name in expected]

    def test_teacher_attendance_via_group(self, test_db, academic_graph):
        scope = ListScope(kind=EntityKind.ATTENDANCE, teacher_id=academic_graph.t3)
        assert scoped_ids(test_db, scope) == [academic_graph.attendance_x]

    def test_subject_must_match(self, test_db, academic_graph):
        ids = academic_graph
        # Physics for G1 does not open the Math grade of X
        test_db.add(TeachingAssignment(id=6, teacher_id=ids.t2, subject_id=ids.physics,
                                       group_id=ids.g1, semester_id=ids.s1))
        test_db.commit()
        scope = ListScope(kind=EntityKind.GRADE, teacher_id=ids.t2)
        assert scoped_ids(test_db, scope) == [ids.grade_g2]

    @pytest.mark.parametrize("scope", [
        ListScope(kind=EntityKind.GROUP, teacher_id=1),
        ListScope(kind=EntityKind.TEACHING_ASSIGNMENT, student_id=1),
        ListScope(kind=EntityKind.GRADE, group_id=1),
    ])
    def test_undefined_scope_fields(self, scope):
        with pytest.raises(ValueError):
            ScopeQueryBuilder.predicate(scope)

    def test_apply_leaves_unrestricted_query(self, test_db):
        query = test_db.query(User)
        assert ScopeQueryBuilder.apply(query, ListScope.everything(EntityKind.USER)) is query


class TestScopeMatchesDecisions:
    """Listing and single-record decisions agree on every row"""

    @pytest.mark.parametrize("user", ["t1_user", "t2_user", "t3_user", "x_user", "y_user", "z_user"])
    @pytest.mark.parametrize("kind,model", [
        (EntityKind.GRADE, Grade),
        (EntityKind.ATTENDANCE, Attendance),
        (EntityKind.TEACHING_ASSIGNMENT, TeachingAssignment),
    ])
    def test_list_equals_viewable(self, engine, test_db, academic_graph, user, kind, model):
        user_id = getattr(academic_graph, user)
        verdict = engine.decide(user_id, Action.VIEW_ALL, kind)
        listed = scoped_ids(test_db, verdict.scope)

        viewable = sorted(
            row.id for row in test_db.query(model.id).all()
            if engine.decide(user_id, Action.VIEW, kind, row.id).allowed
        )
        assert listed == viewable
