from typing import Any, Mapping, Optional

from studentperf_backend.permissions.graph import RelationshipGraph
from studentperf_backend.permissions.handlers import PermissionHandler, PolicyOptions
from studentperf_backend.permissions.principal import Principal, Role
from studentperf_backend.permissions.verdict import Action, EntityKind, ListScope, Verdict


class ProfilePermissionHandler(PermissionHandler):
    """Permission handler for User, Teacher and Student profiles"""

    ROLE_ACTIONS = {
        Role.TEACHER: frozenset({Action.VIEW, Action.UPDATE, Action.DELETE}),
        Role.STUDENT: frozenset({Action.VIEW, Action.UPDATE}),
    }

    # Payload fields that would move a profile within the graph
    PROTECTED_FIELDS = ("user_id", "role_id", "group_id")

    def own_id(self, principal: Principal) -> Optional[int]:
        if self.kind == EntityKind.USER:
            return principal.user_id
        if self.kind == EntityKind.TEACHER:
            return principal.teacher_profile_id
        if self.kind == EntityKind.STUDENT:
            return principal.student_profile_id
        return None

    def can_perform_action(self, principal: Principal, action: Action, graph: RelationshipGraph,
                           resource_id: Optional[int] = None,
                           context: Optional[Mapping[str, Any]] = None) -> Verdict:
        if self.check_admin(principal):
            return self.allow()

        if action not in self.ROLE_ACTIONS.get(principal.role, frozenset()):
            return self.forbid(action, resource_id)

        own = self.own_id(principal)
        if own is None or resource_id != own:
            return self.forbid(action, resource_id, "not the principal's own profile")

        if action == Action.UPDATE:
            for field in self.PROTECTED_FIELDS:
                if context and context.get(field) is not None:
                    return self.forbid(action, resource_id, f"{field} can only be changed by an administrator")

        return self.allow()

    def build_scope(self, principal: Principal, graph: RelationshipGraph) -> ListScope:
        if self.check_admin(principal):
            return ListScope.everything(self.kind)

        own = self.own_id(principal)
        if own is None:
            return ListScope.nothing(self.kind)
        return ListScope(kind=self.kind, only_id=own)


class ReadOnlyPermissionHandler(PermissionHandler):
    """Reference data (groups, subjects, semesters, roles): readable by all, written by admins"""

    def can_perform_action(self, principal: Principal, action: Action, graph: RelationshipGraph,
                           resource_id: Optional[int] = None,
                           context: Optional[Mapping[str, Any]] = None) -> Verdict:
        if self.check_admin(principal):
            return self.allow()

        if action in [Action.VIEW, Action.VIEW_ALL]:
            return self.allow()

        return self.forbid(action, resource_id, "reference data is maintained by administrators")

    def build_scope(self, principal: Principal, graph: RelationshipGraph) -> ListScope:
        return ListScope.everything(self.kind)


class TeachingAssignmentPermissionHandler(PermissionHandler):
    """Permission handler for TeachingAssignment

    Teachers act on the assignments they own; students may read the
    assignments bound to their group.
    """

    def __init__(self, options: Optional[PolicyOptions] = None):
        super().__init__(EntityKind.TEACHING_ASSIGNMENT, options)

    def can_perform_action(self, principal: Principal, action: Action, graph: RelationshipGraph,
                           resource_id: Optional[int] = None,
                           context: Optional[Mapping[str, Any]] = None) -> Verdict:
        if self.check_admin(principal):
            return self.allow()

        if principal.is_teacher:
            return self._teacher_action(principal, action, graph, resource_id, context)

        if principal.is_student:
            if action != Action.VIEW:
                return self.forbid(action, resource_id, "students cannot modify teaching assignments")

            student_group = graph.student_group(principal.student_profile_id)
            if self.group_matches(student_group, graph.assignment_group(resource_id)):
                return self.allow()
            return self.forbid(action, resource_id, "assignment is not bound to the student's group")

        return self.forbid(action, resource_id)

    def _teacher_action(self, principal: Principal, action: Action, graph: RelationshipGraph,
                        resource_id: Optional[int], context: Optional[Mapping[str, Any]]) -> Verdict:
        me = principal.teacher_profile_id
        requested_owner = self.context_id(context, "teacher_id")

        if action == Action.CREATE:
            if requested_owner != me:
                return self.forbid(action, why="teachers can only create their own assignments")
            return self.allow()

        if graph.assignment_owner(resource_id) != me:
            return self.forbid(action, resource_id, "assignment belongs to another teacher")

        if action == Action.UPDATE and requested_owner is not None and requested_owner != me:
            return self.forbid(action, resource_id, "assignment cannot be handed to another teacher")

        return self.allow()

    def build_scope(self, principal: Principal, graph: RelationshipGraph) -> ListScope:
        if self.check_admin(principal):
            return ListScope.everything(self.kind)

        if principal.is_teacher:
            return ListScope(kind=self.kind, teacher_id=principal.teacher_profile_id)

        if principal.is_student:
            group_id = graph.student_group(principal.student_profile_id)
            if group_id is None:
                return ListScope.nothing(self.kind)
            return ListScope(
                kind=self.kind,
                group_id=group_id,
                include_ungrouped=self.options.open_ungrouped_assignments
            )

        return ListScope.nothing(self.kind)


class AnchoredRecordPermissionHandler(PermissionHandler):
    """Permission handler for Grade and Attendance rows

    Both are anchored to one student and one teaching assignment. Teachers
    write rows under assignments they own and read rows of students they
    teach; students read their own rows only.
    """

    def can_perform_action(self, principal: Principal, action: Action, graph: RelationshipGraph,
                           resource_id: Optional[int] = None,
                           context: Optional[Mapping[str, Any]] = None) -> Verdict:
        if self.check_admin(principal):
            return self.allow()

        if principal.is_teacher:
            return self._teacher_action(principal, action, graph, resource_id, context)

        if principal.is_student:
            if action != Action.VIEW:
                return self.forbid(action, resource_id, f"students cannot modify {self.resource_name} records")

            anchor = graph.record_anchor(self.kind, resource_id)
            if anchor.student_id == principal.student_profile_id:
                return self.allow()
            return self.forbid(action, resource_id, "record belongs to another student")

        return self.forbid(action, resource_id)

    def _teacher_action(self, principal: Principal, action: Action, graph: RelationshipGraph,
                        resource_id: Optional[int], context: Optional[Mapping[str, Any]]) -> Verdict:
        me = principal.teacher_profile_id

        if action == Action.CREATE:
            return self._check_placement(
                principal, action, graph, None,
                self.context_id(context, "assignment_id"),
                self.context_id(context, "student_id"),
            )

        anchor = graph.record_anchor(self.kind, resource_id)
        binding = graph.assignment_binding(anchor.assignment_id)

        if action == Action.VIEW:
            if binding.teacher_id == me:
                return self.allow()
            # Teaches the student's group the same subject in the same semester
            student_group = graph.student_group(anchor.student_id)
            if graph.teaches_group(me, student_group, binding.subject_id, binding.semester_id):
                return self.allow()
            return self.forbid(action, resource_id, "teacher neither owns the assignment nor teaches the student")

        if binding.teacher_id != me:
            return self.forbid(action, resource_id, "record belongs to another teacher's assignment")

        if action == Action.UPDATE:
            new_assignment = self.context_id(context, "assignment_id")
            new_student = self.context_id(context, "student_id")
            target_assignment = new_assignment if new_assignment is not None else anchor.assignment_id
            target_student = new_student if new_student is not None else anchor.student_id
            # Only a move re-checks placement; repeating the current anchor does not
            if (target_assignment, target_student) != (anchor.assignment_id, anchor.student_id):
                return self._check_placement(
                    principal, action, graph, resource_id, target_assignment, target_student
                )

        return self.allow()

    def _check_placement(self, principal: Principal, action: Action, graph: RelationshipGraph,
                         resource_id: Optional[int],
                         assignment_id: Optional[int], student_id: Optional[int]) -> Verdict:
        """A record may sit under an owned assignment for a student of its group"""
        if assignment_id is None or student_id is None:
            return self.forbid(action, resource_id, "assignment_id and student_id are required")

        binding = graph.assignment_binding(assignment_id)
        if binding.teacher_id != principal.teacher_profile_id:
            return self.forbid(action, resource_id, "assignment belongs to another teacher")

        if not self.group_matches(graph.student_group(student_id), binding.group_id):
            return self.forbid(action, resource_id, "student is not in the assignment's group")

        return self.allow()

    def build_scope(self, principal: Principal, graph: RelationshipGraph) -> ListScope:
        if self.check_admin(principal):
            return ListScope.everything(self.kind)

        if principal.is_teacher:
            return ListScope(kind=self.kind, teacher_id=principal.teacher_profile_id)

        if principal.is_student:
            return ListScope(kind=self.kind, student_id=principal.student_profile_id)

        return ListScope.nothing(self.kind)
