"""
Permission engine: the single entry point request handlers call to decide
whether a principal may perform an action on a record.

Decision order for every request:
1. principal resolution (unknown accounts are denied as unauthenticated)
2. malformed input (unknown action/kind, missing or non-numeric target id) is unsupported
3. administrators are allowed everything
4. a missing target is denied as not found
5. the entity kind's handler applies the role and relationship rules
"""

import logging
from typing import Any, Mapping, Optional, Union
from sqlalchemy.orm import Session

from studentperf_backend.permissions.graph import RelationshipGraph
from studentperf_backend.permissions.handlers import (
    PermissionRegistry,
    PolicyInputError,
    PolicyOptions,
    UnsupportedKindError,
    parse_id
)
from studentperf_backend.permissions.handlers_impl import (
    AnchoredRecordPermissionHandler,
    ProfilePermissionHandler,
    ReadOnlyPermissionHandler,
    TeachingAssignmentPermissionHandler
)
from studentperf_backend.permissions.principal import Principal
from studentperf_backend.permissions.resolver import ProfileResolver
from studentperf_backend.permissions.verdict import (
    TARGETED_ACTIONS,
    Action,
    Allow,
    Deny,
    EntityKind,
    ListScope,
    Verdict
)
from studentperf_backend.repositories.academics import AcademicRepository
from studentperf_backend.repositories.base import NotFoundError

logger = logging.getLogger(__name__)


def build_permission_registry(options: PolicyOptions) -> PermissionRegistry:
    """Create a registry with a handler for every entity kind"""
    registry = PermissionRegistry()

    # Profiles
    registry.register(EntityKind.USER, ProfilePermissionHandler(EntityKind.USER, options))
    registry.register(EntityKind.TEACHER, ProfilePermissionHandler(EntityKind.TEACHER, options))
    registry.register(EntityKind.STUDENT, ProfilePermissionHandler(EntityKind.STUDENT, options))

    # Reference data
    registry.register(EntityKind.GROUP, ReadOnlyPermissionHandler(EntityKind.GROUP, options))
    registry.register(EntityKind.SUBJECT, ReadOnlyPermissionHandler(EntityKind.SUBJECT, options))
    registry.register(EntityKind.SEMESTER, ReadOnlyPermissionHandler(EntityKind.SEMESTER, options))
    registry.register(EntityKind.ROLE, ReadOnlyPermissionHandler(EntityKind.ROLE, options))

    # Teaching graph
    registry.register(EntityKind.TEACHING_ASSIGNMENT, TeachingAssignmentPermissionHandler(options))
    registry.register(EntityKind.GRADE, AnchoredRecordPermissionHandler(EntityKind.GRADE, options))
    registry.register(EntityKind.ATTENDANCE, AnchoredRecordPermissionHandler(EntityKind.ATTENDANCE, options))

    return registry


class PermissionEngine:
    """Relationship-based permission engine.

    Holds no mutable state after construction; every decision is a pure
    function of its arguments and the store as seen through ``graph``.
    """

    def __init__(self, graph: RelationshipGraph, resolver: ProfileResolver,
                 options: Optional[PolicyOptions] = None):
        self.graph = graph
        self.resolver = resolver
        self.options = options or PolicyOptions.from_settings()
        self.registry = build_permission_registry(self.options)

    @classmethod
    def for_session(cls, db: Session, options: Optional[PolicyOptions] = None) -> "PermissionEngine":
        """Build an engine reading through one database session"""
        repository = AcademicRepository(db)
        return cls(RelationshipGraph(repository), ProfileResolver(repository), options)

    def resolve_principal(self, user_id: int) -> Optional[Principal]:
        return self.resolver.resolve(user_id)

    def decide(self, user_id: int, action: Union[Action, str], kind: Union[EntityKind, str],
               entity_id: Optional[int] = None,
               context: Optional[Mapping[str, Any]] = None) -> Verdict:
        """Decide for an authenticated user id"""
        principal = self.resolver.resolve(user_id)
        if principal is None:
            return Deny.unauthenticated(f"user {user_id} cannot be resolved to a principal")
        return self.decide_for(principal, action, kind, entity_id, context)

    def decide_for(self, principal: Principal, action: Union[Action, str], kind: Union[EntityKind, str],
                   entity_id: Optional[int] = None,
                   context: Optional[Mapping[str, Any]] = None) -> Verdict:
        """Decide for an already resolved principal"""
        try:
            action = Action(action)
            kind = EntityKind(kind)
        except ValueError:
            logger.error(f"Unsupported permission request: action={action!r} kind={kind!r}")
            return Deny.unsupported(f"unknown action {action!r} or entity kind {kind!r}")

        if action in TARGETED_ACTIONS and entity_id is None:
            logger.error(f"Permission request {action.value} on {kind.value} without an entity id")
            return Deny.unsupported(f"{action.value} on {kind.value} requires an entity id")

        if entity_id is not None:
            try:
                entity_id = parse_id(entity_id, "entity id")
            except PolicyInputError as e:
                logger.error(f"Malformed target for {action.value} on {kind.value}: {e}")
                return Deny.unsupported(str(e))

        if principal.is_admin:
            return Allow(scope=ListScope.everything(kind)) if action == Action.VIEW_ALL else Allow()

        handler = self.registry.get_handler(kind)
        if handler is None:
            logger.error(f"No permission handler registered for {kind.value}")
            return Deny.unsupported(f"no policy for {kind.value}")

        try:
            if action in TARGETED_ACTIONS and not self.graph.exists(kind, entity_id):
                logger.debug(f"{kind.value} {entity_id} requested by user {principal.user_id} does not exist")
                return Deny.not_found(f"{kind.value} {entity_id} not found")

            if action == Action.VIEW_ALL:
                verdict = Allow(scope=handler.build_scope(principal, self.graph))
            else:
                verdict = handler.can_perform_action(principal, action, self.graph, entity_id, context)

        except NotFoundError as e:
            logger.debug(f"Lookup for user {principal.user_id} failed: {e}")
            return Deny.not_found(str(e))
        except PolicyInputError as e:
            logger.error(f"Malformed permission context for {action.value} on {kind.value}: {e}")
            return Deny.unsupported(str(e))

        if not verdict.allowed:
            logger.debug(f"Denied user {principal.user_id} ({principal.role.value}): {verdict.detail}")

        return verdict

    def scope_filter(self, principal: Principal, kind: Union[EntityKind, str]) -> ListScope:
        """List scope for a principal; callers apply it with ScopeQueryBuilder

        Raises UnsupportedKindError for a kind outside the closed set.
        """
        try:
            kind = EntityKind(kind)
        except ValueError:
            logger.error(f"List scope requested for unknown entity kind {kind!r}")
            raise UnsupportedKindError(kind) from None

        if principal.is_admin:
            return ListScope.everything(kind)

        handler = self.registry.get_handler(kind)
        if handler is None:
            logger.error(f"No permission handler registered for {kind.value}")
            return ListScope.nothing(kind)

        try:
            return handler.build_scope(principal, self.graph)
        except NotFoundError:
            return ListScope.nothing(kind)
