from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional
from pydantic import BaseModel

from studentperf_backend.permissions.graph import RelationshipGraph
from studentperf_backend.permissions.principal import Principal
from studentperf_backend.permissions.verdict import Action, Allow, Deny, EntityKind, ListScope, Verdict
from studentperf_backend.settings import settings


class PolicyInputError(ValueError):
    """Raised when a decision request carries a malformed id, kind or context"""
    pass


class UnsupportedKindError(PolicyInputError):
    """Raised when a list scope is requested for an unknown entity kind"""

    def __init__(self, kind: Any):
        super().__init__(f"unknown entity kind {kind!r}")
        self.kind = kind


def parse_id(value: Any, name: str) -> int:
    """Coerce a record id given as int or numeric string"""
    if isinstance(value, bool):
        raise PolicyInputError(f"{name} is not an id: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise PolicyInputError(f"{name} is not an id: {value!r}")


class PolicyOptions(BaseModel):
    """Tunable policy decisions shared by all handlers of one engine"""

    open_ungrouped_assignments: bool = False

    model_config = {"frozen": True}

    @classmethod
    def from_settings(cls) -> "PolicyOptions":
        return cls(open_ungrouped_assignments=settings.OPEN_UNGROUPED_ASSIGNMENTS)


class PermissionHandler(ABC):
    """Base class for entity-kind permission handlers (one row of the policy table)"""

    def __init__(self, kind: EntityKind, options: Optional[PolicyOptions] = None):
        self.kind = kind
        self.resource_name = kind.value
        self.options = options or PolicyOptions()

    @abstractmethod
    def can_perform_action(self, principal: Principal, action: Action, graph: RelationshipGraph,
                           resource_id: Optional[int] = None,
                           context: Optional[Mapping[str, Any]] = None) -> Verdict:
        """Decide a single-record or create action.

        Args:
            principal: Current principal
            action: Action to perform
            graph: Relationship graph bound to the current store
            resource_id: Target record id (None for create)
            context: `*_id` fields of the write payload (e.g. {"assignment_id": 3, "student_id": 7})

        The target is known to exist when this is called; graph lookups may
        still raise NotFoundError if it disappears concurrently.
        """
        pass

    @abstractmethod
    def build_scope(self, principal: Principal, graph: RelationshipGraph) -> ListScope:
        """Describe which rows of this kind the principal may list"""
        pass

    def check_admin(self, principal: Principal) -> bool:
        """Check if principal has admin privileges"""
        return principal.is_admin

    def allow(self) -> Allow:
        return Allow()

    def forbid(self, action: Action, resource_id: Optional[int] = None, why: Optional[str] = None) -> Deny:
        target = self.resource_name if resource_id is None else f"{self.resource_name} {resource_id}"
        detail = f"{action.value} on {target} is not permitted"
        if why:
            detail = f"{detail}: {why}"
        return Deny.forbidden(detail)

    def group_matches(self, student_group: Optional[int], assignment_group: Optional[int]) -> bool:
        """Whether a student's group satisfies an assignment's group binding"""
        if student_group is None:
            return False
        if assignment_group is None:
            return self.options.open_ungrouped_assignments
        return student_group == assignment_group

    @staticmethod
    def context_id(context: Optional[Mapping[str, Any]], key: str) -> Optional[int]:
        """Read an integer id from the decision context"""
        if not context or context.get(key) is None:
            return None
        return parse_id(context[key], f"context field {key}")


class PermissionRegistry:
    """Maps entity kinds to their permission handlers.

    Each engine owns its own registry; there is no process-wide instance.
    """

    def __init__(self):
        self._handlers: Dict[EntityKind, PermissionHandler] = {}

    def register(self, kind: EntityKind, handler: PermissionHandler):
        """Register a permission handler for an entity kind"""
        self._handlers[kind] = handler

    def get_handler(self, kind: EntityKind) -> Optional[PermissionHandler]:
        """Get the permission handler for an entity kind"""
        return self._handlers.get(kind)

    def kinds(self) -> frozenset:
        return frozenset(self._handlers)
