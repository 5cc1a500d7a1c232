"""
Relationship-based permission system for the academic-records backend.

Main components:
- principal: Principal and the closed Role enumeration
- resolver: ProfileResolver turning a user id into a Principal
- graph: RelationshipGraph id-keyed read queries
- verdict: Allow/Deny verdicts and list scopes
- handlers: Base permission handler interface and registry
- handlers_impl: Concrete permission handlers for each entity kind
- query_builders: ListScope to SQL translation
- core: PermissionEngine and handler registration
"""

# Core exports for easy access
from .principal import (
    Principal,
    Role,
    role_from_name,
)

from .verdict import (
    Action,
    Allow,
    Deny,
    DenyReason,
    EntityKind,
    ListScope,
    Verdict,
    TARGETED_ACTIONS,
)

from .resolver import ProfileResolver

from .graph import (
    ENTITY_MODELS,
    RelationshipGraph,
)

from .handlers import (
    PermissionHandler,
    PermissionRegistry,
    PolicyInputError,
    UnsupportedKindError,
    parse_id,
    PolicyOptions,
)

from .handlers_impl import (
    ProfilePermissionHandler,
    ReadOnlyPermissionHandler,
    TeachingAssignmentPermissionHandler,
    AnchoredRecordPermissionHandler,
)

from .query_builders import ScopeQueryBuilder

from .core import (
    PermissionEngine,
    build_permission_registry,
)

__all__ = [
    # Principal
    'Principal',
    'Role',
    'role_from_name',
    # Verdicts
    'Action',
    'Allow',
    'Deny',
    'DenyReason',
    'EntityKind',
    'ListScope',
    'Verdict',
    'TARGETED_ACTIONS',
    # Resolution and graph
    'ProfileResolver',
    'ENTITY_MODELS',
    'RelationshipGraph',
    # Handlers
    'PermissionHandler',
    'PermissionRegistry',
    'PolicyInputError',
    'UnsupportedKindError',
    'parse_id',
    'PolicyOptions',
    'ProfilePermissionHandler',
    'ReadOnlyPermissionHandler',
    'TeachingAssignmentPermissionHandler',
    'AnchoredRecordPermissionHandler',
    # Query building
    'ScopeQueryBuilder',
    # Engine
    'PermissionEngine',
    'build_permission_registry',
]
