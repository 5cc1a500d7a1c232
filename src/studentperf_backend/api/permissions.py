"""
FastAPI glue between request handlers and the permission engine.

Authentication happens upstream; by the time a request reaches these
dependencies, ``request.state.user_id`` carries the authenticated account id.
"""

from typing import Any, Mapping, Optional
from fastapi import Depends, Request
from pydantic import BaseModel
from sqlalchemy.orm import Query, Session

from studentperf_backend.api.exceptions import (
    BadRequestException,
    InternalServerException,
    UnauthorizedException,
    verdict_to_http_exception
)
from studentperf_backend.database import get_db
from studentperf_backend.permissions.core import PermissionEngine
from studentperf_backend.permissions.handlers import UnsupportedKindError
from studentperf_backend.permissions.principal import Principal
from studentperf_backend.permissions.query_builders import ScopeQueryBuilder
from studentperf_backend.permissions.verdict import Action, EntityKind, ListScope, Verdict


def get_permission_engine(db: Session = Depends(get_db)) -> PermissionEngine:
    return PermissionEngine.for_session(db)


def get_current_user_id(request: Request) -> int:
    user_id = getattr(request.state, "user_id", None)
    if user_id is None:
        raise UnauthorizedException()
    return user_id


def get_current_principal(
    user_id: int = Depends(get_current_user_id),
    engine: PermissionEngine = Depends(get_permission_engine)
) -> Principal:
    principal = engine.resolve_principal(user_id)
    if principal is None:
        raise UnauthorizedException()
    return principal


def context_from_payload(entity: Any) -> dict:
    """Collect the *_id fields of a write payload as decision context"""
    if isinstance(entity, BaseModel):
        model_dump = entity.model_dump(exclude_unset=True)
    else:
        model_dump = dict(entity or {})
    return {k: v for k, v in model_dump.items() if k.endswith("_id") and v is not None}


def enforce(verdict: Verdict) -> Verdict:
    """Raise the HTTP error matching a Deny verdict, pass an Allow through"""
    if not verdict.allowed:
        raise verdict_to_http_exception(verdict.reason, verdict.detail)
    return verdict


def check_permission(engine: PermissionEngine, principal: Principal, kind: EntityKind, action: Action,
                     entity_id: Optional[int] = None,
                     context: Optional[Mapping[str, Any]] = None) -> Verdict:
    return enforce(engine.decide_for(principal, action, kind, entity_id, context))


def scoped_query(engine: PermissionEngine, principal: Principal, kind: EntityKind, db: Session) -> Query:
    """List query over an entity kind, restricted to what the principal may see"""
    try:
        scope: ListScope = engine.scope_filter(principal, kind)
    except UnsupportedKindError as e:
        raise InternalServerException(detail=str(e))
    return ScopeQueryBuilder.apply(db.query(ScopeQueryBuilder.model_for(scope.kind)), scope)


def require_permission(kind: EntityKind, action: Action, id_param: Optional[str] = None):
    """Dependency factory guarding a route with one engine decision.

    ``id_param`` names the path parameter carrying the target id.
    """

    def dependency(
        request: Request,
        principal: Principal = Depends(get_current_principal),
        engine: PermissionEngine = Depends(get_permission_engine)
    ) -> Principal:
        entity_id = None
        if id_param is not None:
            raw_id = request.path_params[id_param]
            try:
                entity_id = int(raw_id)
            except ValueError:
                raise BadRequestException(detail=f"{id_param} must be an integer id, got {raw_id!r}")
        check_permission(engine, principal, kind, action, entity_id)
        return principal

    return dependency
