"""
Value types exchanged between the permission engine and request handlers.

Verdicts are returned by value: callers branch on ``verdict.allowed`` (or on
``isinstance(verdict, Deny)``) instead of catching exceptions.
"""

from enum import Enum
from typing import Literal, Optional, Union
from pydantic import BaseModel


class Action(str, Enum):
    VIEW = "get"
    VIEW_ALL = "list"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


# Actions that address one concrete record
TARGETED_ACTIONS = frozenset({Action.VIEW, Action.UPDATE, Action.DELETE})


class EntityKind(str, Enum):
    USER = "user"
    TEACHER = "teacher"
    STUDENT = "student"
    GROUP = "group"
    SUBJECT = "subject"
    SEMESTER = "semester"
    ROLE = "role"
    TEACHING_ASSIGNMENT = "teaching_assignment"
    GRADE = "grade"
    ATTENDANCE = "attendance"


class DenyReason(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    UNSUPPORTED = "unsupported"


class ListScope(BaseModel):
    """Which rows of an entity kind a principal may list.

    Translated into a SQL predicate by ``ScopeQueryBuilder``. A scope with
    no field set matches nothing.
    """

    kind: EntityKind
    unrestricted: bool = False
    only_id: Optional[int] = None
    teacher_id: Optional[int] = None
    student_id: Optional[int] = None
    group_id: Optional[int] = None
    # With group_id: also match teaching assignments bound to no group
    include_ungrouped: bool = False

    model_config = {"frozen": True}

    @classmethod
    def everything(cls, kind: EntityKind) -> "ListScope":
        return cls(kind=kind, unrestricted=True)

    @classmethod
    def nothing(cls, kind: EntityKind) -> "ListScope":
        return cls(kind=kind)

    @property
    def is_empty(self) -> bool:
        return not self.unrestricted and all(
            value is None
            for value in (self.only_id, self.teacher_id, self.student_id, self.group_id)
        )


class Allow(BaseModel):
    allowed: Literal[True] = True
    scope: Optional[ListScope] = None

    model_config = {"frozen": True}

    def __bool__(self) -> bool:
        return True


class Deny(BaseModel):
    allowed: Literal[False] = False
    reason: DenyReason
    detail: Optional[str] = None

    model_config = {"frozen": True}

    def __bool__(self) -> bool:
        return False

    @classmethod
    def unauthenticated(cls, detail: Optional[str] = None) -> "Deny":
        return cls(reason=DenyReason.UNAUTHENTICATED, detail=detail)

    @classmethod
    def not_found(cls, detail: Optional[str] = None) -> "Deny":
        return cls(reason=DenyReason.NOT_FOUND, detail=detail)

    @classmethod
    def forbidden(cls, detail: Optional[str] = None) -> "Deny":
        return cls(reason=DenyReason.FORBIDDEN, detail=detail)

    @classmethod
    def unsupported(cls, detail: Optional[str] = None) -> "Deny":
        return cls(reason=DenyReason.UNSUPPORTED, detail=detail)


Verdict = Union[Allow, Deny]
