"""
Repository pattern implementation for direct database access.

This package provides the read-only repositories the permission core uses
as its data-access boundary.
"""

from .base import (
    BaseRepository,
    RepositoryError,
    NotFoundError
)
from .academics import (
    AcademicRepository,
    AnchoredRow,
    AssignmentRow,
    StudentProfile,
    TeacherProfile
)

__all__ = [
    "BaseRepository",
    "RepositoryError",
    "NotFoundError",
    "AcademicRepository",
    "AnchoredRow",
    "AssignmentRow",
    "StudentProfile",
    "TeacherProfile"
]
