"""
Base repository pattern implementation.

This module provides the read-only base class the permission core uses to
reach the database. Repositories return plain column rows, never live ORM
objects, so callers cannot walk relationships behind the repository's back.
"""

from abc import ABC
from typing import Any, Optional, Type
from sqlalchemy.orm import Session
from sqlalchemy.engine import Row


class RepositoryError(Exception):
    """Base exception for repository operations."""
    pass


class NotFoundError(RepositoryError):
    """Exception raised when entity is not found."""

    def __init__(self, entity_type: str, entity_id: Any):
        super().__init__(f"{entity_type} with id {entity_id} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class BaseRepository(ABC):
    """
    Abstract read-only repository over a SQLAlchemy session.

    Every lookup is a point query keyed by primary key or a small join;
    nothing is cached between calls, so each result reflects the session's
    view of the store at call time.
    """

    def __init__(self, db: Session):
        """
        Initialize repository with database session.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def exists(self, model: Type[Any], entity_id: Any) -> bool:
        """
        Check if entity exists by ID.

        Args:
            model: SQLAlchemy model class
            entity_id: Entity identifier

        Returns:
            True if entity exists
        """
        return self.db.query(model.id).filter(model.id == entity_id).first() is not None

    def get_row(self, model: Type[Any], entity_id: Any, *columns) -> Optional[Row]:
        """
        Fetch selected columns of one entity by ID.

        Args:
            model: SQLAlchemy model class
            entity_id: Entity identifier
            *columns: Columns to select

        Returns:
            Row of the requested columns or None
        """
        return self.db.query(*columns).filter(model.id == entity_id).first()

