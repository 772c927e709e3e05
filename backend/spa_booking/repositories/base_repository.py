# backend/spa_booking/repositories/base_repository.py
"""
Base Repository Pattern for the spa booking API

Provides the foundation for all repository classes with:
- Common CRUD operations
- Type safety with generics
- Transaction support (managed by services)
- Batched reads by id

The repository pattern separates data access from business logic,
making the code more testable and maintainable.
"""

import logging
from typing import Any, Collection, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import RepositoryException

# Type variable for generic model support
T = TypeVar("T")

logger = logging.getLogger(__name__)


class BaseRepository(Generic[T]):
    """
    Concrete base repository implementation with common data access patterns.

    This class provides default implementations for CRUD operations and
    can be extended by specific repositories to add custom queries.

    Attributes:
        db: SQLAlchemy session
        model: SQLAlchemy model class
    """

    def __init__(self, db: Session, model: Type[T]):
        """
        Initialize repository with database session and model.

        Args:
            db: SQLAlchemy session (managed by service layer)
            model: SQLAlchemy model class
        """
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    def get_by_id(self, id: str) -> Optional[T]:
        """Retrieve an entity by its primary key."""
        try:
            return self.db.query(self.model).filter(self.model.id == id).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting {self.model.__name__} by id {id}: {str(e)}")
            raise RepositoryException(
                f"Failed to retrieve {self.model.__name__}: {str(e)}"
            ) from e

    def get_many_by_ids(self, ids: Collection[str]) -> Dict[str, T]:
        """
        Fetch several entities in one round trip.

        Ids that do not exist are simply absent from the returned mapping;
        callers decide whether a missing id is an error.
        """
        unique_ids = list(dict.fromkeys(i for i in ids if i))
        if not unique_ids:
            return {}
        try:
            rows = self.db.query(self.model).filter(self.model.id.in_(unique_ids)).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error batch-loading {self.model.__name__}: {str(e)}")
            raise RepositoryException(
                f"Failed to retrieve {self.model.__name__} batch: {str(e)}"
            ) from e
        return {row.id: row for row in rows}

    def create(self, **kwargs: Any) -> T:
        """
        Create a new entity.

        Note: Does NOT commit - transaction management is handled by service layer.
        """
        try:
            entity = self.model(**kwargs)
            self.db.add(entity)
            self.db.flush()  # Get ID without committing
            return entity
        except IntegrityError as exc:
            self.logger.error(
                "Integrity error creating %s: %s", self.model.__name__, exc, exc_info=True
            )
            raise RepositoryException(f"Integrity constraint violated: {exc}") from exc
        except SQLAlchemyError as e:
            self.logger.error(f"Error creating {self.model.__name__}: {str(e)}")
            raise RepositoryException(f"Failed to create {self.model.__name__}: {str(e)}") from e

    def update(self, entity: T, **kwargs: Any) -> T:
        """
        Update an already-loaded entity.

        Only updates provided fields, preserves others.
        """
        try:
            for key, value in kwargs.items():
                if hasattr(entity, key):
                    setattr(entity, key, value)
            self.db.flush()
            return entity
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating {self.model.__name__}: {str(e)}")
            raise RepositoryException(f"Failed to update {self.model.__name__}: {str(e)}") from e

    # Protected helper methods for use by subclasses

    def _build_query(self) -> Query:
        """Get base query for the model."""
        return self.db.query(self.model)

    def _execute_query(self, query: Query) -> List[T]:
        """Execute query with error handling."""
        try:
            return query.all()
        except SQLAlchemyError as e:
            self.logger.error(f"Query execution error: {str(e)}")
            raise RepositoryException(f"Query failed: {str(e)}") from e
