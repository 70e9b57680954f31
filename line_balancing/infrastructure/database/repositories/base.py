"""
Base repository implementation.

Repositories are bound to the session of one unit of work and never commit
on their own; the unit of work owns the transaction.
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel

from line_balancing.domain.shared.exceptions import DomainError, ErrorType

EntityType = TypeVar("EntityType", bound=SQLModel)


class DatabaseError(DomainError):
    """Raised when a database operation fails."""

    def __init__(self, message: str) -> None:
        super().__init__(message, ErrorType.REPOSITORY)


class BaseRepository(Generic[EntityType], ABC):
    """Common lookups for a single table."""

    def __init__(self, session: Session):
        self.session = session

    @property
    @abstractmethod
    def entity_class(self) -> type[EntityType]:
        """Return the SQLModel entity class managed by this repository."""
        pass

    def get_by_id(self, entity_id: UUID | str) -> EntityType | None:
        """
        Get entity by primary key.

        Raises:
            DatabaseError: If database operation fails
        """
        try:
            return self.session.get(self.entity_class, entity_id)
        except SQLAlchemyError as e:
            raise DatabaseError(
                f"Error getting {self.entity_class.__name__} {entity_id}: {str(e)}"
            ) from e
