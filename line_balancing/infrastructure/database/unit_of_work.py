"""
Unit of Work implementation for managing transactions across repositories.

Every repository obtained from a unit of work shares its session, so all
writes made inside one ``with`` block commit or roll back together.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from line_balancing.core.db import get_engine

from .repositories.balancing_repository import BalancingRepository
from .repositories.base import DatabaseError
from .repositories.operation_catalog_repository import OperationCatalogRepository

SessionFactory = Callable[[], Session]


class UnitOfWorkInterface(ABC):
    """Interface for coordinating transactions across repositories."""

    catalog: OperationCatalogRepository
    balancings: BalancingRepository

    @abstractmethod
    def __enter__(self):
        pass

    @abstractmethod
    def __exit__(self, exc_type, exc_val, exc_tb):
        pass

    @abstractmethod
    def commit(self) -> None:
        """Commit all changes in the current transaction."""
        pass

    @abstractmethod
    def rollback(self) -> None:
        """Rollback all changes in the current transaction."""
        pass


class SqlModelUnitOfWork(UnitOfWorkInterface):
    """
    SQLModel-based implementation of Unit of Work pattern.

    Commits on a clean exit and rolls back when the block raises.
    """

    def __init__(self, session_factory: SessionFactory | None = None):
        self._session_factory = session_factory
        self._session: Session | None = None

    def __enter__(self):
        if self._session_factory:
            self._session = self._session_factory()
        else:
            self._session = Session(get_engine())

        self.catalog = OperationCatalogRepository(self._session)
        self.balancings = BalancingRepository(self._session)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is not None:
                self.rollback()
            else:
                try:
                    self.commit()
                except Exception:
                    self.rollback()
                    raise
        finally:
            if self._session:
                self._session.close()
                self._session = None

    def commit(self) -> None:
        """
        Commit the current transaction.

        Raises:
            DatabaseError: If commit fails
        """
        if not self._session:
            raise DatabaseError("No active session to commit")

        try:
            self._session.commit()
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to commit transaction: {str(e)}") from e

    def rollback(self) -> None:
        """
        Rollback the current transaction.

        Raises:
            DatabaseError: If rollback fails
        """
        if not self._session:
            raise DatabaseError("No active session to rollback")

        try:
            self._session.rollback()
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to rollback transaction: {str(e)}") from e

    @property
    def session(self) -> Session:
        if not self._session:
            raise DatabaseError("No active database session")
        return self._session


class UnitOfWorkManager:
    """Factory for unit of work instances sharing one session factory."""

    def __init__(self, session_factory: SessionFactory | None = None):
        self._session_factory = session_factory

    def create_unit_of_work(self) -> SqlModelUnitOfWork:
        return SqlModelUnitOfWork(self._session_factory)

    @contextmanager
    def transaction(self) -> Iterator[SqlModelUnitOfWork]:
        """
        Context manager for executing code within a transaction.

        Usage:
            with uow_manager.transaction() as uow:
                operations = uow.catalog.get_operations_for_product(product_id)
        """
        uow = self.create_unit_of_work()
        with uow:
            yield uow

