"""
Operation catalog repository.

Reads a product's operation sheet and maps it to domain operations. The
``SqlOperationCatalog`` adapter implements the domain ``OperationCatalog``
port on top of it.
"""

from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from line_balancing.domain.balancing.repositories.operation_catalog import (
    OperationCatalog,
    ProcessInfo,
)
from line_balancing.domain.balancing.value_objects.operation import Operation
from line_balancing.domain.shared.exceptions import NoOperationListFound
from line_balancing.infrastructure.database.models import (
    CatalogOperation,
    OperationSheet,
    OperationSheetItem,
    Process,
    Product,
)

from .base import BaseRepository, DatabaseError

if TYPE_CHECKING:
    from line_balancing.infrastructure.database.unit_of_work import UnitOfWorkManager


class OperationCatalogRepository(BaseRepository[OperationSheet]):
    """Queries over products, processes and operation sheets."""

    @property
    def entity_class(self):
        return OperationSheet

    def find_sheet_for_product(self, product_id: str) -> OperationSheet | None:
        try:
            statement = select(OperationSheet).where(
                OperationSheet.product_id == product_id
            )
            return self.session.exec(statement).first()
        except SQLAlchemyError as e:
            raise DatabaseError(
                f"Error finding operation sheet for product {product_id}: {str(e)}"
            ) from e

    def get_operations_for_product(self, product_id: str) -> list[Operation]:
        """
        Get the product's operations in sheet order.

        Operations without a recorded standard time come back with a SAM of 0.

        Raises:
            NoOperationListFound: If the product has no operation sheet
            DatabaseError: If database operation fails
        """
        sheet = self.find_sheet_for_product(product_id)
        if sheet is None:
            raise NoOperationListFound(product_id)

        try:
            statement = (
                select(OperationSheetItem, CatalogOperation)
                .join(
                    CatalogOperation,
                    CatalogOperation.id == OperationSheetItem.operation_id,
                )
                .where(OperationSheetItem.operation_sheet_id == sheet.id)
                .order_by(OperationSheetItem.sequence)
            )
            rows = self.session.exec(statement).all()
        except SQLAlchemyError as e:
            raise DatabaseError(
                f"Error loading operations for product {product_id}: {str(e)}"
            ) from e

        return [
            Operation(
                id=operation.id,
                name=operation.name,
                process_id=operation.process_id,
                standard_time_minutes=operation.standard_time_minutes or 0.0,
            )
            for _item, operation in rows
        ]

    def list_processes(self) -> list[Process]:
        try:
            statement = select(Process).order_by(Process.sequence_order, Process.name)
            return list(self.session.exec(statement).all())
        except SQLAlchemyError as e:
            raise DatabaseError(f"Error listing processes: {str(e)}") from e

    def get_product(self, product_id: str) -> Product | None:
        try:
            return self.session.get(Product, product_id)
        except SQLAlchemyError as e:
            raise DatabaseError(f"Error getting product {product_id}: {str(e)}") from e


class SqlOperationCatalog(OperationCatalog):
    """``OperationCatalog`` backed by the catalog tables."""

    def __init__(self, uow_manager: "UnitOfWorkManager") -> None:
        self._uow_manager = uow_manager

    def get_operations_for_product(self, product_id: str) -> list[Operation]:
        with self._uow_manager.transaction() as uow:
            return uow.catalog.get_operations_for_product(product_id)

    def list_processes(self) -> list[ProcessInfo]:
        with self._uow_manager.transaction() as uow:
            return [
                ProcessInfo(process_id=process.id, name=process.name)
                for process in uow.catalog.list_processes()
            ]
