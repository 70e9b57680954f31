"""
Balancing repository implementation.

Stores saved balancing sessions as a header row, one row per operator and one
row per assignment. ``SqlBalancingSessionGateway`` implements the domain
``BalancingSessionGateway`` port: a save replaces all operator and assignment
rows of the session inside a single transaction.
"""

from collections.abc import Sequence
from datetime import datetime, timezone
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col, delete, select

from line_balancing.core.observability import get_logger
from line_balancing.domain.balancing.repositories.balancing_gateway import (
    BalancingSessionGateway,
)
from line_balancing.domain.balancing.value_objects.records import (
    OperatorRecord,
    SavedAssignment,
    SavedOperator,
    SavedSession,
    SavedSessionSummary,
    SessionHeader,
)
from line_balancing.domain.shared.exceptions import (
    PersistenceFailure,
    SavedSessionNotFound,
)
from line_balancing.infrastructure.database.models import (
    BalancingAssignmentRecord,
    BalancingOperatorRecord,
    BalancingRecord,
    Product,
)

from .base import BaseRepository, DatabaseError

if TYPE_CHECKING:
    from line_balancing.infrastructure.database.unit_of_work import UnitOfWorkManager

logger = get_logger(__name__)


class BalancingRepository(BaseRepository[BalancingRecord]):
    """Row-level access to saved balancing sessions."""

    @property
    def entity_class(self):
        return BalancingRecord

    def get_required(self, session_id: UUID) -> BalancingRecord:
        record = self.get_by_id(session_id)
        if record is None:
            raise SavedSessionNotFound(session_id)
        return record

    def write_header(
        self, header: SessionHeader, session_id: UUID | None = None
    ) -> BalancingRecord:
        """
        Insert a new header row or overwrite an existing one.

        Raises:
            SavedSessionNotFound: If session_id does not exist
            DatabaseError: If database operation fails
        """
        if session_id is None:
            record_id = uuid4()
            record = BalancingRecord(
                id=record_id,
                code=f"BAL-{record_id.hex[:8].upper()}",
                product_id=header.product_id,
                number_of_people=header.headcount,
            )
        else:
            record = self.get_required(session_id)
            record.product_id = header.product_id
            record.number_of_people = header.headcount
            record.updated_at = datetime.now(timezone.utc)

        record.total_sam = header.total_standard_time
        record.units_per_hour = header.units_per_hour
        record.takt_time = header.takt_time
        record.required_machines = header.required_machines

        try:
            self.session.add(record)
            self.session.flush()
        except SQLAlchemyError as e:
            raise DatabaseError(f"Error writing balancing header: {str(e)}") from e
        return record

    def get_operators(self, session_id: UUID) -> list[BalancingOperatorRecord]:
        try:
            statement = (
                select(BalancingOperatorRecord)
                .where(BalancingOperatorRecord.module_balancing_id == session_id)
                .order_by(BalancingOperatorRecord.operator_number)
            )
            return list(self.session.exec(statement).all())
        except SQLAlchemyError as e:
            raise DatabaseError(
                f"Error loading operators of balancing {session_id}: {str(e)}"
            ) from e

    def get_assignments(
        self, operator_row_ids: Sequence[UUID]
    ) -> list[BalancingAssignmentRecord]:
        if not operator_row_ids:
            return []
        try:
            statement = (
                select(BalancingAssignmentRecord)
                .where(col(BalancingAssignmentRecord.operator_id).in_(operator_row_ids))
                .order_by(BalancingAssignmentRecord.position)
            )
            return list(self.session.exec(statement).all())
        except SQLAlchemyError as e:
            raise DatabaseError(f"Error loading balancing assignments: {str(e)}") from e

    def delete_children(self, session_id: UUID) -> None:
        """Delete the operator and assignment rows of a session."""
        operator_row_ids = [row.id for row in self.get_operators(session_id)]
        try:
            if operator_row_ids:
                self.session.execute(
                    delete(BalancingAssignmentRecord).where(
                        col(BalancingAssignmentRecord.operator_id).in_(operator_row_ids)
                    )
                )
                self.session.execute(
                    delete(BalancingOperatorRecord).where(
                        col(BalancingOperatorRecord.id).in_(operator_row_ids)
                    )
                )
            self.session.flush()
        except SQLAlchemyError as e:
            raise DatabaseError(
                f"Error deleting records of balancing {session_id}: {str(e)}"
            ) from e

    def add_operators(
        self, session_id: UUID, operators: Sequence[OperatorRecord]
    ) -> None:
        try:
            for number, operator in enumerate(operators, start=1):
                row = BalancingOperatorRecord(
                    module_balancing_id=session_id,
                    slot_id=operator.operator_id,
                    operator_name=operator.display_name,
                    operator_number=number,
                    total_occupancy_minutes=operator.occupied_minutes,
                    total_occupancy_percentage=operator.occupancy_percentage,
                )
                self.session.add(row)
                self.session.flush()
                self.add_assignments(row.id, operator)
        except SQLAlchemyError as e:
            raise DatabaseError(
                f"Error writing operators of balancing {session_id}: {str(e)}"
            ) from e

    def add_assignments(self, operator_row_id: UUID, operator: OperatorRecord) -> None:
        for position, assignment in enumerate(operator.assignments):
            self.session.add(
                BalancingAssignmentRecord(
                    operator_id=operator_row_id,
                    operation_id=assignment.operation_id,
                    assigned_units_per_hour=assignment.assigned_units_per_hour,
                    position=position,
                )
            )
        self.session.flush()

    def delete(self, session_id: UUID) -> None:
        record = self.get_required(session_id)
        self.delete_children(session_id)
        try:
            self.session.delete(record)
            self.session.flush()
        except SQLAlchemyError as e:
            raise DatabaseError(f"Error deleting balancing {session_id}: {str(e)}") from e

    def list_with_products(self) -> list[tuple[BalancingRecord, Product | None]]:
        try:
            statement = (
                select(BalancingRecord, Product)
                .join(Product, Product.id == BalancingRecord.product_id, isouter=True)
                .order_by(col(BalancingRecord.created_at).desc())
            )
            return list(self.session.exec(statement).all())
        except SQLAlchemyError as e:
            raise DatabaseError(f"Error listing balancing sessions: {str(e)}") from e


class SqlBalancingSessionGateway(BalancingSessionGateway):
    """``BalancingSessionGateway`` backed by the balancing tables."""

    def __init__(self, uow_manager: "UnitOfWorkManager") -> None:
        self._uow_manager = uow_manager

    def save_session(
        self,
        header: SessionHeader,
        operators: Sequence[OperatorRecord],
        session_id: UUID | None = None,
    ) -> UUID:
        try:
            with self._uow_manager.transaction() as uow:
                record = uow.balancings.write_header(header, session_id)
                saved_id = record.id
                uow.balancings.delete_children(saved_id)
                uow.balancings.add_operators(saved_id, operators)
        except (DatabaseError, SQLAlchemyError) as e:
            logger.error(
                "balancing_save_failed",
                session_id=str(session_id) if session_id else None,
                product_id=header.product_id,
                error=str(e),
            )
            raise PersistenceFailure(
                f"Could not save balancing for product {header.product_id}",
                session_id,
            ) from e

        logger.info(
            "balancing_saved",
            session_id=str(saved_id),
            product_id=header.product_id,
            operators=len(operators),
        )
        return saved_id

    def get_saved_assignments(self, session_id: UUID) -> SavedSession:
        with self._uow_manager.transaction() as uow:
            record = uow.balancings.get_required(session_id)
            operator_rows = uow.balancings.get_operators(session_id)
            slot_ids = {row.id: row.slot_id for row in operator_rows}
            assignment_rows = uow.balancings.get_assignments(list(slot_ids))

            # Keep assignments grouped by operator in operator order
            by_operator: dict[UUID, list[BalancingAssignmentRecord]] = {
                row.id: [] for row in operator_rows
            }
            for row in assignment_rows:
                by_operator[row.operator_id].append(row)

            return SavedSession(
                session_id=record.id,
                product_id=record.product_id,
                headcount=record.number_of_people,
                operators=tuple(
                    SavedOperator(operator_id=row.slot_id, display_name=row.operator_name)
                    for row in operator_rows
                ),
                assignments=tuple(
                    SavedAssignment(
                        operator_id=slot_ids[operator_row_id],
                        operation_id=row.operation_id,
                        assigned_units_per_hour=row.assigned_units_per_hour,
                    )
                    for operator_row_id, rows in by_operator.items()
                    for row in rows
                ),
            )

    def list_sessions(self) -> list[SavedSessionSummary]:
        with self._uow_manager.transaction() as uow:
            return [
                SavedSessionSummary(
                    session_id=record.id,
                    code=record.code,
                    product_id=record.product_id,
                    product_name=product.name if product else None,
                    product_reference=product.reference if product else None,
                    headcount=record.number_of_people,
                    total_standard_time=record.total_sam,
                    units_per_hour=record.units_per_hour,
                    required_machines=record.required_machines,
                    created_at=record.created_at,
                    updated_at=record.updated_at,
                )
                for record, product in uow.balancings.list_with_products()
            ]

    def delete_session(self, session_id: UUID) -> None:
        try:
            with self._uow_manager.transaction() as uow:
                uow.balancings.delete(session_id)
        except (DatabaseError, SQLAlchemyError) as e:
            raise PersistenceFailure(
                f"Could not delete balancing {session_id}", session_id
            ) from e
        logger.info("balancing_deleted", session_id=str(session_id))
