"""
SQLModel database models for the line balancing system.

Catalog tables (products, processes, operations and operation sheets) are read
by the balancing engine. Balancing tables store saved sessions: one header
row, one row per operator and one row per assignment.
"""

from datetime import datetime, timezone
from uuid import UUID, uuid4

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

from line_balancing.domain.balancing.entities.operator_slot import MAX_OPERATOR_NAME_LENGTH


# Catalog
class Product(SQLModel, table=True):
    __tablename__ = "products"

    id: str = Field(primary_key=True, max_length=64)
    name: str = Field(max_length=200)
    reference: str | None = Field(default=None, max_length=100)


class Process(SQLModel, table=True):
    __tablename__ = "processes"

    id: str = Field(primary_key=True, max_length=64)
    name: str = Field(max_length=100)
    sequence_order: int = Field(default=0)


class CatalogOperation(SQLModel, table=True):
    """
    Operation master data.

    ``standard_time_minutes`` is null when no standard has been recorded yet.
    """

    __tablename__ = "operations"

    id: str = Field(primary_key=True, max_length=64)
    name: str = Field(max_length=200)
    process_id: str | None = Field(default=None, foreign_key="processes.id")
    standard_time_minutes: float | None = Field(default=None)


class OperationSheet(SQLModel, table=True):
    """Ordered operation list of one product."""

    __tablename__ = "operation_sheets"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    product_id: str = Field(foreign_key="products.id", unique=True, index=True)

    items: list["OperationSheetItem"] = Relationship(back_populates="sheet")


class OperationSheetItem(SQLModel, table=True):
    __tablename__ = "operation_sheet_items"
    __table_args__ = (
        UniqueConstraint("operation_sheet_id", "operation_id", name="uq_sheet_operation"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    operation_sheet_id: UUID = Field(foreign_key="operation_sheets.id", index=True)
    operation_id: str = Field(foreign_key="operations.id")
    sequence: int = Field(ge=1)

    sheet: OperationSheet | None = Relationship(back_populates="items")


# Saved balancing sessions
class BalancingRecord(SQLModel, table=True):
    """Header row of a saved balancing session."""

    __tablename__ = "module_balancing"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    code: str = Field(max_length=20, unique=True, index=True)
    product_id: str = Field(foreign_key="products.id", index=True)
    number_of_people: int = Field(ge=1)
    total_sam: float = Field(default=0.0)
    units_per_hour: int = Field(default=0, ge=0)
    takt_time: float = Field(default=0.0)
    required_machines: float = Field(default=0.0)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_type=DateTime(timezone=True),
        index=True,
    )
    updated_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))


class BalancingOperatorRecord(SQLModel, table=True):
    __tablename__ = "module_balancing_operators"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    module_balancing_id: UUID = Field(foreign_key="module_balancing.id", index=True)
    slot_id: UUID = Field(description="Operator id inside the balancing session")
    operator_name: str = Field(max_length=MAX_OPERATOR_NAME_LENGTH)
    operator_number: int = Field(ge=1)
    total_occupancy_minutes: float = Field(default=0.0)
    total_occupancy_percentage: float = Field(default=0.0)


class BalancingAssignmentRecord(SQLModel, table=True):
    __tablename__ = "module_balancing_assignments"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    operator_id: UUID = Field(foreign_key="module_balancing_operators.id", index=True)
    operation_id: str = Field(foreign_key="operations.id")
    assigned_units_per_hour: int = Field(gt=0)
    position: int = Field(default=0, ge=0)
