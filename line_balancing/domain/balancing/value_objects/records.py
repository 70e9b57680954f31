"""
Boundary records exchanged with the persistence gateway.

``SavedSession`` is what the loader returns for edit mode; ``SessionHeader``
and ``OperatorRecord`` are what a save hands to the gateway.
"""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from ...shared.base import ValueObject


class SavedOperator(ValueObject):
    operator_id: UUID
    display_name: str


class SavedAssignment(ValueObject):
    operator_id: UUID
    operation_id: str
    assigned_units_per_hour: int


class SavedSession(ValueObject):
    """Persisted balancing session as returned by the loader."""

    session_id: UUID
    product_id: str
    headcount: int = Field(ge=1)
    operators: tuple[SavedOperator, ...] = ()
    assignments: tuple[SavedAssignment, ...] = ()


class SessionHeader(ValueObject):
    """Header record of a saved balancing session."""

    product_id: str
    headcount: int
    total_standard_time: float
    units_per_hour: int
    takt_time: float
    required_machines: float


class AssignmentRecord(ValueObject):
    operation_id: str
    assigned_units_per_hour: int = Field(gt=0)


class OperatorRecord(ValueObject):
    operator_id: UUID
    display_name: str
    occupied_minutes: float
    occupancy_percentage: float
    assignments: tuple[AssignmentRecord, ...] = ()


class SavedSessionSummary(ValueObject):
    """Row of the saved balancing listing."""

    session_id: UUID
    code: str
    product_id: str
    product_name: str | None = None
    product_reference: str | None = None
    headcount: int
    total_standard_time: float
    units_per_hour: int
    required_machines: float
    created_at: datetime
    updated_at: datetime | None = None
