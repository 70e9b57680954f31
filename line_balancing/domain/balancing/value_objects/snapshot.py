"""
Session snapshot value objects.

Immutable views of a balancing session handed to the calculator and to the
persistence layer. The pool and the operator lists stay two separate
collections linked by ``operation_id``.
"""

from uuid import UUID

from pydantic import computed_field

from ...shared.base import ValueObject
from .operation import Operation


class CapacitySnapshot(ValueObject):
    operation: Operation
    assigned_units_per_hour: int

    @property
    def operation_id(self) -> str:
        return self.operation.id

    @property
    def total_units_per_hour(self) -> int:
        return self.operation.total_units_per_hour

    @computed_field  # type: ignore[prop-decorator]
    @property
    def pending_units_per_hour(self) -> int:
        return self.total_units_per_hour - self.assigned_units_per_hour


class AssignmentSnapshot(ValueObject):
    instance_id: UUID
    operation_id: str
    operator_id: UUID
    assigned_units_per_hour: int


class OperatorSnapshot(ValueObject):
    operator_id: UUID
    display_name: str
    position: int
    assignments: tuple[AssignmentSnapshot, ...] = ()


class SessionSnapshot(ValueObject):
    """Point-in-time copy of a balancing session."""

    session_id: UUID
    product_id: str
    headcount: int
    revision: int
    capacities: tuple[CapacitySnapshot, ...]
    operators: tuple[OperatorSnapshot, ...]

    def capacity_for(self, operation_id: str) -> CapacitySnapshot | None:
        for capacity in self.capacities:
            if capacity.operation_id == operation_id:
                return capacity
        return None
