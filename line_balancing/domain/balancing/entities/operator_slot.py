"""Operator slots and the operation instances placed on them."""

from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

MAX_OPERATOR_NAME_LENGTH = 100


class OperationAssignment(BaseModel):
    """An operation placed on an operator with a share of its units per hour."""

    model_config = ConfigDict(validate_assignment=True)

    instance_id: UUID = Field(default_factory=uuid4)
    operation_id: str
    operator_id: UUID
    assigned_units_per_hour: int = Field(gt=0)


class OperatorSlot(BaseModel):
    """
    One position of the line.

    ``operator_id`` is stable and independent of both the display name and the
    slot position, so renaming or resizing never re-keys assignments.
    """

    model_config = ConfigDict(validate_assignment=True)

    operator_id: UUID = Field(default_factory=uuid4)
    display_name: str = Field(min_length=1, max_length=MAX_OPERATOR_NAME_LENGTH)
    position: int = Field(ge=0)
    assignments: list[OperationAssignment] = Field(default_factory=list)

    def find(self, instance_id: UUID) -> OperationAssignment | None:
        for assignment in self.assignments:
            if assignment.instance_id == instance_id:
                return assignment
        return None

    def detach(self, instance_id: UUID) -> OperationAssignment | None:
        for index, assignment in enumerate(self.assignments):
            if assignment.instance_id == instance_id:
                return self.assignments.pop(index)
        return None

    @property
    def assigned_units_per_hour(self) -> int:
        return sum(a.assigned_units_per_hour for a in self.assignments)
