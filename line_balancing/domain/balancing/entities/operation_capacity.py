"""Operation capacity entity: one entry of the pending pool."""

from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing_extensions import Self

from ..value_objects.operation import Operation


class OperationCapacity(BaseModel):
    """
    Units per hour of one operation and how many of them are placed.

    ``pending_units_per_hour`` is derived from the other two values so the
    complement ``assigned + pending == total`` holds at all times.
    """

    model_config = ConfigDict(validate_assignment=True)

    operation: Operation
    assigned_units_per_hour: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _check_within_total(self) -> Self:
        if self.assigned_units_per_hour > self.total_units_per_hour:
            raise ValueError(
                f"assigned units per hour ({self.assigned_units_per_hour}) exceed "
                f"total ({self.total_units_per_hour}) for operation {self.operation.id}"
            )
        return self

    @property
    def operation_id(self) -> str:
        return self.operation.id

    @property
    def total_units_per_hour(self) -> int:
        return self.operation.total_units_per_hour

    @property
    def pending_units_per_hour(self) -> int:
        return self.total_units_per_hour - self.assigned_units_per_hour

    @property
    def is_fully_assigned(self) -> bool:
        return self.pending_units_per_hour == 0

    def reserve(self, units: int) -> None:
        self.assigned_units_per_hour = self.assigned_units_per_hour + units

    def release(self, units: int) -> None:
        self.assigned_units_per_hour = self.assigned_units_per_hour - units
