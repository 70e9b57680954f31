"""
Operation Value Object

A catalog operation as seen by a balancing session: immutable reference data
with the standard allotted minutes (SAM) for one unit.
"""

import math

from pydantic import Field, computed_field

from ...shared.base import ValueObject


def units_per_hour_for(standard_time_minutes: float) -> int:
    """Whole units one operator completes per hour at the given SAM.

    Rounds half up; a non-positive or non-finite SAM yields no capacity.
    """
    if not math.isfinite(standard_time_minutes) or standard_time_minutes <= 0:
        return 0
    return math.floor(60.0 / standard_time_minutes + 0.5)


class Operation(ValueObject):
    """Operation of a product's operation sheet."""

    id: str = Field(min_length=1)
    name: str = ""
    process_id: str | None = None
    standard_time_minutes: float = 0.0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_units_per_hour(self) -> int:
        return units_per_hour_for(self.standard_time_minutes)

    @property
    def has_standard_time(self) -> bool:
        sam = self.standard_time_minutes
        return math.isfinite(sam) and sam > 0

    @property
    def is_producible(self) -> bool:
        """An operation without a usable SAM has no throughput-bearing capacity."""
        return self.has_standard_time and self.total_units_per_hour > 0
