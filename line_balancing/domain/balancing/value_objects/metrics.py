"""
Balancing metric value objects.

Results of the balancing calculator. All minute and percentage quantities are
unrounded floats; ``units_per_hour`` is the only integral metric.
"""

from enum import Enum
from uuid import UUID

from pydantic import Field, model_validator
from typing_extensions import Self

from ...shared.base import ValueObject


class OccupancyBand(str, Enum):
    """Load classification of an operator against takt time."""

    UNDERLOADED = "underloaded"
    BALANCED = "balanced"
    OVERLOADED = "overloaded"


class OccupancyThresholds(ValueObject):
    """Percent-of-takt boundaries between occupancy bands."""

    balanced_from: float = Field(default=80.0, ge=0.0)
    overloaded_above: float = Field(default=100.0, ge=0.0)

    @model_validator(mode="after")
    def _check_order(self) -> Self:
        if self.balanced_from > self.overloaded_above:
            raise ValueError("balanced_from cannot exceed overloaded_above")
        return self

    def classify(self, occupancy_percentage: float) -> OccupancyBand:
        if occupancy_percentage > self.overloaded_above:
            return OccupancyBand.OVERLOADED
        if occupancy_percentage >= self.balanced_from:
            return OccupancyBand.BALANCED
        return OccupancyBand.UNDERLOADED


class OperatorLoad(ValueObject):
    """Workload of a single operator slot."""

    operator_id: UUID
    display_name: str
    position: int
    assignment_count: int = 0
    occupied_minutes: float = 0.0
    occupancy_percentage: float = 0.0
    band: OccupancyBand = OccupancyBand.UNDERLOADED


class LoadSummary(ValueObject):
    """Workload imbalance statistics across all operators."""

    average_occupancy: float = 0.0
    most_loaded: OperatorLoad | None = None
    least_loaded: OperatorLoad | None = None

    @property
    def occupancy_spread(self) -> float:
        if self.most_loaded is None or self.least_loaded is None:
            return 0.0
        return (
            self.most_loaded.occupancy_percentage
            - self.least_loaded.occupancy_percentage
        )


class BalancingMetrics(ValueObject):
    """Aggregate metrics derived from a session snapshot."""

    headcount: int
    total_standard_time: float
    units_per_hour: int
    takt_time: float
    required_machines: float
    operator_loads: tuple[OperatorLoad, ...] = ()
    summary: LoadSummary = Field(default_factory=LoadSummary)
    pending_units_total: int = 0
    is_fully_assigned: bool = False
    degraded_operation_ids: tuple[str, ...] = ()

    @property
    def has_degraded_data(self) -> bool:
        return bool(self.degraded_operation_ids)

    def load_for(self, operator_id: UUID) -> OperatorLoad | None:
        for load in self.operator_loads:
            if load.operator_id == operator_id:
                return load
        return None
