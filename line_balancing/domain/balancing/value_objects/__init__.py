"""Value objects for the line balancing domain."""

from .metrics import (
    BalancingMetrics,
    LoadSummary,
    OccupancyBand,
    OccupancyThresholds,
    OperatorLoad,
)
from .operation import Operation, units_per_hour_for
from .records import (
    AssignmentRecord,
    OperatorRecord,
    SavedAssignment,
    SavedOperator,
    SavedSession,
    SavedSessionSummary,
    SessionHeader,
)
from .snapshot import (
    AssignmentSnapshot,
    CapacitySnapshot,
    OperatorSnapshot,
    SessionSnapshot,
)

__all__ = [
    "AssignmentRecord",
    "AssignmentSnapshot",
    "BalancingMetrics",
    "CapacitySnapshot",
    "LoadSummary",
    "OccupancyBand",
    "OccupancyThresholds",
    "Operation",
    "OperatorLoad",
    "OperatorRecord",
    "OperatorSnapshot",
    "SavedAssignment",
    "SavedOperator",
    "SavedSession",
    "SavedSessionSummary",
    "SessionHeader",
    "SessionSnapshot",
    "units_per_hour_for",
]
