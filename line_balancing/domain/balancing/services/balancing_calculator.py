"""
BalancingCalculator Domain Service

Derives throughput, takt time, machine requirements and per-operator
occupancy from a session snapshot. Pure functions: no state, no I/O and no
rounding.
"""

import math
from collections.abc import Iterable, Sequence

from ..value_objects.metrics import (
    BalancingMetrics,
    LoadSummary,
    OccupancyThresholds,
    OperatorLoad,
)
from ..value_objects.operation import Operation
from ..value_objects.snapshot import OperatorSnapshot, SessionSnapshot


def total_standard_time(operations: Iterable[Operation]) -> float:
    """Sum of the standard minutes of every operation with a positive SAM."""
    return sum(op.standard_time_minutes for op in operations if op.has_standard_time)


def units_per_hour(headcount: int, total_minutes: float) -> int:
    """Line throughput: ``floor(60 * headcount / total_minutes)``."""
    if total_minutes <= 0:
        return 0
    return math.floor(60 * headcount / total_minutes)


def takt_time(total_minutes: float, headcount: int) -> float:
    if headcount <= 0:
        return 0.0
    return total_minutes / headcount


def required_machines(operations: Iterable[Operation], takt: float) -> float:
    if takt <= 0:
        return 0.0
    return sum(
        op.standard_time_minutes / takt
        for op in operations
        if op.has_standard_time
    )


def occupied_minutes(
    operator: OperatorSnapshot, operations: dict[str, Operation]
) -> float:
    """
    Minutes per unit cycle an operator spends on their assignments.

    Each assignment contributes ``sam * assigned / total_units_per_hour``.
    Assignments of operations without capacity contribute nothing.
    """
    minutes = 0.0
    for assignment in operator.assignments:
        operation = operations.get(assignment.operation_id)
        if operation is None or operation.total_units_per_hour <= 0:
            continue
        minutes += (
            operation.standard_time_minutes
            * assignment.assigned_units_per_hour
            / operation.total_units_per_hour
        )
    return minutes


def occupancy_percentage(occupied: float, takt: float) -> float:
    if takt <= 0:
        return 0.0
    return occupied / takt * 100


def summarize_loads(loads: Sequence[OperatorLoad]) -> LoadSummary:
    """
    Average, most and least loaded operator.

    Ties go to the operator with the lowest slot position.
    """
    if not loads:
        return LoadSummary()

    ordered = sorted(loads, key=lambda load: load.position)
    most = ordered[0]
    least = ordered[0]
    for load in ordered[1:]:
        if load.occupancy_percentage > most.occupancy_percentage:
            most = load
        if load.occupancy_percentage < least.occupancy_percentage:
            least = load

    average = sum(load.occupancy_percentage for load in loads) / len(loads)
    return LoadSummary(average_occupancy=average, most_loaded=most, least_loaded=least)


class BalancingCalculator:
    """Computes balancing metrics for a session snapshot."""

    def __init__(self, thresholds: OccupancyThresholds | None = None) -> None:
        self.thresholds = thresholds or OccupancyThresholds()

    def calculate(self, snapshot: SessionSnapshot) -> BalancingMetrics:
        """
        Calculate all balancing metrics.

        Args:
            snapshot: Immutable view of the session

        Returns:
            BalancingMetrics with per-operator loads and the pool summary
        """
        operations = {c.operation_id: c.operation for c in snapshot.capacities}
        total = total_standard_time(operations.values())
        takt = takt_time(total, snapshot.headcount)

        loads = []
        for operator in sorted(snapshot.operators, key=lambda o: o.position):
            occupied = occupied_minutes(operator, operations)
            occupancy = occupancy_percentage(occupied, takt)
            loads.append(
                OperatorLoad(
                    operator_id=operator.operator_id,
                    display_name=operator.display_name,
                    position=operator.position,
                    assignment_count=len(operator.assignments),
                    occupied_minutes=occupied,
                    occupancy_percentage=occupancy,
                    band=self.thresholds.classify(occupancy),
                )
            )

        pending_total = sum(c.pending_units_per_hour for c in snapshot.capacities)
        producible = [c for c in snapshot.capacities if c.operation.is_producible]

        return BalancingMetrics(
            headcount=snapshot.headcount,
            total_standard_time=total,
            units_per_hour=units_per_hour(snapshot.headcount, total),
            takt_time=takt,
            required_machines=required_machines(operations.values(), takt),
            operator_loads=tuple(loads),
            summary=summarize_loads(loads),
            pending_units_total=pending_total,
            is_fully_assigned=all(c.pending_units_per_hour == 0 for c in producible),
            degraded_operation_ids=tuple(
                op_id for op_id, op in operations.items() if not op.is_producible
            ),
        )
