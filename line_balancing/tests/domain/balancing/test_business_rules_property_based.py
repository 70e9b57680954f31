"""
Property-based tests for the balancing business rules.

Random command sequences are applied to a session; the capacity invariants
and the derived metrics must hold after every step, whether the command was
applied or rejected.
"""

import pytest
from hypothesis import given, settings, strategies as st

from line_balancing.domain.balancing.entities.balancing_session import BalancingSession
from line_balancing.domain.balancing.services.assignment_controller import (
    AssignmentController,
)
from line_balancing.domain.balancing.services.balancing_calculator import (
    BalancingCalculator,
)
from line_balancing.domain.balancing.value_objects.operation import (
    Operation,
    units_per_hour_for,
)
from line_balancing.domain.shared.exceptions import DomainError


@st.composite
def standard_times(draw):
    """Realistic SAM values, with the occasional degraded zero."""
    return draw(
        st.one_of(
            st.floats(min_value=0.05, max_value=12.0, allow_nan=False),
            st.just(0.0),
        )
    )


@st.composite
def operation_lists(draw):
    sams = draw(st.lists(standard_times(), min_size=1, max_size=6))
    return [
        Operation(
            id=f"OP-{i}",
            name=f"Operation {i}",
            process_id=draw(st.sampled_from(["SEW", "PRESS", None])),
            standard_time_minutes=sam,
        )
        for i, sam in enumerate(sams)
    ]


@st.composite
def commands(draw):
    kind = draw(st.sampled_from(["place", "change", "remove", "move", "resize", "rename"]))
    return (
        kind,
        draw(st.integers(min_value=0, max_value=10)),
        draw(st.integers(min_value=0, max_value=10)),
        draw(st.integers(min_value=-5, max_value=200)),
    )


def apply(session: BalancingSession, command) -> None:
    kind, first, second, value = command
    controller = AssignmentController(session)
    operators = session.operators
    operator = operators[first % len(operators)]
    capacities = session.capacities

    if kind == "place":
        operation_id = capacities[second % len(capacities)].operation_id
        controller.place(operation_id, operator.operator_id, value)
    elif kind in ("change", "remove", "move"):
        if not operator.assignments:
            return
        assignment = operator.assignments[second % len(operator.assignments)]
        if kind == "change":
            controller.change_quantity(operator.operator_id, assignment.instance_id, value)
        elif kind == "remove":
            controller.remove(operator.operator_id, assignment.instance_id)
        else:
            target = operators[second % len(operators)]
            controller.move(
                assignment.instance_id,
                operator.operator_id,
                target.operator_id,
                value if value > 0 else None,
            )
    elif kind == "resize":
        session.resize_headcount(value % 6)
    else:
        session.rename_operator(operator.operator_id, "x" * (value % 3))


class TestUnitsPerHourProperties:
    @given(sam=st.floats(min_value=0.01, max_value=600.0, allow_nan=False))
    @settings(max_examples=200)
    def test_rounding_is_nearest_integer(self, sam):
        exact = 60.0 / sam
        assert abs(units_per_hour_for(sam) - exact) <= 0.5


class TestSessionInvariantProperties:
    @given(
        operations=operation_lists(),
        headcount=st.integers(min_value=1, max_value=5),
        steps=st.lists(commands(), max_size=30),
    )
    @settings(max_examples=150, deadline=None)
    def test_invariants_hold_after_every_command(self, operations, headcount, steps):
        session = BalancingSession.initialize("P", operations, headcount)

        for step in steps:
            revision = session.revision
            before = session.snapshot()
            try:
                apply(session, step)
            except DomainError:
                # A rejected command leaves the session exactly as it was
                assert session.revision == revision
                assert session.snapshot() == before

            assert session.check_invariants() == []
            for capacity in session.capacities:
                assert 0 <= capacity.assigned_units_per_hour <= capacity.total_units_per_hour
                assert (
                    capacity.assigned_units_per_hour + capacity.pending_units_per_hour
                    == capacity.total_units_per_hour
                )
            for slot in session.operators:
                assert all(a.assigned_units_per_hour >= 1 for a in slot.assignments)

    @given(
        operations=operation_lists(),
        headcount=st.integers(min_value=1, max_value=5),
        steps=st.lists(commands(), max_size=20),
    )
    @settings(max_examples=100, deadline=None)
    def test_metrics_are_consistent(self, operations, headcount, steps):
        session = BalancingSession.initialize("P", operations, headcount)
        for step in steps:
            try:
                apply(session, step)
            except DomainError:
                pass

        metrics = BalancingCalculator().calculate(session.snapshot())

        assert metrics.headcount == len(metrics.operator_loads) == session.headcount
        assert metrics.pending_units_total == sum(
            c.pending_units_per_hour for c in session.capacities
        )
        occupied = sum(load.occupied_minutes for load in metrics.operator_loads)
        assert occupied <= metrics.total_standard_time + 1e-9
        if metrics.takt_time > 0:
            assert metrics.required_machines == pytest.approx(metrics.headcount)
        if metrics.summary.most_loaded is not None:
            assert all(
                metrics.summary.least_loaded.occupancy_percentage
                <= load.occupancy_percentage
                <= metrics.summary.most_loaded.occupancy_percentage
                for load in metrics.operator_loads
            )

    @given(
        operations=operation_lists(),
        headcount=st.integers(min_value=2, max_value=5),
        new_headcount=st.integers(min_value=1, max_value=5),
    )
    @settings(max_examples=100, deadline=None)
    def test_resize_never_loses_units(self, operations, headcount, new_headcount):
        session = BalancingSession.initialize("P", operations, headcount)
        controller = AssignmentController(session)
        for index, capacity in enumerate(session.pool()):
            if capacity.operation.is_producible:
                operator = session.operators[index % headcount]
                controller.place(capacity.operation_id, operator.operator_id)

        totals = {c.operation_id: c.total_units_per_hour for c in session.capacities}
        released = session.resize_headcount(new_headcount)

        assert session.check_invariants() == []
        assert {c.operation_id: c.total_units_per_hour for c in session.capacities} == totals
        placed = sum(
            a.assigned_units_per_hour for slot in session.operators for a in slot.assignments
        )
        assigned = sum(c.assigned_units_per_hour for c in session.capacities)
        assert placed == assigned
        assert assigned + sum(a.assigned_units_per_hour for a in released) == sum(
            totals.values()
        )
