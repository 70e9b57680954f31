"""
Tests for AssignmentController: quantity prompts, declined intents and moves.
"""

from uuid import uuid4

import pytest

from line_balancing.domain.balancing.entities.balancing_session import BalancingSession
from line_balancing.domain.balancing.events.domain_events import (
    AssignmentCreated,
    AssignmentMoved,
    AssignmentRemoved,
)
from line_balancing.domain.balancing.services.assignment_controller import (
    AssignmentController,
)
from line_balancing.domain.shared.exceptions import (
    AssignmentDeclined,
    AssignmentNotFound,
    ErrorType,
    NoCapacityRemaining,
)


@pytest.fixture
def session(session_factory):
    return session_factory(1.0, 2.0, headcount=2)


@pytest.fixture
def controller(session):
    return AssignmentController(session)


class TestPrepare:
    def test_prompt_suggests_everything_pending(self, session, controller):
        operator = session.operators[0]
        session.assign("O1", operator.operator_id, 20)

        prompt = controller.prepare("O1", operator.operator_id)

        assert prompt.operation_name == "Operation 1"
        assert prompt.operator_name == "Operator 1"
        assert prompt.total_units_per_hour == 60
        assert prompt.pending_units_per_hour == 40
        assert prompt.suggested_units_per_hour == 40

    def test_prompt_suggests_one_when_nothing_pending(self, session, controller):
        operator_id = session.operators[0].operator_id
        session.assign("O2", operator_id, 30)

        prompt = controller.prepare("O2", operator_id)

        assert prompt.pending_units_per_hour == 0
        assert prompt.suggested_units_per_hour == 1

    def test_unknown_operation_declined(self, session, controller):
        with pytest.raises(AssignmentDeclined) as exc_info:
            controller.prepare("NOPE", session.operators[0].operator_id)
        assert exc_info.value.error_type == ErrorType.VALIDATION
        assert exc_info.value.field_name == "operation_id"


class TestClamp:
    @pytest.mark.parametrize(
        "raw, expected",
        [(None, 1), (0, 1), (-4, 1), (25, 25), (60, 60), (61, 60), (1000, 60)],
    )
    def test_clamps_to_pending(self, controller, raw, expected):
        assert controller.clamp_requested_units("O1", raw) == expected


class TestPlace:
    def test_omitted_units_take_everything_pending(self, session, controller):
        operator_id = session.operators[1].operator_id

        assignment = controller.place("O2", operator_id)

        assert assignment.assigned_units_per_hour == 30
        assert session.capacity("O2").is_fully_assigned

    def test_explicit_units(self, session, controller):
        assignment = controller.place("O1", session.operators[0].operator_id, 12)

        assert assignment.assigned_units_per_hour == 12

    @pytest.mark.parametrize("units", [0, -1])
    def test_non_positive_units_declined(self, session, controller, units):
        with pytest.raises(AssignmentDeclined):
            controller.place("O1", session.operators[0].operator_id, units)
        assert session.revision == 0

    def test_unknown_operator_declined(self, session, controller):
        with pytest.raises(AssignmentDeclined) as exc_info:
            controller.place("O1", uuid4())
        assert exc_info.value.field_name == "operator_id"
        assert session.revision == 0

    def test_nothing_pending_propagates(self, session, controller):
        operator_id = session.operators[0].operator_id
        controller.place("O1", operator_id)

        with pytest.raises(NoCapacityRemaining):
            controller.place("O1", operator_id)


class TestChangeQuantityAndRemove:
    def test_change_quantity(self, session, controller):
        operator_id = session.operators[0].operator_id
        assignment = controller.place("O1", operator_id, 10)

        controller.change_quantity(operator_id, assignment.instance_id, 15)

        assert assignment.assigned_units_per_hour == 15

    def test_change_to_zero_declined(self, session, controller):
        operator_id = session.operators[0].operator_id
        assignment = controller.place("O1", operator_id, 10)

        with pytest.raises(AssignmentDeclined):
            controller.change_quantity(operator_id, assignment.instance_id, 0)
        assert assignment.assigned_units_per_hour == 10

    def test_remove(self, session, controller):
        operator_id = session.operators[0].operator_id
        assignment = controller.place("O1", operator_id, 10)

        controller.remove(operator_id, assignment.instance_id)

        assert session.capacity("O1").pending_units_per_hour == 60


class TestMove:
    def test_move_keeps_units_and_issues_new_instance(self, session, controller):
        first, second = session.operators
        assignment = controller.place("O1", first.operator_id, 25)
        session.clear_domain_events()

        moved = controller.move(assignment.instance_id, first.operator_id, second.operator_id)

        assert moved.operator_id == second.operator_id
        assert moved.assigned_units_per_hour == 25
        assert moved.instance_id != assignment.instance_id
        assert first.assignments == []
        assert session.capacity("O1").assigned_units_per_hour == 25
        assert [type(e) for e in session.get_domain_events()] == [
            AssignmentRemoved,
            AssignmentCreated,
            AssignmentMoved,
        ]

    def test_move_with_new_quantity(self, session, controller):
        first, second = session.operators
        assignment = controller.place("O1", first.operator_id, 25)

        moved = controller.move(
            assignment.instance_id, first.operator_id, second.operator_id, units=40
        )

        assert moved.assigned_units_per_hour == 40
        assert session.capacity("O1").pending_units_per_hour == 20

    def test_move_request_above_available_is_clamped(self, session, controller):
        first, second = session.operators
        assignment = controller.place("O1", first.operator_id, 25)
        controller.place("O1", second.operator_id, 30)

        moved = controller.move(
            assignment.instance_id, first.operator_id, second.operator_id, units=50
        )

        assert moved.assigned_units_per_hour == 30
        assert session.check_invariants() == []

    def test_move_onto_same_operator_declined(self, session, controller):
        operator_id = session.operators[0].operator_id
        assignment = controller.place("O1", operator_id, 25)
        revision = session.revision

        with pytest.raises(AssignmentDeclined):
            controller.move(assignment.instance_id, operator_id, operator_id)
        assert session.revision == revision

    def test_move_unknown_instance(self, session, controller):
        first, second = session.operators

        with pytest.raises(AssignmentNotFound):
            controller.move(uuid4(), first.operator_id, second.operator_id)

    def test_failed_move_leaves_session_untouched(self, session, controller, monkeypatch):
        first, second = session.operators
        assignment = controller.place("O1", first.operator_id, 25)
        session.clear_domain_events()
        before = session.snapshot()

        def broken_assign(*args, **kwargs):
            raise NoCapacityRemaining("O1")

        monkeypatch.setattr(BalancingSession, "assign", broken_assign)

        with pytest.raises(NoCapacityRemaining):
            controller.move(assignment.instance_id, first.operator_id, second.operator_id)

        assert session.snapshot() == before
        assert session.get_domain_events() == []
        assert session.find_assignment(assignment.instance_id) is not None
