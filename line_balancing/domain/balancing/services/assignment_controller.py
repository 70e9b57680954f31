"""
Assignment Interaction Controller

Translates user intents (drop an operation on an operator, edit a quantity,
remove a chip, drag a chip to another operator) into state store calls.
Intents that cannot be valid are declined before they reach the session.
"""

from typing import NoReturn
from uuid import UUID

from line_balancing.core.observability import get_logger

from ...shared.base import ValueObject
from ...shared.exceptions import AssignmentDeclined, AssignmentNotFound
from ..entities.balancing_session import BalancingSession
from ..entities.operation_capacity import OperationCapacity
from ..entities.operator_slot import OperationAssignment, OperatorSlot
from ..events.domain_events import AssignmentMoved

logger = get_logger(__name__)


class AssignmentPrompt(ValueObject):
    """What the quantity dialog shows before an operation is placed."""

    operation_id: str
    operation_name: str
    operator_id: UUID
    operator_name: str
    total_units_per_hour: int
    pending_units_per_hour: int
    suggested_units_per_hour: int


class AssignmentController:
    """Drives one balancing session from user intents."""

    def __init__(self, session: BalancingSession) -> None:
        self.session = session

    def prepare(self, operation_id: str, operator_id: UUID) -> AssignmentPrompt:
        """
        Build the quantity prompt for placing an operation on an operator.

        The suggested quantity is everything still pending, or 1 when nothing
        is left.
        """
        capacity = self._capacity_or_decline(operation_id)
        slot = self._operator_or_decline(operator_id)
        pending = capacity.pending_units_per_hour
        return AssignmentPrompt(
            operation_id=operation_id,
            operation_name=capacity.operation.name,
            operator_id=operator_id,
            operator_name=slot.display_name,
            total_units_per_hour=capacity.total_units_per_hour,
            pending_units_per_hour=pending,
            suggested_units_per_hour=pending if pending > 0 else 1,
        )

    def clamp_requested_units(self, operation_id: str, raw: int | None) -> int:
        """Normalize dialog input to ``[1, pending]``."""
        pending = self._capacity_or_decline(operation_id).pending_units_per_hour
        return max(1, min(pending, raw or 1))

    def place(
        self, operation_id: str, operator_id: UUID, units: int | None = None
    ) -> OperationAssignment:
        """
        Assign an operation to an operator.

        Args:
            operation_id: Operation dropped on the operator
            operator_id: Target operator slot
            units: Requested units per hour, the full pending quantity if omitted

        Raises:
            AssignmentDeclined: If the intent is invalid
        """
        capacity = self._capacity_or_decline(operation_id)
        self._operator_or_decline(operator_id)
        if units is None:
            units = capacity.pending_units_per_hour
        elif units <= 0:
            self._decline("assigned_units_per_hour", units, "must be a positive quantity")
        return self.session.assign(operation_id, operator_id, units)

    def change_quantity(
        self, operator_id: UUID, instance_id: UUID, units: int
    ) -> OperationAssignment:
        if units <= 0:
            self._decline("assigned_units_per_hour", units, "must be a positive quantity")
        return self.session.reassign_quantity(operator_id, instance_id, units)

    def remove(self, operator_id: UUID, instance_id: UUID) -> OperationAssignment:
        return self.session.unassign(operator_id, instance_id)

    def move(
        self,
        instance_id: UUID,
        from_operator_id: UUID,
        to_operator_id: UUID,
        units: int | None = None,
    ) -> OperationAssignment:
        """
        Move an assignment to another operator.

        Either both the removal and the new placement apply, or the session is
        left exactly as it was.

        Returns:
            The new assignment on the target operator
        """
        if from_operator_id == to_operator_id:
            self._decline(
                "to_operator_id", str(to_operator_id), "cannot move onto the same operator"
            )
        source = self._operator_or_decline(from_operator_id)
        self._operator_or_decline(to_operator_id)
        current = source.find(instance_id)
        if current is None:
            raise AssignmentNotFound(instance_id, from_operator_id)
        if units is not None and units <= 0:
            self._decline("assigned_units_per_hour", units, "must be a positive quantity")

        with self.session.atomic():
            removed = self.session.unassign(from_operator_id, instance_id)
            moved = self.session.assign(
                removed.operation_id,
                to_operator_id,
                units if units is not None else removed.assigned_units_per_hour,
            )
            self.session.add_domain_event(
                AssignmentMoved(
                    aggregate_id=self.session.id,
                    old_instance_id=instance_id,
                    new_instance_id=moved.instance_id,
                    operation_id=moved.operation_id,
                    from_operator_id=from_operator_id,
                    to_operator_id=to_operator_id,
                    units_per_hour=moved.assigned_units_per_hour,
                )
            )
        return moved

    def _capacity_or_decline(self, operation_id: str) -> OperationCapacity:
        for capacity in self.session.capacities:
            if capacity.operation_id == operation_id:
                return capacity
        self._decline("operation_id", operation_id, "operation is not part of this session")

    def _operator_or_decline(self, operator_id: UUID) -> OperatorSlot:
        for slot in self.session.operators:
            if slot.operator_id == operator_id:
                return slot
        self._decline("operator_id", str(operator_id), "operator is not part of this session")

    def _decline(self, field_name: str, value: str | int, reason: str) -> NoReturn:
        logger.info(
            "assignment_intent_declined",
            session_id=str(self.session.id),
            field=field_name,
            value=value,
            reason=reason,
        )
        raise AssignmentDeclined(field_name, value, reason)
