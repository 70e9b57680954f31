"""
Balancing Session aggregate.

Holds the canonical in-memory model of one balancing session: the pool of
operation capacity and the ordered operator slots with their assignments.
Every mutation goes through this aggregate, which keeps the capacity
invariants intact:

* for every operation, ``0 <= assigned <= total`` and
  ``assigned + pending == total``;
* for every operation, the units of all assignments referencing it add up to
  the pool's ``assigned_units_per_hour``.

The pool and the operator slots reference each other only by
``operation_id`` / ``instance_id``.
"""

import copy
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from pydantic import Field, PrivateAttr

from line_balancing.core.observability import get_logger

from ...shared.base import AggregateRoot, ValueObject
from ...shared.exceptions import (
    AssignmentNotFound,
    CapacityExceeded,
    DegradedOperationData,
    InvalidProductState,
    NoCapacityRemaining,
    OperationNotFound,
    OperatorNotFound,
    SessionNotActiveError,
    ValidationError,
)
from ..events.domain_events import (
    AssignmentCreated,
    AssignmentRemoved,
    AssignmentResized,
    HeadcountChanged,
    OperatorRenamed,
    SessionDiscarded,
    SessionInitialized,
)
from ..value_objects.operation import Operation
from ..value_objects.records import SavedSession
from ..value_objects.snapshot import (
    AssignmentSnapshot,
    CapacitySnapshot,
    OperatorSnapshot,
    SessionSnapshot,
)
from .operation_capacity import OperationCapacity
from .operator_slot import MAX_OPERATOR_NAME_LENGTH, OperationAssignment, OperatorSlot

logger = get_logger(__name__)

DEFAULT_OPERATOR_NAME_TEMPLATE = "Operator {number}"


class SessionState(str, Enum):
    INITIALIZED = "initialized"
    DISCARDED = "discarded"


class ReplayDiscrepancy(ValueObject):
    """A saved assignment record that could not be replayed as stored."""

    operator_id: UUID
    operation_id: str
    requested_units_per_hour: int
    applied_units_per_hour: int
    reason: str


@dataclass
class _Checkpoint:
    headcount: int
    revision: int
    assigned: dict[str, int]
    operators: list[OperatorSlot]
    event_count: int


class BalancingSession(AggregateRoot):
    """One editable assignment of a product's operations to its operators."""

    product_id: str = Field(min_length=1)
    headcount: int = Field(ge=1)
    state: SessionState = SessionState.INITIALIZED
    revision: int = Field(default=0, ge=0)
    operator_name_template: str = DEFAULT_OPERATOR_NAME_TEMPLATE

    _capacities: dict[str, OperationCapacity] = PrivateAttr(default_factory=dict)
    _operators: list[OperatorSlot] = PrivateAttr(default_factory=list)
    _replay_discrepancies: list[ReplayDiscrepancy] = PrivateAttr(default_factory=list)

    @classmethod
    def initialize(
        cls,
        product_id: str,
        operations: Sequence[Operation],
        headcount: int,
        existing: SavedSession | None = None,
        operator_name_template: str = DEFAULT_OPERATOR_NAME_TEMPLATE,
    ) -> "BalancingSession":
        """
        Build a session from a product's operation list.

        Args:
            product_id: Product being balanced
            operations: Ordered operation list of the product
            headcount: Number of operator slots
            existing: Saved session to replay (edit mode)
            operator_name_template: Default name format, ``{number}`` is 1-based

        Raises:
            InvalidProductState: If the operation list is empty or has duplicates
            ValidationError: If headcount is not a positive integer
        """
        if not operations:
            raise InvalidProductState(
                f"Product {product_id} has no operations to balance",
                {"product_id": product_id},
            )
        if headcount < 1:
            raise ValidationError("headcount", headcount, "must be a positive integer")

        seen: set[str] = set()
        for operation in operations:
            if operation.id in seen:
                raise InvalidProductState(
                    f"Operation {operation.id} appears twice in the operation list "
                    f"of product {product_id}",
                    {"product_id": product_id, "operation_id": operation.id},
                )
            seen.add(operation.id)

        session = cls(
            product_id=product_id,
            headcount=headcount,
            operator_name_template=operator_name_template,
        )
        for operation in operations:
            session._capacities[operation.id] = OperationCapacity(operation=operation)

        degraded = session.degraded_operation_ids
        if degraded:
            logger.warning(
                "degraded_operations_in_catalog",
                product_id=product_id,
                operation_ids=list(degraded),
            )

        replayed = 0
        if existing is not None:
            replayed = session._seed_from_saved(existing)
        else:
            session._operators = [session._new_slot(i) for i in range(headcount)]

        session.add_domain_event(
            SessionInitialized(
                aggregate_id=session.id,
                product_id=product_id,
                headcount=headcount,
                operation_count=len(operations),
                replayed_assignments=replayed,
            )
        )
        return session

    def _new_slot(self, position: int) -> OperatorSlot:
        return OperatorSlot(
            display_name=self.operator_name_template.format(number=position + 1),
            position=position,
        )

    def _seed_from_saved(self, saved: SavedSession) -> int:
        for position, saved_operator in enumerate(saved.operators[: self.headcount]):
            name = saved_operator.display_name.strip()
            self._operators.append(
                OperatorSlot(
                    operator_id=saved_operator.operator_id,
                    display_name=name
                    or self.operator_name_template.format(number=position + 1),
                    position=position,
                )
            )
        for position in range(len(self._operators), self.headcount):
            self._operators.append(self._new_slot(position))

        slots = {slot.operator_id: slot for slot in self._operators}
        replayed = 0
        for record in saved.assignments:
            requested = record.assigned_units_per_hour
            slot = slots.get(record.operator_id)
            capacity = self._capacities.get(record.operation_id)

            if slot is None:
                reason = "operator_not_in_session"
            elif capacity is None:
                reason = "unknown_operation"
            elif not capacity.operation.is_producible:
                reason = "degraded_operation"
            elif requested <= 0:
                reason = "non_positive_quantity"
            elif capacity.pending_units_per_hour <= 0:
                reason = "no_capacity_remaining"
            else:
                applied = min(requested, capacity.pending_units_per_hour)
                self._attach(slot, capacity, applied)
                replayed += 1
                if applied == requested:
                    continue
                reason = "clamped_to_capacity"
                self._note_discrepancy(record.operator_id, record.operation_id, requested, applied, reason)
                continue

            self._note_discrepancy(record.operator_id, record.operation_id, requested, 0, reason)
        return replayed

    def _note_discrepancy(
        self,
        operator_id: UUID,
        operation_id: str,
        requested: int,
        applied: int,
        reason: str,
    ) -> None:
        discrepancy = ReplayDiscrepancy(
            operator_id=operator_id,
            operation_id=operation_id,
            requested_units_per_hour=requested,
            applied_units_per_hour=applied,
            reason=reason,
        )
        self._replay_discrepancies.append(discrepancy)
        logger.warning(
            "saved_assignment_not_replayed_as_stored",
            product_id=self.product_id,
            **discrepancy.model_dump(mode="json"),
        )

    # Read access

    @property
    def is_active(self) -> bool:
        return self.state == SessionState.INITIALIZED

    @property
    def capacities(self) -> tuple[OperationCapacity, ...]:
        """Capacity pool in operation-list order."""
        return tuple(self._capacities.values())

    @property
    def operators(self) -> tuple[OperatorSlot, ...]:
        """Operator slots in position order."""
        return tuple(self._operators)

    @property
    def operations(self) -> tuple[Operation, ...]:
        return tuple(c.operation for c in self._capacities.values())

    @property
    def replay_discrepancies(self) -> tuple[ReplayDiscrepancy, ...]:
        return tuple(self._replay_discrepancies)

    @property
    def degraded_operation_ids(self) -> tuple[str, ...]:
        return tuple(
            c.operation_id
            for c in self._capacities.values()
            if not c.operation.is_producible
        )

    def capacity(self, operation_id: str) -> OperationCapacity:
        try:
            return self._capacities[operation_id]
        except KeyError:
            raise OperationNotFound(operation_id) from None

    def operator(self, operator_id: UUID) -> OperatorSlot:
        for slot in self._operators:
            if slot.operator_id == operator_id:
                return slot
        raise OperatorNotFound(operator_id)

    def find_assignment(self, instance_id: UUID) -> OperationAssignment | None:
        for slot in self._operators:
            assignment = slot.find(instance_id)
            if assignment is not None:
                return assignment
        return None

    def assignments_for(self, operation_id: str) -> list[OperationAssignment]:
        return [
            a
            for slot in self._operators
            for a in slot.assignments
            if a.operation_id == operation_id
        ]

    def pool(self, process_id: str | None = None) -> list[OperationCapacity]:
        """Capacity pool, optionally restricted to one process."""
        if process_id is None:
            return list(self._capacities.values())
        return [
            c for c in self._capacities.values() if c.operation.process_id == process_id
        ]

    def pending_operations(self, process_id: str | None = None) -> list[OperationCapacity]:
        return [c for c in self.pool(process_id) if c.pending_units_per_hour > 0]

    def available_process_ids(self) -> list[str]:
        """Processes present in the product's operation list, first-seen order."""
        process_ids: list[str] = []
        for capacity in self._capacities.values():
            process_id = capacity.operation.process_id
            if process_id is not None and process_id not in process_ids:
                process_ids.append(process_id)
        return process_ids

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            session_id=self.id,
            product_id=self.product_id,
            headcount=self.headcount,
            revision=self.revision,
            capacities=tuple(
                CapacitySnapshot(
                    operation=c.operation,
                    assigned_units_per_hour=c.assigned_units_per_hour,
                )
                for c in self._capacities.values()
            ),
            operators=tuple(
                OperatorSnapshot(
                    operator_id=slot.operator_id,
                    display_name=slot.display_name,
                    position=slot.position,
                    assignments=tuple(
                        AssignmentSnapshot(
                            instance_id=a.instance_id,
                            operation_id=a.operation_id,
                            operator_id=a.operator_id,
                            assigned_units_per_hour=a.assigned_units_per_hour,
                        )
                        for a in slot.assignments
                    ),
                )
                for slot in self._operators
            ),
        )

    def check_invariants(self) -> list[str]:
        """Re-check the capacity invariants by summation."""
        violations: list[str] = []
        placed: dict[str, int] = {}
        for slot in self._operators:
            for a in slot.assignments:
                if a.operator_id != slot.operator_id:
                    violations.append(
                        f"assignment {a.instance_id} is filed under operator "
                        f"{slot.operator_id} but belongs to {a.operator_id}"
                    )
                if a.operation_id not in self._capacities:
                    violations.append(
                        f"assignment {a.instance_id} references unknown operation {a.operation_id}"
                    )
                placed[a.operation_id] = placed.get(a.operation_id, 0) + a.assigned_units_per_hour

        for operation_id, capacity in self._capacities.items():
            assigned = capacity.assigned_units_per_hour
            pending = capacity.pending_units_per_hour
            if assigned < 0 or pending < 0:
                violations.append(
                    f"operation {operation_id}: assigned={assigned} pending={pending}"
                )
            if placed.get(operation_id, 0) != assigned:
                violations.append(
                    f"operation {operation_id}: assignments sum to "
                    f"{placed.get(operation_id, 0)} but pool records {assigned}"
                )

        if len(self._operators) != self.headcount:
            violations.append(
                f"{len(self._operators)} operator slots for headcount {self.headcount}"
            )
        return violations

    def is_valid(self) -> bool:
        return not self.check_invariants()

    # Mutations

    def assign(
        self, operation_id: str, operator_id: UUID, requested_units_per_hour: int
    ) -> OperationAssignment:
        """
        Place units of an operation on an operator.

        The requested quantity is clamped to ``[1, pending]``.

        Raises:
            NoCapacityRemaining: If nothing is pending for the operation
            DegradedOperationData: If the operation has no capacity at all
        """
        self._ensure_active()
        capacity = self.capacity(operation_id)
        slot = self.operator(operator_id)

        if not capacity.operation.is_producible:
            raise DegradedOperationData(
                operation_id, capacity.operation.standard_time_minutes
            )
        pending = capacity.pending_units_per_hour
        if pending <= 0:
            raise NoCapacityRemaining(operation_id)

        units = max(1, min(requested_units_per_hour, pending))
        assignment = self._attach(slot, capacity, units)
        self._touch()
        self.add_domain_event(
            AssignmentCreated(
                aggregate_id=self.id,
                instance_id=assignment.instance_id,
                operation_id=operation_id,
                operator_id=operator_id,
                assigned_units_per_hour=units,
                requested_units_per_hour=requested_units_per_hour,
            )
        )
        return assignment

    def unassign(self, operator_id: UUID, instance_id: UUID) -> OperationAssignment:
        """
        Remove an assignment and return its units to the pool.

        Raises:
            AssignmentNotFound: If the operator holds no such instance
        """
        self._ensure_active()
        slot = self.operator(operator_id)
        assignment = slot.detach(instance_id)
        if assignment is None:
            raise AssignmentNotFound(instance_id, operator_id)

        self._capacities[assignment.operation_id].release(
            assignment.assigned_units_per_hour
        )
        self._touch()
        self.add_domain_event(
            AssignmentRemoved(
                aggregate_id=self.id,
                instance_id=instance_id,
                operation_id=assignment.operation_id,
                operator_id=operator_id,
                released_units_per_hour=assignment.assigned_units_per_hour,
            )
        )
        return assignment

    def reassign_quantity(
        self, operator_id: UUID, instance_id: UUID, new_units_per_hour: int
    ) -> OperationAssignment:
        """
        Change the units of an existing assignment.

        Raises:
            AssignmentNotFound: If the operator holds no such instance
            CapacityExceeded: If the increase exceeds the pending units
            ValidationError: If the new quantity is not positive
        """
        self._ensure_active()
        slot = self.operator(operator_id)
        assignment = slot.find(instance_id)
        if assignment is None:
            raise AssignmentNotFound(instance_id, operator_id)
        if new_units_per_hour < 1:
            raise ValidationError(
                "assigned_units_per_hour",
                new_units_per_hour,
                "must be at least 1 unit per hour",
            )

        capacity = self._capacities[assignment.operation_id]
        old_units = assignment.assigned_units_per_hour
        delta = new_units_per_hour - old_units
        if capacity.pending_units_per_hour - delta < 0:
            raise CapacityExceeded(
                assignment.operation_id,
                requested=new_units_per_hour,
                available=capacity.pending_units_per_hour + old_units,
            )
        if delta == 0:
            return assignment

        if delta > 0:
            capacity.reserve(delta)
        else:
            capacity.release(-delta)
        assignment.assigned_units_per_hour = new_units_per_hour
        self._touch()
        self.add_domain_event(
            AssignmentResized(
                aggregate_id=self.id,
                instance_id=instance_id,
                operation_id=assignment.operation_id,
                operator_id=operator_id,
                old_units_per_hour=old_units,
                new_units_per_hour=new_units_per_hour,
            )
        )
        return assignment

    def rename_operator(self, operator_id: UUID, new_name: str) -> OperatorSlot:
        self._ensure_active()
        slot = self.operator(operator_id)
        name = new_name.strip()
        if not name:
            raise ValidationError("display_name", new_name, "cannot be blank")
        if len(name) > MAX_OPERATOR_NAME_LENGTH:
            raise ValidationError(
                "display_name",
                new_name,
                f"must be at most {MAX_OPERATOR_NAME_LENGTH} characters",
            )

        old_name = slot.display_name
        if name == old_name:
            return slot
        slot.display_name = name
        self._touch()
        self.add_domain_event(
            OperatorRenamed(
                aggregate_id=self.id,
                operator_id=operator_id,
                old_name=old_name,
                new_name=name,
            )
        )
        return slot

    def resize_headcount(self, new_count: int) -> list[OperationAssignment]:
        """
        Resize the operator slots.

        The first ``min(old, new)`` slots keep their ids, names and
        assignments. Assignments of dropped slots go back to pending.

        Returns:
            The assignments that were forcibly unassigned
        """
        self._ensure_active()
        if new_count < 1:
            raise ValidationError("headcount", new_count, "must be a positive integer")

        old_count = self.headcount
        if new_count == old_count:
            return []

        released: list[OperationAssignment] = []
        if new_count < old_count:
            for slot in self._operators[new_count:]:
                for assignment in slot.assignments:
                    self._capacities[assignment.operation_id].release(
                        assignment.assigned_units_per_hour
                    )
                    released.append(assignment)
                    self.add_domain_event(
                        AssignmentRemoved(
                            aggregate_id=self.id,
                            instance_id=assignment.instance_id,
                            operation_id=assignment.operation_id,
                            operator_id=slot.operator_id,
                            released_units_per_hour=assignment.assigned_units_per_hour,
                            reason="headcount_reduced",
                        )
                    )
                slot.assignments = []
            del self._operators[new_count:]
        else:
            for position in range(old_count, new_count):
                self._operators.append(self._new_slot(position))

        self.headcount = new_count
        self._touch()
        self.add_domain_event(
            HeadcountChanged(
                aggregate_id=self.id,
                old_headcount=old_count,
                new_headcount=new_count,
                released_instance_ids=tuple(a.instance_id for a in released),
            )
        )
        return released

    def discard(self) -> None:
        self._ensure_active()
        self.state = SessionState.DISCARDED
        self._touch()
        self.add_domain_event(
            SessionDiscarded(aggregate_id=self.id, product_id=self.product_id)
        )

    @contextmanager
    def atomic(self) -> Iterator["BalancingSession"]:
        """
        Run several mutations as one: on any exception the session, its
        revision and its pending events return to the state at entry.
        """
        checkpoint = _Checkpoint(
            headcount=self.headcount,
            revision=self.revision,
            assigned={k: c.assigned_units_per_hour for k, c in self._capacities.items()},
            operators=copy.deepcopy(self._operators),
            event_count=len(self._domain_events),
        )
        try:
            yield self
        except Exception:
            self._operators = checkpoint.operators
            for operation_id, assigned in checkpoint.assigned.items():
                self._capacities[operation_id].assigned_units_per_hour = assigned
            self.headcount = checkpoint.headcount
            self.revision = checkpoint.revision
            del self._domain_events[checkpoint.event_count :]
            raise

    # Internals

    def _attach(
        self, slot: OperatorSlot, capacity: OperationCapacity, units: int
    ) -> OperationAssignment:
        assignment = OperationAssignment(
            operation_id=capacity.operation_id,
            operator_id=slot.operator_id,
            assigned_units_per_hour=units,
        )
        capacity.reserve(units)
        slot.assignments.append(assignment)
        return assignment

    def _ensure_active(self) -> None:
        if not self.is_active:
            raise SessionNotActiveError(self.id, self.state.value)

    def _touch(self) -> None:
        self.revision += 1
        self.mark_updated()
