"""Entities of the line balancing domain."""

from .balancing_session import (
    DEFAULT_OPERATOR_NAME_TEMPLATE,
    BalancingSession,
    ReplayDiscrepancy,
    SessionState,
)
from .operation_capacity import OperationCapacity
from .operator_slot import OperationAssignment, OperatorSlot

__all__ = [
    "DEFAULT_OPERATOR_NAME_TEMPLATE",
    "BalancingSession",
    "OperationAssignment",
    "OperationCapacity",
    "OperatorSlot",
    "ReplayDiscrepancy",
    "SessionState",
]
