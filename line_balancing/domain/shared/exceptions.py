"""
Domain Exceptions

Defines the error taxonomy of the balancing engine. Every error carries an
``ErrorType`` discriminator so callers (the API layer in particular) can map
failures without inspecting concrete classes.
"""

from enum import Enum
from uuid import UUID


class ErrorType(str, Enum):
    """Error type enumeration for discriminated unions."""

    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    CONSTRAINT_VIOLATION = "constraint_violation"
    NOT_FOUND = "not_found"
    REPOSITORY = "repository"


DetailValue = str | int | float | bool | None


class DomainError(Exception):
    """Base class for all domain errors with type discrimination."""

    def __init__(
        self,
        message: str,
        error_type: ErrorType,
        details: dict[str, DetailValue] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.details = details or {}

    def to_dict(self) -> dict[str, str | dict[str, DetailValue]]:
        """Convert error to dictionary for API responses."""
        return {
            "type": self.error_type.value,
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DomainError):
    """Raised when domain validation rules are violated."""

    def __init__(
        self,
        field_name: str,
        value: DetailValue,
        message: str,
        error_code: str | None = None,
    ) -> None:
        self.field_name = field_name
        self.value = value
        self.error_code = error_code or "VALIDATION_ERROR"

        details: dict[str, DetailValue] = {
            "field": field_name,
            "value": str(value) if value is not None else None,
            "error_code": self.error_code,
        }
        super().__init__(
            f"Validation failed for field '{field_name}': {message}",
            ErrorType.VALIDATION,
            details,
        )


class AssignmentDeclined(ValidationError):
    """Raised when the interaction controller refuses a user intent."""

    def __init__(self, field_name: str, value: DetailValue, reason: str) -> None:
        super().__init__(field_name, value, reason, "ASSIGNMENT_DECLINED")
        self.reason = reason


# Product / session state
class InvalidProductState(DomainError):
    """Raised when the selected product has no usable operation list."""

    def __init__(
        self, message: str, details: dict[str, DetailValue] | None = None
    ) -> None:
        super().__init__(message, ErrorType.BUSINESS_RULE, details)


class NoOperationListFound(InvalidProductState):
    """Raised when a product has no operation sheet in the catalog."""

    def __init__(self, product_id: str) -> None:
        super().__init__(
            f"No operation list found for product {product_id}",
            {"product_id": product_id},
        )
        self.product_id = product_id


class DegradedOperationData(DomainError):
    """Raised when an operation's standard time makes throughput undefined."""

    def __init__(self, operation_id: str, standard_time_minutes: float) -> None:
        super().__init__(
            f"Operation {operation_id} has non-positive standard time "
            f"({standard_time_minutes} min) and cannot be balanced",
            ErrorType.BUSINESS_RULE,
            {
                "operation_id": operation_id,
                "standard_time_minutes": standard_time_minutes,
            },
        )
        self.operation_id = operation_id
        self.standard_time_minutes = standard_time_minutes


class SessionNotActiveError(DomainError):
    """Raised when a discarded balancing session is mutated."""

    def __init__(self, session_id: UUID, state: str) -> None:
        super().__init__(
            f"Balancing session {session_id} is {state}",
            ErrorType.BUSINESS_RULE,
            {"session_id": str(session_id), "state": state},
        )
        self.session_id = session_id
        self.state = state


# Capacity invariant violations
class NoCapacityRemaining(DomainError):
    """Raised when an operation has no pending units left to assign."""

    def __init__(self, operation_id: str) -> None:
        super().__init__(
            f"No pending units per hour left for operation {operation_id}",
            ErrorType.CONSTRAINT_VIOLATION,
            {"operation_id": operation_id, "pending_units_per_hour": 0},
        )
        self.operation_id = operation_id


class CapacityExceeded(DomainError):
    """Raised when a quantity increase exceeds the pending capacity."""

    def __init__(self, operation_id: str, requested: int, available: int) -> None:
        super().__init__(
            f"Operation {operation_id}: requested {requested} units per hour, "
            f"only {available} can be assigned",
            ErrorType.CONSTRAINT_VIOLATION,
            {
                "operation_id": operation_id,
                "requested_units_per_hour": requested,
                "available_units_per_hour": available,
            },
        )
        self.operation_id = operation_id
        self.requested = requested
        self.available = available


# Not found
class EntityNotFound(DomainError):
    """Base class for lookups of unknown identifiers."""

    def __init__(self, entity_type: str, entity_id: UUID | str) -> None:
        super().__init__(
            f"{entity_type} not found: {entity_id}",
            ErrorType.NOT_FOUND,
            {"entity_type": entity_type, "entity_id": str(entity_id)},
        )
        self.entity_type = entity_type
        self.entity_id = entity_id


class AssignmentNotFound(EntityNotFound):
    """Raised when a stale or removed assignment instance is targeted."""

    def __init__(self, instance_id: UUID, operator_id: UUID | None = None) -> None:
        super().__init__("Assignment", instance_id)
        if operator_id is not None:
            self.details["operator_id"] = str(operator_id)
        self.instance_id = instance_id
        self.operator_id = operator_id


class OperatorNotFound(EntityNotFound):
    def __init__(self, operator_id: UUID) -> None:
        super().__init__("Operator", operator_id)
        self.operator_id = operator_id


class OperationNotFound(EntityNotFound):
    def __init__(self, operation_id: str) -> None:
        super().__init__("Operation", operation_id)
        self.operation_id = operation_id


class SavedSessionNotFound(EntityNotFound):
    def __init__(self, session_id: UUID) -> None:
        super().__init__("Saved balancing session", session_id)
        self.session_id = session_id


class WorkspaceNotFound(EntityNotFound):
    def __init__(self, workspace_id: UUID) -> None:
        super().__init__("Balancing workspace", workspace_id)
        self.workspace_id = workspace_id


# Persistence
class PersistenceFailure(DomainError):
    """Raised when the persistence gateway could not durably save a session."""

    def __init__(self, message: str, session_id: UUID | None = None) -> None:
        super().__init__(
            message,
            ErrorType.REPOSITORY,
            {"session_id": str(session_id) if session_id else None},
        )
        self.session_id = session_id
