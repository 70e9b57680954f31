"""
Domain Events

Change notifications emitted by a balancing session so a UI layer can
re-render. Events are recorded on the aggregate and published through the
dispatcher only after the command that produced them succeeded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4

from line_balancing.core.observability import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, kw_only=True)
class DomainEvent:
    """Base class for all balancing events."""

    aggregate_id: UUID
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def event_type(self) -> str:
        return type(self).__name__


@dataclass(frozen=True, kw_only=True)
class SessionInitialized(DomainEvent):
    """Raised when a session is built for a product."""

    product_id: str
    headcount: int
    operation_count: int
    replayed_assignments: int = 0


@dataclass(frozen=True, kw_only=True)
class AssignmentCreated(DomainEvent):
    """Raised when units of an operation are placed on an operator."""

    instance_id: UUID
    operation_id: str
    operator_id: UUID
    assigned_units_per_hour: int
    requested_units_per_hour: int


@dataclass(frozen=True, kw_only=True)
class AssignmentRemoved(DomainEvent):
    """Raised when an assignment is returned to the pending pool."""

    instance_id: UUID
    operation_id: str
    operator_id: UUID
    released_units_per_hour: int
    reason: str = "unassigned"


@dataclass(frozen=True, kw_only=True)
class AssignmentResized(DomainEvent):
    """Raised when an assignment's quantity changes."""

    instance_id: UUID
    operation_id: str
    operator_id: UUID
    old_units_per_hour: int
    new_units_per_hour: int


@dataclass(frozen=True, kw_only=True)
class AssignmentMoved(DomainEvent):
    """Raised when an assignment is moved between operators."""

    old_instance_id: UUID
    new_instance_id: UUID
    operation_id: str
    from_operator_id: UUID
    to_operator_id: UUID
    units_per_hour: int


@dataclass(frozen=True, kw_only=True)
class HeadcountChanged(DomainEvent):
    """Raised when the operator slots are resized."""

    old_headcount: int
    new_headcount: int
    released_instance_ids: tuple[UUID, ...] = ()


@dataclass(frozen=True, kw_only=True)
class OperatorRenamed(DomainEvent):
    operator_id: UUID
    old_name: str
    new_name: str


@dataclass(frozen=True, kw_only=True)
class SessionDiscarded(DomainEvent):
    product_id: str


@dataclass(frozen=True, kw_only=True)
class SessionSaved(DomainEvent):
    """Raised after the persistence gateway stored the session."""

    saved_session_id: UUID
    revision: int


# Event Handler Interface
class DomainEventHandler:
    """Base interface for domain event handlers."""

    def can_handle(self, event: DomainEvent) -> bool:
        """Check if this handler can handle the given event."""
        raise NotImplementedError

    def handle(self, event: DomainEvent) -> None:
        """Handle the domain event."""
        raise NotImplementedError


class LoggingEventHandler(DomainEventHandler):
    """Writes every event to the structured log."""

    def can_handle(self, event: DomainEvent) -> bool:
        return True

    def handle(self, event: DomainEvent) -> None:
        logger.debug(
            "balancing_event",
            event_type=event.event_type,
            aggregate_id=str(event.aggregate_id),
            event_id=str(event.event_id),
        )


# Event Publisher/Dispatcher
class DomainEventDispatcher:
    """Dispatches domain events to registered handlers."""

    def __init__(self) -> None:
        self._handlers: list[DomainEventHandler] = []

    def register_handler(self, handler: DomainEventHandler) -> None:
        """Register an event handler."""
        if handler not in self._handlers:
            self._handlers.append(handler)

    def unregister_handler(self, handler: DomainEventHandler) -> None:
        """Unregister an event handler."""
        if handler in self._handlers:
            self._handlers.remove(handler)

    def dispatch(self, event: DomainEvent) -> None:
        """Dispatch an event to all capable handlers."""
        for handler in self._handlers:
            if handler.can_handle(event):
                try:
                    handler.handle(event)
                except Exception:
                    # Log error but continue with other handlers
                    logger.exception(
                        "event_handler_failed",
                        event_type=event.event_type,
                        event_id=str(event.event_id),
                        handler=type(handler).__name__,
                    )

    def dispatch_all(self, events: list[DomainEvent]) -> None:
        """Dispatch multiple events."""
        for event in events:
            self.dispatch(event)


# Global event dispatcher instance
_global_dispatcher = DomainEventDispatcher()
_global_dispatcher.register_handler(LoggingEventHandler())


def get_event_dispatcher() -> DomainEventDispatcher:
    """Get the global event dispatcher."""
    return _global_dispatcher
