"""
Domain Events Module

Exports all balancing events and event handling infrastructure.
"""

from .domain_events import (
    AssignmentCreated,
    AssignmentMoved,
    AssignmentRemoved,
    AssignmentResized,
    DomainEvent,
    DomainEventDispatcher,
    DomainEventHandler,
    HeadcountChanged,
    LoggingEventHandler,
    OperatorRenamed,
    SessionDiscarded,
    SessionInitialized,
    SessionSaved,
    get_event_dispatcher,
)

__all__ = [
    # Base classes
    "DomainEvent",
    "DomainEventHandler",
    "DomainEventDispatcher",
    "LoggingEventHandler",
    # Session events
    "SessionInitialized",
    "SessionDiscarded",
    "SessionSaved",
    "HeadcountChanged",
    "OperatorRenamed",
    # Assignment events
    "AssignmentCreated",
    "AssignmentRemoved",
    "AssignmentResized",
    "AssignmentMoved",
    # Utility functions
    "get_event_dispatcher",
]
