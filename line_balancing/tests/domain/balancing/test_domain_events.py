"""
Unit tests for balancing domain events and the dispatcher.
"""

import dataclasses
from datetime import datetime, timezone
from uuid import UUID, uuid4

import pytest

from line_balancing.domain.balancing.events.domain_events import (
    AssignmentCreated,
    DomainEvent,
    DomainEventDispatcher,
    DomainEventHandler,
    HeadcountChanged,
    SessionSaved,
)
from line_balancing.infrastructure.events import MetricsEventHandler, register_event_handlers


class RecordingHandler(DomainEventHandler):
    def __init__(self, event_type: type = DomainEvent) -> None:
        self.event_type = event_type
        self.handled: list[DomainEvent] = []

    def can_handle(self, event: DomainEvent) -> bool:
        return isinstance(event, self.event_type)

    def handle(self, event: DomainEvent) -> None:
        self.handled.append(event)


class FailingHandler(DomainEventHandler):
    def can_handle(self, event: DomainEvent) -> bool:
        return True

    def handle(self, event: DomainEvent) -> None:
        raise RuntimeError("handler failure")


class TestDomainEventBase:
    def test_automatic_fields(self):
        aggregate_id = uuid4()
        event = HeadcountChanged(aggregate_id=aggregate_id, old_headcount=2, new_headcount=3)

        assert isinstance(event.event_id, UUID)
        assert isinstance(event.occurred_at, datetime)
        assert event.occurred_at.tzinfo is timezone.utc
        assert event.aggregate_id == aggregate_id
        assert event.released_instance_ids == ()
        assert event.event_type == "HeadcountChanged"

    def test_events_are_immutable(self):
        event = SessionSaved(aggregate_id=uuid4(), saved_session_id=uuid4(), revision=3)

        with pytest.raises(dataclasses.FrozenInstanceError):
            event.revision = 4  # type: ignore[misc]

    def test_fields_are_keyword_only(self):
        with pytest.raises(TypeError):
            HeadcountChanged(uuid4(), 2, 3)  # type: ignore[misc]


class TestDomainEventDispatcher:
    def test_dispatch_to_capable_handlers(self):
        dispatcher = DomainEventDispatcher()
        everything = RecordingHandler()
        created_only = RecordingHandler(AssignmentCreated)
        dispatcher.register_handler(everything)
        dispatcher.register_handler(created_only)

        resized = HeadcountChanged(aggregate_id=uuid4(), old_headcount=1, new_headcount=2)
        created = AssignmentCreated(
            aggregate_id=uuid4(),
            instance_id=uuid4(),
            operation_id="O1",
            operator_id=uuid4(),
            assigned_units_per_hour=10,
            requested_units_per_hour=10,
        )
        dispatcher.dispatch_all([resized, created])

        assert everything.handled == [resized, created]
        assert created_only.handled == [created]

    def test_register_is_idempotent(self):
        dispatcher = DomainEventDispatcher()
        handler = RecordingHandler()
        dispatcher.register_handler(handler)
        dispatcher.register_handler(handler)

        dispatcher.dispatch(HeadcountChanged(aggregate_id=uuid4(), old_headcount=1, new_headcount=2))

        assert len(handler.handled) == 1

    def test_unregister(self):
        dispatcher = DomainEventDispatcher()
        handler = RecordingHandler()
        dispatcher.register_handler(handler)
        dispatcher.unregister_handler(handler)

        dispatcher.dispatch(HeadcountChanged(aggregate_id=uuid4(), old_headcount=1, new_headcount=2))

        assert handler.handled == []

    def test_failing_handler_does_not_stop_others(self):
        dispatcher = DomainEventDispatcher()
        handler = RecordingHandler()
        dispatcher.register_handler(FailingHandler())
        dispatcher.register_handler(handler)

        dispatcher.dispatch(HeadcountChanged(aggregate_id=uuid4(), old_headcount=1, new_headcount=2))

        assert len(handler.handled) == 1


class TestSessionEvents:
    def test_pull_clears_pending_events(self, session_factory):
        session = session_factory(1.0)
        session.assign("O1", session.operators[0].operator_id, 10)

        events = session.pull_domain_events()

        assert [e.event_type for e in events] == ["AssignmentCreated"]
        assert all(e.aggregate_id == session.id for e in events)
        assert session.get_domain_events() == []


class TestMetricsEventHandler:
    def test_counts_events(self, monkeypatch):
        recorded: list[str] = []
        monkeypatch.setattr(
            "line_balancing.infrastructure.events.metrics_event_handler.record_event",
            recorded.append,
        )
        dispatcher = DomainEventDispatcher()
        register_event_handlers(dispatcher)
        register_event_handlers(dispatcher)

        dispatcher.dispatch(HeadcountChanged(aggregate_id=uuid4(), old_headcount=1, new_headcount=2))

        assert recorded == ["HeadcountChanged"]

    def test_handles_every_event(self):
        event = SessionSaved(aggregate_id=uuid4(), saved_session_id=uuid4(), revision=1)

        assert MetricsEventHandler().can_handle(event)
