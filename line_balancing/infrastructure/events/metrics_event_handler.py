"""
Domain event handlers backed by infrastructure.

Bridges the balancing domain's event dispatcher to Prometheus.
"""

from line_balancing.core.observability import record_event
from line_balancing.domain.balancing.events.domain_events import (
    DomainEvent,
    DomainEventDispatcher,
    DomainEventHandler,
    get_event_dispatcher,
)


class MetricsEventHandler(DomainEventHandler):
    """Counts every published event by type."""

    def can_handle(self, event: DomainEvent) -> bool:
        return True

    def handle(self, event: DomainEvent) -> None:
        record_event(event.event_type)


_metrics_handler = MetricsEventHandler()


def register_event_handlers(dispatcher: DomainEventDispatcher | None = None) -> None:
    """Register the infrastructure handlers; safe to call more than once."""
    (dispatcher or get_event_dispatcher()).register_handler(_metrics_handler)
