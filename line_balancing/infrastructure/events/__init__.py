from .metrics_event_handler import MetricsEventHandler, register_event_handlers

__all__ = ["MetricsEventHandler", "register_event_handlers"]
