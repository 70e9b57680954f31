"""
Observability Infrastructure

Structured logging and Prometheus counters for the balancing engine.
"""

import logging
import sys
from typing import Any

import structlog
from prometheus_client import Counter

from .config import get_settings

BALANCING_COMMANDS = Counter(
    "line_balancing_commands_total",
    "Balancing session commands",
    ["command", "outcome"],
)

SESSION_SAVES = Counter(
    "line_balancing_session_saves_total",
    "Balancing session save attempts",
    ["status"],
)

BALANCING_EVENTS = Counter(
    "line_balancing_events_total",
    "Balancing domain events published",
    ["event_type"],
)


def setup_structured_logging() -> None:
    """Configure structured logging with JSON or console output."""
    settings = get_settings()
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
    ]

    if settings.LOG_FORMAT == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(colors=settings.ENVIRONMENT == "local")
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    if settings.DATABASE_ECHO:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
    else:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def record_command(command: str, outcome: str) -> None:
    """Count a balancing command by outcome ("applied", "rejected", "declined")."""
    if get_settings().ENABLE_METRICS:
        BALANCING_COMMANDS.labels(command=command, outcome=outcome).inc()


def record_save(status: str) -> None:
    if get_settings().ENABLE_METRICS:
        SESSION_SAVES.labels(status=status).inc()


def record_event(event_type: str) -> None:
    if get_settings().ENABLE_METRICS:
        BALANCING_EVENTS.labels(event_type=event_type).inc()
