"""Production-line balancing engine."""

__version__ = "1.0.0"
