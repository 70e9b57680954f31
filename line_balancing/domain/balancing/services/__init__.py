"""
Domain Services

Stateless logic over a balancing session: the metric calculator and the
controller that turns user intents into state store calls.
"""

from .assignment_controller import AssignmentController, AssignmentPrompt
from .balancing_calculator import (
    BalancingCalculator,
    occupancy_percentage,
    occupied_minutes,
    required_machines,
    summarize_loads,
    takt_time,
    total_standard_time,
    units_per_hour,
)

__all__ = [
    "AssignmentController",
    "AssignmentPrompt",
    "BalancingCalculator",
    "occupancy_percentage",
    "occupied_minutes",
    "required_machines",
    "summarize_loads",
    "takt_time",
    "total_standard_time",
    "units_per_hour",
]
