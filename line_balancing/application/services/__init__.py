"""
Application services for coordinating balancing use cases.

This module contains the service that orchestrates balancing sessions and
the registry holding the sessions being edited.
"""

from .balancing_service import BalancingApplicationService
from .session_registry import SessionRegistry, Workspace

__all__ = [
    "BalancingApplicationService",
    "SessionRegistry",
    "Workspace",
]
