"""
Repository Interfaces

Ports the balancing domain depends on. Implementations live in the
infrastructure layer.
"""

from .balancing_gateway import BalancingSessionGateway
from .operation_catalog import OperationCatalog, ProcessInfo

__all__ = [
    "BalancingSessionGateway",
    "OperationCatalog",
    "ProcessInfo",
]
