"""Database repositories and the adapters implementing the domain ports."""

from .balancing_repository import BalancingRepository, SqlBalancingSessionGateway
from .base import BaseRepository, DatabaseError
from .operation_catalog_repository import (
    OperationCatalogRepository,
    SqlOperationCatalog,
)

__all__ = [
    "BalancingRepository",
    "BaseRepository",
    "DatabaseError",
    "OperationCatalogRepository",
    "SqlBalancingSessionGateway",
    "SqlOperationCatalog",
]
