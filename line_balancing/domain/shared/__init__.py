"""Building blocks shared by every domain package."""

from .base import AggregateRoot, Entity, ValueObject
from .exceptions import DomainError, ErrorType, ValidationError

__all__ = [
    "AggregateRoot",
    "DomainError",
    "Entity",
    "ErrorType",
    "ValidationError",
    "ValueObject",
]
