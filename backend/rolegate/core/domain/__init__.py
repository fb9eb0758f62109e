"""Domain primitives shared by all modules."""

from rolegate.core.domain.base import AggregateRoot, Entity, utc_now
from rolegate.core.domain.result import DomainError, ErrorType, Result

__all__ = [
    "AggregateRoot",
    "DomainError",
    "Entity",
    "ErrorType",
    "Result",
    "utc_now",
]
