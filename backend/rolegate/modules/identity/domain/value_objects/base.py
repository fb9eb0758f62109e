"""
Base Value Object

Provides common functionality for all value objects in the identity domain.
"""

from abc import ABC
from collections.abc import Callable
from typing import Any, TypeVar

from rolegate.core.domain.result import DomainError, Result

V = TypeVar("V", bound="ValueObject")


class ValueObject(ABC):
    """
    Base class for all value objects.

    Concrete value objects are frozen dataclasses that validate in
    ``__post_init__`` and raise ``ValueError`` on bad input, so no invalid
    instance can exist. :meth:`_attempt` turns that exception into a failed
    :class:`Result` for callers that prefer outcomes over exceptions.
    """

    @classmethod
    def _attempt(
        cls: type[V], code: str, build: Callable[[], V]
    ) -> Result[V]:
        try:
            return Result.success(build())
        except (TypeError, ValueError) as e:
            return Result.failure(DomainError.validation(code, str(e)))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {key: str(value) if value is not None else None for key, value in self.__dict__.items()}
