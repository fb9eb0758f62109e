"""
Operation outcome types.

Business operations never raise for expected conditions. They return a
:class:`Result` that is either a success (optionally carrying a value) or a
failure carrying one or more :class:`DomainError` entries. Each error is
classified by :class:`ErrorType` so callers can branch without parsing
messages.

Usage Example:
    result = role.add_permission(permission)
    if result.is_failure:
        logger.warning("Grant rejected", code=result.error.code)
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")


class ErrorType(Enum):
    """Classification of a domain error."""

    FAILURE = "failure"
    VALIDATION = "validation"
    PROBLEM = "problem"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class DomainError:
    """A coded, human-readable description of why an operation failed."""

    code: str
    description: str
    type: ErrorType = ErrorType.FAILURE

    @classmethod
    def failure(cls, code: str, description: str) -> "DomainError":
        return cls(code, description, ErrorType.FAILURE)

    @classmethod
    def validation(cls, code: str, description: str) -> "DomainError":
        return cls(code, description, ErrorType.VALIDATION)

    @classmethod
    def problem(cls, code: str, description: str) -> "DomainError":
        return cls(code, description, ErrorType.PROBLEM)

    @classmethod
    def not_found(cls, code: str, description: str) -> "DomainError":
        return cls(code, description, ErrorType.NOT_FOUND)

    @classmethod
    def conflict(cls, code: str, description: str) -> "DomainError":
        return cls(code, description, ErrorType.CONFLICT)

    def to_dict(self) -> dict[str, str]:
        return {
            "code": self.code,
            "description": self.description,
            "type": self.type.value,
        }

    def __str__(self) -> str:
        return f"{self.code}: {self.description}"


class Result(Generic[T]):
    """
    Outcome of an operation.

    A successful result carries an optional value and no errors. A failed
    result carries at least one error and no value.
    """

    __slots__ = ("_errors", "_value")

    def __init__(self, value: T | None = None, errors: Iterable[DomainError] = ()):
        self._value = value
        self._errors: tuple[DomainError, ...] = tuple(errors)

    # =========================================================================
    # Factories
    # =========================================================================

    @classmethod
    def success(cls, value: T | None = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, *errors: DomainError) -> "Result[T]":
        if not errors:
            raise ValueError("A failed result requires at least one error")
        return cls(errors=errors)

    @classmethod
    def from_errors(cls, errors: Iterable[DomainError]) -> "Result[T]":
        return cls.failure(*errors)

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def is_success(self) -> bool:
        return not self._errors

    @property
    def is_failure(self) -> bool:
        return bool(self._errors)

    @property
    def errors(self) -> tuple[DomainError, ...]:
        return self._errors

    @property
    def error(self) -> DomainError | None:
        """First error, or ``None`` for a successful result."""
        return self._errors[0] if self._errors else None

    @property
    def value(self) -> T:
        """
        Value of a successful result.

        Raises:
            RuntimeError: If the result is a failure
        """
        if self._errors:
            raise RuntimeError(
                f"Cannot access the value of a failed result ({self._errors[0]})"
            )
        return self._value  # type: ignore[return-value]

    # =========================================================================
    # Combinators
    # =========================================================================

    def map(self, func: Callable[[T], U]) -> "Result[U]":
        """Transform the value of a successful result; failures pass through."""
        if self._errors:
            return Result(errors=self._errors)
        return Result(value=func(self._value))  # type: ignore[arg-type]

    def bind(self, func: Callable[[T], "Result[U]"]) -> "Result[U]":
        """Chain another result-returning operation onto a success."""
        if self._errors:
            return Result(errors=self._errors)
        return func(self._value)  # type: ignore[arg-type]

    def __repr__(self) -> str:
        if self._errors:
            return f"Result.failure({', '.join(e.code for e in self._errors)})"
        return f"Result.success({self._value!r})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.is_success,
            "errors": [error.to_dict() for error in self._errors],
        }


__all__ = ["DomainError", "ErrorType", "Result"]
