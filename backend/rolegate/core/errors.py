"""Exceptions raised outside the outcome-returning service boundary.

Domain and service operations report business failures through
:class:`rolegate.core.domain.result.Result`. The exceptions here are for
faults callers are not expected to branch on: invalid configuration and
broken infrastructure.
"""

from typing import Any


class RolegateError(Exception):
    """
    Base exception for all rolegate errors.

    Carries a stable code, structured details and a message that is safe to
    show to end users.
    """

    default_code = "ROLEGATE_ERROR"
    retryable = False

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        user_message: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = dict(details or {})
        self.user_message = user_message or message

    def to_dict(self) -> dict[str, Any]:
        """Serialize for structured logs; credential-like details are left out."""
        data: dict[str, Any] = {"error": self.code, "message": self.user_message}
        details = {k: v for k, v in self.details.items() if "password" not in k.lower()}
        if details:
            data["details"] = details
        if self.retryable:
            data["retryable"] = True
        return data

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class InfrastructureError(RolegateError):
    """A backing service (database, identity store) failed."""

    default_code = "INFRASTRUCTURE_ERROR"
    retryable = True


class ConfigurationError(InfrastructureError):
    """Settings are missing or invalid."""

    default_code = "CONFIGURATION_ERROR"
    retryable = False

    def __init__(self, message: str, config_key: str | None = None, **kwargs: Any) -> None:
        kwargs.setdefault("user_message", "Service configuration issue")
        super().__init__(message, **kwargs)
        if config_key:
            self.details["config_key"] = config_key


class RepositoryError(InfrastructureError):
    """A persistence operation could not be completed."""

    default_code = "REPOSITORY_ERROR"

    def __init__(self, message: str, operation: str | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        if operation:
            self.details["operation"] = operation


__all__ = [
    "ConfigurationError",
    "InfrastructureError",
    "RepositoryError",
    "RolegateError",
]
