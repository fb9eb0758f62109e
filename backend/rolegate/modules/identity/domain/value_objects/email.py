"""
Email Value Object

Represents a validated email address.
"""

import re
from dataclasses import dataclass
from typing import ClassVar

from rolegate.core.domain.result import Result

from .base import ValueObject


@dataclass(frozen=True)
class Email(ValueObject):
    """Email value object with validation."""

    EMAIL_REGEX: ClassVar[re.Pattern] = re.compile(
        r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
    )
    MAX_LENGTH: ClassVar[int] = 254

    value: str

    def __post_init__(self):
        """Validate email address."""
        if not isinstance(self.value, str) or not self.value.strip():
            raise ValueError("Email address cannot be empty")

        object.__setattr__(self, "value", self.value.strip().lower())

        if len(self.value) > self.MAX_LENGTH:
            raise ValueError("Email address is too long")

        if not self.EMAIL_REGEX.match(self.value):
            raise ValueError(f"Invalid email format: {self.value}")

        if ".." in self.value:
            raise ValueError("Email cannot contain consecutive dots")

    @classmethod
    def create(cls, value: str | None) -> Result["Email"]:
        return cls._attempt("Email.Invalid", lambda: cls(value))

    @property
    def domain(self) -> str:
        """Get email domain."""
        return self.value.split("@")[1]

    @property
    def normalized(self) -> str:
        """Upper-case form used for case-insensitive lookups."""
        return self.value.upper()

    def mask(self) -> str:
        """Return masked version for display."""
        local, domain = self.value.split("@")
        if len(local) <= 2:
            return f"{local[0]}*@{domain}"
        return f"{local[:2]}{'*' * (len(local) - 2)}@{domain}"

    def __str__(self) -> str:
        return self.value
