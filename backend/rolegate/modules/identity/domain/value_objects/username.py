"""
Username Value Object

Login name of a user account.
"""

import re
from dataclasses import dataclass
from typing import ClassVar

from rolegate.core.domain.result import Result

from .base import ValueObject


@dataclass(frozen=True)
class UserName(ValueObject):
    """Username of 3 to 20 letters, digits or underscores."""

    MIN_LENGTH: ClassVar[int] = 3
    MAX_LENGTH: ClassVar[int] = 20
    PATTERN: ClassVar[re.Pattern] = re.compile(r"^[a-zA-Z0-9_]+$")

    value: str

    def __post_init__(self):
        if not isinstance(self.value, str) or not self.value.strip():
            raise ValueError("Username cannot be empty")

        object.__setattr__(self, "value", self.value.strip())

        if len(self.value) < self.MIN_LENGTH:
            raise ValueError(f"Username must be at least {self.MIN_LENGTH} characters")

        if len(self.value) > self.MAX_LENGTH:
            raise ValueError(f"Username cannot exceed {self.MAX_LENGTH} characters")

        if not self.PATTERN.match(self.value):
            raise ValueError(
                "Username can only contain letters, numbers and underscores"
            )

    @classmethod
    def create(cls, value: str | None) -> Result["UserName"]:
        return cls._attempt("UserName.Invalid", lambda: cls(value))

    @property
    def normalized(self) -> str:
        return self.value.upper()

    def __str__(self) -> str:
        return self.value
