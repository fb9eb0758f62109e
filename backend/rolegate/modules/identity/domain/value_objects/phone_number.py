"""
Phone Number Value Object

E.164-style phone number: optional leading plus, up to fifteen digits.
"""

import re
from dataclasses import dataclass
from typing import ClassVar

from rolegate.core.domain.result import Result

from .base import ValueObject


@dataclass(frozen=True)
class PhoneNumber(ValueObject):
    """Validated phone number."""

    PATTERN: ClassVar[re.Pattern] = re.compile(r"^\+?[1-9]\d{1,14}$")

    value: str

    def __post_init__(self):
        if not isinstance(self.value, str) or not self.value.strip():
            raise ValueError("Phone number cannot be empty")

        # separators are accepted on input but not stored
        compact = re.sub(r"[\s\-().]", "", self.value)
        object.__setattr__(self, "value", compact)

        if not self.PATTERN.match(self.value):
            raise ValueError(f"Invalid phone number format: {self.value}")

    @classmethod
    def create(cls, value: str | None) -> Result["PhoneNumber"]:
        return cls._attempt("PhoneNumber.Invalid", lambda: cls(value))

    def __str__(self) -> str:
        return self.value
