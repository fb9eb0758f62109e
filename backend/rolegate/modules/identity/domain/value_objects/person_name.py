"""
Person Name Value Object

Immutable representation of a person's name.
"""

from dataclasses import dataclass
from typing import ClassVar

from rolegate.core.domain.result import Result

from .base import ValueObject


@dataclass(frozen=True)
class PersonName(ValueObject):
    """Value object representing a person's name."""

    MAX_PART_LENGTH: ClassVar[int] = 100

    first_name: str
    last_name: str
    middle_name: str | None = None

    def __post_init__(self):
        """Validate name components."""
        if not self.first_name or not self.first_name.strip():
            raise ValueError("First name is required")

        if not self.last_name or not self.last_name.strip():
            raise ValueError("Last name is required")

        object.__setattr__(self, "first_name", self._normalize(self.first_name))
        object.__setattr__(self, "last_name", self._normalize(self.last_name))

        if self.middle_name is not None:
            middle = self._normalize(self.middle_name)
            object.__setattr__(self, "middle_name", middle or None)

        for part in (self.first_name, self.last_name, self.middle_name or ""):
            if len(part) > self.MAX_PART_LENGTH:
                raise ValueError(
                    f"Name parts cannot exceed {self.MAX_PART_LENGTH} characters"
                )

    @staticmethod
    def _normalize(name: str) -> str:
        return " ".join(name.split())

    @classmethod
    def create(
        cls, first_name: str | None, last_name: str | None, middle_name: str | None = None
    ) -> Result["PersonName"]:
        return cls._attempt(
            "PersonName.Invalid", lambda: cls(first_name, last_name, middle_name)
        )

    @property
    def full_name(self) -> str:
        if self.middle_name:
            return f"{self.first_name} {self.middle_name} {self.last_name}"
        return f"{self.first_name} {self.last_name}"

    @property
    def initials(self) -> str:
        parts = [self.first_name, self.middle_name, self.last_name]
        return "".join(part[0].upper() for part in parts if part)

    def __str__(self) -> str:
        return self.full_name
