"""
Permission Name Value Object

Permission names have the shape ``Resource.Action``, for example
``Articles.Edit``.
"""

import re
from dataclasses import dataclass
from typing import ClassVar

from rolegate.core.domain.result import Result

from .base import ValueObject


@dataclass(frozen=True)
class PermissionName(ValueObject):
    """Dotted ``Resource.Action`` permission name."""

    PATTERN: ClassVar[re.Pattern] = re.compile(r"^[A-Za-z0-9]+\.[A-Za-z0-9]+$")

    value: str

    def __post_init__(self):
        if not isinstance(self.value, str) or not self.value.strip():
            raise ValueError("Permission name cannot be empty")

        object.__setattr__(self, "value", self.value.strip())

        if not self.PATTERN.match(self.value):
            raise ValueError(
                f"Permission name must have the form 'Resource.Action': {self.value}"
            )

    @classmethod
    def create(cls, value: str | None) -> Result["PermissionName"]:
        return cls._attempt("PermissionName.Invalid", lambda: cls(value))

    @classmethod
    def from_parts(cls, resource: str, action: str) -> Result["PermissionName"]:
        return cls.create(f"{resource}.{action}")

    @property
    def resource(self) -> str:
        return self.value.split(".", 1)[0]

    @property
    def action(self) -> str:
        return self.value.split(".", 1)[1]

    def __str__(self) -> str:
        return self.value
