"""
Typed Identifiers

Strongly typed 128-bit identifiers for identity aggregates and join entities.
Each identifier wraps a UUID and rejects the nil UUID; identifiers of
different types never compare equal even when they wrap the same value.
"""

from dataclasses import dataclass
from typing import ClassVar, TypeVar
from uuid import UUID, uuid4

from rolegate.core.domain.result import Result

from .base import ValueObject

NIL_UUID = UUID(int=0)

I = TypeVar("I", bound="EntityId")


@dataclass(frozen=True)
class EntityId(ValueObject):
    """Base typed identifier."""

    ERROR_CODE: ClassVar[str] = "EntityId.Invalid"

    value: UUID

    def __post_init__(self):
        if not isinstance(self.value, UUID):
            raise TypeError(f"{self.__class__.__name__} requires a UUID value")
        if self.value == NIL_UUID:
            raise ValueError(f"{self.__class__.__name__} cannot be the nil UUID")

    @classmethod
    def new(cls: type[I]) -> I:
        """Generate a fresh random identifier."""
        return cls(uuid4())

    @classmethod
    def create(cls: type[I], value: UUID) -> Result[I]:
        return cls._attempt(cls.ERROR_CODE, lambda: cls(value))

    @classmethod
    def parse(cls: type[I], text: str | None) -> Result[I]:
        """Parse the canonical textual form of an identifier."""

        def build() -> I:
            if text is None or not text.strip():
                raise ValueError(f"{cls.__name__} text is empty")
            return cls(UUID(text.strip()))

        return cls._attempt(cls.ERROR_CODE, build)

    @classmethod
    def try_parse(cls: type[I], text: str | None) -> I | None:
        result = cls.parse(text)
        return result.value if result.is_success else None

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class UserAccountId(EntityId):
    ERROR_CODE: ClassVar[str] = "UserAccountId.Invalid"


@dataclass(frozen=True)
class RoleId(EntityId):
    ERROR_CODE: ClassVar[str] = "RoleId.Invalid"


@dataclass(frozen=True)
class PermissionId(EntityId):
    ERROR_CODE: ClassVar[str] = "PermissionId.Invalid"


@dataclass(frozen=True)
class UserRoleId(EntityId):
    ERROR_CODE: ClassVar[str] = "UserRoleId.Invalid"


@dataclass(frozen=True)
class RolePermissionId(EntityId):
    ERROR_CODE: ClassVar[str] = "RolePermissionId.Invalid"
