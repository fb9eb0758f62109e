"""Identity value objects."""

from .base import ValueObject
from .email import Email
from .identifiers import (
    EntityId,
    PermissionId,
    RoleId,
    RolePermissionId,
    UserAccountId,
    UserRoleId,
)
from .permission_name import PermissionName
from .person_name import PersonName
from .phone_number import PhoneNumber
from .username import UserName

__all__ = [
    "Email",
    "EntityId",
    "PermissionId",
    "PermissionName",
    "PersonName",
    "PhoneNumber",
    "RoleId",
    "RolePermissionId",
    "UserAccountId",
    "UserName",
    "UserRoleId",
    "ValueObject",
]
