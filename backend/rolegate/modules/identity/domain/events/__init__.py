"""Identity domain events."""

from .base import IdentityDomainEvent
from .permission_events import (
    PermissionCreated,
    PermissionDescriptionChanged,
    PermissionTypeChanged,
)
from .role_events import (
    RoleCreated,
    RoleDescriptionChanged,
    RolePermissionAdded,
    RolePermissionRemoved,
)
from .user_events import (
    UserAccountCreated,
    UserAccountProfileChanged,
    UserAccountRoleAdded,
    UserAccountRoleRemoved,
    UserAccountStatusChanged,
)

__all__ = [
    "IdentityDomainEvent",
    "PermissionCreated",
    "PermissionDescriptionChanged",
    "PermissionTypeChanged",
    "RoleCreated",
    "RoleDescriptionChanged",
    "RolePermissionAdded",
    "RolePermissionRemoved",
    "UserAccountCreated",
    "UserAccountProfileChanged",
    "UserAccountRoleAdded",
    "UserAccountRoleRemoved",
    "UserAccountStatusChanged",
]
