"""SQLModel tables. Importing this package registers every table on the metadata."""

from .identity_role_model import (
    IdentityRoleClaimModel,
    IdentityRoleModel,
    IdentityUserRoleModel,
)
from .identity_user_model import IdentityUserClaimModel, IdentityUserModel
from .permission_model import PermissionModel

__all__ = [
    "IdentityRoleClaimModel",
    "IdentityRoleModel",
    "IdentityUserClaimModel",
    "IdentityUserModel",
    "IdentityUserRoleModel",
    "PermissionModel",
]
