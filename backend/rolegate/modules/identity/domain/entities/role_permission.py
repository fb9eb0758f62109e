"""RolePermission entity: grant of a permission to a role."""

from datetime import datetime

from rolegate.core.domain.base import Entity, utc_now

from ..value_objects.identifiers import PermissionId, RoleId, RolePermissionId
from ..value_objects.permission_name import PermissionName


class RolePermission(Entity[RolePermissionId]):
    """
    Association between a role and a permission.

    Carries the permission name as a label so grants can be checked by name
    without loading the permission catalog. Permission names never change
    after creation, so the label cannot go stale.
    """

    def __init__(
        self,
        grant_id: RolePermissionId,
        role_id: RoleId,
        permission_id: PermissionId,
        permission_name: PermissionName,
        granted_at: datetime | None,
    ):
        super().__init__(grant_id)
        self.role_id = role_id
        self.permission_id = permission_id
        self.permission_name = permission_name
        self.granted_at = granted_at

    @classmethod
    def grant(
        cls, role_id: RoleId, permission_id: PermissionId, permission_name: PermissionName
    ) -> "RolePermission":
        return cls(RolePermissionId.new(), role_id, permission_id, permission_name, utc_now())

    @classmethod
    def restore(
        cls,
        role_id: RoleId,
        permission_id: PermissionId,
        permission_name: PermissionName,
        granted_at: datetime | None = None,
    ) -> "RolePermission":
        return cls(RolePermissionId.new(), role_id, permission_id, permission_name, granted_at)

    def __repr__(self) -> str:
        return f"RolePermission(role={self.role_id}, permission={self.permission_name})"
