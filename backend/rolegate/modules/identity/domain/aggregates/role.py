"""
Role Aggregate

A named set of permission grants. Users obtain permissions only through the
roles they hold; there is no role inheritance.
"""

from collections.abc import Iterable
from datetime import datetime

from rolegate.core.domain.base import AggregateRoot
from rolegate.core.domain.result import Result

from ..entities.role_permission import RolePermission
from ..errors import RoleErrors
from ..events.role_events import (
    RoleCreated,
    RoleDescriptionChanged,
    RolePermissionAdded,
    RolePermissionRemoved,
)
from ..value_objects.identifiers import PermissionId, RoleId
from ..value_objects.permission_name import PermissionName
from .permission import Permission

_CONSTRUCTION_TOKEN = object()

MAX_ROLE_NAME_LENGTH = 256


class Role(AggregateRoot[RoleId]):
    """
    Role aggregate root.

    Invariants:
    - ``normalized_name`` is always the upper-case form of ``name``
    - a permission id appears at most once among the grants
    - system-defined roles reject every mutation
    """

    def __init__(
        self,
        role_id: RoleId,
        name: str,
        description: str,
        is_system_defined: bool,
        grants: Iterable[RolePermission] = (),
        created_at: datetime | None = None,
        *,
        _token: object = None,
    ):
        if _token is not _CONSTRUCTION_TOKEN:
            raise TypeError("Use Role.create or Role.restore")
        super().__init__(role_id, created_at)
        self.name = name
        self.normalized_name = name.upper()
        self.description = description
        self.is_system_defined = is_system_defined
        self._grants: list[RolePermission] = list(grants)

    # =========================================================================
    # Factory Methods
    # =========================================================================

    @classmethod
    def create(
        cls,
        name: str,
        description: str,
        is_system_defined: bool = False,
        permissions: Iterable[Permission] = (),
    ) -> Result["Role"]:
        """
        Create a new role and raise ``RoleCreated``.

        ``permissions`` are granted as part of creation, which is the only way
        a system-defined role receives grants.
        """
        if not name or not name.strip():
            return Result.failure(RoleErrors.name_required())
        if len(name.strip()) > MAX_ROLE_NAME_LENGTH:
            return Result.failure(RoleErrors.name_too_long(MAX_ROLE_NAME_LENGTH))
        if not description or not description.strip():
            return Result.failure(RoleErrors.description_required())

        role = cls(
            RoleId.new(),
            name.strip(),
            description.strip(),
            is_system_defined,
            _token=_CONSTRUCTION_TOKEN,
        )
        role.add_domain_event(
            RoleCreated(
                role_id=role.id.value,
                name=role.name,
                is_system_defined=is_system_defined,
            )
        )
        for permission in _unique_by_id(permissions):
            role._grant(permission)
        return Result.success(role)

    @classmethod
    def restore(
        cls,
        role_id: RoleId,
        name: str,
        description: str,
        is_system_defined: bool,
        permissions: Iterable[Permission] = (),
        created_at: datetime | None = None,
    ) -> "Role":
        """Rehydrate a stored role and its grants without raising events."""
        grants = [
            RolePermission.restore(role_id, permission.id, permission.name)
            for permission in _unique_by_id(permissions)
        ]
        return cls(
            role_id,
            name,
            description or "",
            is_system_defined,
            grants,
            created_at,
            _token=_CONSTRUCTION_TOKEN,
        )

    # =========================================================================
    # Mutations
    # =========================================================================

    def update_description(self, description: str) -> Result[None]:
        if self.is_system_defined:
            return Result.failure(RoleErrors.system_defined())
        if not description or not description.strip():
            return Result.failure(RoleErrors.description_required())

        old_description = self.description
        self.description = description.strip()
        self.add_domain_event(
            RoleDescriptionChanged(
                role_id=self.id.value,
                old_description=old_description,
                new_description=self.description,
            )
        )
        return Result.success()

    def add_permission(self, permission: Permission | None) -> Result[None]:
        if permission is None:
            return Result.failure(RoleErrors.permission_required())
        if self.is_system_defined:
            return Result.failure(RoleErrors.system_defined())
        if self._find_grant(permission.id) is not None:
            return Result.failure(
                RoleErrors.permission_already_granted(permission.name.value)
            )

        self._grant(permission)
        return Result.success()

    def _grant(self, permission: Permission) -> None:
        self._grants.append(RolePermission.grant(self.id, permission.id, permission.name))
        self.add_domain_event(
            RolePermissionAdded(
                role_id=self.id.value,
                permission_id=permission.id.value,
                permission_name=permission.name.value,
            )
        )

    def remove_permission(self, permission: Permission | None) -> Result[None]:
        if permission is None:
            return Result.failure(RoleErrors.permission_required())
        if self.is_system_defined:
            return Result.failure(RoleErrors.system_defined())

        grant = self._find_grant(permission.id)
        if grant is None:
            return Result.failure(RoleErrors.permission_not_granted(permission.name.value))

        self._grants.remove(grant)
        self.add_domain_event(
            RolePermissionRemoved(
                role_id=self.id.value,
                permission_id=permission.id.value,
                permission_name=permission.name.value,
            )
        )
        return Result.success()

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def permissions(self) -> tuple[RolePermission, ...]:
        return tuple(self._grants)

    @property
    def permission_names(self) -> frozenset[str]:
        return frozenset(grant.permission_name.value for grant in self._grants)

    def has_permission(self, permission: PermissionId | PermissionName | str) -> bool:
        """Check for a grant by permission id or by permission name."""
        if isinstance(permission, PermissionId):
            return self._find_grant(permission) is not None

        name = permission.value if isinstance(permission, PermissionName) else permission
        return any(grant.permission_name.value == name for grant in self._grants)

    def matches_name(self, name: str) -> bool:
        """Case-insensitive name comparison through the normalized name."""
        return self.normalized_name == name.strip().upper()

    def _find_grant(self, permission_id: PermissionId) -> RolePermission | None:
        for grant in self._grants:
            if grant.permission_id == permission_id:
                return grant
        return None

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "name": self.name,
            "normalized_name": self.normalized_name,
            "description": self.description,
            "is_system_defined": self.is_system_defined,
            "permissions": sorted(self.permission_names),
            "created_at": self.created_at.isoformat(),
        }


def _unique_by_id(permissions: Iterable[Permission]) -> list[Permission]:
    seen: set[PermissionId] = set()
    unique: list[Permission] = []
    for permission in permissions:
        if permission.id not in seen:
            seen.add(permission.id)
            unique.append(permission)
    return unique
