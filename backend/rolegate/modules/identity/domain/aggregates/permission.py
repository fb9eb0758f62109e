"""
Permission Aggregate

A named capability of the form ``Resource.Action``. Permissions are granted
to roles, never directly to users. System-defined permissions are immutable
after creation.
"""

from datetime import datetime

from rolegate.core.domain.base import AggregateRoot
from rolegate.core.domain.result import Result

from ..enums import PermissionType
from ..errors import PermissionErrors
from ..events.permission_events import (
    PermissionCreated,
    PermissionDescriptionChanged,
    PermissionTypeChanged,
)
from ..value_objects.identifiers import PermissionId
from ..value_objects.permission_name import PermissionName

_CONSTRUCTION_TOKEN = object()

STANDARD_PERMISSION_TYPES = (
    PermissionType.CREATE,
    PermissionType.READ,
    PermissionType.UPDATE,
    PermissionType.DELETE,
)


class Permission(AggregateRoot[PermissionId]):
    """Permission aggregate root."""

    def __init__(
        self,
        permission_id: PermissionId,
        name: PermissionName,
        description: str,
        permission_type: PermissionType,
        is_system_defined: bool,
        created_at: datetime | None = None,
        *,
        _token: object = None,
    ):
        if _token is not _CONSTRUCTION_TOKEN:
            raise TypeError("Use Permission.create or Permission.restore")
        super().__init__(permission_id, created_at)
        self.name = name
        self.description = description
        self.permission_type = permission_type
        self.is_system_defined = is_system_defined

    # =========================================================================
    # Factory Methods
    # =========================================================================

    @classmethod
    def create(
        cls,
        name: PermissionName,
        description: str,
        permission_type: PermissionType,
        is_system_defined: bool = False,
    ) -> Result["Permission"]:
        """Create a new permission and raise ``PermissionCreated``."""
        if not description or not description.strip():
            return Result.failure(PermissionErrors.description_required())

        permission = cls(
            PermissionId.new(),
            name,
            description.strip(),
            PermissionType(permission_type),
            is_system_defined,
            _token=_CONSTRUCTION_TOKEN,
        )
        permission.add_domain_event(
            PermissionCreated(
                permission_id=permission.id.value,
                name=name.value,
                permission_type=int(permission.permission_type),
                is_system_defined=is_system_defined,
            )
        )
        return Result.success(permission)

    @classmethod
    def restore(
        cls,
        permission_id: PermissionId,
        name: PermissionName,
        description: str,
        permission_type: PermissionType,
        is_system_defined: bool,
        created_at: datetime | None = None,
    ) -> "Permission":
        """Rehydrate a stored permission without raising events."""
        return cls(
            permission_id,
            name,
            description,
            PermissionType(permission_type),
            is_system_defined,
            created_at,
            _token=_CONSTRUCTION_TOKEN,
        )

    @classmethod
    def create_standard_permissions(cls, resource: str) -> Result[list["Permission"]]:
        """
        Build the system-defined CRUD permissions for a resource.

        Args:
            resource: Resource segment, e.g. ``Articles``

        Returns:
            Result holding ``<resource>.Create``, ``.Read``, ``.Update`` and
            ``.Delete`` permissions, in that order
        """
        if not resource or not resource.strip():
            return Result.failure(PermissionErrors.resource_required())

        resource = resource.strip()
        permissions: list[Permission] = []
        for permission_type in STANDARD_PERMISSION_TYPES:
            name_result = PermissionName.from_parts(resource, permission_type.action_name)
            if name_result.is_failure:
                return Result.from_errors(name_result.errors)

            created = cls.create(
                name_result.value,
                f"{permission_type.action_name} {resource}",
                permission_type,
                is_system_defined=True,
            )
            if created.is_failure:
                return Result.from_errors(created.errors)
            permissions.append(created.value)

        return Result.success(permissions)

    # =========================================================================
    # Mutations
    # =========================================================================

    def update_description(self, description: str) -> Result[None]:
        if self.is_system_defined:
            return Result.failure(PermissionErrors.system_defined())
        if not description or not description.strip():
            return Result.failure(PermissionErrors.description_required())

        old_description = self.description
        self.description = description.strip()
        self.add_domain_event(
            PermissionDescriptionChanged(
                permission_id=self.id.value,
                old_description=old_description,
                new_description=self.description,
            )
        )
        return Result.success()

    def update_type(self, permission_type: PermissionType) -> Result[None]:
        if self.is_system_defined:
            return Result.failure(PermissionErrors.system_defined())

        old_type = self.permission_type
        self.permission_type = PermissionType(permission_type)
        self.add_domain_event(
            PermissionTypeChanged(
                permission_id=self.id.value,
                old_type=int(old_type),
                new_type=int(self.permission_type),
            )
        )
        return Result.success()

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def resource(self) -> str:
        return self.name.resource

    @property
    def action(self) -> str:
        return self.name.action

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "name": self.name.value,
            "description": self.description,
            "permission_type": self.permission_type.name,
            "is_system_defined": self.is_system_defined,
            "created_at": self.created_at.isoformat(),
        }
