"""
Permission Management Service Interface

Port for maintaining the permission catalog.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rolegate.core.domain.result import Result
    from rolegate.modules.identity.domain.aggregates import Permission, Role, UserAccount
    from rolegate.modules.identity.domain.enums import PermissionType
    from rolegate.modules.identity.domain.value_objects import (
        PermissionId,
        PermissionName,
    )


class IPermissionManagementService(ABC):
    """Port for permission catalog operations."""

    @abstractmethod
    async def create_permission(
        self,
        name: "PermissionName",
        description: str,
        permission_type: "PermissionType",
        is_system_defined: bool = False,
    ) -> "Result[Permission]":
        """
        Add a permission to the catalog.

        Returns:
            Result holding the permission; ``Conflict`` if the name exists
        """

    @abstractmethod
    async def get_permission_by_id(
        self, permission_id: "PermissionId"
    ) -> "Result[Permission]":
        """Load a permission; ``NotFound`` if missing."""

    @abstractmethod
    async def get_permission_by_name(
        self, name: "PermissionName | str"
    ) -> "Result[Permission]":
        """Load a permission by name; ``NotFound`` if missing."""

    @abstractmethod
    async def get_all_permissions(self) -> "Result[list[Permission]]":
        """List the whole catalog ordered by name."""

    @abstractmethod
    async def update_permission_description(
        self, permission_id: "PermissionId", description: str
    ) -> "Result[Permission]":
        """Change a description; ``Failure`` for system-defined permissions."""

    @abstractmethod
    async def update_permission_type(
        self, permission_id: "PermissionId", permission_type: "PermissionType"
    ) -> "Result[Permission]":
        """Change a type; ``Failure`` for system-defined permissions."""

    @abstractmethod
    async def delete_permission(self, permission_id: "PermissionId") -> "Result[None]":
        """
        Remove a permission from the catalog.

        Returns:
            ``Failure`` for system-defined permissions, ``Conflict`` while any
            role grants it
        """

    @abstractmethod
    async def create_standard_permissions(
        self, resource: str
    ) -> "Result[list[Permission]]":
        """
        Ensure the system-defined Create/Read/Update/Delete permissions exist
        for a resource.

        Returns:
            Result holding the four permissions, whether new or pre-existing
        """

    @abstractmethod
    async def get_roles_for_permission(
        self, permission_id: "PermissionId"
    ) -> "Result[list[Role]]":
        """List the roles that grant a permission."""

    @abstractmethod
    async def get_users_for_permission(
        self, permission_id: "PermissionId"
    ) -> "Result[list[UserAccount]]":
        """List the accounts that hold a permission through any role."""
