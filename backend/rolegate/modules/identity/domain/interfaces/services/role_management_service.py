"""
Role Management Service Interface

Port for role lifecycle, permission grants and role assignment.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rolegate.core.domain.result import Result
    from rolegate.modules.identity.domain.aggregates import Permission, Role, UserAccount
    from rolegate.modules.identity.domain.value_objects import (
        PermissionId,
        RoleId,
        UserAccountId,
    )


class IRoleManagementService(ABC):
    """Port for role management operations."""

    @abstractmethod
    async def create_role(
        self, name: str, description: str, is_system_defined: bool = False
    ) -> "Result[Role]":
        """
        Create a new role.

        Args:
            name: Unique role name (compared case-insensitively)
            description: Role description
            is_system_defined: Whether the role is immutable after creation

        Returns:
            Result holding the created role; ``Conflict`` if the name is taken
        """

    @abstractmethod
    async def get_role_by_id(self, role_id: "RoleId") -> "Result[Role]":
        """Load a role with its grants; ``NotFound`` if missing."""

    @abstractmethod
    async def get_role_by_name(self, name: str) -> "Result[Role]":
        """Load a role by case-insensitive name; ``NotFound`` if missing."""

    @abstractmethod
    async def get_all_roles(self) -> "Result[list[Role]]":
        """List every role ordered by name."""

    @abstractmethod
    async def update_role_description(
        self, role_id: "RoleId", description: str
    ) -> "Result[Role]":
        """
        Change a role's description.

        Returns:
            Result holding the updated role; ``Failure`` for system-defined roles
        """

    @abstractmethod
    async def delete_role(self, role_id: "RoleId") -> "Result[None]":
        """
        Delete a role.

        Returns:
            ``Failure`` for system-defined roles, ``Conflict`` while any user
            holds the role
        """

    @abstractmethod
    async def add_permission_to_role(
        self, role_id: "RoleId", permission_id: "PermissionId"
    ) -> "Result[None]":
        """Grant a permission to a role; ``Conflict`` if already granted."""

    @abstractmethod
    async def remove_permission_from_role(
        self, role_id: "RoleId", permission_id: "PermissionId"
    ) -> "Result[None]":
        """Revoke a permission from a role; ``NotFound`` if not granted."""

    @abstractmethod
    async def get_permissions_for_role(
        self, role_id: "RoleId"
    ) -> "Result[list[Permission]]":
        """List the permissions granted to a role."""

    @abstractmethod
    async def assign_role_to_user(
        self, user_id: "UserAccountId", role_id: "RoleId"
    ) -> "Result[None]":
        """
        Assign a role to a user.

        Returns:
            ``Conflict`` if the user already holds the role, ``NotFound`` if
            either side is missing
        """

    @abstractmethod
    async def remove_role_from_user(
        self, user_id: "UserAccountId", role_id: "RoleId"
    ) -> "Result[None]":
        """Remove a role from a user; ``NotFound`` if the user does not hold it."""

    @abstractmethod
    async def get_user_roles(self, user_id: "UserAccountId") -> "Result[list[Role]]":
        """Load the roles held by a user, with their grants."""

    @abstractmethod
    async def get_users_for_role(
        self, role_id: "RoleId"
    ) -> "Result[list[UserAccount]]":
        """List the accounts holding a role. Unmappable records are skipped."""
