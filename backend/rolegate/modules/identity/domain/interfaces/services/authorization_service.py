"""
Authorization Service Interface

Port for answering "may this user do X?" questions.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rolegate.core.domain.result import Result
    from rolegate.modules.identity.domain.value_objects import (
        PermissionId,
        PermissionName,
        RoleId,
        UserAccountId,
    )


class IAuthorizationService(ABC):
    """Port for authorization decisions."""

    @abstractmethod
    async def has_permission(
        self,
        user_id: "UserAccountId",
        permission: "PermissionId | PermissionName | str",
    ) -> "Result[bool]":
        """
        Check whether any of the user's roles grants a permission.

        Args:
            user_id: Account to check
            permission: Permission id, or permission name

        Returns:
            Result holding the decision; ``NotFound`` if the user is unknown
        """

    @abstractmethod
    async def get_permissions_for_user(
        self, user_id: "UserAccountId"
    ) -> "Result[frozenset[str]]":
        """
        Collect the names of all permissions granted through the user's roles.

        Returns:
            Result holding the set of permission names
        """

    @abstractmethod
    async def has_role(
        self, user_id: "UserAccountId", role: "RoleId | str"
    ) -> "Result[bool]":
        """
        Check role membership by role id or case-insensitive role name.
        """

    @abstractmethod
    async def get_roles_for_user(
        self, user_id: "UserAccountId"
    ) -> "Result[frozenset[str]]":
        """
        Collect the names of the roles the user holds.
        """
