"""
User Service Interface

Port for user account persistence through the identity store.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rolegate.core.domain.result import Result
    from rolegate.modules.identity.domain.aggregates import UserAccount
    from rolegate.modules.identity.domain.value_objects import (
        Email,
        UserAccountId,
        UserName,
    )


class IUserService(ABC):
    """Port for user account operations."""

    @abstractmethod
    async def get_user_by_id(self, user_id: "UserAccountId") -> "Result[UserAccount]":
        """
        Load an account with its role memberships.

        Returns:
            ``NotFound`` when no record exists or the record cannot be mapped
        """

    @abstractmethod
    async def get_user_by_username(
        self, username: "UserName | str"
    ) -> "Result[UserAccount]":
        """Load an account by case-insensitive username."""

    @abstractmethod
    async def get_user_by_email(self, email: "Email | str") -> "Result[UserAccount]":
        """Load an account by case-insensitive email."""

    @abstractmethod
    async def create_user(
        self, account: "UserAccount", password: str | None
    ) -> "Result[UserAccount]":
        """
        Persist a new account with its initial password.

        Args:
            account: Account built with ``UserAccount.create``
            password: Initial password; required

        Returns:
            ``Failure`` if the password is missing or rejected by policy,
            ``Conflict`` on duplicate id, email or username
        """

    @abstractmethod
    async def update_user(self, account: "UserAccount") -> "Result[UserAccount]":
        """
        Persist profile and status changes.

        Email and username uniqueness are re-checked only when they changed.
        """

    @abstractmethod
    async def delete_user(self, user_id: "UserAccountId") -> "Result[None]":
        """Delete an account together with its memberships and claims."""

    @abstractmethod
    async def change_password(
        self, user_id: "UserAccountId", current_password: str, new_password: str
    ) -> "Result[None]":
        """Replace the password after verifying the current one."""

    @abstractmethod
    async def get_users(
        self, page: int = 1, page_size: int = 20, search_term: str | None = None
    ) -> "Result[list[UserAccount]]":
        """
        Page through accounts ordered by username.

        Args:
            page: 1-based page number
            page_size: Accounts per page
            search_term: Optional substring matched against username, email
                and names
        """

    @abstractmethod
    async def get_user_count(self, search_term: str | None = None) -> "Result[int]":
        """Count accounts matching the optional search term."""
