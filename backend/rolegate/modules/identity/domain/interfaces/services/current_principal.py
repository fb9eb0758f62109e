"""
Current Principal Interface

Port exposing the authenticated caller of the current request.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rolegate.core.domain.result import Result
    from rolegate.modules.identity.domain.value_objects import Email, UserAccountId


class ICurrentPrincipal(ABC):
    """Request-scoped view of the calling user."""

    @property
    @abstractmethod
    def is_authenticated(self) -> bool:
        """Whether the request carries an authenticated identity."""

    @property
    @abstractmethod
    def username(self) -> str | None:
        """Name claim of the caller."""

    @property
    @abstractmethod
    def email(self) -> "Email | None":
        """Email claim of the caller, if present and valid."""

    @abstractmethod
    async def get_user_id(self) -> "UserAccountId | None":
        """Resolve the caller's account id."""

    @abstractmethod
    async def is_in_role(self, role: str) -> bool:
        """Check role membership, claims first."""

    @abstractmethod
    async def has_permission(self, permission: str) -> bool:
        """Check a permission, claims first."""

    @abstractmethod
    async def get_roles(self) -> "Result[list[str]]":
        """Names of the caller's roles."""

    @abstractmethod
    async def get_permissions(self) -> "Result[frozenset[str]]":
        """Names of every permission the caller holds."""
