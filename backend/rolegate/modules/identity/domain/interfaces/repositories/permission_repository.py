"""Permission Repository Interface

Domain contract for the permission catalog that must be implemented by the
infrastructure layer.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rolegate.modules.identity.domain.aggregates.permission import Permission
    from rolegate.modules.identity.domain.value_objects.identifiers import PermissionId
    from rolegate.modules.identity.domain.value_objects.permission_name import (
        PermissionName,
    )


class IPermissionRepository(ABC):
    """Repository interface for the permission catalog."""

    @abstractmethod
    async def find_by_id(self, permission_id: "PermissionId") -> "Permission | None":
        """Find permission by ID.

        Args:
            permission_id: Permission identifier

        Returns:
            Permission aggregate if found, None otherwise
        """

    @abstractmethod
    async def find_by_name(self, name: "PermissionName") -> "Permission | None":
        """Find permission by its ``Resource.Action`` name."""

    @abstractmethod
    async def find_by_names(self, names: Iterable[str]) -> list["Permission"]:
        """Find every permission whose name is in ``names``; unknown names are ignored."""

    @abstractmethod
    async def list_all(self) -> list["Permission"]:
        """List the whole catalog ordered by name."""

    @abstractmethod
    async def add(self, permission: "Permission") -> None:
        """Insert a new permission.

        Raises:
            RepositoryError: If a permission with the same name already exists
        """

    @abstractmethod
    async def update(self, permission: "Permission") -> None:
        """Persist description and type changes of an existing permission."""

    @abstractmethod
    async def delete(self, permission_id: "PermissionId") -> bool:
        """Delete a permission.

        Returns:
            True if a row was removed
        """
