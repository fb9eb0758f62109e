"""Permission-related domain events."""

from uuid import UUID

from .base import IdentityDomainEvent


class PermissionCreated(IdentityDomainEvent):
    """Event raised when a permission is added to the catalog."""
    permission_id: UUID
    name: str
    permission_type: int
    is_system_defined: bool = False

    def get_aggregate_id(self) -> str:
        return str(self.permission_id)


class PermissionDescriptionChanged(IdentityDomainEvent):
    """Event raised when a permission's description changes."""
    permission_id: UUID
    old_description: str
    new_description: str

    def get_aggregate_id(self) -> str:
        return str(self.permission_id)


class PermissionTypeChanged(IdentityDomainEvent):
    """Event raised when a permission's type changes."""
    permission_id: UUID
    old_type: int
    new_type: int

    def get_aggregate_id(self) -> str:
        return str(self.permission_id)
