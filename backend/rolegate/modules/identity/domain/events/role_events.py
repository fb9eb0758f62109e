"""Role-related domain events."""

from uuid import UUID

from .base import IdentityDomainEvent


class RoleCreated(IdentityDomainEvent):
    """Event raised when a new role is created."""
    role_id: UUID
    name: str
    is_system_defined: bool = False

    def get_aggregate_id(self) -> str:
        return str(self.role_id)


class RoleDescriptionChanged(IdentityDomainEvent):
    """Event raised when role description is updated."""
    role_id: UUID
    old_description: str
    new_description: str

    def get_aggregate_id(self) -> str:
        return str(self.role_id)


class RolePermissionAdded(IdentityDomainEvent):
    """Event raised when permission is granted to role."""
    role_id: UUID
    permission_id: UUID
    permission_name: str

    def get_aggregate_id(self) -> str:
        return str(self.role_id)


class RolePermissionRemoved(IdentityDomainEvent):
    """Event raised when permission is revoked from role."""
    role_id: UUID
    permission_id: UUID
    permission_name: str

    def get_aggregate_id(self) -> str:
        return str(self.role_id)
