"""User account domain events."""

from uuid import UUID

from .base import IdentityDomainEvent


class UserAccountCreated(IdentityDomainEvent):
    """Event raised when a new user account is created."""
    user_account_id: UUID
    username: str
    email: str

    def get_aggregate_id(self) -> str:
        return str(self.user_account_id)


class UserAccountProfileChanged(IdentityDomainEvent):
    """Event raised when username, email, name or phone number change."""
    user_account_id: UUID
    field_name: str
    old_value: str | None = None
    new_value: str | None = None

    def get_aggregate_id(self) -> str:
        return str(self.user_account_id)


class UserAccountStatusChanged(IdentityDomainEvent):
    """Event raised when the account status transitions."""
    user_account_id: UUID
    old_status: str
    new_status: str

    def get_aggregate_id(self) -> str:
        return str(self.user_account_id)


class UserAccountRoleAdded(IdentityDomainEvent):
    """Event raised when a role is assigned to a user account."""
    user_account_id: UUID
    role_id: UUID
    role_name: str

    def get_aggregate_id(self) -> str:
        return str(self.user_account_id)


class UserAccountRoleRemoved(IdentityDomainEvent):
    """Event raised when a role is removed from a user account."""
    user_account_id: UUID
    role_id: UUID
    role_name: str

    def get_aggregate_id(self) -> str:
        return str(self.user_account_id)
