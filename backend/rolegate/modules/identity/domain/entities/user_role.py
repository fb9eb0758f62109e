"""UserRole entity: membership of a user account in a role."""

from datetime import datetime

from rolegate.core.domain.base import Entity, utc_now

from ..value_objects.identifiers import RoleId, UserAccountId, UserRoleId


class UserRole(Entity[UserRoleId]):
    """
    Association between a user account and a role.

    Only :class:`UserAccount` creates and removes memberships. ``assigned_at``
    is ``None`` when the membership was rehydrated from a store that does not
    record assignment times.
    """

    def __init__(
        self,
        membership_id: UserRoleId,
        user_account_id: UserAccountId,
        role_id: RoleId,
        assigned_at: datetime | None,
    ):
        super().__init__(membership_id)
        self.user_account_id = user_account_id
        self.role_id = role_id
        self.assigned_at = assigned_at

    @classmethod
    def assign(cls, user_account_id: UserAccountId, role_id: RoleId) -> "UserRole":
        return cls(UserRoleId.new(), user_account_id, role_id, utc_now())

    @classmethod
    def restore(
        cls,
        user_account_id: UserAccountId,
        role_id: RoleId,
        assigned_at: datetime | None = None,
        membership_id: UserRoleId | None = None,
    ) -> "UserRole":
        return cls(membership_id or UserRoleId.new(), user_account_id, role_id, assigned_at)

    def __repr__(self) -> str:
        return f"UserRole(user={self.user_account_id}, role={self.role_id})"
