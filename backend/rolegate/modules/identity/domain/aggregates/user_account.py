"""
UserAccount Aggregate

The internally owned representation of a user. Role memberships are kept as
id-only :class:`UserRole` entries; role details are supplied at read time
through an explicit ``RoleId -> Role`` lookup.
"""

from collections.abc import Iterable, Mapping
from datetime import datetime

from rolegate.core.domain.base import AggregateRoot
from rolegate.core.domain.result import DomainError, Result

from ..entities.user_role import UserRole
from ..enums import UserStatus
from ..errors import UserAccountErrors
from ..events.user_events import (
    UserAccountCreated,
    UserAccountProfileChanged,
    UserAccountRoleAdded,
    UserAccountRoleRemoved,
    UserAccountStatusChanged,
)
from ..value_objects.email import Email
from ..value_objects.identifiers import PermissionId, RoleId, UserAccountId
from ..value_objects.permission_name import PermissionName
from ..value_objects.person_name import PersonName
from ..value_objects.phone_number import PhoneNumber
from ..value_objects.username import UserName
from .role import Role

_CONSTRUCTION_TOKEN = object()

_ACTIVATABLE = frozenset({UserStatus.PENDING_ACTIVATION, UserStatus.INACTIVE})
_DEACTIVATABLE = frozenset({UserStatus.ACTIVE, UserStatus.PENDING_ACTIVATION})
_LOCKABLE = frozenset({UserStatus.ACTIVE})
_UNLOCKABLE = frozenset({UserStatus.LOCKED})


class UserAccount(AggregateRoot[UserAccountId]):
    """
    User account aggregate root.

    Invariants:
    - a role id appears at most once among the memberships
    - status only changes through the transition methods
    """

    def __init__(
        self,
        account_id: UserAccountId,
        username: UserName,
        email: Email,
        person_name: PersonName,
        status: UserStatus,
        phone_number: PhoneNumber | None = None,
        memberships: Iterable[UserRole] = (),
        created_at: datetime | None = None,
        *,
        _token: object = None,
    ):
        if _token is not _CONSTRUCTION_TOKEN:
            raise TypeError("Use UserAccount.create or UserAccount.restore")
        super().__init__(account_id, created_at)
        self.username = username
        self.email = email
        self.person_name = person_name
        self.status = status
        self.phone_number = phone_number
        self._memberships: list[UserRole] = []
        for membership in memberships:
            if not self._has_role_id(membership.role_id):
                self._memberships.append(membership)

    # =========================================================================
    # Factory Methods
    # =========================================================================

    @classmethod
    def create(
        cls,
        username: UserName,
        email: Email,
        person_name: PersonName,
        phone_number: PhoneNumber | None = None,
        status: UserStatus = UserStatus.PENDING_ACTIVATION,
    ) -> Result["UserAccount"]:
        """Create a new account with a fresh id and raise ``UserAccountCreated``."""
        missing = [
            label
            for label, value in (
                ("username", username),
                ("email", email),
                ("person name", person_name),
            )
            if value is None
        ]
        if missing:
            return Result.failure(
                *(
                    DomainError.validation(
                        "UserAccount.FieldRequired", f"The {label} is required."
                    )
                    for label in missing
                )
            )

        account = cls(
            UserAccountId.new(),
            username,
            email,
            person_name,
            status,
            phone_number,
            _token=_CONSTRUCTION_TOKEN,
        )
        account.add_domain_event(
            UserAccountCreated(
                user_account_id=account.id.value,
                username=username.value,
                email=email.value,
            )
        )
        return Result.success(account)

    @classmethod
    def restore(
        cls,
        account_id: UserAccountId,
        username: UserName,
        email: Email,
        person_name: PersonName,
        status: UserStatus,
        phone_number: PhoneNumber | None = None,
        role_ids: Iterable[RoleId] = (),
        created_at: datetime | None = None,
    ) -> "UserAccount":
        """Rehydrate a stored account without raising events."""
        memberships = [UserRole.restore(account_id, role_id) for role_id in role_ids]
        return cls(
            account_id,
            username,
            email,
            person_name,
            status,
            phone_number,
            memberships,
            created_at,
            _token=_CONSTRUCTION_TOKEN,
        )

    # =========================================================================
    # Role Membership
    # =========================================================================

    def add_role(self, role: Role | None) -> Result[None]:
        """
        Assign a role.

        Returns a ``Conflict`` failure, and leaves the account unchanged, when
        the role is already assigned.
        """
        if role is None:
            return Result.failure(UserAccountErrors.role_required())
        if self._has_role_id(role.id):
            return Result.failure(UserAccountErrors.role_already_assigned(role.name))

        self._memberships.append(UserRole.assign(self.id, role.id))
        self.add_domain_event(
            UserAccountRoleAdded(
                user_account_id=self.id.value,
                role_id=role.id.value,
                role_name=role.name,
            )
        )
        return Result.success()

    def remove_role(self, role: Role | None) -> Result[None]:
        if role is None:
            return Result.failure(UserAccountErrors.role_required())

        membership = next((m for m in self._memberships if m.role_id == role.id), None)
        if membership is None:
            return Result.failure(UserAccountErrors.role_not_assigned(role.name))

        self._memberships.remove(membership)
        self.add_domain_event(
            UserAccountRoleRemoved(
                user_account_id=self.id.value,
                role_id=role.id.value,
                role_name=role.name,
            )
        )
        return Result.success()

    @property
    def roles(self) -> tuple[UserRole, ...]:
        return tuple(self._memberships)

    @property
    def role_ids(self) -> frozenset[RoleId]:
        return frozenset(m.role_id for m in self._memberships)

    def has_role(
        self, role: RoleId | str, roles: Mapping[RoleId, Role] | None = None
    ) -> bool:
        """
        Check role membership.

        A ``RoleId`` is matched directly. A role name is matched
        case-insensitively against the roles resolved through ``roles``;
        without a lookup, name checks return ``False``.
        """
        if isinstance(role, RoleId):
            return self._has_role_id(role)
        if not roles:
            return False
        return any(
            resolved.matches_name(role)
            for resolved in self._resolve(roles)
        )

    def has_permission(
        self,
        permission: PermissionId | PermissionName | str,
        roles: Mapping[RoleId, Role],
    ) -> bool:
        """Check whether any held role grants the permission."""
        return any(resolved.has_permission(permission) for resolved in self._resolve(roles))

    def permission_names(self, roles: Mapping[RoleId, Role]) -> frozenset[str]:
        names: set[str] = set()
        for resolved in self._resolve(roles):
            names.update(resolved.permission_names)
        return frozenset(names)

    def _resolve(self, roles: Mapping[RoleId, Role]) -> list[Role]:
        return [roles[m.role_id] for m in self._memberships if m.role_id in roles]

    def _has_role_id(self, role_id: RoleId) -> bool:
        return any(m.role_id == role_id for m in self._memberships)

    # =========================================================================
    # Profile
    # =========================================================================

    def change_username(self, username: UserName) -> Result[None]:
        return self._change_field("username", username)

    def change_email(self, email: Email) -> Result[None]:
        return self._change_field("email", email)

    def change_person_name(self, person_name: PersonName) -> Result[None]:
        return self._change_field("person_name", person_name)

    def change_phone_number(self, phone_number: PhoneNumber | None) -> Result[None]:
        return self._change_field("phone_number", phone_number, optional=True)

    def _change_field(self, field_name: str, value, optional: bool = False) -> Result[None]:
        if value is None and not optional:
            return Result.failure(
                DomainError.validation(
                    "UserAccount.FieldRequired", f"The {field_name} is required."
                )
            )

        old_value = getattr(self, field_name)
        if old_value == value:
            return Result.success()

        setattr(self, field_name, value)
        self.add_domain_event(
            UserAccountProfileChanged(
                user_account_id=self.id.value,
                field_name=field_name,
                old_value=str(old_value) if old_value is not None else None,
                new_value=str(value) if value is not None else None,
            )
        )
        return Result.success()

    # =========================================================================
    # Status
    # =========================================================================

    def activate(self) -> Result[None]:
        return self._transition(UserStatus.ACTIVE, _ACTIVATABLE)

    def deactivate(self) -> Result[None]:
        return self._transition(UserStatus.INACTIVE, _DEACTIVATABLE)

    def lock(self) -> Result[None]:
        return self._transition(UserStatus.LOCKED, _LOCKABLE)

    def unlock(self) -> Result[None]:
        return self._transition(UserStatus.ACTIVE, _UNLOCKABLE)

    def _transition(
        self, target: UserStatus, allowed_from: frozenset[UserStatus]
    ) -> Result[None]:
        if self.status not in allowed_from:
            return Result.failure(
                UserAccountErrors.invalid_status_transition(self.status.value, target.value)
            )

        old_status = self.status
        self.status = target
        self.add_domain_event(
            UserAccountStatusChanged(
                user_account_id=self.id.value,
                old_status=old_status.value,
                new_status=target.value,
            )
        )
        return Result.success()

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "username": self.username.value,
            "email": self.email.value,
            "first_name": self.person_name.first_name,
            "middle_name": self.person_name.middle_name,
            "last_name": self.person_name.last_name,
            "phone_number": self.phone_number.value if self.phone_number else None,
            "status": self.status.value,
            "role_ids": sorted(str(role_id) for role_id in self.role_ids),
            "created_at": self.created_at.isoformat(),
        }
