"""
Identity Mapper

Translates between identity store records and identity aggregates. The
mapper owns the correlation policy between opaque store ids and typed
aggregate ids:

1. the record's ``domain_id`` holds a UUID: use it
2. otherwise the record's own id parses as a UUID: use that (records created
   before correlation existed)
3. otherwise the record cannot be represented and mapping yields ``None``

Forward mapping never raises. Records that fail value-object validation are
logged and skipped.
"""

from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from uuid import UUID

from rolegate.core.config import IdentityConfig
from rolegate.core.logging import get_logger
from rolegate.modules.identity.domain.aggregates import Permission, Role, UserAccount
from rolegate.modules.identity.domain.enums import UserStatus
from rolegate.modules.identity.domain.value_objects import (
    Email,
    PersonName,
    PhoneNumber,
    RoleId,
    UserAccountId,
    UserName,
)

from ..models import IdentityRoleModel, IdentityUserModel
from ..stores.identity_store import IdentityClaim

logger = get_logger(__name__)

_DAYS_PER_YEAR = 365.25


def as_utc(value: datetime | None) -> datetime | None:
    """Read naive datetimes from the store as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _parse_uuid(text: str | None) -> UUID | None:
    if not text:
        return None
    try:
        value = UUID(text.strip())
    except ValueError:
        return None
    return value if value.int else None


class IdentityMapper:
    """Bidirectional mapping between store records and aggregates."""

    def __init__(self, config: IdentityConfig):
        self._config = config

    # =========================================================================
    # Correlation
    # =========================================================================

    @staticmethod
    def resolve_domain_id(record: IdentityUserModel | IdentityRoleModel) -> UUID | None:
        """Apply the correlation precedence to a user or role record."""
        return _parse_uuid(record.domain_id) or _parse_uuid(record.id)

    # =========================================================================
    # Users
    # =========================================================================

    def derive_status(self, record: IdentityUserModel, now: datetime | None = None) -> UserStatus:
        now = now or datetime.now(UTC)
        lockout_end = as_utc(record.lockout_end)
        if lockout_end is not None and lockout_end > now:
            return UserStatus.INACTIVE
        if record.email_confirmed:
            return UserStatus.ACTIVE
        return UserStatus.PENDING_ACTIVATION

    def map_to_user_account(
        self, record: IdentityUserModel | None, roles: Iterable[Role] = ()
    ) -> UserAccount | None:
        """
        Build a ``UserAccount`` from a user record.

        Args:
            record: Store record, may be ``None``
            roles: Roles the record belongs to

        Returns:
            The account, or ``None`` if the record cannot be represented
        """
        if record is None:
            return None

        domain_id = self.resolve_domain_id(record)
        if domain_id is None:
            logger.warning(
                "Identity record has no usable correlation id",
                record_id=record.id,
                domain_id=record.domain_id,
            )
            return None

        username = UserName.create(record.user_name)
        email = Email.create(record.email)
        person_name = PersonName.create(
            record.first_name, record.last_name, record.middle_name
        )
        failures = [r.error for r in (username, email, person_name) if r.is_failure]
        if failures:
            logger.warning(
                "Identity record failed validation",
                record_id=record.id,
                errors=[error.code for error in failures],
            )
            return None

        phone_number = None
        if record.phone_number:
            phone = PhoneNumber.create(record.phone_number)
            if phone.is_success:
                phone_number = phone.value
            else:
                logger.warning(
                    "Dropping invalid phone number from identity record",
                    record_id=record.id,
                )

        return UserAccount.restore(
            account_id=UserAccountId(domain_id),
            username=username.value,
            email=email.value,
            person_name=person_name.value,
            status=self.derive_status(record),
            phone_number=phone_number,
            role_ids=[role.id for role in roles],
            created_at=as_utc(record.created_at),
        )

    def map_to_identity_user(
        self, account: UserAccount, existing: IdentityUserModel | None = None
    ) -> IdentityUserModel:
        """
        Write an account's state onto a new or existing user record.

        ``Locked`` has no store representation and is written like
        ``PendingActivation``.
        """
        record = existing or IdentityUserModel(
            identity_provider=self._config.identity_provider_name
        )

        record.user_name = account.username.value
        record.normalized_user_name = account.username.normalized
        record.email = account.email.value
        record.normalized_email = account.email.normalized
        record.first_name = account.person_name.first_name
        record.middle_name = account.person_name.middle_name
        record.last_name = account.person_name.last_name
        record.phone_number = account.phone_number.value if account.phone_number else None
        record.domain_id = str(account.id)

        record.email_confirmed = account.status == UserStatus.ACTIVE
        record.lockout_enabled = True
        if account.status == UserStatus.INACTIVE:
            record.lockout_end = datetime.now(UTC) + timedelta(
                days=_DAYS_PER_YEAR * self._config.lockout_horizon_years
            )
        else:
            record.lockout_end = None

        if existing is None:
            record.created_at = account.created_at
        return record

    # =========================================================================
    # Roles
    # =========================================================================

    def map_to_role(
        self,
        record: IdentityRoleModel | None,
        claims: Iterable[IdentityClaim] = (),
        permissions: Iterable[Permission] = (),
    ) -> Role | None:
        """
        Build a ``Role`` from a role record and its claims.

        Grants are the record's permission claims resolved against
        ``permissions``; names missing from the catalog are skipped.
        """
        if record is None:
            return None

        domain_id = self.resolve_domain_id(record)
        if domain_id is None or not record.name:
            logger.warning(
                "Identity role record cannot be represented",
                record_id=record.id,
                name=record.name,
            )
            return None

        catalog = {permission.name.value: permission for permission in permissions}
        granted: list[Permission] = []
        for claim in claims:
            if claim.type != self._config.permission_claim_type:
                continue
            permission = catalog.get(claim.value)
            if permission is None:
                logger.warning(
                    "Role grants unknown permission",
                    role=record.name,
                    permission=claim.value,
                )
                continue
            granted.append(permission)

        return Role.restore(
            role_id=RoleId(domain_id),
            name=record.name,
            description=record.description,
            is_system_defined=record.is_system_defined,
            permissions=granted,
            created_at=as_utc(record.created_at),
        )

    def map_to_identity_role(
        self, role: Role, existing: IdentityRoleModel | None = None
    ) -> IdentityRoleModel:
        """Write a role's own fields onto a record. Grants are stored as claims."""
        record = existing or IdentityRoleModel(name=role.name, normalized_name=role.normalized_name)
        record.name = role.name
        record.normalized_name = role.normalized_name
        record.description = role.description
        record.is_system_defined = role.is_system_defined
        record.domain_id = str(role.id)
        if existing is None:
            record.created_at = role.created_at
        return record
