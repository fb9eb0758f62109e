"""
Current Principal Resolver

Request-scoped view of the authenticated caller. Claims on the principal are
consulted first; the identity store is only queried when the claims cannot
answer, and the caller's user record is looked up at most once per request.
"""

from enum import Enum

from rolegate.core.config import IdentityConfig
from rolegate.core.domain.result import DomainError, Result
from rolegate.core.logging import get_logger
from rolegate.modules.identity.domain.interfaces.services import ICurrentPrincipal
from rolegate.modules.identity.domain.value_objects import Email, UserAccountId

from ..models import IdentityUserModel
from ..stores.identity_store import IIdentityStore
from .claims import ClaimsPrincipal

logger = get_logger(__name__)


class LookupState(Enum):
    NOT_LOADED = "not_loaded"
    LOADED = "loaded"


class CurrentPrincipalErrors:
    @staticmethod
    def not_authenticated() -> DomainError:
        return DomainError.failure("Identity.NotAuthenticated", "User is not authenticated.")

    @staticmethod
    def user_not_found() -> DomainError:
        return DomainError.not_found("Identity.UserNotFound", "User not found.")


class CurrentPrincipalResolver(ICurrentPrincipal):
    """
    Resolves the calling user from request claims.

    Not safe for concurrent use; create one per request.
    """

    def __init__(
        self, principal: ClaimsPrincipal, store: IIdentityStore, config: IdentityConfig
    ):
        self._principal = principal
        self._store = store
        self._config = config
        self._state = LookupState.NOT_LOADED
        self._record: IdentityUserModel | None = None

    # =========================================================================
    # Claims
    # =========================================================================

    @property
    def principal(self) -> ClaimsPrincipal:
        return self._principal

    @property
    def is_authenticated(self) -> bool:
        return self._principal.is_authenticated

    @property
    def username(self) -> str | None:
        return self._principal.find_first(self._config.name_claim_type)

    @property
    def email(self) -> Email | None:
        value = self._principal.find_first(self._config.email_claim_type)
        if not value:
            return None
        result = Email.create(value)
        return result.value if result.is_success else None

    # =========================================================================
    # Record lookup
    # =========================================================================

    async def _current_record(self) -> IdentityUserModel | None:
        """Load the caller's record once; a failed lookup is retried on next access."""
        if self._state is LookupState.LOADED:
            return self._record

        correlation_id = self._principal.find_first(self._config.correlation_claim_type)
        subject = self._principal.find_first(self._config.subject_claim_type)

        try:
            record = None
            if correlation_id:
                record = await self._store.find_by_correlation_id(correlation_id)
            if record is None and subject:
                record = await self._store.find_by_id(subject)
        except Exception as e:
            logger.error(
                "Failed to load current user record",
                subject=subject,
                correlation_id=correlation_id,
                error=str(e),
            )
            return None

        self._record = record
        self._state = LookupState.LOADED
        return record

    async def get_user_id(self) -> UserAccountId | None:
        if not self.is_authenticated:
            return None

        claimed = UserAccountId.try_parse(
            self._principal.find_first(self._config.correlation_claim_type)
        )
        if claimed is not None:
            return claimed

        record = await self._current_record()
        if record is not None:
            stored = UserAccountId.try_parse(record.domain_id)
            if stored is not None:
                return stored

        subject = UserAccountId.try_parse(
            self._principal.find_first(self._config.subject_claim_type)
        )
        if subject is not None:
            return subject

        logger.warning("Could not determine account id for authenticated principal")
        return None

    # =========================================================================
    # Roles and permissions
    # =========================================================================

    async def is_in_role(self, role: str) -> bool:
        if not self.is_authenticated or not role:
            return False

        wanted = role.strip().upper()
        claimed = self._principal.find_all(self._config.role_claim_type)
        if any(name.strip().upper() == wanted for name in claimed):
            return True

        record = await self._current_record()
        if record is None:
            return False
        return await self._store.is_in_role(record, role)

    async def has_permission(self, permission: str) -> bool:
        if not self.is_authenticated or not permission:
            return False

        if self._principal.has_claim(self._config.permission_claim_type, permission):
            return True

        permissions = await self._role_permissions()
        return permissions.is_success and permission in permissions.value

    async def get_roles(self) -> Result[list[str]]:
        if not self.is_authenticated:
            return Result.failure(CurrentPrincipalErrors.not_authenticated())

        record = await self._current_record()
        if record is None:
            return Result.failure(CurrentPrincipalErrors.user_not_found())

        roles = await self._store.get_roles(record)
        return Result.success([role.name for role in roles])

    async def get_permissions(self) -> Result[frozenset[str]]:
        if not self.is_authenticated:
            return Result.failure(CurrentPrincipalErrors.not_authenticated())

        from_roles = await self._role_permissions()
        if from_roles.is_failure:
            return from_roles

        claimed = self._principal.find_all(self._config.permission_claim_type)
        return Result.success(from_roles.value | frozenset(claimed))

    async def _role_permissions(self) -> Result[frozenset[str]]:
        record = await self._current_record()
        if record is None:
            return Result.failure(CurrentPrincipalErrors.user_not_found())

        names: set[str] = set()
        for role in await self._store.get_roles(record):
            for claim in await self._store.get_role_claims(role):
                if claim.type == self._config.permission_claim_type:
                    names.add(claim.value)
        return Result.success(frozenset(names))
