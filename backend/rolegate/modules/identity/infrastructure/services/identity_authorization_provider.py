"""
Identity Authorization Provider

Implements the user, role, permission and authorization services on top of
the identity store and the permission catalog.

Every public operation returns a :class:`Result`. Expected conditions
(missing records, duplicates, immutable system data) are reported as typed
errors; unexpected exceptions are logged and reported as a ``Problem`` with
code ``Identity.Error``. Domain events are published only after the store
write they describe has succeeded.
"""

import functools
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, TypeVar

from rolegate.core.config import IdentityConfig
from rolegate.core.domain.result import DomainError, Result
from rolegate.core.logging import get_logger, log_context
from rolegate.modules.identity.domain.aggregates import Permission, Role, UserAccount
from rolegate.modules.identity.domain.enums import PermissionType
from rolegate.modules.identity.domain.errors import PermissionErrors, RoleErrors
from rolegate.modules.identity.domain.interfaces.repositories import (
    IPermissionRepository,
)
from rolegate.modules.identity.domain.interfaces.services import (
    IAuthorizationService,
    IPermissionManagementService,
    IRoleManagementService,
    IUserService,
)
from rolegate.modules.identity.domain.value_objects import (
    Email,
    PermissionId,
    PermissionName,
    RoleId,
    UserAccountId,
    UserName,
)

from ..events import DomainEventDispatcher
from ..mapping import IdentityMapper
from ..models import IdentityRoleModel, IdentityUserModel
from ..stores.identity_store import IdentityResult, IIdentityStore

logger = get_logger(__name__)

R = TypeVar("R")

_CONFLICT_CODES = frozenset(
    {
        "DuplicateUserName",
        "DuplicateEmail",
        "DuplicateRoleName",
        "UserAlreadyInRole",
        "DuplicateRoleClaim",
    }
)
_NOT_FOUND_CODES = frozenset(
    {"UserNotFound", "RoleNotFound", "UserNotInRole", "RoleClaimNotFound"}
)


class IdentityServiceErrors:
    """Errors reported by the identity-backed services."""

    UNEXPECTED_CODE = "Identity.Error"

    @staticmethod
    def unexpected(operation: str) -> DomainError:
        return DomainError.problem(
            IdentityServiceErrors.UNEXPECTED_CODE,
            f"An unexpected error occurred during {operation}.",
        )

    @staticmethod
    def user_not_found(subject: Any) -> DomainError:
        return DomainError.not_found("Identity.UserNotFound", f"User '{subject}' was not found.")

    @staticmethod
    def user_not_representable(subject: Any) -> DomainError:
        return DomainError.not_found(
            "Identity.UserNotRepresentable",
            f"User '{subject}' exists but cannot be represented as an account.",
        )

    @staticmethod
    def role_not_found(subject: Any) -> DomainError:
        return DomainError.not_found("Identity.RoleNotFound", f"Role '{subject}' was not found.")

    @staticmethod
    def role_not_representable(subject: Any) -> DomainError:
        return DomainError.not_found(
            "Identity.RoleNotRepresentable",
            f"Role '{subject}' exists but cannot be represented.",
        )

    @staticmethod
    def permission_not_found(subject: Any) -> DomainError:
        return DomainError.not_found(
            "Identity.PermissionNotFound", f"Permission '{subject}' was not found."
        )

    @staticmethod
    def password_required() -> DomainError:
        return DomainError.failure("Identity.PasswordRequired", "A password is required.")

    @staticmethod
    def duplicate_user_id(user_id: UserAccountId) -> DomainError:
        return DomainError.conflict(
            "Identity.DuplicateUserId", f"A user with id '{user_id}' already exists."
        )

    @staticmethod
    def duplicate_email(email: str) -> DomainError:
        return DomainError.conflict(
            "Identity.DuplicateEmail", f"Email '{email}' is already taken."
        )

    @staticmethod
    def duplicate_user_name(username: str) -> DomainError:
        return DomainError.conflict(
            "Identity.DuplicateUserName", f"Username '{username}' is already taken."
        )

    @staticmethod
    def duplicate_role_name(name: str) -> DomainError:
        return DomainError.conflict(
            "Identity.DuplicateRoleName", f"Role name '{name}' is already taken."
        )

    @staticmethod
    def duplicate_permission_name(name: str) -> DomainError:
        return DomainError.conflict(
            "Identity.DuplicatePermissionName", f"Permission '{name}' already exists."
        )

    @staticmethod
    def role_in_use(name: str) -> DomainError:
        return DomainError.conflict(
            "Identity.RoleInUse", f"Role '{name}' is still assigned to users."
        )

    @staticmethod
    def permission_in_use(name: str) -> DomainError:
        return DomainError.conflict(
            "Permission.InUse", f"Permission '{name}' is still granted to roles."
        )

    @staticmethod
    def invalid_paging() -> DomainError:
        return DomainError.validation(
            "Identity.InvalidPaging", "Page and page size must be positive."
        )

    @staticmethod
    def from_store(result: IdentityResult) -> list[DomainError]:
        """Translate identity store errors into domain errors."""
        errors: list[DomainError] = []
        for error in result.errors:
            code = f"Identity.{error.code}"
            if error.code in _CONFLICT_CODES:
                errors.append(DomainError.conflict(code, error.description))
            elif error.code in _NOT_FOUND_CODES:
                errors.append(DomainError.not_found(code, error.description))
            else:
                errors.append(DomainError.failure(code, error.description))
        if not errors:
            errors.append(
                DomainError.failure(
                    "Identity.StoreFailure", "The identity store rejected the change."
                )
            )
        return errors


def identity_boundary(
    func: Callable[..., Awaitable[Result[R]]]
) -> Callable[..., Awaitable[Result[R]]]:
    """Convert unexpected exceptions of a service operation into a ``Problem`` result."""

    @functools.wraps(func)
    async def wrapper(self, *args: Any, **kwargs: Any) -> Result[R]:
        with log_context(operation=func.__name__):
            try:
                return await func(self, *args, **kwargs)
            except Exception as e:
                subject = getattr(args[0], "id", args[0]) if args else None
                logger.exception(
                    "Identity operation failed",
                    subject=str(subject) if subject is not None else None,
                    error=str(e),
                )
                return Result.failure(IdentityServiceErrors.unexpected(func.__name__))

    return wrapper


class IdentityAuthorizationProvider(
    IAuthorizationService,
    IRoleManagementService,
    IPermissionManagementService,
    IUserService,
):
    """Identity-store-backed implementation of the identity services."""

    def __init__(
        self,
        store: IIdentityStore,
        permission_repository: IPermissionRepository,
        mapper: IdentityMapper,
        dispatcher: DomainEventDispatcher,
        config: IdentityConfig,
    ):
        self._store = store
        self._permissions = permission_repository
        self._mapper = mapper
        self._dispatcher = dispatcher
        self._config = config

    # =========================================================================
    # Loading helpers
    # =========================================================================

    async def _find_user_record(self, user_id: UserAccountId) -> IdentityUserModel | None:
        record = await self._store.find_by_correlation_id(str(user_id))
        if record is None:
            record = await self._store.find_by_id(str(user_id))
        return record

    async def _find_role_record(self, role_id: RoleId) -> IdentityRoleModel | None:
        record = await self._store.find_role_by_correlation_id(str(role_id))
        if record is None:
            record = await self._store.find_role_by_id(str(role_id))
        return record

    async def _map_roles(self, records: Iterable[IdentityRoleModel]) -> list[Role]:
        """Map role records, resolving their permission claims in one catalog query."""
        claimed: list[tuple[IdentityRoleModel, list]] = []
        names: set[str] = set()
        for record in records:
            claims = await self._store.get_role_claims(record)
            claimed.append((record, claims))
            names.update(
                claim.value
                for claim in claims
                if claim.type == self._config.permission_claim_type
            )

        catalog = await self._permissions.find_by_names(names)

        roles: list[Role] = []
        for record, claims in claimed:
            role = self._mapper.map_to_role(record, claims, catalog)
            if role is not None:
                roles.append(role)
        return roles

    async def _map_user(
        self, record: IdentityUserModel
    ) -> tuple[UserAccount | None, list[Role]]:
        roles = await self._map_roles(await self._store.get_roles(record))
        return self._mapper.map_to_user_account(record, roles), roles

    async def _map_users(self, records: Iterable[IdentityUserModel]) -> list[UserAccount]:
        accounts: list[UserAccount] = []
        for record in records:
            account, _ = await self._map_user(record)
            if account is not None:
                accounts.append(account)
        return accounts

    async def _account_from_record(
        self, record: IdentityUserModel | None, subject: Any
    ) -> Result[UserAccount]:
        if record is None:
            return Result.failure(IdentityServiceErrors.user_not_found(subject))
        account, _ = await self._map_user(record)
        if account is None:
            return Result.failure(IdentityServiceErrors.user_not_representable(subject))
        return Result.success(account)

    async def _load_user_with_roles(
        self, user_id: UserAccountId
    ) -> Result[tuple[IdentityUserModel, UserAccount, dict[RoleId, Role]]]:
        record = await self._find_user_record(user_id)
        if record is None:
            return Result.failure(IdentityServiceErrors.user_not_found(user_id))

        account, roles = await self._map_user(record)
        if account is None:
            return Result.failure(IdentityServiceErrors.user_not_representable(user_id))
        return Result.success((record, account, {role.id: role for role in roles}))

    async def _load_role(self, role_id: RoleId) -> Result[tuple[IdentityRoleModel, Role]]:
        record = await self._find_role_record(role_id)
        return await self._role_from_record(record, role_id)

    async def _role_from_record(
        self, record: IdentityRoleModel | None, subject: Any
    ) -> Result[tuple[IdentityRoleModel, Role]]:
        if record is None:
            return Result.failure(IdentityServiceErrors.role_not_found(subject))
        roles = await self._map_roles([record])
        if not roles:
            return Result.failure(IdentityServiceErrors.role_not_representable(subject))
        return Result.success((record, roles[0]))

    async def _load_permission(self, permission_id: PermissionId) -> Result[Permission]:
        permission = await self._permissions.find_by_id(permission_id)
        if permission is None:
            return Result.failure(IdentityServiceErrors.permission_not_found(permission_id))
        return Result.success(permission)

    async def _resolve_role_records(
        self, account: UserAccount
    ) -> Result[dict[RoleId, IdentityRoleModel]]:
        """Look up the stored record of every role the account holds."""
        resolved: dict[RoleId, IdentityRoleModel] = {}
        for role_id in account.role_ids:
            role_record = await self._find_role_record(role_id)
            if role_record is None:
                return Result.failure(IdentityServiceErrors.role_not_found(role_id))
            resolved[role_id] = role_record
        return Result.success(resolved)

    async def _sync_memberships(
        self, record: IdentityUserModel, wanted: dict[RoleId, IdentityRoleModel]
    ) -> Result[None]:
        """Bring the store's memberships in line with ``wanted``."""
        current: dict[RoleId, IdentityRoleModel] = {}
        for role_record in await self._store.get_roles(record):
            domain_id = self._mapper.resolve_domain_id(role_record)
            if domain_id is not None:
                current[RoleId(domain_id)] = role_record

        for role_id in wanted.keys() - current.keys():
            added = await self._store.add_to_role(record, wanted[role_id].name)
            if not added.succeeded:
                return Result.from_errors(IdentityServiceErrors.from_store(added))

        for role_id in current.keys() - wanted.keys():
            removed = await self._store.remove_from_role(record, current[role_id].name)
            if not removed.succeeded:
                return Result.from_errors(IdentityServiceErrors.from_store(removed))

        return Result.success()

    async def _undo(
        self, action: str, reverted: Awaitable[IdentityResult], **context: Any
    ) -> None:
        """Revert an earlier write of a multi-step operation that did not complete."""
        result = await reverted
        if not result.succeeded:
            logger.error(
                "Partial identity write could not be reverted",
                action=action,
                error_codes=result.error_codes,
                **context,
            )

    # =========================================================================
    # IUserService
    # =========================================================================

    @identity_boundary
    async def get_user_by_id(self, user_id: UserAccountId) -> Result[UserAccount]:
        loaded = await self._load_user_with_roles(user_id)
        return loaded.map(lambda loaded_user: loaded_user[1])

    @identity_boundary
    async def get_user_by_username(self, username: UserName | str) -> Result[UserAccount]:
        text = username.value if isinstance(username, UserName) else username
        record = await self._store.find_by_username(text)
        return await self._account_from_record(record, text)

    @identity_boundary
    async def get_user_by_email(self, email: Email | str) -> Result[UserAccount]:
        text = email.value if isinstance(email, Email) else email
        record = await self._store.find_by_email(text)
        return await self._account_from_record(record, text)

    @identity_boundary
    async def create_user(
        self, account: UserAccount, password: str | None
    ) -> Result[UserAccount]:
        if not password:
            return Result.failure(IdentityServiceErrors.password_required())

        if await self._store.find_by_correlation_id(str(account.id)) is not None:
            return Result.failure(IdentityServiceErrors.duplicate_user_id(account.id))
        if await self._store.find_by_email(account.email.value) is not None:
            return Result.failure(IdentityServiceErrors.duplicate_email(account.email.value))
        if await self._store.find_by_username(account.username.value) is not None:
            return Result.failure(
                IdentityServiceErrors.duplicate_user_name(account.username.value)
            )

        role_records = await self._resolve_role_records(account)
        if role_records.is_failure:
            return Result.from_errors(role_records.errors)

        record = self._mapper.map_to_identity_user(account)
        created = await self._store.create(record, password)
        if not created.succeeded:
            return Result.from_errors(IdentityServiceErrors.from_store(created))

        try:
            synced = await self._sync_memberships(record, role_records.value)
        except Exception:
            await self._undo("create_user", self._store.delete(record), record_id=record.id)
            raise
        if synced.is_failure:
            await self._undo("create_user", self._store.delete(record), record_id=record.id)
            return Result.from_errors(synced.errors)

        await self._dispatcher.dispatch(account)
        logger.info("User account created", user_id=str(account.id), record_id=record.id)
        return Result.success(account)

    @identity_boundary
    async def update_user(self, account: UserAccount) -> Result[UserAccount]:
        record = await self._find_user_record(account.id)
        if record is None:
            return Result.failure(IdentityServiceErrors.user_not_found(account.id))

        if account.email.normalized != record.normalized_email:
            other = await self._store.find_by_email(account.email.value)
            if other is not None and other.id != record.id:
                return Result.failure(
                    IdentityServiceErrors.duplicate_email(account.email.value)
                )

        if account.username.normalized != record.normalized_user_name:
            other = await self._store.find_by_username(account.username.value)
            if other is not None and other.id != record.id:
                return Result.failure(
                    IdentityServiceErrors.duplicate_user_name(account.username.value)
                )

        role_records = await self._resolve_role_records(account)
        if role_records.is_failure:
            return Result.from_errors(role_records.errors)

        # Detached copy of the stored row; the record below is overwritten in place.
        previous = await self._store.find_by_id(record.id)
        record = self._mapper.map_to_identity_user(account, existing=record)
        updated = await self._store.update(record)
        if not updated.succeeded:
            return Result.from_errors(IdentityServiceErrors.from_store(updated))

        try:
            synced = await self._sync_memberships(record, role_records.value)
        except Exception:
            await self._undo("update_user", self._store.update(previous), record_id=record.id)
            raise
        if synced.is_failure:
            await self._undo("update_user", self._store.update(previous), record_id=record.id)
            return Result.from_errors(synced.errors)

        await self._dispatcher.dispatch(account)
        return Result.success(account)

    @identity_boundary
    async def delete_user(self, user_id: UserAccountId) -> Result[None]:
        record = await self._find_user_record(user_id)
        if record is None:
            return Result.failure(IdentityServiceErrors.user_not_found(user_id))

        deleted = await self._store.delete(record)
        if not deleted.succeeded:
            return Result.from_errors(IdentityServiceErrors.from_store(deleted))

        logger.info("User account deleted", user_id=str(user_id))
        return Result.success()

    @identity_boundary
    async def change_password(
        self, user_id: UserAccountId, current_password: str, new_password: str
    ) -> Result[None]:
        record = await self._find_user_record(user_id)
        if record is None:
            return Result.failure(IdentityServiceErrors.user_not_found(user_id))
        if not new_password:
            return Result.failure(IdentityServiceErrors.password_required())

        changed = await self._store.change_password(record, current_password, new_password)
        if not changed.succeeded:
            return Result.from_errors(IdentityServiceErrors.from_store(changed))
        return Result.success()

    @identity_boundary
    async def get_users(
        self, page: int = 1, page_size: int = 20, search_term: str | None = None
    ) -> Result[list[UserAccount]]:
        if page < 1 or page_size < 1:
            return Result.failure(IdentityServiceErrors.invalid_paging())

        records = await self._store.list_users(
            offset=(page - 1) * page_size, limit=page_size, search_term=search_term
        )
        return Result.success(await self._map_users(records))

    @identity_boundary
    async def get_user_count(self, search_term: str | None = None) -> Result[int]:
        return Result.success(await self._store.count_users(search_term))

    # =========================================================================
    # IRoleManagementService
    # =========================================================================

    @identity_boundary
    async def create_role(
        self, name: str, description: str, is_system_defined: bool = False
    ) -> Result[Role]:
        created = Role.create(name, description, is_system_defined)
        if created.is_failure:
            return created
        return await self._persist_new_role(created.value)

    async def _persist_new_role(self, role: Role) -> Result[Role]:
        if await self._store.find_role_by_name(role.name) is not None:
            return Result.failure(IdentityServiceErrors.duplicate_role_name(role.name))

        record = self._mapper.map_to_identity_role(role)
        stored = await self._store.create_role(record)
        if not stored.succeeded:
            return Result.from_errors(IdentityServiceErrors.from_store(stored))

        claimed = IdentityResult.success()
        try:
            for grant in role.permissions:
                claimed = await self._store.add_role_claim(
                    record, self._config.permission_claim_type, grant.permission_name.value
                )
                if not claimed.succeeded:
                    break
        except Exception:
            await self._undo("create_role", self._store.delete_role(record), role_id=record.id)
            raise
        if not claimed.succeeded:
            await self._undo("create_role", self._store.delete_role(record), role_id=record.id)
            return Result.from_errors(IdentityServiceErrors.from_store(claimed))

        await self._dispatcher.dispatch(role)
        logger.info("Role created", role_id=str(role.id), name=role.name)
        return Result.success(role)

    @identity_boundary
    async def create_role_with_permissions(
        self,
        name: str,
        description: str,
        permissions: Iterable[Permission],
        is_system_defined: bool = False,
    ) -> Result[Role]:
        """Create a role holding ``permissions`` from the start."""
        created = Role.create(name, description, is_system_defined, permissions)
        if created.is_failure:
            return created
        return await self._persist_new_role(created.value)

    @identity_boundary
    async def get_role_by_id(self, role_id: RoleId) -> Result[Role]:
        loaded = await self._load_role(role_id)
        return loaded.map(lambda pair: pair[1])

    @identity_boundary
    async def get_role_by_name(self, name: str) -> Result[Role]:
        record = await self._store.find_role_by_name(name)
        loaded = await self._role_from_record(record, name)
        return loaded.map(lambda pair: pair[1])

    @identity_boundary
    async def get_all_roles(self) -> Result[list[Role]]:
        return Result.success(await self._map_roles(await self._store.list_roles()))

    @identity_boundary
    async def update_role_description(
        self, role_id: RoleId, description: str
    ) -> Result[Role]:
        loaded = await self._load_role(role_id)
        if loaded.is_failure:
            return Result.from_errors(loaded.errors)
        record, role = loaded.value

        changed = role.update_description(description)
        if changed.is_failure:
            return Result.from_errors(changed.errors)

        updated = await self._store.update_role(
            self._mapper.map_to_identity_role(role, existing=record)
        )
        if not updated.succeeded:
            return Result.from_errors(IdentityServiceErrors.from_store(updated))

        await self._dispatcher.dispatch(role)
        return Result.success(role)

    @identity_boundary
    async def delete_role(self, role_id: RoleId) -> Result[None]:
        loaded = await self._load_role(role_id)
        if loaded.is_failure:
            return Result.from_errors(loaded.errors)
        record, role = loaded.value

        if role.is_system_defined:
            return Result.failure(RoleErrors.system_defined())
        if await self._store.get_users_in_role(record.name):
            return Result.failure(IdentityServiceErrors.role_in_use(role.name))

        deleted = await self._store.delete_role(record)
        if not deleted.succeeded:
            return Result.from_errors(IdentityServiceErrors.from_store(deleted))

        logger.info("Role deleted", role_id=str(role_id), name=role.name)
        return Result.success()

    @identity_boundary
    async def add_permission_to_role(
        self, role_id: RoleId, permission_id: PermissionId
    ) -> Result[None]:
        loaded = await self._load_role(role_id)
        if loaded.is_failure:
            return Result.from_errors(loaded.errors)
        record, role = loaded.value

        permission = await self._load_permission(permission_id)
        if permission.is_failure:
            return Result.from_errors(permission.errors)

        granted = role.add_permission(permission.value)
        if granted.is_failure:
            return granted

        claimed = await self._store.add_role_claim(
            record, self._config.permission_claim_type, permission.value.name.value
        )
        if not claimed.succeeded:
            return Result.from_errors(IdentityServiceErrors.from_store(claimed))

        await self._dispatcher.dispatch(role)
        return Result.success()

    @identity_boundary
    async def remove_permission_from_role(
        self, role_id: RoleId, permission_id: PermissionId
    ) -> Result[None]:
        loaded = await self._load_role(role_id)
        if loaded.is_failure:
            return Result.from_errors(loaded.errors)
        record, role = loaded.value

        permission = await self._load_permission(permission_id)
        if permission.is_failure:
            return Result.from_errors(permission.errors)

        revoked = role.remove_permission(permission.value)
        if revoked.is_failure:
            return revoked

        removed = await self._store.remove_role_claim(
            record, self._config.permission_claim_type, permission.value.name.value
        )
        if not removed.succeeded:
            return Result.from_errors(IdentityServiceErrors.from_store(removed))

        await self._dispatcher.dispatch(role)
        return Result.success()

    @identity_boundary
    async def get_permissions_for_role(self, role_id: RoleId) -> Result[list[Permission]]:
        loaded = await self._load_role(role_id)
        if loaded.is_failure:
            return Result.from_errors(loaded.errors)
        _, role = loaded.value
        return Result.success(await self._permissions.find_by_names(role.permission_names))

    @identity_boundary
    async def assign_role_to_user(
        self, user_id: UserAccountId, role_id: RoleId
    ) -> Result[None]:
        user = await self._load_user_with_roles(user_id)
        if user.is_failure:
            return Result.from_errors(user.errors)
        user_record, account, _ = user.value

        loaded = await self._load_role(role_id)
        if loaded.is_failure:
            return Result.from_errors(loaded.errors)
        role_record, role = loaded.value

        added = account.add_role(role)
        if added.is_failure:
            return added

        stored = await self._store.add_to_role(user_record, role_record.name)
        if not stored.succeeded:
            return Result.from_errors(IdentityServiceErrors.from_store(stored))

        await self._dispatcher.dispatch(account)
        logger.info("Role assigned", user_id=str(user_id), role=role.name)
        return Result.success()

    @identity_boundary
    async def remove_role_from_user(
        self, user_id: UserAccountId, role_id: RoleId
    ) -> Result[None]:
        user = await self._load_user_with_roles(user_id)
        if user.is_failure:
            return Result.from_errors(user.errors)
        user_record, account, _ = user.value

        loaded = await self._load_role(role_id)
        if loaded.is_failure:
            return Result.from_errors(loaded.errors)
        role_record, role = loaded.value

        removed = account.remove_role(role)
        if removed.is_failure:
            return removed

        stored = await self._store.remove_from_role(user_record, role_record.name)
        if not stored.succeeded:
            return Result.from_errors(IdentityServiceErrors.from_store(stored))

        await self._dispatcher.dispatch(account)
        logger.info("Role removed", user_id=str(user_id), role=role.name)
        return Result.success()

    @identity_boundary
    async def get_user_roles(self, user_id: UserAccountId) -> Result[list[Role]]:
        user = await self._load_user_with_roles(user_id)
        return user.map(lambda loaded_user: list(loaded_user[2].values()))

    @identity_boundary
    async def get_users_for_role(self, role_id: RoleId) -> Result[list[UserAccount]]:
        record = await self._find_role_record(role_id)
        if record is None:
            return Result.failure(IdentityServiceErrors.role_not_found(role_id))
        records = await self._store.get_users_in_role(record.name)
        return Result.success(await self._map_users(records))

    # =========================================================================
    # IPermissionManagementService
    # =========================================================================

    @identity_boundary
    async def create_permission(
        self,
        name: PermissionName,
        description: str,
        permission_type: PermissionType,
        is_system_defined: bool = False,
    ) -> Result[Permission]:
        if await self._permissions.find_by_name(name) is not None:
            return Result.failure(IdentityServiceErrors.duplicate_permission_name(name.value))

        created = Permission.create(name, description, permission_type, is_system_defined)
        if created.is_failure:
            return created

        await self._permissions.add(created.value)
        await self._dispatcher.dispatch(created.value)
        return created

    @identity_boundary
    async def get_permission_by_id(self, permission_id: PermissionId) -> Result[Permission]:
        return await self._load_permission(permission_id)

    @identity_boundary
    async def get_permission_by_name(
        self, name: PermissionName | str
    ) -> Result[Permission]:
        if not isinstance(name, PermissionName):
            parsed = PermissionName.create(name)
            if parsed.is_failure:
                return Result.from_errors(parsed.errors)
            name = parsed.value

        permission = await self._permissions.find_by_name(name)
        if permission is None:
            return Result.failure(IdentityServiceErrors.permission_not_found(name))
        return Result.success(permission)

    @identity_boundary
    async def get_all_permissions(self) -> Result[list[Permission]]:
        return Result.success(await self._permissions.list_all())

    @identity_boundary
    async def update_permission_description(
        self, permission_id: PermissionId, description: str
    ) -> Result[Permission]:
        return await self._update_permission(
            permission_id, lambda permission: permission.update_description(description)
        )

    @identity_boundary
    async def update_permission_type(
        self, permission_id: PermissionId, permission_type: PermissionType
    ) -> Result[Permission]:
        return await self._update_permission(
            permission_id, lambda permission: permission.update_type(permission_type)
        )

    async def _update_permission(
        self,
        permission_id: PermissionId,
        change: Callable[[Permission], Result[None]],
    ) -> Result[Permission]:
        loaded = await self._load_permission(permission_id)
        if loaded.is_failure:
            return loaded

        changed = change(loaded.value)
        if changed.is_failure:
            return Result.from_errors(changed.errors)

        await self._permissions.update(loaded.value)
        await self._dispatcher.dispatch(loaded.value)
        return loaded

    @identity_boundary
    async def delete_permission(self, permission_id: PermissionId) -> Result[None]:
        loaded = await self._load_permission(permission_id)
        if loaded.is_failure:
            return Result.from_errors(loaded.errors)
        permission = loaded.value

        if permission.is_system_defined:
            return Result.failure(PermissionErrors.system_defined())

        granting = await self._store.get_roles_with_claim(
            self._config.permission_claim_type, permission.name.value
        )
        if granting:
            return Result.failure(IdentityServiceErrors.permission_in_use(permission.name.value))

        await self._permissions.delete(permission_id)
        logger.info("Permission deleted", permission=permission.name.value)
        return Result.success()

    @identity_boundary
    async def create_standard_permissions(self, resource: str) -> Result[list[Permission]]:
        candidates = Permission.create_standard_permissions(resource)
        if candidates.is_failure:
            return candidates

        permissions: list[Permission] = []
        for candidate in candidates.value:
            existing = await self._permissions.find_by_name(candidate.name)
            if existing is not None:
                permissions.append(existing)
                continue

            await self._permissions.add(candidate)
            await self._dispatcher.dispatch(candidate)
            permissions.append(candidate)

        return Result.success(permissions)

    @identity_boundary
    async def get_roles_for_permission(
        self, permission_id: PermissionId
    ) -> Result[list[Role]]:
        loaded = await self._load_permission(permission_id)
        if loaded.is_failure:
            return Result.from_errors(loaded.errors)

        records = await self._store.get_roles_with_claim(
            self._config.permission_claim_type, loaded.value.name.value
        )
        return Result.success(await self._map_roles(records))

    @identity_boundary
    async def get_users_for_permission(
        self, permission_id: PermissionId
    ) -> Result[list[UserAccount]]:
        loaded = await self._load_permission(permission_id)
        if loaded.is_failure:
            return Result.from_errors(loaded.errors)

        role_records = await self._store.get_roles_with_claim(
            self._config.permission_claim_type, loaded.value.name.value
        )

        seen: set[str] = set()
        records: list[IdentityUserModel] = []
        for role_record in role_records:
            for user_record in await self._store.get_users_in_role(role_record.name):
                if user_record.id not in seen:
                    seen.add(user_record.id)
                    records.append(user_record)

        return Result.success(await self._map_users(records))

    # =========================================================================
    # IAuthorizationService
    # =========================================================================

    @identity_boundary
    async def has_permission(
        self, user_id: UserAccountId, permission: PermissionId | PermissionName | str
    ) -> Result[bool]:
        user = await self._load_user_with_roles(user_id)
        return user.map(
            lambda loaded_user: loaded_user[1].has_permission(permission, loaded_user[2])
        )

    @identity_boundary
    async def get_permissions_for_user(
        self, user_id: UserAccountId
    ) -> Result[frozenset[str]]:
        user = await self._load_user_with_roles(user_id)
        return user.map(lambda loaded_user: loaded_user[1].permission_names(loaded_user[2]))

    @identity_boundary
    async def has_role(self, user_id: UserAccountId, role: RoleId | str) -> Result[bool]:
        user = await self._load_user_with_roles(user_id)
        return user.map(lambda loaded_user: loaded_user[1].has_role(role, loaded_user[2]))

    @identity_boundary
    async def get_roles_for_user(self, user_id: UserAccountId) -> Result[frozenset[str]]:
        user = await self._load_user_with_roles(user_id)
        return user.map(
            lambda loaded_user: frozenset(
                role.name
                for role_id, role in loaded_user[2].items()
                if role_id in loaded_user[1].role_ids
            )
        )
