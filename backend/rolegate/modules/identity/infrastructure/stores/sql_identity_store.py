"""
SQL Identity Store

SQLModel implementation of the identity subsystem contract. Every public
method runs in its own session, so each write is a single unit of work.
"""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from datetime import UTC, datetime

from sqlmodel import col, func, or_, select
from sqlmodel.ext.asyncio.session import AsyncSession

from rolegate.core.config import IdentityConfig, PasswordPolicyConfig
from rolegate.core.logging import get_logger
from rolegate.modules.identity.domain.interfaces.services.password_hasher import (
    IPasswordHasher,
)

from ..models import (
    IdentityRoleClaimModel,
    IdentityRoleModel,
    IdentityUserClaimModel,
    IdentityUserModel,
    IdentityUserRoleModel,
)
from .identity_store import IdentityClaim, IdentityError, IdentityResult, IIdentityStore

logger = get_logger(__name__)

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


def _normalize(value: str | None) -> str | None:
    return value.strip().upper() if value else None


class IdentityErrors:
    """Identity store error codes."""

    @staticmethod
    def duplicate_user_name(user_name: str) -> IdentityError:
        return IdentityError("DuplicateUserName", f"Username '{user_name}' is already taken.")

    @staticmethod
    def duplicate_email(email: str) -> IdentityError:
        return IdentityError("DuplicateEmail", f"Email '{email}' is already taken.")

    @staticmethod
    def duplicate_role_name(name: str) -> IdentityError:
        return IdentityError("DuplicateRoleName", f"Role name '{name}' is already taken.")

    @staticmethod
    def user_not_found() -> IdentityError:
        return IdentityError("UserNotFound", "The user record does not exist.")

    @staticmethod
    def role_not_found(name: str) -> IdentityError:
        return IdentityError("RoleNotFound", f"Role '{name}' does not exist.")

    @staticmethod
    def user_already_in_role(name: str) -> IdentityError:
        return IdentityError("UserAlreadyInRole", f"User already in role '{name}'.")

    @staticmethod
    def user_not_in_role(name: str) -> IdentityError:
        return IdentityError("UserNotInRole", f"User is not in role '{name}'.")

    @staticmethod
    def duplicate_role_claim(claim_type: str, claim_value: str) -> IdentityError:
        return IdentityError(
            "DuplicateRoleClaim", f"Role already has claim {claim_type}={claim_value}."
        )

    @staticmethod
    def role_claim_not_found(claim_type: str, claim_value: str) -> IdentityError:
        return IdentityError(
            "RoleClaimNotFound", f"Role has no claim {claim_type}={claim_value}."
        )

    @staticmethod
    def password_mismatch() -> IdentityError:
        return IdentityError("PasswordMismatch", "Incorrect password.")


def validate_password(password: str, policy: PasswordPolicyConfig) -> list[IdentityError]:
    """Check a candidate password against the configured policy."""
    errors: list[IdentityError] = []

    if len(password) < policy.required_length:
        errors.append(
            IdentityError(
                "PasswordTooShort",
                f"Passwords must be at least {policy.required_length} characters.",
            )
        )
    if policy.require_non_alphanumeric and all(c.isalnum() for c in password):
        errors.append(
            IdentityError(
                "PasswordRequiresNonAlphanumeric",
                "Passwords must have at least one non alphanumeric character.",
            )
        )
    if policy.require_digit and not any(c.isdigit() for c in password):
        errors.append(
            IdentityError("PasswordRequiresDigit", "Passwords must have at least one digit.")
        )
    if policy.require_lowercase and not any(c.islower() for c in password):
        errors.append(
            IdentityError(
                "PasswordRequiresLower", "Passwords must have at least one lowercase letter."
            )
        )
    if policy.require_uppercase and not any(c.isupper() for c in password):
        errors.append(
            IdentityError(
                "PasswordRequiresUpper", "Passwords must have at least one uppercase letter."
            )
        )
    if len(set(password)) < policy.required_unique_chars:
        errors.append(
            IdentityError(
                "PasswordRequiresUniqueChars",
                f"Passwords must use at least {policy.required_unique_chars} different characters.",
            )
        )
    return errors


class SqlIdentityStore(IIdentityStore):
    """SQLModel implementation of the identity store."""

    def __init__(
        self,
        session_factory: SessionFactory,
        password_hasher: IPasswordHasher,
        config: IdentityConfig,
    ):
        self._session_factory = session_factory
        self._password_hasher = password_hasher
        self._config = config

    # =========================================================================
    # User lookup
    # =========================================================================

    async def find_by_correlation_id(self, domain_id: str) -> IdentityUserModel | None:
        async with self._session_factory() as session:
            stmt = select(IdentityUserModel).where(IdentityUserModel.domain_id == domain_id)
            result = await session.exec(stmt)
            return result.first()

    async def find_by_id(self, user_id: str) -> IdentityUserModel | None:
        async with self._session_factory() as session:
            return await session.get(IdentityUserModel, user_id)

    async def find_by_username(self, username: str) -> IdentityUserModel | None:
        async with self._session_factory() as session:
            stmt = select(IdentityUserModel).where(
                IdentityUserModel.normalized_user_name == _normalize(username)
            )
            result = await session.exec(stmt)
            return result.first()

    async def find_by_email(self, email: str) -> IdentityUserModel | None:
        async with self._session_factory() as session:
            stmt = select(IdentityUserModel).where(
                IdentityUserModel.normalized_email == _normalize(email)
            )
            result = await session.exec(stmt)
            return result.first()

    def _search_clause(self, search_term: str):
        term = search_term.strip()
        return or_(
            col(IdentityUserModel.normalized_user_name).contains(term.upper(), autoescape=True),
            col(IdentityUserModel.normalized_email).contains(term.upper(), autoescape=True),
            col(IdentityUserModel.first_name).icontains(term, autoescape=True),
            col(IdentityUserModel.last_name).icontains(term, autoescape=True),
        )

    async def list_users(
        self, offset: int, limit: int, search_term: str | None = None
    ) -> list[IdentityUserModel]:
        async with self._session_factory() as session:
            stmt = select(IdentityUserModel)
            if search_term and search_term.strip():
                stmt = stmt.where(self._search_clause(search_term))
            stmt = (
                stmt.order_by(IdentityUserModel.normalized_user_name)
                .offset(offset)
                .limit(limit)
            )
            result = await session.exec(stmt)
            return list(result.all())

    async def count_users(self, search_term: str | None = None) -> int:
        async with self._session_factory() as session:
            stmt = select(func.count()).select_from(IdentityUserModel)
            if search_term and search_term.strip():
                stmt = stmt.where(self._search_clause(search_term))
            result = await session.exec(stmt)
            return int(result.one())

    # =========================================================================
    # User writes
    # =========================================================================

    async def _uniqueness_errors(
        self, session: AsyncSession, user: IdentityUserModel
    ) -> list[IdentityError]:
        errors: list[IdentityError] = []

        if user.normalized_user_name:
            stmt = select(IdentityUserModel.id).where(
                IdentityUserModel.normalized_user_name == user.normalized_user_name,
                IdentityUserModel.id != user.id,
            )
            if (await session.exec(stmt)).first() is not None:
                errors.append(IdentityErrors.duplicate_user_name(user.user_name or ""))

        if user.normalized_email:
            stmt = select(IdentityUserModel.id).where(
                IdentityUserModel.normalized_email == user.normalized_email,
                IdentityUserModel.id != user.id,
            )
            if (await session.exec(stmt)).first() is not None:
                errors.append(IdentityErrors.duplicate_email(user.email or ""))

        return errors

    async def create(self, user: IdentityUserModel, password: str | None) -> IdentityResult:
        user.normalized_user_name = _normalize(user.user_name)
        user.normalized_email = _normalize(user.email)

        errors: list[IdentityError] = []
        if password is not None:
            errors.extend(validate_password(password, self._config.password_policy))

        async with self._session_factory() as session:
            errors.extend(await self._uniqueness_errors(session, user))
            if errors:
                return IdentityResult.failed(*errors)

            if password is not None:
                user.password_hash = await self._password_hasher.hash_password(password)

            session.add(user)
            if user.domain_id:
                session.add(
                    IdentityUserClaimModel(
                        user_id=user.id,
                        claim_type=self._config.correlation_claim_type,
                        claim_value=user.domain_id,
                    )
                )

        logger.info("Identity user created", user_id=user.id, domain_id=user.domain_id)
        return IdentityResult.success()

    async def update(self, user: IdentityUserModel) -> IdentityResult:
        user.normalized_user_name = _normalize(user.user_name)
        user.normalized_email = _normalize(user.email)
        user.updated_at = datetime.now(UTC)

        async with self._session_factory() as session:
            if await session.get(IdentityUserModel, user.id) is None:
                return IdentityResult.failed(IdentityErrors.user_not_found())

            errors = await self._uniqueness_errors(session, user)
            if errors:
                return IdentityResult.failed(*errors)

            await session.merge(user)

        return IdentityResult.success()

    async def delete(self, user: IdentityUserModel) -> IdentityResult:
        async with self._session_factory() as session:
            stored = await session.get(IdentityUserModel, user.id)
            if stored is None:
                return IdentityResult.failed(IdentityErrors.user_not_found())

            memberships = await session.exec(
                select(IdentityUserRoleModel).where(IdentityUserRoleModel.user_id == user.id)
            )
            for membership in memberships.all():
                await session.delete(membership)

            claims = await session.exec(
                select(IdentityUserClaimModel).where(IdentityUserClaimModel.user_id == user.id)
            )
            for claim in claims.all():
                await session.delete(claim)

            # dependent rows must be gone before the user row
            await session.flush()
            await session.delete(stored)

        logger.info("Identity user deleted", user_id=user.id)
        return IdentityResult.success()

    async def check_password(self, user: IdentityUserModel, password: str) -> bool:
        if not user.password_hash:
            return False

        verified = await self._password_hasher.verify_password(password, user.password_hash)
        if verified and self._password_hasher.needs_rehash(user.password_hash):
            user.password_hash = await self._password_hasher.hash_password(password)
            async with self._session_factory() as session:
                await session.merge(user)
            logger.info("Password hash upgraded", user_id=user.id)
        return verified

    async def change_password(
        self, user: IdentityUserModel, current_password: str, new_password: str
    ) -> IdentityResult:
        if not await self.check_password(user, current_password):
            return IdentityResult.failed(IdentityErrors.password_mismatch())

        errors = validate_password(new_password, self._config.password_policy)
        if errors:
            return IdentityResult.failed(*errors)

        user.password_hash = await self._password_hasher.hash_password(new_password)
        user.password_change_required = False
        user.updated_at = datetime.now(UTC)
        async with self._session_factory() as session:
            await session.merge(user)

        return IdentityResult.success()

    async def get_claims(self, user: IdentityUserModel) -> list[IdentityClaim]:
        async with self._session_factory() as session:
            result = await session.exec(
                select(IdentityUserClaimModel).where(IdentityUserClaimModel.user_id == user.id)
            )
            return [IdentityClaim(row.claim_type, row.claim_value) for row in result.all()]

    # =========================================================================
    # Memberships
    # =========================================================================

    async def _role_by_name(
        self, session: AsyncSession, name: str
    ) -> IdentityRoleModel | None:
        result = await session.exec(
            select(IdentityRoleModel).where(
                IdentityRoleModel.normalized_name == _normalize(name)
            )
        )
        return result.first()

    async def add_to_role(self, user: IdentityUserModel, role_name: str) -> IdentityResult:
        async with self._session_factory() as session:
            role = await self._role_by_name(session, role_name)
            if role is None:
                return IdentityResult.failed(IdentityErrors.role_not_found(role_name))

            if await session.get(IdentityUserRoleModel, (user.id, role.id)) is not None:
                return IdentityResult.failed(IdentityErrors.user_already_in_role(role.name))

            session.add(IdentityUserRoleModel(user_id=user.id, role_id=role.id))

        return IdentityResult.success()

    async def remove_from_role(
        self, user: IdentityUserModel, role_name: str
    ) -> IdentityResult:
        async with self._session_factory() as session:
            role = await self._role_by_name(session, role_name)
            if role is None:
                return IdentityResult.failed(IdentityErrors.role_not_found(role_name))

            membership = await session.get(IdentityUserRoleModel, (user.id, role.id))
            if membership is None:
                return IdentityResult.failed(IdentityErrors.user_not_in_role(role.name))

            await session.delete(membership)

        return IdentityResult.success()

    async def is_in_role(self, user: IdentityUserModel, role_name: str) -> bool:
        async with self._session_factory() as session:
            role = await self._role_by_name(session, role_name)
            if role is None:
                return False
            return await session.get(IdentityUserRoleModel, (user.id, role.id)) is not None

    async def get_roles(self, user: IdentityUserModel) -> list[IdentityRoleModel]:
        async with self._session_factory() as session:
            stmt = (
                select(IdentityRoleModel)
                .join(
                    IdentityUserRoleModel,
                    IdentityUserRoleModel.role_id == IdentityRoleModel.id,
                )
                .where(IdentityUserRoleModel.user_id == user.id)
                .order_by(IdentityRoleModel.normalized_name)
            )
            result = await session.exec(stmt)
            return list(result.all())

    async def get_users_in_role(self, role_name: str) -> list[IdentityUserModel]:
        async with self._session_factory() as session:
            stmt = (
                select(IdentityUserModel)
                .join(
                    IdentityUserRoleModel,
                    IdentityUserRoleModel.user_id == IdentityUserModel.id,
                )
                .join(
                    IdentityRoleModel,
                    IdentityRoleModel.id == IdentityUserRoleModel.role_id,
                )
                .where(IdentityRoleModel.normalized_name == _normalize(role_name))
                .order_by(IdentityUserModel.normalized_user_name)
            )
            result = await session.exec(stmt)
            return list(result.all())

    # =========================================================================
    # Roles
    # =========================================================================

    async def find_role_by_id(self, role_id: str) -> IdentityRoleModel | None:
        async with self._session_factory() as session:
            return await session.get(IdentityRoleModel, role_id)

    async def find_role_by_name(self, name: str) -> IdentityRoleModel | None:
        async with self._session_factory() as session:
            return await self._role_by_name(session, name)

    async def find_role_by_correlation_id(self, domain_id: str) -> IdentityRoleModel | None:
        async with self._session_factory() as session:
            result = await session.exec(
                select(IdentityRoleModel).where(IdentityRoleModel.domain_id == domain_id)
            )
            return result.first()

    async def list_roles(self) -> list[IdentityRoleModel]:
        async with self._session_factory() as session:
            result = await session.exec(
                select(IdentityRoleModel).order_by(IdentityRoleModel.normalized_name)
            )
            return list(result.all())

    async def create_role(self, role: IdentityRoleModel) -> IdentityResult:
        role.normalized_name = _normalize(role.name) or ""

        async with self._session_factory() as session:
            existing = await self._role_by_name(session, role.name)
            if existing is not None:
                return IdentityResult.failed(IdentityErrors.duplicate_role_name(role.name))
            session.add(role)

        logger.info("Identity role created", role_id=role.id, name=role.name)
        return IdentityResult.success()

    async def update_role(self, role: IdentityRoleModel) -> IdentityResult:
        role.normalized_name = _normalize(role.name) or ""

        async with self._session_factory() as session:
            existing = await self._role_by_name(session, role.name)
            if existing is not None and existing.id != role.id:
                return IdentityResult.failed(IdentityErrors.duplicate_role_name(role.name))
            await session.merge(role)

        return IdentityResult.success()

    async def delete_role(self, role: IdentityRoleModel) -> IdentityResult:
        async with self._session_factory() as session:
            stored = await session.get(IdentityRoleModel, role.id)
            if stored is None:
                return IdentityResult.failed(IdentityErrors.role_not_found(role.name))

            claims = await session.exec(
                select(IdentityRoleClaimModel).where(IdentityRoleClaimModel.role_id == role.id)
            )
            for claim in claims.all():
                await session.delete(claim)

            memberships = await session.exec(
                select(IdentityUserRoleModel).where(IdentityUserRoleModel.role_id == role.id)
            )
            for membership in memberships.all():
                await session.delete(membership)

            await session.flush()
            await session.delete(stored)

        logger.info("Identity role deleted", role_id=role.id, name=role.name)
        return IdentityResult.success()

    async def _find_role_claim(
        self, session: AsyncSession, role: IdentityRoleModel, claim_type: str, claim_value: str
    ) -> IdentityRoleClaimModel | None:
        result = await session.exec(
            select(IdentityRoleClaimModel).where(
                IdentityRoleClaimModel.role_id == role.id,
                IdentityRoleClaimModel.claim_type == claim_type,
                IdentityRoleClaimModel.claim_value == claim_value,
            )
        )
        return result.first()

    async def add_role_claim(
        self, role: IdentityRoleModel, claim_type: str, claim_value: str
    ) -> IdentityResult:
        async with self._session_factory() as session:
            if await self._find_role_claim(session, role, claim_type, claim_value):
                return IdentityResult.failed(
                    IdentityErrors.duplicate_role_claim(claim_type, claim_value)
                )
            session.add(
                IdentityRoleClaimModel(
                    role_id=role.id, claim_type=claim_type, claim_value=claim_value
                )
            )

        return IdentityResult.success()

    async def remove_role_claim(
        self, role: IdentityRoleModel, claim_type: str, claim_value: str
    ) -> IdentityResult:
        async with self._session_factory() as session:
            claim = await self._find_role_claim(session, role, claim_type, claim_value)
            if claim is None:
                return IdentityResult.failed(
                    IdentityErrors.role_claim_not_found(claim_type, claim_value)
                )
            await session.delete(claim)

        return IdentityResult.success()

    async def get_role_claims(self, role: IdentityRoleModel) -> list[IdentityClaim]:
        async with self._session_factory() as session:
            result = await session.exec(
                select(IdentityRoleClaimModel)
                .where(IdentityRoleClaimModel.role_id == role.id)
                .order_by(IdentityRoleClaimModel.id)
            )
            return [IdentityClaim(row.claim_type, row.claim_value) for row in result.all()]

    async def get_roles_with_claim(
        self, claim_type: str, claim_value: str
    ) -> list[IdentityRoleModel]:
        async with self._session_factory() as session:
            stmt = (
                select(IdentityRoleModel)
                .join(
                    IdentityRoleClaimModel,
                    IdentityRoleClaimModel.role_id == IdentityRoleModel.id,
                )
                .where(
                    IdentityRoleClaimModel.claim_type == claim_type,
                    IdentityRoleClaimModel.claim_value == claim_value,
                )
                .order_by(IdentityRoleModel.normalized_name)
            )
            result = await session.exec(stmt)
            return list(result.all())
