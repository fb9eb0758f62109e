"""
Identity Store Contract

Operations rolegate consumes from the identity subsystem. The subsystem owns
user and role records keyed by opaque string ids, their credentials and their
claims. Write operations report expected failures as an
:class:`IdentityResult` instead of raising; unexpected faults propagate.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from ..models import IdentityRoleModel, IdentityUserModel


@dataclass(frozen=True)
class IdentityError:
    """Structured failure reported by the identity store."""

    code: str
    description: str


@dataclass(frozen=True)
class IdentityResult:
    """Outcome of an identity store write."""

    succeeded: bool
    errors: tuple[IdentityError, ...] = field(default_factory=tuple)

    @classmethod
    def success(cls) -> "IdentityResult":
        return cls(True)

    @classmethod
    def failed(cls, *errors: IdentityError) -> "IdentityResult":
        return cls(False, tuple(errors))

    @property
    def error_codes(self) -> list[str]:
        return [error.code for error in self.errors]


@dataclass(frozen=True)
class IdentityClaim:
    """Claim type/value pair stored against a user or role record."""

    type: str
    value: str


class IIdentityStore(ABC):
    """Consumed contract of the identity subsystem."""

    # =========================================================================
    # User lookup
    # =========================================================================

    @abstractmethod
    async def find_by_correlation_id(self, domain_id: str) -> IdentityUserModel | None:
        """Find a user record by its correlation field."""

    @abstractmethod
    async def find_by_id(self, user_id: str) -> IdentityUserModel | None:
        """Find a user record by its opaque id."""

    @abstractmethod
    async def find_by_username(self, username: str) -> IdentityUserModel | None:
        """Find a user record by case-insensitive user name."""

    @abstractmethod
    async def find_by_email(self, email: str) -> IdentityUserModel | None:
        """Find a user record by case-insensitive email."""

    @abstractmethod
    async def list_users(
        self, offset: int, limit: int, search_term: str | None = None
    ) -> list[IdentityUserModel]:
        """Page through user records ordered by user name."""

    @abstractmethod
    async def count_users(self, search_term: str | None = None) -> int:
        """Count user records matching the optional search term."""

    # =========================================================================
    # User writes
    # =========================================================================

    @abstractmethod
    async def create(self, user: IdentityUserModel, password: str | None) -> IdentityResult:
        """
        Insert a user record, hashing ``password`` when given.

        Returns:
            Failed result on policy violations or duplicate user name/email
        """

    @abstractmethod
    async def update(self, user: IdentityUserModel) -> IdentityResult:
        """Persist changes to an existing user record."""

    @abstractmethod
    async def delete(self, user: IdentityUserModel) -> IdentityResult:
        """Delete a user record with its memberships and claims."""

    @abstractmethod
    async def check_password(self, user: IdentityUserModel, password: str) -> bool:
        """Verify a password against the stored hash."""

    @abstractmethod
    async def change_password(
        self, user: IdentityUserModel, current_password: str, new_password: str
    ) -> IdentityResult:
        """Replace the password after verifying the current one."""

    @abstractmethod
    async def get_claims(self, user: IdentityUserModel) -> list[IdentityClaim]:
        """Claims stored against a user record."""

    # =========================================================================
    # Memberships
    # =========================================================================

    @abstractmethod
    async def add_to_role(self, user: IdentityUserModel, role_name: str) -> IdentityResult:
        """Add a membership by role name."""

    @abstractmethod
    async def remove_from_role(
        self, user: IdentityUserModel, role_name: str
    ) -> IdentityResult:
        """Remove a membership by role name."""

    @abstractmethod
    async def is_in_role(self, user: IdentityUserModel, role_name: str) -> bool:
        """Check a membership by case-insensitive role name."""

    @abstractmethod
    async def get_roles(self, user: IdentityUserModel) -> list[IdentityRoleModel]:
        """Role records the user belongs to, ordered by name."""

    @abstractmethod
    async def get_users_in_role(self, role_name: str) -> list[IdentityUserModel]:
        """User records belonging to a role."""

    # =========================================================================
    # Roles
    # =========================================================================

    @abstractmethod
    async def find_role_by_id(self, role_id: str) -> IdentityRoleModel | None:
        """Find a role record by its opaque id."""

    @abstractmethod
    async def find_role_by_name(self, name: str) -> IdentityRoleModel | None:
        """Find a role record by case-insensitive name."""

    @abstractmethod
    async def find_role_by_correlation_id(self, domain_id: str) -> IdentityRoleModel | None:
        """Find a role record by its correlation field."""

    @abstractmethod
    async def list_roles(self) -> list[IdentityRoleModel]:
        """All role records ordered by name."""

    @abstractmethod
    async def create_role(self, role: IdentityRoleModel) -> IdentityResult:
        """Insert a role record; fails on a duplicate name."""

    @abstractmethod
    async def update_role(self, role: IdentityRoleModel) -> IdentityResult:
        """Persist changes to a role record."""

    @abstractmethod
    async def delete_role(self, role: IdentityRoleModel) -> IdentityResult:
        """Delete a role record with its claims and memberships."""

    @abstractmethod
    async def add_role_claim(
        self, role: IdentityRoleModel, claim_type: str, claim_value: str
    ) -> IdentityResult:
        """Attach a claim to a role record."""

    @abstractmethod
    async def remove_role_claim(
        self, role: IdentityRoleModel, claim_type: str, claim_value: str
    ) -> IdentityResult:
        """Detach a claim from a role record."""

    @abstractmethod
    async def get_role_claims(self, role: IdentityRoleModel) -> list[IdentityClaim]:
        """Claims stored against a role record."""

    @abstractmethod
    async def get_roles_with_claim(
        self, claim_type: str, claim_value: str
    ) -> list[IdentityRoleModel]:
        """Role records carrying a given claim."""
