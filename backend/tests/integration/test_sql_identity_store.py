"""
Integration tests for the SQL identity store.
"""

from uuid import uuid4

import pytest

from rolegate.core.config import IdentityConfig, PasswordPolicyConfig
from rolegate.modules.identity.infrastructure.models import (
    IdentityRoleModel,
    IdentityUserModel,
)
from rolegate.modules.identity.infrastructure.stores import validate_password

pytestmark = pytest.mark.integration

PASSWORD = "Secret123!"


def _user(name: str = "alice", domain_id: str | None = None) -> IdentityUserModel:
    return IdentityUserModel(
        user_name=name,
        email=f"{name}@example.com",
        first_name=name.title(),
        last_name="Smith",
        domain_id=domain_id or str(uuid4()),
    )


def _role(name: str = "Editor") -> IdentityRoleModel:
    return IdentityRoleModel(name=name, normalized_name=name.upper(), domain_id=str(uuid4()))


class TestUsers:
    """Test user record operations."""

    async def test_create_and_find(self, store):
        user = _user()

        result = await store.create(user, PASSWORD)

        assert result.succeeded
        assert (await store.find_by_id(user.id)).user_name == "alice"
        assert (await store.find_by_correlation_id(user.domain_id)).id == user.id
        assert (await store.find_by_username("ALICE")).id == user.id
        assert (await store.find_by_email("Alice@Example.com")).id == user.id
        assert await store.find_by_username("bob") is None

    async def test_create_adds_correlation_claim(self, store, identity_config):
        user = _user()
        await store.create(user, PASSWORD)

        claims = await store.get_claims(user)

        assert [(c.type, c.value) for c in claims] == [
            (identity_config.correlation_claim_type, user.domain_id)
        ]

    async def test_password_is_hashed(self, store):
        user = _user()
        await store.create(user, PASSWORD)

        stored = await store.find_by_id(user.id)

        assert stored.password_hash != PASSWORD
        assert await store.check_password(stored, PASSWORD)
        assert not await store.check_password(stored, "Wrong123!")

    async def test_duplicate_user_name_and_email(self, store):
        await store.create(_user(), PASSWORD)

        duplicate = _user()
        result = await store.create(duplicate, PASSWORD)

        assert not result.succeeded
        assert result.error_codes == ["DuplicateUserName", "DuplicateEmail"]

    async def test_password_policy_enforced(self, store):
        result = await store.create(_user(), "short")

        assert not result.succeeded
        assert "PasswordTooShort" in result.error_codes
        assert await store.count_users() == 0

    async def test_update(self, store):
        user = _user()
        await store.create(user, PASSWORD)

        user.email = "alice.smith@example.com"
        result = await store.update(user)

        assert result.succeeded
        stored = await store.find_by_email("ALICE.SMITH@example.com")
        assert stored.id == user.id

    async def test_update_missing_user(self, store):
        assert (await store.update(_user())).error_codes == ["UserNotFound"]

    async def test_delete_removes_memberships_and_claims(self, store):
        user = _user()
        role = _role()
        await store.create(user, PASSWORD)
        await store.create_role(role)
        await store.add_to_role(user, "Editor")

        result = await store.delete(user)

        assert result.succeeded
        assert await store.find_by_id(user.id) is None
        assert await store.get_users_in_role("Editor") == []
        assert await store.get_claims(user) == []

    async def test_change_password(self, store):
        user = _user()
        await store.create(user, PASSWORD)

        mismatch = await store.change_password(user, "Wrong123!", "Another123!")
        changed = await store.change_password(user, PASSWORD, "Another123!")

        assert mismatch.error_codes == ["PasswordMismatch"]
        assert changed.succeeded
        assert await store.check_password(await store.find_by_id(user.id), "Another123!")

    async def test_list_and_count_with_search(self, store):
        for name in ("carol", "alice", "bob"):
            await store.create(_user(name), PASSWORD)

        page = await store.list_users(offset=0, limit=2)
        matches = await store.list_users(offset=0, limit=10, search_term="ALI")

        assert [u.user_name for u in page] == ["alice", "bob"]
        assert [u.user_name for u in matches] == ["alice"]
        assert await store.count_users() == 3
        assert await store.count_users("bob") == 1

    async def test_search_treats_wildcards_literally(self, store):
        for name in ("a_b", "axb", "pct%user"):
            await store.create(_user(name), PASSWORD)

        underscore = await store.list_users(offset=0, limit=10, search_term="a_b")
        percent = await store.list_users(offset=0, limit=10, search_term="%")

        assert [u.user_name for u in underscore] == ["a_b"]
        assert [u.user_name for u in percent] == ["pct%user"]
        assert await store.count_users("_") == 1


class TestRolesAndMemberships:
    """Test role record operations."""

    async def test_membership_lifecycle(self, store):
        user = _user()
        await store.create(user, PASSWORD)
        await store.create_role(_role("Editor"))

        assert (await store.add_to_role(user, "editor")).succeeded
        assert (await store.add_to_role(user, "Editor")).error_codes == ["UserAlreadyInRole"]
        assert await store.is_in_role(user, "EDITOR")
        assert [r.name for r in await store.get_roles(user)] == ["Editor"]
        assert [u.id for u in await store.get_users_in_role("Editor")] == [user.id]

        assert (await store.remove_from_role(user, "Editor")).succeeded
        assert (await store.remove_from_role(user, "Editor")).error_codes == ["UserNotInRole"]
        assert not await store.is_in_role(user, "Editor")

    async def test_unknown_role(self, store):
        user = _user()
        await store.create(user, PASSWORD)

        assert (await store.add_to_role(user, "Ghost")).error_codes == ["RoleNotFound"]
        assert not await store.is_in_role(user, "Ghost")

    async def test_duplicate_role_name(self, store):
        await store.create_role(_role("Editor"))

        result = await store.create_role(_role("EDITOR"))

        assert result.error_codes == ["DuplicateRoleName"]

    async def test_role_lookup(self, store):
        role = _role()
        await store.create_role(role)

        assert (await store.find_role_by_id(role.id)).name == "Editor"
        assert (await store.find_role_by_name("editor")).id == role.id
        assert (await store.find_role_by_correlation_id(role.domain_id)).id == role.id
        assert [r.name for r in await store.list_roles()] == ["Editor"]

    async def test_role_claims(self, store):
        editor = _role("Editor")
        viewer = _role("Viewer")
        await store.create_role(editor)
        await store.create_role(viewer)

        assert (await store.add_role_claim(editor, "Permission", "Articles.Edit")).succeeded
        duplicate = await store.add_role_claim(editor, "Permission", "Articles.Edit")
        await store.add_role_claim(viewer, "Permission", "Articles.Read")

        assert duplicate.error_codes == ["DuplicateRoleClaim"]
        assert [(c.type, c.value) for c in await store.get_role_claims(editor)] == [
            ("Permission", "Articles.Edit")
        ]
        granting = await store.get_roles_with_claim("Permission", "Articles.Edit")
        assert [r.name for r in granting] == ["Editor"]

        assert (await store.remove_role_claim(editor, "Permission", "Articles.Edit")).succeeded
        missing = await store.remove_role_claim(editor, "Permission", "Articles.Edit")
        assert missing.error_codes == ["RoleClaimNotFound"]

    async def test_delete_role(self, store):
        role = _role()
        await store.create_role(role)
        await store.add_role_claim(role, "Permission", "Articles.Edit")

        assert (await store.delete_role(role)).succeeded
        assert await store.find_role_by_id(role.id) is None
        assert await store.get_roles_with_claim("Permission", "Articles.Edit") == []


@pytest.mark.unit
class TestPasswordPolicy:
    """Test password policy validation."""

    def test_all_rules(self):
        errors = validate_password("aaaa", IdentityConfig().password_policy)

        assert [e.code for e in errors] == [
            "PasswordTooShort",
            "PasswordRequiresNonAlphanumeric",
            "PasswordRequiresDigit",
            "PasswordRequiresUpper",
        ]

    def test_unique_chars(self):
        policy = PasswordPolicyConfig(
            required_length=1,
            required_unique_chars=3,
            require_digit=False,
            require_lowercase=False,
            require_uppercase=False,
            require_non_alphanumeric=False,
        )

        assert [e.code for e in validate_password("aab", policy)] == [
            "PasswordRequiresUniqueChars"
        ]
        assert validate_password("abc", policy) == []
