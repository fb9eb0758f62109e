"""
Integration tests for the identity-backed authorization provider.
"""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
import structlog

from rolegate.core.domain.result import ErrorType
from rolegate.modules.identity.domain.aggregates import Role
from rolegate.modules.identity.domain.enums import PermissionType, UserStatus
from rolegate.modules.identity.domain.events import (
    PermissionCreated,
    RoleCreated,
    RolePermissionAdded,
    UserAccountCreated,
    UserAccountRoleAdded,
)
from rolegate.modules.identity.domain.value_objects import (
    Email,
    PermissionId,
    PermissionName,
    RoleId,
    UserAccountId,
)
from rolegate.modules.identity.infrastructure.stores.identity_store import (
    IdentityError,
    IdentityResult,
)

pytestmark = pytest.mark.integration

PASSWORD = "Secret123!"


async def _editor_scenario(provider, account_factory):
    """Articles permissions, an Editor role granting update, and alice holding it."""
    standard = (await provider.create_standard_permissions("Articles")).value
    update = next(p for p in standard if p.name.value == "Articles.Update")
    publish = (
        await provider.create_permission(
            PermissionName("Articles.Publish"), "Publish articles", PermissionType.EXECUTE
        )
    ).value

    editor = (await provider.create_role("Editor", "Edits articles")).value
    assert (await provider.add_permission_to_role(editor.id, update.id)).is_success

    alice = (await provider.create_user(account_factory(), PASSWORD)).value
    assert (await provider.assign_role_to_user(alice.id, editor.id)).is_success

    return alice, editor, update, publish


class TestAuthorization:
    """Test permission and role checks."""

    async def test_editor_scenario(self, provider, account_factory):
        alice, editor, update, publish = await _editor_scenario(provider, account_factory)

        assert (await provider.has_permission(alice.id, "Articles.Update")).value
        assert (await provider.has_permission(alice.id, update.id)).value
        assert not (await provider.has_permission(alice.id, "Articles.Publish")).value
        assert not (await provider.has_permission(alice.id, publish.name)).value
        assert (await provider.get_roles_for_user(alice.id)).value == frozenset({"Editor"})
        assert (await provider.get_permissions_for_user(alice.id)).value == frozenset(
            {"Articles.Update"}
        )
        assert (await provider.has_role(alice.id, "editor")).value
        assert (await provider.has_role(alice.id, editor.id)).value

    async def test_revoked_permission_no_longer_held(self, provider, account_factory):
        alice, editor, update, _ = await _editor_scenario(provider, account_factory)

        assert (await provider.remove_permission_from_role(editor.id, update.id)).is_success

        assert not (await provider.has_permission(alice.id, "Articles.Update")).value
        assert (await provider.get_permissions_for_user(alice.id)).value == frozenset()

    async def test_user_without_roles(self, provider, account_factory):
        bob = (
            await provider.create_user(
                account_factory("bob", "bob@example.com", "Bob", "Jones"), PASSWORD
            )
        ).value

        assert not (await provider.has_permission(bob.id, "Articles.Update")).value
        assert (await provider.get_roles_for_user(bob.id)).value == frozenset()

    async def test_unknown_user(self, provider):
        result = await provider.has_permission(UserAccountId.new(), "Articles.Update")

        assert result.error.code == "Identity.UserNotFound"
        assert result.error.type is ErrorType.NOT_FOUND

    async def test_reverse_lookups(self, provider, account_factory):
        alice, editor, update, publish = await _editor_scenario(provider, account_factory)

        roles = (await provider.get_roles_for_permission(update.id)).value
        users = (await provider.get_users_for_permission(update.id)).value
        holders = (await provider.get_users_for_role(editor.id)).value

        assert [r.id for r in roles] == [editor.id]
        assert [u.id for u in users] == [alice.id]
        assert [u.id for u in holders] == [alice.id]
        assert (await provider.get_users_for_permission(publish.id)).value == []


class TestUsers:
    """Test user account operations."""

    async def test_create_and_load(self, provider, account_factory):
        account = account_factory()

        created = await provider.create_user(account, PASSWORD)
        by_id = await provider.get_user_by_id(account.id)
        by_name = await provider.get_user_by_username("ALICE")
        by_email = await provider.get_user_by_email(Email("alice@example.com"))

        assert created.is_success
        assert by_id.value.id == account.id
        assert by_id.value.status is UserStatus.PENDING_ACTIVATION
        assert by_name.value.id == account.id
        assert by_email.value.id == account.id

    async def test_password_required(self, provider, account_factory):
        for password in (None, ""):
            result = await provider.create_user(account_factory(), password)

            assert result.error.code == "Identity.PasswordRequired"
            assert result.error.type is ErrorType.FAILURE

    async def test_weak_password_reports_store_errors(self, provider, account_factory):
        result = await provider.create_user(account_factory(), "weak")

        assert result.is_failure
        assert "Identity.PasswordTooShort" in [e.code for e in result.errors]
        assert (await provider.get_user_count()).value == 0

    @pytest.mark.parametrize(
        "username,email,code",
        [
            ("bob", "alice@example.com", "Identity.DuplicateEmail"),
            ("alice", "other@example.com", "Identity.DuplicateUserName"),
        ],
    )
    async def test_duplicates(self, provider, account_factory, username, email, code):
        await provider.create_user(account_factory(), PASSWORD)

        result = await provider.create_user(account_factory(username, email), PASSWORD)

        assert result.error.code == code
        assert result.error.type is ErrorType.CONFLICT

    async def test_duplicate_user_id(self, provider, account_factory):
        account = account_factory()
        await provider.create_user(account, PASSWORD)

        result = await provider.create_user(account, PASSWORD)

        assert result.error.code == "Identity.DuplicateUserId"

    async def test_update_profile_and_status(self, provider, account_factory):
        account = account_factory()
        await provider.create_user(account, PASSWORD)

        account.change_email(Email("alice.smith@example.com"))
        account.activate()
        updated = await provider.update_user(account)

        assert updated.is_success
        reloaded = (await provider.get_user_by_id(account.id)).value
        assert reloaded.email.value == "alice.smith@example.com"
        assert reloaded.status is UserStatus.ACTIVE

    async def test_update_rejects_taken_email(self, provider, account_factory):
        alice = account_factory()
        await provider.create_user(alice, PASSWORD)
        await provider.create_user(account_factory("bob", "bob@example.com"), PASSWORD)

        alice.change_email(Email("bob@example.com"))
        result = await provider.update_user(alice)

        assert result.error.code == "Identity.DuplicateEmail"

    async def test_update_unknown_user(self, provider, account_factory):
        result = await provider.update_user(account_factory())

        assert result.error.code == "Identity.UserNotFound"

    async def test_update_syncs_memberships(self, provider, account_factory):
        account = account_factory()
        await provider.create_user(account, PASSWORD)
        editor = (await provider.create_role("Editor", "Edits articles")).value

        account.add_role(editor)
        assert (await provider.update_user(account)).is_success
        assert (await provider.get_roles_for_user(account.id)).value == frozenset({"Editor"})

        account.remove_role(editor)
        assert (await provider.update_user(account)).is_success
        assert (await provider.get_roles_for_user(account.id)).value == frozenset()

    async def test_create_with_roles(self, provider, account_factory):
        editor = (await provider.create_role("Editor", "Edits articles")).value
        account = account_factory()
        account.add_role(editor)

        await provider.create_user(account, PASSWORD)

        roles = (await provider.get_user_roles(account.id)).value
        assert [r.id for r in roles] == [editor.id]

    async def test_delete_user(self, provider, account_factory):
        account = account_factory()
        await provider.create_user(account, PASSWORD)

        assert (await provider.delete_user(account.id)).is_success
        assert (await provider.get_user_by_id(account.id)).error.code == (
            "Identity.UserNotFound"
        )
        assert (await provider.delete_user(account.id)).error.code == "Identity.UserNotFound"

    async def test_change_password(self, provider, account_factory):
        account = account_factory()
        await provider.create_user(account, PASSWORD)

        wrong = await provider.change_password(account.id, "Wrong123!", "Another123!")
        changed = await provider.change_password(account.id, PASSWORD, "Another123!")

        assert wrong.error.code == "Identity.PasswordMismatch"
        assert changed.is_success

    async def test_paging_and_search(self, provider, account_factory):
        for name in ("carol", "alice", "bob"):
            await provider.create_user(account_factory(name, f"{name}@example.com"), PASSWORD)

        first = (await provider.get_users(page=1, page_size=2)).value
        second = (await provider.get_users(page=2, page_size=2)).value
        found = (await provider.get_users(search_term="car")).value

        assert [u.username.value for u in first] == ["alice", "bob"]
        assert [u.username.value for u in second] == ["carol"]
        assert [u.username.value for u in found] == ["carol"]
        assert (await provider.get_user_count()).value == 3
        assert (await provider.get_user_count("bo")).value == 1

    @pytest.mark.parametrize("page,page_size", [(0, 10), (1, 0)])
    async def test_invalid_paging(self, provider, page, page_size):
        result = await provider.get_users(page=page, page_size=page_size)

        assert result.error.code == "Identity.InvalidPaging"
        assert result.error.type is ErrorType.VALIDATION


class TestRoles:
    """Test role management operations."""

    async def test_create_and_load(self, provider):
        role = (await provider.create_role("Editor", "Edits articles")).value

        assert (await provider.get_role_by_id(role.id)).value.name == "Editor"
        assert (await provider.get_role_by_name("EDITOR")).value.id == role.id
        assert [r.name for r in (await provider.get_all_roles()).value] == ["Editor"]

    async def test_duplicate_name(self, provider):
        await provider.create_role("Editor", "Edits articles")

        result = await provider.create_role("editor", "Other")

        assert result.error.code == "Identity.DuplicateRoleName"
        assert result.error.type is ErrorType.CONFLICT

    async def test_invalid_role(self, provider):
        assert (await provider.create_role("", "desc")).error.code == "Role.NameRequired"

    async def test_unknown_role(self, provider):
        assert (await provider.get_role_by_id(RoleId.new())).error.code == (
            "Identity.RoleNotFound"
        )
        assert (await provider.get_role_by_name("Ghost")).error.code == "Identity.RoleNotFound"

    async def test_update_description(self, provider):
        role = (await provider.create_role("Editor", "Edits articles")).value

        result = await provider.update_role_description(role.id, "Edits everything")

        assert result.is_success
        assert (await provider.get_role_by_id(role.id)).value.description == "Edits everything"

    async def test_duplicate_grant_is_conflict(self, provider, account_factory):
        _, editor, update, _ = await _editor_scenario(provider, account_factory)

        result = await provider.add_permission_to_role(editor.id, update.id)

        assert result.error.code == "Role.PermissionAlreadyGranted"
        assert result.error.type is ErrorType.CONFLICT

    async def test_grant_unknown_permission(self, provider):
        role = (await provider.create_role("Editor", "Edits articles")).value

        result = await provider.add_permission_to_role(role.id, PermissionId.new())

        assert result.error.code == "Identity.PermissionNotFound"

    async def test_permissions_for_role(self, provider, account_factory):
        _, editor, update, _ = await _editor_scenario(provider, account_factory)

        permissions = (await provider.get_permissions_for_role(editor.id)).value

        assert [p.id for p in permissions] == [update.id]

    async def test_assignment_is_not_idempotent(self, provider, account_factory):
        alice, editor, _, _ = await _editor_scenario(provider, account_factory)

        result = await provider.assign_role_to_user(alice.id, editor.id)

        assert result.error.code == "UserAccount.RoleAlreadyAssigned"
        assert result.error.type is ErrorType.CONFLICT

    async def test_remove_role_from_user(self, provider, account_factory):
        alice, editor, _, _ = await _editor_scenario(provider, account_factory)

        assert (await provider.remove_role_from_user(alice.id, editor.id)).is_success
        again = await provider.remove_role_from_user(alice.id, editor.id)

        assert again.error.code == "UserAccount.RoleNotAssigned"
        assert not (await provider.has_permission(alice.id, "Articles.Update")).value

    async def test_delete_role_in_use(self, provider, account_factory):
        alice, editor, _, _ = await _editor_scenario(provider, account_factory)

        result = await provider.delete_role(editor.id)

        assert result.error.code == "Identity.RoleInUse"
        assert result.error.type is ErrorType.CONFLICT

        await provider.remove_role_from_user(alice.id, editor.id)
        assert (await provider.delete_role(editor.id)).is_success
        assert (await provider.get_role_by_id(editor.id)).is_failure

    async def test_system_defined_role(self, provider):
        standard = (await provider.create_standard_permissions("Articles")).value
        admin = (
            await provider.create_role_with_permissions(
                "Administrator", "Everything", standard, is_system_defined=True
            )
        ).value

        reloaded = (await provider.get_role_by_id(admin.id)).value
        assert reloaded.is_system_defined
        assert reloaded.permission_names == frozenset(p.name.value for p in standard)

        for result in (
            await provider.delete_role(admin.id),
            await provider.update_role_description(admin.id, "Changed"),
            await provider.remove_permission_from_role(admin.id, standard[0].id),
        ):
            assert result.error.code == "Role.SystemDefined"


class TestPermissions:
    """Test permission catalog operations."""

    async def test_create_and_load(self, provider):
        name = PermissionName("Articles.Publish")
        created = await provider.create_permission(name, "Publish", PermissionType.EXECUTE)

        assert (await provider.get_permission_by_id(created.value.id)).value.name == name
        assert (await provider.get_permission_by_name("Articles.Publish")).value.id == (
            created.value.id
        )
        assert [p.name.value for p in (await provider.get_all_permissions()).value] == [
            "Articles.Publish"
        ]

    async def test_duplicate_name(self, provider):
        name = PermissionName("Articles.Publish")
        await provider.create_permission(name, "Publish", PermissionType.EXECUTE)

        result = await provider.create_permission(name, "Again", PermissionType.EXECUTE)

        assert result.error.code == "Identity.DuplicatePermissionName"

    async def test_lookup_by_invalid_name(self, provider):
        result = await provider.get_permission_by_name("not a name")

        assert result.error.code == "PermissionName.Invalid"

    async def test_update(self, provider):
        created = (
            await provider.create_permission(
                PermissionName("Articles.Publish"), "Publish", PermissionType.EXECUTE
            )
        ).value

        await provider.update_permission_description(created.id, "Publish articles")
        await provider.update_permission_type(created.id, PermissionType.MANAGE)

        reloaded = (await provider.get_permission_by_id(created.id)).value
        assert reloaded.description == "Publish articles"
        assert reloaded.permission_type is PermissionType.MANAGE

    async def test_standard_permissions_idempotent(self, provider):
        first = (await provider.create_standard_permissions("Articles")).value
        second = (await provider.create_standard_permissions("Articles")).value

        assert [p.id for p in first] == [p.id for p in second]
        assert len((await provider.get_all_permissions()).value) == 4

    async def test_system_defined_permission(self, provider):
        standard = (await provider.create_standard_permissions("Articles")).value

        for result in (
            await provider.delete_permission(standard[0].id),
            await provider.update_permission_description(standard[0].id, "Changed"),
        ):
            assert result.error.code == "Permission.SystemDefined"

    async def test_delete_permission_in_use(self, provider, account_factory):
        _, editor, _, publish = await _editor_scenario(provider, account_factory)
        await provider.add_permission_to_role(editor.id, publish.id)

        result = await provider.delete_permission(publish.id)

        assert result.error.code == "Permission.InUse"
        assert result.error.type is ErrorType.CONFLICT

        await provider.remove_permission_from_role(editor.id, publish.id)
        assert (await provider.delete_permission(publish.id)).is_success
        assert (await provider.get_permission_by_id(publish.id)).error.code == (
            "Identity.PermissionNotFound"
        )


class TestEventsAndFailures:
    """Test event publication and the error boundary."""

    async def test_events_published_after_writes(
        self, provider, account_factory, published_events
    ):
        await _editor_scenario(provider, account_factory)

        types = [type(event) for event in published_events]
        assert types.count(PermissionCreated) == 5
        assert RoleCreated in types
        assert RolePermissionAdded in types
        assert UserAccountCreated in types
        assert types[-1] is UserAccountRoleAdded

    async def test_failed_write_publishes_nothing(
        self, provider, account_factory, published_events
    ):
        await provider.create_user(account_factory(), PASSWORD)
        published_events.clear()

        await provider.create_user(account_factory(), PASSWORD)

        assert published_events == []

    async def test_unexpected_exception_becomes_problem(self, provider, store):
        store.find_by_correlation_id = AsyncMock(side_effect=RuntimeError("database down"))

        result = await provider.get_user_by_id(UserAccountId(uuid4()))

        assert result.error.code == "Identity.Error"
        assert result.error.type is ErrorType.PROBLEM

    async def test_operation_bound_to_log_context(self, provider, store):
        seen: list[dict] = []
        store.find_by_correlation_id = AsyncMock(
            side_effect=lambda _: seen.append(structlog.contextvars.get_contextvars())
        )

        await provider.get_user_by_id(UserAccountId(uuid4()))

        assert seen[0]["operation"] == "get_user_by_id"
        assert "operation" not in structlog.contextvars.get_contextvars()

    async def test_create_with_unknown_role_stores_nothing(
        self, provider, store, account_factory, published_events
    ):
        account = account_factory()
        account.add_role(Role.create("Ghost", "Never stored").value)

        result = await provider.create_user(account, PASSWORD)
        retry = await provider.create_user(account, PASSWORD)

        assert result.error.code == "Identity.RoleNotFound"
        assert retry.error.code == "Identity.RoleNotFound"
        assert await store.find_by_correlation_id(str(account.id)) is None
        assert await store.find_by_username("alice") is None
        assert published_events == []

    async def test_create_reverted_when_membership_fails(
        self, provider, store, account_factory, published_events
    ):
        editor = (await provider.create_role("Editor", "Edits articles")).value
        published_events.clear()
        account = account_factory()
        account.add_role(editor)
        store.add_to_role = AsyncMock(
            return_value=IdentityResult.failed(IdentityError("RoleNotFound", "gone"))
        )

        result = await provider.create_user(account, PASSWORD)

        assert result.error.type is ErrorType.NOT_FOUND
        assert await store.find_by_correlation_id(str(account.id)) is None
        assert published_events == []

    async def test_update_with_unknown_role_changes_nothing(
        self, provider, store, account_factory, published_events
    ):
        account = account_factory()
        await provider.create_user(account, PASSWORD)
        published_events.clear()

        account.change_email(Email("new@example.com"))
        account.add_role(Role.create("Ghost", "Never stored").value)
        result = await provider.update_user(account)

        assert result.error.code == "Identity.RoleNotFound"
        record = await store.find_by_correlation_id(str(account.id))
        assert record.email == "alice@example.com"
        assert published_events == []

    async def test_update_reverted_when_membership_fails(
        self, provider, store, account_factory, published_events
    ):
        account = account_factory()
        await provider.create_user(account, PASSWORD)
        editor = (await provider.create_role("Editor", "Edits articles")).value
        published_events.clear()
        store.add_to_role = AsyncMock(
            return_value=IdentityResult.failed(IdentityError("RoleNotFound", "gone"))
        )

        account.change_email(Email("new@example.com"))
        account.add_role(editor)
        result = await provider.update_user(account)

        assert result.is_failure
        record = await store.find_by_correlation_id(str(account.id))
        assert record.email == "alice@example.com"
        assert record.normalized_email == "ALICE@EXAMPLE.COM"
        assert published_events == []

    async def test_role_removed_when_grant_claim_fails(
        self, provider, store, published_events
    ):
        standard = (await provider.create_standard_permissions("Articles")).value
        published_events.clear()
        store.add_role_claim = AsyncMock(
            side_effect=[
                IdentityResult.success(),
                IdentityResult.failed(IdentityError("DuplicateRoleClaim", "taken")),
            ]
        )

        result = await provider.create_role_with_permissions(
            "Editor", "Edits articles", standard[:2]
        )

        assert result.error.code == "Identity.DuplicateRoleClaim"
        assert result.error.type is ErrorType.CONFLICT
        assert await store.find_role_by_name("Editor") is None
        assert published_events == []
