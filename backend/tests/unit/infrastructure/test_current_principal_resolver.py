"""
Tests for the request-scoped current principal resolver.
"""

from unittest.mock import AsyncMock, Mock
from uuid import uuid4

import pytest

from rolegate.modules.identity.infrastructure.models import (
    IdentityRoleModel,
    IdentityUserModel,
)
from rolegate.modules.identity.infrastructure.services import (
    Claim,
    ClaimsPrincipal,
    CurrentPrincipalResolver,
    LookupState,
)
from rolegate.modules.identity.infrastructure.stores import IdentityClaim, IIdentityStore


@pytest.fixture
def store():
    store = Mock(spec=IIdentityStore)
    store.find_by_correlation_id = AsyncMock(return_value=None)
    store.find_by_id = AsyncMock(return_value=None)
    store.is_in_role = AsyncMock(return_value=False)
    store.get_roles = AsyncMock(return_value=[])
    store.get_role_claims = AsyncMock(return_value=[])
    return store


def _principal(*claims: tuple[str, str]) -> ClaimsPrincipal:
    return ClaimsPrincipal.authenticated(Claim(t, v) for t, v in claims)


@pytest.mark.unit
class TestClaimsOnly:
    """Test answers that come straight from claims."""

    def test_anonymous_principal(self, store, identity_config):
        resolver = CurrentPrincipalResolver(ClaimsPrincipal.anonymous(), store, identity_config)

        assert not resolver.is_authenticated

    def test_authenticated_with_no_claims(self, store, identity_config):
        resolver = CurrentPrincipalResolver(_principal(), store, identity_config)

        assert resolver.is_authenticated

    def test_username_and_email(self, store, identity_config):
        resolver = CurrentPrincipalResolver(
            _principal(("name", "alice"), ("email", "Alice@Example.com")),
            store,
            identity_config,
        )

        assert resolver.username == "alice"
        assert resolver.email.value == "alice@example.com"

    def test_invalid_email_claim(self, store, identity_config):
        resolver = CurrentPrincipalResolver(
            _principal(("email", "nope")), store, identity_config
        )

        assert resolver.email is None

    async def test_user_id_from_correlation_claim(self, store, identity_config):
        domain_id = uuid4()
        resolver = CurrentPrincipalResolver(
            _principal(("DomainId", str(domain_id))), store, identity_config
        )

        user_id = await resolver.get_user_id()

        assert user_id.value == domain_id
        store.find_by_correlation_id.assert_not_awaited()

    async def test_role_claim_short_circuits(self, store, identity_config):
        resolver = CurrentPrincipalResolver(
            _principal(("role", "Editor")), store, identity_config
        )

        assert await resolver.is_in_role("editor")
        store.find_by_id.assert_not_awaited()

    async def test_permission_claim_short_circuits(self, store, identity_config):
        resolver = CurrentPrincipalResolver(
            _principal(("Permission", "Articles.Edit")), store, identity_config
        )

        assert await resolver.has_permission("Articles.Edit")
        store.get_roles.assert_not_awaited()

    async def test_anonymous_is_never_in_role(self, store, identity_config):
        resolver = CurrentPrincipalResolver(
            ClaimsPrincipal((Claim("role", "Editor"),)), store, identity_config
        )

        assert not await resolver.is_in_role("Editor")
        assert not await resolver.has_permission("Articles.Edit")
        assert await resolver.get_user_id() is None
        assert (await resolver.get_roles()).error.code == "Identity.NotAuthenticated"
        assert (await resolver.get_permissions()).error.code == "Identity.NotAuthenticated"


@pytest.mark.unit
class TestStorageFallback:
    """Test lookups that reach the identity store."""

    async def test_user_id_from_stored_record(self, store, identity_config):
        domain_id = uuid4()
        store.find_by_id.return_value = IdentityUserModel(id="opaque", domain_id=str(domain_id))
        resolver = CurrentPrincipalResolver(_principal(("sub", "opaque")), store, identity_config)

        assert (await resolver.get_user_id()).value == domain_id

    async def test_user_id_from_subject_uuid(self, store, identity_config):
        subject = uuid4()
        resolver = CurrentPrincipalResolver(
            _principal(("sub", str(subject))), store, identity_config
        )

        assert (await resolver.get_user_id()).value == subject

    async def test_user_id_none_when_nothing_matches(self, store, identity_config):
        resolver = CurrentPrincipalResolver(_principal(("sub", "opaque")), store, identity_config)

        assert await resolver.get_user_id() is None

    async def test_lookup_prefers_correlation_claim(self, store, identity_config):
        record = IdentityUserModel(id="opaque", domain_id="not-a-uuid")
        store.find_by_correlation_id.return_value = record
        resolver = CurrentPrincipalResolver(
            _principal(("DomainId", "not-a-uuid"), ("sub", "opaque")), store, identity_config
        )

        await resolver.is_in_role("Editor")

        store.find_by_correlation_id.assert_awaited_once_with("not-a-uuid")
        store.find_by_id.assert_not_awaited()
        store.is_in_role.assert_awaited_once_with(record, "Editor")

    async def test_record_looked_up_once(self, store, identity_config):
        store.find_by_id.return_value = IdentityUserModel(id="opaque")
        resolver = CurrentPrincipalResolver(_principal(("sub", "opaque")), store, identity_config)

        await resolver.is_in_role("Editor")
        await resolver.get_roles()
        await resolver.has_permission("Articles.Edit")

        store.find_by_id.assert_awaited_once_with("opaque")

    async def test_not_found_is_cached(self, store, identity_config):
        resolver = CurrentPrincipalResolver(_principal(("sub", "ghost")), store, identity_config)

        assert (await resolver.get_roles()).error.code == "Identity.UserNotFound"
        assert not await resolver.is_in_role("Editor")

        store.find_by_id.assert_awaited_once()
        assert resolver._state is LookupState.LOADED

    async def test_failed_lookup_is_retried(self, store, identity_config):
        store.find_by_id.side_effect = [RuntimeError("database down"), None]
        resolver = CurrentPrincipalResolver(_principal(("sub", "opaque")), store, identity_config)

        assert not await resolver.is_in_role("Editor")
        assert resolver._state is LookupState.NOT_LOADED
        assert not await resolver.is_in_role("Editor")

        assert store.find_by_id.await_count == 2
        assert resolver._state is LookupState.LOADED

    async def test_permissions_through_role_claims(self, store, identity_config):
        record = IdentityUserModel(id="opaque")
        editor = IdentityRoleModel(id="r1", name="Editor", normalized_name="EDITOR")
        store.find_by_id.return_value = record
        store.get_roles.return_value = [editor]
        store.get_role_claims.return_value = [
            IdentityClaim("Permission", "Articles.Edit"),
            IdentityClaim("Other", "Articles.Delete"),
        ]
        resolver = CurrentPrincipalResolver(
            _principal(("sub", "opaque"), ("Permission", "Reports.Read")),
            store,
            identity_config,
        )

        assert await resolver.has_permission("Articles.Edit")
        assert not await resolver.has_permission("Articles.Delete")
        assert (await resolver.get_roles()).value == ["Editor"]
        assert (await resolver.get_permissions()).value == frozenset(
            {"Articles.Edit", "Reports.Read"}
        )
