"""
Shared fixtures.

Integration fixtures run against an in-memory SQLite database that lives for
the duration of a single test.
"""

import pytest

from rolegate.core.config import DatabaseConfig, IdentityConfig, PasswordHashingConfig
from rolegate.core.database import DatabaseSessionManager
from rolegate.core.enums import Environment
from rolegate.core.events import DomainEvent, InMemoryEventBus
from rolegate.core.logging import LogConfig, configure_logging
from rolegate.modules.identity.domain.aggregates import UserAccount
from rolegate.modules.identity.domain.value_objects import Email, PersonName, UserName
from rolegate.modules.identity.infrastructure.adapters import PasswordHasherAdapter
from rolegate.modules.identity.infrastructure.events import DomainEventDispatcher
from rolegate.modules.identity.infrastructure.mapping import IdentityMapper
from rolegate.modules.identity.infrastructure.repositories import (
    SQLPermissionRepository,
)
from rolegate.modules.identity.infrastructure.services import (
    IdentityAuthorizationProvider,
)
from rolegate.modules.identity.infrastructure.stores import SqlIdentityStore

configure_logging(LogConfig(environment=Environment.TESTING))


@pytest.fixture
def identity_config():
    """Identity settings with cheap hashing parameters."""
    return IdentityConfig(
        password_hashing=PasswordHashingConfig(time_cost=1, memory_cost=8192)
    )


@pytest.fixture
def mapper(identity_config):
    return IdentityMapper(identity_config)


@pytest.fixture
def password_hasher(identity_config):
    return PasswordHasherAdapter(identity_config.password_hashing)


@pytest.fixture
async def database():
    manager = DatabaseSessionManager(DatabaseConfig(url="sqlite+aiosqlite:///:memory:"))
    await manager.create_schema()
    yield manager
    await manager.dispose()


@pytest.fixture
def store(database, password_hasher, identity_config):
    return SqlIdentityStore(database.session, password_hasher, identity_config)


@pytest.fixture
def permission_repository(database):
    return SQLPermissionRepository(database.session)


@pytest.fixture
def event_bus():
    return InMemoryEventBus()


@pytest.fixture
def published_events(event_bus):
    """Every event published on the bus, in order."""
    events = []
    event_bus.subscribe(DomainEvent, events.append)
    return events


@pytest.fixture
def provider(store, permission_repository, mapper, event_bus, identity_config):
    return IdentityAuthorizationProvider(
        store=store,
        permission_repository=permission_repository,
        mapper=mapper,
        dispatcher=DomainEventDispatcher(event_bus),
        config=identity_config,
    )


def build_account(
    username: str = "alice",
    email: str = "alice@example.com",
    first_name: str = "Alice",
    last_name: str = "Smith",
) -> UserAccount:
    """Build a new pending account with its creation event pending."""
    return UserAccount.create(
        UserName(username), Email(email), PersonName(first_name, last_name)
    ).value


@pytest.fixture
def account_factory():
    return build_account
