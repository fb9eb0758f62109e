"""
Identity module bootstrap configuration.

Wires the identity store, permission catalog, mapper and services into a
dependency injection container and seeds the default permissions, the
system administrator role and the default administrator account.
"""

from dependency_injector import containers, providers

from rolegate.core.config import IdentityConfig, Settings, get_settings
from rolegate.core.database import DatabaseSessionManager
from rolegate.core.domain.result import ErrorType
from rolegate.core.errors import InfrastructureError
from rolegate.core.events import InMemoryEventBus
from rolegate.core.logging import get_logger
from rolegate.modules.identity.domain.aggregates import Permission, Role, UserAccount
from rolegate.modules.identity.domain.value_objects import Email, PersonName, UserName
from rolegate.modules.identity.infrastructure.adapters import PasswordHasherAdapter
from rolegate.modules.identity.infrastructure.events import DomainEventDispatcher
from rolegate.modules.identity.infrastructure.mapping import IdentityMapper
from rolegate.modules.identity.infrastructure.repositories import (
    SQLPermissionRepository,
)
from rolegate.modules.identity.infrastructure.services import (
    CurrentPrincipalResolver,
    IdentityAuthorizationProvider,
)
from rolegate.modules.identity.infrastructure.stores import SqlIdentityStore

logger = get_logger(__name__)


class IdentityContainer(containers.DeclarativeContainer):
    """Identity module dependency injection container."""

    settings = providers.Singleton(get_settings)

    # Infrastructure
    database = providers.Singleton(
        DatabaseSessionManager,
        config=settings.provided.database,
    )

    password_hasher = providers.Singleton(
        PasswordHasherAdapter,
        config=settings.provided.identity.password_hashing,
    )

    identity_store = providers.Singleton(
        SqlIdentityStore,
        session_factory=database.provided.session,
        password_hasher=password_hasher,
        config=settings.provided.identity,
    )

    permission_repository = providers.Singleton(
        SQLPermissionRepository,
        session_factory=database.provided.session,
    )

    # Mapping and events
    mapper = providers.Singleton(
        IdentityMapper,
        config=settings.provided.identity,
    )

    event_bus = providers.Singleton(InMemoryEventBus)

    dispatcher = providers.Singleton(
        DomainEventDispatcher,
        event_bus=event_bus,
    )

    # Services
    authorization_provider = providers.Singleton(
        IdentityAuthorizationProvider,
        store=identity_store,
        permission_repository=permission_repository,
        mapper=mapper,
        dispatcher=dispatcher,
        config=settings.provided.identity,
    )

    # One per request: call with ``principal=...``
    current_principal = providers.Factory(
        CurrentPrincipalResolver,
        store=identity_store,
        config=settings.provided.identity,
    )


class IdentitySeeder:
    """Creates the schema and the default identity data."""

    def __init__(
        self,
        database: DatabaseSessionManager,
        provider: IdentityAuthorizationProvider,
        config: IdentityConfig,
    ):
        self.database = database
        self.provider = provider
        self.config = config

    async def seed(self) -> None:
        """
        Create the schema and, when enabled, the default data.

        Raises:
            InfrastructureError: If any default record cannot be created
        """
        await self.database.create_schema()

        if not self.config.seed_default_data:
            logger.info("Default identity data seeding disabled")
            return

        permissions = await self._seed_permissions()
        role = await self._seed_admin_role(permissions)
        await self._seed_admin_user(role)

    async def _seed_permissions(self) -> list[Permission]:
        permissions: list[Permission] = []
        for resource in self.config.standard_permission_resources:
            result = await self.provider.create_standard_permissions(resource)
            if result.is_failure:
                raise InfrastructureError(
                    f"Failed to seed permissions for {resource}: {result.error}"
                )
            permissions.extend(result.value)

        logger.info("Standard permissions ready", count=len(permissions))
        return permissions

    async def _seed_admin_role(self, permissions: list[Permission]) -> Role:
        admin = self.config.default_admin

        existing = await self.provider.get_role_by_name(admin.role_name)
        if existing.is_success:
            return existing.value
        if existing.error.type is not ErrorType.NOT_FOUND:
            raise InfrastructureError(f"Failed to load administrator role: {existing.error}")

        created = await self.provider.create_role_with_permissions(
            admin.role_name,
            admin.role_description,
            permissions,
            is_system_defined=True,
        )
        if created.is_failure:
            raise InfrastructureError(f"Failed to seed administrator role: {created.error}")

        logger.info("Administrator role created", role=admin.role_name)
        return created.value

    async def _seed_admin_user(self, role: Role) -> None:
        admin = self.config.default_admin

        existing = await self.provider.get_user_by_email(admin.email)
        if existing.is_success:
            return
        if existing.error.type is not ErrorType.NOT_FOUND:
            raise InfrastructureError(f"Failed to load default administrator: {existing.error}")

        username = UserName.create(admin.username)
        email = Email.create(admin.email)
        person_name = PersonName.create(admin.first_name, admin.last_name)
        invalid = [
            str(part.error) for part in (username, email, person_name) if part.is_failure
        ]
        if invalid:
            raise InfrastructureError(
                f"Invalid default administrator: {'; '.join(invalid)}",
                code="INVALID_DEFAULT_ADMIN",
            )

        created = UserAccount.create(username.value, email.value, person_name.value)
        if created.is_failure:
            raise InfrastructureError(f"Invalid default administrator: {created.error}")

        account = created.value
        account.activate()
        account.add_role(role)

        stored = await self.provider.create_user(account, admin.password)
        if stored.is_failure:
            raise InfrastructureError(
                f"Failed to seed default administrator: {', '.join(e.code for e in stored.errors)}"
            )

        logger.info("Default administrator created", email=email.value.mask())


async def initialize_identity(settings: Settings | None = None) -> IdentityContainer:
    """
    Build the identity container and seed its database.

    Args:
        settings: Settings to use instead of ``get_settings()``

    Returns:
        IdentityContainer: Configured container
    """
    container = IdentityContainer()
    if settings is not None:
        container.settings.override(providers.Object(settings))

    logger.info("Bootstrapping identity module")
    try:
        seeder = IdentitySeeder(
            database=container.database(),
            provider=container.authorization_provider(),
            config=container.settings().identity,
        )
        await seeder.seed()
    except Exception as e:
        logger.exception("Failed to bootstrap identity module", error=str(e))
        raise

    logger.info("Identity module bootstrapped")
    return container
