"""
Permission Repository Implementation

SQLModel-based implementation of the permission repository interface.
"""

from collections.abc import Iterable

from sqlalchemy.exc import IntegrityError
from sqlmodel import col, select

from rolegate.core.errors import RepositoryError
from rolegate.modules.identity.domain.aggregates.permission import Permission
from rolegate.modules.identity.domain.interfaces.repositories.permission_repository import (
    IPermissionRepository,
)
from rolegate.modules.identity.domain.value_objects.identifiers import PermissionId
from rolegate.modules.identity.domain.value_objects.permission_name import (
    PermissionName,
)

from ..models.permission_model import PermissionModel
from ..stores.sql_identity_store import SessionFactory


class SQLPermissionRepository(IPermissionRepository):
    """SQLModel implementation of permission repository."""

    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory

    async def find_by_id(self, permission_id: PermissionId) -> Permission | None:
        """Find permission by ID."""
        async with self._session_factory() as session:
            model = await session.get(PermissionModel, permission_id.value)
            return model.to_domain() if model else None

    async def find_by_name(self, name: PermissionName) -> Permission | None:
        """Find permission by name."""
        async with self._session_factory() as session:
            stmt = select(PermissionModel).where(PermissionModel.name == name.value)
            result = await session.exec(stmt)
            model = result.first()
            return model.to_domain() if model else None

    async def find_by_names(self, names: Iterable[str]) -> list[Permission]:
        wanted = sorted(set(names))
        if not wanted:
            return []

        async with self._session_factory() as session:
            stmt = (
                select(PermissionModel)
                .where(col(PermissionModel.name).in_(wanted))
                .order_by(PermissionModel.name)
            )
            result = await session.exec(stmt)
            return [model.to_domain() for model in result.all()]

    async def list_all(self) -> list[Permission]:
        async with self._session_factory() as session:
            result = await session.exec(select(PermissionModel).order_by(PermissionModel.name))
            return [model.to_domain() for model in result.all()]

    async def add(self, permission: Permission) -> None:
        """Insert permission; the name must be unique."""
        try:
            async with self._session_factory() as session:
                stmt = select(PermissionModel.id).where(
                    PermissionModel.name == permission.name.value
                )
                if (await session.exec(stmt)).first() is not None:
                    raise RepositoryError(
                        f"Permission '{permission.name}' already exists", operation="add"
                    )
                session.add(PermissionModel.from_domain(permission))
        except IntegrityError as e:
            raise RepositoryError(
                f"Failed to insert permission '{permission.name}'", operation="add"
            ) from e

    async def update(self, permission: Permission) -> None:
        async with self._session_factory() as session:
            model = await session.get(PermissionModel, permission.id.value)
            if model is None:
                raise RepositoryError(
                    f"Permission {permission.id} not found", operation="update"
                )
            model.update_from_domain(permission)
            session.add(model)

    async def delete(self, permission_id: PermissionId) -> bool:
        async with self._session_factory() as session:
            model = await session.get(PermissionModel, permission_id.value)
            if model is None:
                return False
            await session.delete(model)
            return True
