"""
Permission Model

SQLModel definition for the permission catalog.
"""

from datetime import UTC, datetime
from uuid import UUID

from sqlmodel import Field, SQLModel

from rolegate.modules.identity.domain.aggregates.permission import Permission
from rolegate.modules.identity.domain.enums import PermissionType
from rolegate.modules.identity.domain.value_objects.identifiers import PermissionId
from rolegate.modules.identity.domain.value_objects.permission_name import (
    PermissionName,
)


class PermissionModel(SQLModel, table=True):
    """Permission persistence model."""

    __tablename__ = "permissions"

    id: UUID = Field(primary_key=True)
    name: str = Field(max_length=128, index=True, unique=True)
    description: str = Field(max_length=1024)
    permission_type: int = Field(default=int(PermissionType.READ))
    is_system_defined: bool = Field(default=False, index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_domain(cls, permission: Permission) -> "PermissionModel":
        """Create model from domain aggregate."""
        return cls(
            id=permission.id.value,
            name=permission.name.value,
            description=permission.description,
            permission_type=int(permission.permission_type),
            is_system_defined=permission.is_system_defined,
            created_at=permission.created_at,
        )

    def to_domain(self) -> Permission:
        """Convert to domain aggregate."""
        return Permission.restore(
            permission_id=PermissionId(self.id),
            name=PermissionName(self.name),
            description=self.description,
            permission_type=PermissionType(self.permission_type),
            is_system_defined=self.is_system_defined,
            created_at=self.created_at,
        )

    def update_from_domain(self, permission: Permission) -> None:
        """Copy mutable fields from the aggregate."""
        self.description = permission.description
        self.permission_type = int(permission.permission_type)
