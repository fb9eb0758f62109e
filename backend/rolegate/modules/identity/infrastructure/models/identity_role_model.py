"""
Identity Role Models

SQLModel definitions for identity store roles, user-role memberships and
role claims. Permission grants are stored as role claims whose type is the
configured permission claim type and whose value is the permission name.
"""

from datetime import UTC, datetime
from uuid import uuid4

from sqlmodel import Field, SQLModel

from .identity_user_model import DOMAIN_ID_MAX_LENGTH


class IdentityRoleModel(SQLModel, table=True):
    """External role record."""

    __tablename__ = "identity_roles"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True, max_length=450)
    name: str = Field(max_length=256)
    normalized_name: str = Field(max_length=256, index=True, unique=True)
    description: str = Field(default="", max_length=1024)
    is_system_defined: bool = Field(default=False, index=True)

    # Correlation with RoleId
    domain_id: str | None = Field(
        default=None, max_length=DOMAIN_ID_MAX_LENGTH, index=True, unique=True
    )

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class IdentityUserRoleModel(SQLModel, table=True):
    """Membership of a user record in a role record."""

    __tablename__ = "identity_user_roles"

    user_id: str = Field(foreign_key="identity_users.id", primary_key=True, max_length=450)
    role_id: str = Field(foreign_key="identity_roles.id", primary_key=True, max_length=450)


class IdentityRoleClaimModel(SQLModel, table=True):
    """Claim attached to a role record."""

    __tablename__ = "identity_role_claims"

    id: int | None = Field(default=None, primary_key=True)
    role_id: str = Field(foreign_key="identity_roles.id", index=True, max_length=450)
    claim_type: str = Field(max_length=256, index=True)
    claim_value: str = Field(max_length=1024, index=True)
