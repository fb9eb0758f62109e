"""
Identity User Model

SQLModel definitions for the identity subsystem's user records. These rows
belong to the identity store: their ``id`` is an opaque string and they are
translated to and from ``UserAccount`` by the identity mapper, never by the
models themselves.
"""

from datetime import UTC, datetime
from uuid import uuid4

from sqlmodel import Field, SQLModel

DOMAIN_ID_MAX_LENGTH = 36


class IdentityUserModel(SQLModel, table=True):
    """External identity record."""

    __tablename__ = "identity_users"

    # Identity
    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True, max_length=450)
    user_name: str | None = Field(default=None, max_length=256)
    normalized_user_name: str | None = Field(
        default=None, max_length=256, index=True, unique=True
    )
    email: str | None = Field(default=None, max_length=256)
    normalized_email: str | None = Field(default=None, max_length=256, index=True)
    email_confirmed: bool = Field(default=False)

    # Credentials
    password_hash: str | None = Field(default=None)
    password_change_required: bool = Field(default=False)

    # Lockout
    lockout_end: datetime | None = Field(default=None)
    lockout_enabled: bool = Field(default=True)
    access_failed_count: int = Field(default=0)

    # Profile
    phone_number: str | None = Field(default=None, max_length=32)
    first_name: str | None = Field(default=None, max_length=100)
    middle_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)

    # Correlation with UserAccountId
    domain_id: str | None = Field(
        default=None, max_length=DOMAIN_ID_MAX_LENGTH, index=True, unique=True
    )
    identity_provider: str | None = Field(default=None, max_length=64)

    # Timestamps
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class IdentityUserClaimModel(SQLModel, table=True):
    """Free-form claim attached to a user record."""

    __tablename__ = "identity_user_claims"

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="identity_users.id", index=True, max_length=450)
    claim_type: str = Field(max_length=256)
    claim_value: str = Field(max_length=1024)
