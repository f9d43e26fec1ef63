from datetime import datetime  # For timestamp fields
from typing import Optional  # For optional fields
from uuid import uuid4  # For string primary keys

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, func
from sqlmodel import Column, Field, Index, SQLModel

from src.utils.clock import utc_now


def _new_id() -> str:
    return str(uuid4())


def _user_fk() -> Column:
    return Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )


class User(SQLModel, table=True):
    """Represents a User entity, the identity root of an account.

    A user belongs to exactly one service (tenant). The same email address may
    register independently under different services, so uniqueness is enforced
    on the ``(email, service_id)`` pair rather than on the email alone.

    Credential and verification state lives in one-to-one satellite tables
    (`EmailInfo`, `PasswordInfo`, `LockoutInfo`) that cascade on delete.

    Attributes:
        id: Opaque unique identifier (UUID string).
        name: Display name.
        email: Primary, lower-cased email address.
        phone: Optional phone number.
        avatar: Optional avatar URL.
        service_id: The tenant the account belongs to.
        is_active: Inactive accounts cannot sign in.
        last_login_at: Timestamp of the last successful sign-in.
        created_at: The timestamp of when the account was created.
        updated_at: The timestamp of the last update to the account row.
    """

    __tablename__ = "users"

    id: str = Field(
        default_factory=_new_id,
        sa_column=Column(String(36), primary_key=True),
        description="The unique identifier for the user.",
    )
    name: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Display name.",
    )
    email: str = Field(
        sa_column=Column(String(320), nullable=False, index=True),
        description="Primary email address, unique per service.",
    )
    phone: Optional[str] = Field(default=None, sa_column=Column(String(32), nullable=True))
    avatar: Optional[str] = Field(default=None, sa_column=Column(String(2048), nullable=True))
    service_id: str = Field(
        sa_column=Column(String(64), nullable=False, index=True),
        description="The tenant this account belongs to.",
    )
    is_active: bool = Field(
        default=True,
        sa_column=Column(Boolean, nullable=False, server_default="true"),
        description="Indicates if the account is active. Inactive users cannot sign in.",
    )
    last_login_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True),
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), server_default=func.now(), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(
            DateTime(timezone=True),
            server_default=func.now(),
            onupdate=func.now(),
            nullable=False,
        ),
    )

    __table_args__ = (
        Index("ux_users_email_service_id", "email", "service_id", unique=True),
        {"extend_existing": True},
    )


class EmailInfo(SQLModel, table=True):
    """Email verification state of an account.

    ``verification_token`` holds the SHA-256 digest of the token that was
    emailed, never the token itself. ``pending_email`` is set while an email
    change awaits confirmation and is swapped into `User.email` only when that
    confirmation succeeds. ``provider`` is null for local accounts, otherwise
    the OAuth provider that created the account.
    """

    __tablename__ = "email_info"

    user_id: str = Field(sa_column=_user_fk())
    verified: bool = Field(default=False, sa_column=Column(Boolean, nullable=False, server_default="false"))
    verification_token: Optional[str] = Field(
        default=None,
        sa_column=Column(String(64), nullable=True, index=True),
    )
    verification_token_expires_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True),
    )
    pending_email: Optional[str] = Field(default=None, sa_column=Column(String(320), nullable=True))
    provider: Optional[str] = Field(default=None, sa_column=Column(String(32), nullable=True))

    __table_args__ = {"extend_existing": True}


class PasswordInfo(SQLModel, table=True):
    """Password credential state. A null hash means no password has been set."""

    __tablename__ = "password_info"

    user_id: str = Field(sa_column=_user_fk())
    password_hash: Optional[str] = Field(default=None, sa_column=Column(String(255), nullable=True))
    reset_token: Optional[str] = Field(
        default=None,
        sa_column=Column(String(64), nullable=True, index=True),
    )
    reset_token_expires_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True),
    )

    __table_args__ = {"extend_existing": True}


class LockoutInfo(SQLModel, table=True):
    """Failed sign-in tracking.

    ``locked_until`` is authoritative: an account is locked only while it lies
    in the future. ``is_locked`` is kept as a hint for reporting.
    """

    __tablename__ = "lockout_info"

    user_id: str = Field(sa_column=_user_fk())
    is_locked: bool = Field(default=False, sa_column=Column(Boolean, nullable=False, server_default="false"))
    locked_until: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True),
    )
    failed_attempts: int = Field(default=0, sa_column=Column(Integer, nullable=False, server_default="0"))

    __table_args__ = {"extend_existing": True}


class InactiveUser(SQLModel, table=True):
    """Audit copy of an account, written just before the account is deleted."""

    __tablename__ = "inactive_users"

    id: str = Field(
        default_factory=_new_id,
        sa_column=Column(String(36), primary_key=True),
    )
    user_id: str = Field(sa_column=Column(String(36), nullable=False, index=True))
    name: str = Field(sa_column=Column(String(255), nullable=False))
    email: str = Field(sa_column=Column(String(320), nullable=False))
    phone: Optional[str] = Field(default=None, sa_column=Column(String(32), nullable=True))
    service_id: str = Field(sa_column=Column(String(64), nullable=False))
    account_created_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True),
    )
    archived_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), server_default=func.now(), nullable=False),
    )

    __table_args__ = {"extend_existing": True}
