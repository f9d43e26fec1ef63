from datetime import datetime  # For timestamp fields
from typing import Optional  # For optional fields
from uuid import uuid4  # For string primary keys

from sqlalchemy import DateTime, ForeignKey, String, func
from sqlmodel import Column, Field, Index, SQLModel

from src.utils.clock import utc_now

DEVICE_ID_MAX_LENGTH = 255
USER_AGENT_MAX_LENGTH = 512
IP_ADDRESS_MAX_LENGTH = 64


class Session(SQLModel, table=True):
    """Represents one authenticated device or browser session.

    A session is identified to the client by an opaque refresh token. Only the
    SHA-256 digest of that token is stored in ``refresh_token``; the plaintext
    is returned once, when the session is issued.

    At most one session exists per ``(user_id, device_id)``: issuing a new
    session for the same device overwrites the previous row. Sessions without a
    device id are not deduplicated, since PostgreSQL treats NULLs as distinct in
    unique indexes.

    Attributes:
        id: The unique identifier for the session record.
        user_id: The owning account. Rows are removed with the account.
        device_id: Client-supplied device identifier, if any.
        refresh_token: Digest of the current refresh token.
        user_agent: User-Agent header seen when the session was issued.
        ip_address: Client IP seen when the session was issued.
        expires_at: After this instant the refresh token is no longer accepted.
        created_at: The timestamp when the session was first created.
        updated_at: The timestamp of the last rotation.
    """

    __tablename__ = "sessions"

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        sa_column=Column(String(36), primary_key=True),
    )
    user_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
    )
    device_id: Optional[str] = Field(default=None, sa_column=Column(String(DEVICE_ID_MAX_LENGTH), nullable=True))
    refresh_token: str = Field(sa_column=Column(String(64), nullable=False))
    user_agent: Optional[str] = Field(default=None, sa_column=Column(String(USER_AGENT_MAX_LENGTH), nullable=True))
    ip_address: Optional[str] = Field(default=None, sa_column=Column(String(IP_ADDRESS_MAX_LENGTH), nullable=True))
    expires_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
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
        Index("ux_sessions_refresh_token", "refresh_token", unique=True),
        Index("ux_sessions_user_id_device_id", "user_id", "device_id", unique=True),
        Index("ix_sessions_expires_at", "expires_at"),
        {"extend_existing": True},
    )
