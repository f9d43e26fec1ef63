from __future__ import annotations

"""Response Pydantic models for token and session data."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from src.domain.value_objects.token_pair import TokenPair as IssuedTokens


class TokenPair(BaseModel):
    """Access & refresh tokens with additional metadata."""

    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int  # Access token expiration time in seconds

    @classmethod
    def from_issued(cls, tokens: IssuedTokens) -> "TokenPair":
        return cls(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            token_type=tokens.token_type,
            expires_in=tokens.expires_in,
        )


class SessionOut(BaseModel):
    """An active session. The refresh token digest is never exposed."""

    id: str
    device_id: Optional[str] = None
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    expires_at: datetime

    model_config = {"from_attributes": True}
