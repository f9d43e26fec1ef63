from __future__ import annotations

"""Composite response Pydantic models for authentication endpoints."""

from typing import List

from pydantic import BaseModel

from src.adapters.api.v1.auth.schemas.misc import MessageResponse
from src.adapters.api.v1.auth.schemas.responses.token import SessionOut, TokenPair
from src.adapters.api.v1.auth.schemas.responses.user import UserOut


class AuthResponse(MessageResponse):
    """Response returned by sign-in, email verification and OAuth endpoints."""

    user: UserOut
    tokens: TokenPair


class TokenRefreshResponse(MessageResponse):
    tokens: TokenPair


class ProfileResponse(MessageResponse):
    user: UserOut


class SessionListResponse(BaseModel):
    sessions: List[SessionOut]
