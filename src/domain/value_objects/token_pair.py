"""Issued credentials returned to a client after sign-in or refresh."""

from dataclasses import dataclass


@dataclass(frozen=True)
class TokenPair:
    """A signed access token and the plaintext refresh token of its session.

    Attributes:
        access_token: Short-lived JWT. Never persisted.
        refresh_token: Opaque token. Only its digest is stored server-side.
        expires_in: Access-token lifetime in seconds.
        token_type: Always ``"Bearer"``.
    """

    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "Bearer"
