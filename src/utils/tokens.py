"""Opaque token generation and storage hashing.

Verification, reset and refresh tokens are random URL-safe strings handed to
the client once. Only their SHA-256 digest is persisted; the digest is
deterministic so an incoming token can be looked up by re-hashing it.
"""

import hashlib
import secrets


def random_token(byte_length: int) -> str:
    """Generate a cryptographically secure URL-safe token.

    Args:
        byte_length: Number of random bytes before encoding.

    Returns:
        str: The plaintext token.
    """
    return secrets.token_urlsafe(byte_length)


def hash_for_storage(token: str) -> str:
    """Return the hex SHA-256 digest stored in place of a plaintext token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
