"""Repository implementations for the infrastructure layer."""

from .session_repository import SessionRepository
from .user_repository import UserRepository

__all__ = ["SessionRepository", "UserRepository"]
