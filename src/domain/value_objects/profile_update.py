"""Sparse profile update."""

from dataclasses import dataclass, fields
from typing import Optional


@dataclass(frozen=True)
class ProfileUpdate:
    """Fields a user may change on their own profile.

    Every field is optional; ``None`` means "leave unchanged", so an instance
    with all fields absent is a no-op. ``redirect_url`` is only used to build
    the confirmation link when ``email`` changes.
    """

    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    redirect_url: Optional[str] = None

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self) if f.name != "redirect_url")
