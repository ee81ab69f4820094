"""Domain models for the user management service."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class User:
    """Represents a registered account.

    ``id`` and ``created_at`` are assigned by the record store on insert and
    are ``None`` on a user that has not been persisted yet.
    """

    username: str
    email: str
    password_hash: str
    id: Optional[int] = None
    created_at: Optional[datetime] = None


__all__ = ["User"]
