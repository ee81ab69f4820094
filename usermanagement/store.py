"""Record store interface for user accounts and an in-memory implementation."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, List, Optional

from .errors import DuplicateEmail, DuplicateUsername
from .models import User


class UserStore(ABC):
    """Persistence port for :class:`User` records.

    Implementations must reject a second user with the same username or email
    at insert time, raising :class:`DuplicateUsername` or
    :class:`DuplicateEmail`.
    """

    @abstractmethod
    def insert(self, user: User) -> User:
        """Persist ``user`` and return it with ``id`` and ``created_at`` set."""

    @abstractmethod
    def find_by_username(self, username: str) -> Optional[User]:
        """Return the user whose username equals ``username`` exactly, if any."""

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[User]:
        """Return the user whose email equals ``email`` exactly, if any."""

    @abstractmethod
    def find_all(self) -> List[User]:
        """Return every user ordered by ``id``."""

    @abstractmethod
    def count(self) -> int:
        """Return the number of stored users."""


class InMemoryUserStore(UserStore):
    """Process-local store, useful for demos and tests."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._users: Dict[int, User] = {}
        self._next_id = 1

    def insert(self, user: User) -> User:
        with self._lock:
            for existing in self._users.values():
                if existing.username == user.username:
                    raise DuplicateUsername(user.username)
            for existing in self._users.values():
                if existing.email == user.email:
                    raise DuplicateEmail(user.email)

            stored = replace(user, id=self._next_id, created_at=datetime.now(timezone.utc))
            self._users[stored.id] = stored
            self._next_id += 1
            return stored

    def find_by_username(self, username: str) -> Optional[User]:
        with self._lock:
            for user in self._users.values():
                if user.username == username:
                    return user
        return None

    def find_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            for user in self._users.values():
                if user.email == email:
                    return user
        return None

    def find_all(self) -> List[User]:
        with self._lock:
            return [self._users[key] for key in sorted(self._users)]

    def count(self) -> int:
        with self._lock:
            return len(self._users)


__all__ = ["UserStore", "InMemoryUserStore"]
