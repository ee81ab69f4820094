"""Account registration and lookup on top of a :class:`UserStore`."""

from __future__ import annotations

import logging
from typing import List, Optional

from .errors import DuplicateEmail, DuplicateUsername, MissingField, RegistrationError
from .models import User
from .passwords import PasswordHasher
from .store import UserStore

logger = logging.getLogger("usermanagement.registration")


class RegistrationService:
    """Create accounts and answer the questions the dashboard and login ask."""

    def __init__(self, store: UserStore, hasher: PasswordHasher) -> None:
        self._store = store
        self._hasher = hasher

    def register(self, username: str, email: str, password: str) -> User:
        """Create a new user or raise :class:`RegistrationError`.

        Checks run in a fixed order and the first failure wins: blank fields,
        then a taken username, then a taken email address. The store enforces
        the same uniqueness rules on insert, so a concurrent registration that
        slips past these checks fails with the same error.
        """

        for field, value in (("username", username), ("email", email), ("password", password)):
            if not value or not value.strip():
                raise MissingField(field)

        try:
            if self._store.find_by_username(username) is not None:
                raise DuplicateUsername(username)
            if self._store.find_by_email(email) is not None:
                raise DuplicateEmail(email)

            password_hash = self._hasher.hash(password)
            user = self._store.insert(
                User(username=username, email=email, password_hash=password_hash)
            )
        except RegistrationError as exc:
            logger.info("Rejected registration for %s: %s", username, exc)
            raise

        logger.info("Registered user %s (id=%s)", user.username, user.id)
        return user

    def list_users(self) -> List[User]:
        return self._store.find_all()

    def count_users(self) -> int:
        return self._store.count()

    def authenticate(self, username: str, password: str) -> Optional[User]:
        if not username or not password:
            return None
        user = self._store.find_by_username(username)
        if user is None:
            return None
        if not self._hasher.verify(password, user.password_hash):
            return None
        return user


__all__ = ["RegistrationService"]
