"""Password hashing for stored credentials."""
from __future__ import annotations

from passlib.context import CryptContext

DEFAULT_ROUNDS = 600_000


class PasswordHasher:
    """One-way hashing of account passwords using PBKDF2-SHA256."""

    def __init__(self, *, rounds: int = DEFAULT_ROUNDS) -> None:
        if rounds < 1:
            raise ValueError("Password hashing rounds must be a positive integer")
        self._context = CryptContext(
            schemes=["pbkdf2_sha256"],
            deprecated="auto",
            pbkdf2_sha256__default_rounds=rounds,
        )

    def hash(self, password: str) -> str:
        """Return a salted hash of ``password`` suitable for storage."""

        return self._context.hash(password)

    def verify(self, password: str, hashed: str) -> bool:
        """Return ``True`` if ``password`` matches ``hashed``.

        Hashes in an unknown or malformed format never verify.
        """

        if not hashed:
            return False
        try:
            return self._context.verify(password, hashed)
        except (ValueError, TypeError):
            return False


__all__ = ["PasswordHasher", "DEFAULT_ROUNDS"]
