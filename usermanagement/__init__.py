"""Self-service registration and a user directory dashboard."""

from __future__ import annotations

from typing import Any

from .database import Database, resolve_database_path
from .errors import DuplicateEmail, DuplicateUsername, MissingField, RegistrationError
from .models import User
from .registration import RegistrationService
from .store import InMemoryUserStore, UserStore


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the web application."""

    from .service import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = [
    "Database",
    "DuplicateEmail",
    "DuplicateUsername",
    "InMemoryUserStore",
    "MissingField",
    "RegistrationError",
    "RegistrationService",
    "User",
    "UserStore",
    "create_app",
    "resolve_database_path",
]
