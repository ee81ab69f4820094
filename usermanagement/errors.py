"""Business-rule errors raised while registering users."""

from __future__ import annotations


class RegistrationError(ValueError):
    """Raised when a registration request violates a business rule.

    The string form of the exception is the message shown to the user.
    """


class MissingField(RegistrationError):
    def __init__(self, field: str) -> None:
        super().__init__(f"{field.capitalize()} is required.")
        self.field = field


class DuplicateUsername(RegistrationError):
    def __init__(self, username: str) -> None:
        super().__init__("Username already exists.")
        self.username = username


class DuplicateEmail(RegistrationError):
    def __init__(self, email: str) -> None:
        super().__init__("Email already exists.")
        self.email = email


__all__ = ["RegistrationError", "MissingField", "DuplicateUsername", "DuplicateEmail"]
