import argparse
import getpass
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from usermanagement.config import Settings, load_settings
from usermanagement.database import resolve_database_path
from usermanagement.errors import RegistrationError
from usermanagement.passwords import PasswordHasher
from usermanagement.registration import RegistrationService
from usermanagement.service import open_store


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a user account")
    parser.add_argument("username", help="Unique username used to sign in")
    parser.add_argument("email", help="Unique email address")
    parser.add_argument(
        "--db",
        dest="db_path",
        default=None,
        help="Path to the SQLite database (defaults to the configured database_path)",
    )
    return parser.parse_args(argv)


def prompt_for_password() -> str:
    for _ in range(3):
        password = getpass.getpass("Password: ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            print("Passwords do not match. Try again.", file=sys.stderr)
            continue
        if not password:
            print("Password must not be empty.", file=sys.stderr)
            continue
        return password
    raise SystemExit("Failed to set password after three attempts.")


def resolve_settings(db_path: Optional[str]) -> Settings:
    """Load the application settings, pointing them at ``db_path`` when given."""

    settings = load_settings()
    if db_path:
        settings = replace(settings, database_path=resolve_database_path(db_path), storage="sqlite")
    return settings


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    settings = resolve_settings(args.db_path)
    if settings.storage == "memory":
        print(
            "Error: the configured storage is 'memory'; accounts created here would be lost. "
            "Pass --db or configure 'storage: sqlite'.",
            file=sys.stderr,
        )
        return 1

    password = prompt_for_password()
    service = RegistrationService(
        open_store(settings), PasswordHasher(rounds=settings.password_rounds)
    )

    try:
        user = service.register(args.username, args.email, password)
    except RegistrationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Created user #{user.id}: {user.username} <{user.email}>")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
