"""Command-line interface for the user management service."""

from __future__ import annotations
import argparse
import logging
import sys
from getpass import getpass
from typing import Sequence

from usermanagement.config import Settings, load_settings
from usermanagement.errors import RegistrationError
from usermanagement.passwords import PasswordHasher
from usermanagement.registration import RegistrationService
from usermanagement.service import open_store

logger = logging.getLogger("usermanagement.main")

KNOWN_COMMANDS = {"serve", "init-db", "list-users", "create-user"}


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="User management utilities")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    subparsers.add_parser("init-db", help="Initialise the user database")
    subparsers.add_parser("list-users", help="Print every registered user")

    create_parser = subparsers.add_parser("create-user", help="Register a new user")
    create_parser.add_argument("username", help="Unique username used to sign in")
    create_parser.add_argument("email", help="Unique email address")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP service")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address for the web app")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=8080,
        help="Port for the web app (default: 8080)",
    )

    args_list = list(argv) if argv is not None else sys.argv[1:]

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in KNOWN_COMMANDS:
            if any(flag in args_list for flag in ("-h", "--help")):
                return parser.parse_args(args_list)
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _build_service(settings: Settings) -> RegistrationService:
    store = open_store(settings)
    return RegistrationService(store, PasswordHasher(rounds=settings.password_rounds))


def _serve(settings: Settings, *, host: str, port: int) -> None:
    from usermanagement.service import create_app
    import uvicorn

    logger.info("Starting user management site on http://%s:%s", host, port)
    app = create_app(settings=settings)
    uvicorn.run(app, host=host, port=port, log_level=settings.log_level.lower())


def _list_users(service: RegistrationService) -> None:
    users = service.list_users()
    if not users:
        print("No users are currently registered.")
        return

    print(f"{service.count_users()} user(s) found:")
    print(f"{'ID':>4}  {'Username':<24}  {'Email':<32}  Created")
    print("-" * 80)
    for user in users:
        created = user.created_at.strftime("%Y-%m-%d %H:%M:%S %Z") if user.created_at else ""
        print(f"{user.id:>4}  {user.username:<24}  {user.email:<32}  {created}")


def _prompt_for_password() -> str | None:
    for _ in range(3):
        password = getpass("Password: ")
        if not password:
            print("Password must not be empty. Please try again.")
            continue
        confirmation = getpass("Confirm password: ")
        if password != confirmation:
            print("Passwords do not match. Please try again.")
            continue
        return password
    return None


def _create_user(service: RegistrationService, username: str, email: str) -> int:
    password = _prompt_for_password()
    if password is None:
        print("Aborted creating user.")
        return 1

    try:
        user = service.register(username, email, password)
    except RegistrationError as exc:
        print(f"Failed to create user: {exc}")
        return 1

    print(f"Created user #{user.id}: {user.username} <{user.email}>")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for CLI usage."""

    args = _parse_args(argv)
    settings = load_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.command == "serve":
        _serve(settings, host=args.host, port=args.port)
        return 0

    if settings.storage == "memory":
        print(
            f"Cannot run '{args.command}' with the in-memory store; its data is discarded "
            "when this command exits. Configure 'storage: sqlite' instead.",
            file=sys.stderr,
        )
        return 1

    service = _build_service(settings)
    if args.command == "init-db":
        print("Database initialisation complete.")
    elif args.command == "list-users":
        _list_users(service)
    elif args.command == "create-user":
        return _create_user(service, args.username, args.email)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
