"""Application factory wiring storage, sessions and routes together."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

from .auth import AuthenticationGate, LoginRequired, redirect_to_login
from .config import Settings, load_settings
from .database import Database
from .passwords import PasswordHasher
from .registration import RegistrationService
from .store import InMemoryUserStore, UserStore
from .web import build_templates, register_ui_routes

logger = logging.getLogger("usermanagement.service")

SESSION_COOKIE_NAME = "usermanagement_session"


def open_store(settings: Settings) -> UserStore:
    """Build the record store selected by ``settings``."""

    if settings.storage == "memory":
        logger.warning("Using the in-memory user store; accounts are lost on restart.")
        return InMemoryUserStore()

    database = Database(settings.database_path)
    database.initialize()
    logger.info("Using SQLite user store at %s", settings.database_path)
    return database


def create_app(
    *,
    settings: Settings | None = None,
    store: UserStore | None = None,
    hasher: PasswordHasher | None = None,
    session_secret: str | None = None,
) -> FastAPI:
    """Instantiate the FastAPI application for the user management site."""

    if settings is None:
        settings = load_settings()

    if session_secret is None:
        session_secret = settings.session_secret
    if not session_secret:
        raise RuntimeError(
            "USER_MANAGEMENT_SESSION_SECRET must be configured to use the web interface"
        )

    user_store = store if store is not None else open_store(settings)
    password_hasher = hasher or PasswordHasher(rounds=settings.password_rounds)
    registration = RegistrationService(user_store, password_hasher)
    gate = AuthenticationGate()

    app = FastAPI(
        title="User Management",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    if not settings.secure_cookies:
        logger.warning(
            "Session cookies are not marked as secure. Only disable secure cookies for"
            " local development."
        )
    app.add_middleware(
        SessionMiddleware,
        secret_key=session_secret,
        session_cookie=SESSION_COOKIE_NAME,
        https_only=settings.secure_cookies,
        same_site="lax",
        max_age=settings.session_max_age,
    )
    app.add_exception_handler(LoginRequired, redirect_to_login)

    app.state.store = user_store
    app.state.registration = registration
    app.state.gate = gate

    register_ui_routes(app, registration, gate=gate, templates=build_templates())

    return app


__all__ = ["create_app", "open_store", "SESSION_COOKIE_NAME"]
