"""Session-backed authentication for the web interface."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Request, status
from fastapi.responses import RedirectResponse

from .models import User

logger = logging.getLogger("usermanagement.auth")

SESSION_IDENTITY_KEY = "username"


class LoginRequired(Exception):
    """Raised when a protected route is requested without a signed-in user."""


class AuthenticationGate:
    """Resolve the signed-in username for protected routes.

    Instances are used as FastAPI dependencies. The identity lives in the
    signed session cookie managed by Starlette's ``SessionMiddleware``; when
    it is absent the dependency raises :class:`LoginRequired`, which
    :func:`redirect_to_login` turns into a redirect.
    """

    def current_identity(self, request: Request) -> Optional[str]:
        username = request.session.get(SESSION_IDENTITY_KEY)
        if not isinstance(username, str) or not username:
            return None
        return username

    async def __call__(self, request: Request) -> str:
        identity = self.current_identity(request)
        if identity is None:
            raise LoginRequired(request.url.path)
        return identity

    def sign_in(self, request: Request, user: User) -> None:
        request.session.clear()
        request.session[SESSION_IDENTITY_KEY] = user.username

    def sign_out(self, request: Request) -> None:
        request.session.clear()


async def redirect_to_login(request: Request, exc: LoginRequired) -> RedirectResponse:
    logger.debug("Redirecting unauthenticated request for %s to the login page", exc)
    return RedirectResponse(
        request.app.url_path_for("show_login"),
        status_code=status.HTTP_303_SEE_OTHER,
    )


__all__ = ["AuthenticationGate", "LoginRequired", "SESSION_IDENTITY_KEY", "redirect_to_login"]
