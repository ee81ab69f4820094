"""Web interface for registering, signing in and browsing users."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional

from fastapi import APIRouter, Depends, FastAPI, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from .auth import AuthenticationGate
from .errors import RegistrationError
from .registration import RegistrationService

logger = logging.getLogger("usermanagement.web")

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
STATIC_DIR = Path(__file__).resolve().parent / "static"

LOGIN_NOTICES = {
    "registered": ("success", "Registration successful. Please sign in."),
    "logout": ("info", "You have been signed out."),
    "error": ("error", "Invalid username or password."),
}


def _format_datetime(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    return value.astimezone(timezone.utc).strftime("%d %b %Y %H:%M %Z")


def build_templates(directory: Path = TEMPLATE_DIR) -> Jinja2Templates:
    templates = Jinja2Templates(directory=str(directory))
    templates.env.globals["format_datetime"] = _format_datetime
    templates.env.globals["now"] = lambda: datetime.now(timezone.utc)
    return templates


def register_ui_routes(
    app: FastAPI,
    service: RegistrationService,
    *,
    gate: AuthenticationGate,
    templates: Jinja2Templates,
) -> None:
    """Expose the HTML pages on the provided FastAPI app."""

    if STATIC_DIR.exists():
        app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    router = APIRouter(include_in_schema=False)

    def _render(
        request: Request,
        view: str,
        data: Optional[Dict[str, object]] = None,
        *,
        status_code: int = status.HTTP_200_OK,
    ) -> HTMLResponse:
        context: Dict[str, object] = {"identity": gate.current_identity(request)}
        if data:
            context.update(data)
        return templates.TemplateResponse(
            request, f"{view}.html", context, status_code=status_code
        )

    def _redirect(request: Request, route_name: str, marker: str | None = None) -> RedirectResponse:
        url = str(request.app.url_path_for(route_name))
        if marker:
            url = f"{url}?{marker}"
        return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)

    @router.get("/", name="home")
    def home(request: Request):
        return _redirect(request, "show_login")

    @router.get("/login", response_class=HTMLResponse, name="show_login")
    def login_form(request: Request):
        notices = [
            {"category": category, "message": message}
            for marker, (category, message) in LOGIN_NOTICES.items()
            if marker in request.query_params
        ]
        return _render(request, "login", {"notices": notices})

    @router.post("/login", name="process_login")
    def process_login(
        request: Request,
        username: str = Form(""),
        password: str = Form(""),
    ):
        user = service.authenticate(username, password)
        if user is None:
            logger.warning("Failed web login attempt for %s", username)
            return _redirect(request, "show_login", "error")

        gate.sign_in(request, user)
        logger.info("User %s signed in", user.username)
        return _redirect(request, "dashboard")

    @router.api_route("/logout", methods=["GET", "POST"], name="logout")
    def logout(request: Request):
        identity = gate.current_identity(request)
        gate.sign_out(request)
        if identity:
            logger.info("User %s signed out", identity)
        return _redirect(request, "show_login", "logout")

    @router.get("/register", response_class=HTMLResponse, name="show_register")
    def register_form(request: Request):
        return _render(request, "register")

    @router.post("/register", name="process_register")
    def process_register(
        request: Request,
        username: str = Form(""),
        email: str = Form(""),
        password: str = Form(""),
    ):
        try:
            service.register(username, email, password)
        except RegistrationError as exc:
            return _render(
                request,
                "register",
                {"error": str(exc), "username": username, "email": email},
            )
        return _redirect(request, "show_login", "registered")

    @router.get("/dashboard", response_class=HTMLResponse, name="dashboard")
    def dashboard(request: Request, username: str = Depends(gate)):
        users = service.list_users()
        total_users = service.count_users()
        return _render(
            request,
            "dashboard",
            {"username": username, "users": users, "totalUsers": total_users},
        )

    app.include_router(router)


__all__ = ["register_ui_routes", "build_templates", "TEMPLATE_DIR"]
