from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from usermanagement.config import Settings
from usermanagement.database import Database
from usermanagement.service import create_app


@pytest.fixture()
def database(tmp_path: Path) -> Database:
    db = Database(tmp_path / "users.sqlite3")
    db.initialize()
    return db


@pytest.fixture()
def app(database: Database):
    settings = Settings(
        database_path=database.path,
        session_secret="tests-secret",
        password_rounds=1_000,
    )
    return create_app(settings=settings, store=database)


@pytest.fixture()
def client(app):
    with TestClient(app) as client:
        yield client


def _register(client: TestClient, username: str, email: str, password: str):
    return client.post(
        "/register",
        data={"username": username, "email": email, "password": password},
        follow_redirects=False,
    )


def _login(client: TestClient, username: str, password: str):
    return client.post(
        "/login",
        data={"username": username, "password": password},
        follow_redirects=False,
    )


def test_root_redirects_to_login(client: TestClient) -> None:
    response = client.get("/", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/login"


def test_root_redirects_to_login_when_signed_in(client: TestClient) -> None:
    _register(client, "bob", "bob@example.com", "secret1")
    assert _login(client, "bob", "secret1").status_code == 303

    response = client.get("/", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/login"


def test_login_page_renders_login_view(client: TestClient) -> None:
    response = client.get("/login")

    assert response.status_code == 200
    assert response.template.name == "login.html"
    assert response.context["notices"] == []


def test_login_page_shows_registration_notice(client: TestClient) -> None:
    response = client.get("/login?registered")

    assert response.status_code == 200
    assert [notice["category"] for notice in response.context["notices"]] == ["success"]
    assert "Registration successful" in response.text


def test_register_page_renders_register_view(client: TestClient) -> None:
    response = client.get("/register")

    assert response.status_code == 200
    assert response.template.name == "register.html"
    assert "error" not in response.context


def test_register_success_redirects_to_login(client: TestClient, database: Database) -> None:
    response = _register(client, "bob", "bob@example.com", "secret1")

    assert response.status_code == 303
    assert response.headers["location"] == "/login?registered"

    saved = database.find_by_username("bob")
    assert saved is not None
    assert saved.email == "bob@example.com"
    assert saved.password_hash != "secret1"


def test_register_duplicate_username_rerenders_form(client: TestClient, database: Database) -> None:
    _register(client, "bob", "bob@example.com", "secret1")

    response = _register(client, "bob", "other@example.com", "secret2")

    assert response.status_code == 200
    assert response.template.name == "register.html"
    assert "already exists" in response.context["error"]
    assert response.context["username"] == "bob"
    assert "secret2" not in response.text
    assert database.count() == 1
    assert database.find_by_username("bob").email == "bob@example.com"


def test_register_duplicate_email_rerenders_form(client: TestClient, database: Database) -> None:
    _register(client, "bob", "bob@example.com", "secret1")

    response = _register(client, "robert", "bob@example.com", "secret2")

    assert response.status_code == 200
    assert response.context["error"] == "Email already exists."
    assert database.count() == 1


def test_register_missing_field_rerenders_form(client: TestClient, database: Database) -> None:
    response = client.post(
        "/register",
        data={"username": "bob", "password": "secret1"},
        follow_redirects=False,
    )

    assert response.status_code == 200
    assert response.context["error"] == "Email is required."
    assert database.count() == 0


def test_dashboard_requires_authentication(client: TestClient) -> None:
    response = client.get("/dashboard", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/login"


def test_dashboard_with_identity_and_no_users(app) -> None:
    app.dependency_overrides[app.state.gate] = lambda: "alice"

    with TestClient(app) as client:
        response = client.get("/dashboard", follow_redirects=False)

    assert response.status_code == 200
    assert response.template.name == "dashboard.html"
    assert response.context["username"] == "alice"
    assert response.context["users"] == []
    assert response.context["totalUsers"] == 0


def test_login_then_dashboard_lists_users(client: TestClient) -> None:
    _register(client, "alice", "alice@example.com", "secret0")
    _register(client, "bob", "bob@example.com", "secret1")

    login = _login(client, "bob", "secret1")
    assert login.status_code == 303
    assert login.headers["location"] == "/dashboard"

    response = client.get("/dashboard", follow_redirects=False)
    assert response.status_code == 200
    assert response.context["username"] == "bob"
    assert response.context["totalUsers"] == 2
    assert [user.username for user in response.context["users"]] == ["alice", "bob"]
    assert "alice@example.com" in response.text
    assert "$pbkdf2-sha256$" not in response.text


def test_login_with_wrong_password_redirects_with_error(client: TestClient) -> None:
    _register(client, "bob", "bob@example.com", "secret1")

    response = _login(client, "bob", "wrong-password")

    assert response.status_code == 303
    assert response.headers["location"] == "/login?error"
    assert client.get("/dashboard", follow_redirects=False).status_code == 303


def test_logout_ends_session(client: TestClient) -> None:
    _register(client, "bob", "bob@example.com", "secret1")
    _login(client, "bob", "secret1")
    assert client.get("/dashboard", follow_redirects=False).status_code == 200

    response = client.post("/logout", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/login?logout"
    assert client.get("/dashboard", follow_redirects=False).status_code == 303


def test_create_app_requires_session_secret(database: Database) -> None:
    settings = Settings(database_path=database.path)

    with pytest.raises(RuntimeError):
        create_app(settings=settings, store=database)
