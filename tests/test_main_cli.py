import pytest

import main as main_module
from main import _create_user, _list_users, _parse_args
from usermanagement.passwords import PasswordHasher
from usermanagement.registration import RegistrationService
from usermanagement.store import InMemoryUserStore


@pytest.fixture()
def service() -> RegistrationService:
    return RegistrationService(InMemoryUserStore(), PasswordHasher(rounds=1_000))


def test_default_command_invokes_serve() -> None:
    args = _parse_args([])
    assert args.command == "serve"


def test_default_command_accepts_options_without_subcommand() -> None:
    args = _parse_args(["--host", "0.0.0.0", "--port", "9000"])
    assert args.command == "serve"
    assert args.host == "0.0.0.0"
    assert args.port == 9000


def test_create_user_subcommand_arguments() -> None:
    args = _parse_args(["create-user", "bob", "bob@example.com"])
    assert args.command == "create-user"
    assert args.username == "bob"
    assert args.email == "bob@example.com"


def test_create_user_registers_account(service, monkeypatch, capsys) -> None:
    monkeypatch.setattr(main_module, "getpass", lambda prompt: "secret1")

    assert _create_user(service, "bob", "bob@example.com") == 0
    assert "Created user #1: bob <bob@example.com>" in capsys.readouterr().out
    assert service.authenticate("bob", "secret1") is not None


def test_create_user_reports_duplicates(service, monkeypatch, capsys) -> None:
    monkeypatch.setattr(main_module, "getpass", lambda prompt: "secret1")
    _create_user(service, "bob", "bob@example.com")

    assert _create_user(service, "bob", "other@example.com") == 1
    assert "Username already exists." in capsys.readouterr().out
    assert service.count_users() == 1


def test_list_users(service, capsys) -> None:
    _list_users(service)
    assert "No users are currently registered." in capsys.readouterr().out

    service.register("alice", "alice@example.com", "secret1")
    _list_users(service)
    output = capsys.readouterr().out
    assert "1 user(s) found:" in output
    assert "alice@example.com" in output


@pytest.fixture()
def isolated_env(tmp_path, monkeypatch):
    monkeypatch.setenv("USER_MANAGEMENT_CONFIG", str(tmp_path / "absent.yaml"))
    monkeypatch.setenv("USER_MANAGEMENT_DB_PATH", str(tmp_path / "cli.sqlite3"))
    monkeypatch.delenv("USER_MANAGEMENT_STORAGE", raising=False)
    return tmp_path


@pytest.mark.parametrize("command", [["init-db"], ["list-users"], ["create-user", "bob", "bob@example.com"]])
def test_account_commands_refuse_memory_storage(isolated_env, monkeypatch, capsys, command) -> None:
    monkeypatch.setenv("USER_MANAGEMENT_STORAGE", "memory")
    monkeypatch.setattr(main_module, "getpass", lambda prompt: "secret1")

    assert main_module.main(command) == 1
    assert "in-memory store" in capsys.readouterr().err
    assert not (isolated_env / "cli.sqlite3").exists()


def test_init_db_creates_configured_database(isolated_env, capsys) -> None:
    assert main_module.main(["init-db"]) == 0
    assert "Database initialisation complete." in capsys.readouterr().out
    assert (isolated_env / "cli.sqlite3").exists()
