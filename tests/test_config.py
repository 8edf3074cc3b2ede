"""Tests for loading configuration from the environment."""

import os
import sys
from unittest.mock import Mock

import pytest
import uvicorn

from shoplist.__main__ import main
from shoplist.config import (
    AppConfig,
    get_env_int,
    get_env_list,
    get_env_str,
    load_config_from_env,
)

CONFIG_VARIABLES = (
    "DATABASE_PATH",
    "LOGGING_LEVEL",
    "ROOT_PATH",
    "ENVIRONMENT",
    "ALLOWED_ORIGINS",
    "JWT_SECRET",
    "ALGORITHM",
    "ACCESS_TOKEN_EXPIRE_MINUTES",
    "PASSWORD_MIN_LENGTH",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every test against a private environment without config variables."""
    environment = {
        name: value for name, value in os.environ.items() if name not in CONFIG_VARIABLES
    }
    monkeypatch.setattr(os, "environ", environment)


def test_defaults() -> None:
    """Without variables every field falls back to its default."""
    config = load_config_from_env(None)

    assert config.database_path == "./shoplist.db"
    assert config.logging_level == "INFO"
    assert config.root_path == ""
    assert config.environment == "production"
    assert config.allowed_origins == ["*"]
    assert config.secret_key is None
    assert config.algorithm == "HS256"
    assert config.access_token_expire_minutes == 60 * 24
    assert config.password_min_length == 4
    assert not config.seeding_enabled


def test_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    """Variables override the defaults and are parsed to their types."""
    monkeypatch.setenv("DATABASE_PATH", "/tmp/lists.db")  # noqa: S108
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("ALLOWED_ORIGINS", "http://a.example, ,http://b.example")
    monkeypatch.setenv("ALGORITHM", "HS512")
    monkeypatch.setenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15")
    monkeypatch.setenv("PASSWORD_MIN_LENGTH", "8")

    config = load_config_from_env(None)

    assert config.database_path == "/tmp/lists.db"  # noqa: S108
    assert config.environment == "development"
    assert config.seeding_enabled
    assert config.allowed_origins == ["http://a.example", "http://b.example"]
    assert config.algorithm == "HS512"
    assert config.access_token_expire_minutes == 15  # noqa: PLR2004
    assert config.password_min_length == 8  # noqa: PLR2004


def test_env_file_is_loaded(tmp_path) -> None:
    """Values from the .env file are read before the environment is parsed."""
    env_file = tmp_path / ".env"
    env_file.write_text("ENVIRONMENT=test\nROOT_PATH=/lists\n")

    config = load_config_from_env(env_file)

    assert config.environment == "test"
    assert config.root_path == "/lists"


@pytest.mark.parametrize(
    ("variable", "value"),
    [
        ("ENVIRONMENT", "staging"),
        ("ALGORITHM", "RS256"),
        ("ACCESS_TOKEN_EXPIRE_MINUTES", "soon"),
        ("ACCESS_TOKEN_EXPIRE_MINUTES", "0"),
        ("PASSWORD_MIN_LENGTH", "-1"),
    ],
)
def test_invalid_values_raise(
    monkeypatch: pytest.MonkeyPatch,
    variable: str,
    value: str,
) -> None:
    """Malformed or out of range values are rejected at startup."""
    monkeypatch.setenv(variable, value)

    with pytest.raises(ValueError, match=variable):
        load_config_from_env(None)


def test_env_helpers(monkeypatch: pytest.MonkeyPatch) -> None:
    """The typed helpers handle missing, empty and checked values."""
    monkeypatch.setenv("SHOPLIST_TEST_STR", "value")
    monkeypatch.setenv("SHOPLIST_TEST_INT", "")
    monkeypatch.setenv("SHOPLIST_TEST_LIST", ",,")

    assert get_env_str("SHOPLIST_TEST_STR", None) == "value"
    assert get_env_int("SHOPLIST_TEST_INT", 3) == 3  # noqa: PLR2004
    assert get_env_list("SHOPLIST_TEST_LIST", ["*"]) == ["*"]

    with pytest.raises(ValueError, match="required"):
        get_env_str("SHOPLIST_TEST_MISSING", None)
    with pytest.raises(ValueError, match="invalid value"):
        get_env_str("SHOPLIST_TEST_STR", None, lambda value: value == "other")


def test_short_secret_is_replaced(caplog: pytest.LogCaptureFixture) -> None:
    """A missing or short JWT secret is swapped for a random one with a warning."""
    config = AppConfig(
        database_path=":memory:",
        logging_level="INFO",
        root_path="",
        environment="test",
        secret_key="short",  # noqa: S106
    )

    security_manager = config.security_manager

    assert security_manager.secret_key != "short"  # noqa: S105
    assert len(security_manager.secret_key) >= security_manager.MINIMUM_JWT_SECRET_KEY_LENGTH
    assert "JWT_SECRET" in caplog.text


def test_shared_secret_requires_length() -> None:
    config = AppConfig(
        database_path="db",
        logging_level="INFO",
        root_path="",
        environment="test",
    )
    assert not config.has_shared_secret

    config.secret_key = "short"  # noqa: S105
    assert not config.has_shared_secret

    config.secret_key = "s" * 32
    assert config.has_shared_secret


def test_workers_refuse_random_secret(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Several workers must sign tokens with the same configured key."""
    env_file = tmp_path / ".env"
    env_file.write_text("ENVIRONMENT=test\n")
    run = Mock()
    monkeypatch.setattr(uvicorn, "run", run)
    monkeypatch.setattr(
        sys,
        "argv",
        ["shoplist", "--env-file", str(env_file), "--workers", "2"],
    )

    with pytest.raises(SystemExit):
        main()

    run.assert_not_called()


def test_workers_start_with_shared_secret(
    tmp_path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(f"JWT_SECRET={'k' * 64}\n")
    run = Mock()
    monkeypatch.setattr(uvicorn, "run", run)
    monkeypatch.setattr(
        sys,
        "argv",
        ["shoplist", "--env-file", str(env_file), "--workers", "2"],
    )

    main()

    run.assert_called_once()
    assert run.call_args.args == ("shoplist.app:create_app",)
    assert run.call_args.kwargs["workers"] == 2  # noqa: PLR2004
    assert run.call_args.kwargs["factory"] is True
