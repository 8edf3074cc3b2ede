"""Configuration management for the shopping list service.

This module provides utilities for loading and validating configuration
from environment variables.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from shoplist.app.auth import SecurityManager

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

_MINUTES_IN_DAY = 60 * 24
_DEFAULT_PASSWORD_MIN_LENGTH = 4
_HMAC_ALGORITHMS = ("HS256", "HS384", "HS512")
ENVIRONMENTS = ("development", "test", "production")
SEEDABLE_ENVIRONMENTS = ("development", "test")


def configure_logging(app_config: "AppConfig") -> None:
    """Configure logging based on the application configuration.

    :param app_config: The application configuration instance
    """
    if not app_config.logging_level:
        logging.basicConfig(level=logging.INFO, force=True)
        return

    numeric_level = getattr(logging, app_config.logging_level.upper(), None)
    if not isinstance(numeric_level, int):
        LOGGER.warning("Invalid log level: %s, using INFO", app_config.logging_level)
        numeric_level = logging.INFO
    logging.basicConfig(level=numeric_level, force=True)


@dataclass
class AppConfig:
    """Holds application configuration loaded from environment variables."""

    database_path: str
    logging_level: str | None
    root_path: str
    environment: str
    allowed_origins: list[str] = field(default_factory=lambda: ["*"])

    secret_key: str | None = None
    algorithm: str = SecurityManager.DEFAULT_JWT_ALGORITHM
    access_token_expire_minutes: int = _MINUTES_IN_DAY
    password_min_length: int = _DEFAULT_PASSWORD_MIN_LENGTH

    @property
    def seeding_enabled(self) -> bool:
        """Whether the dummy seed endpoint may touch the database."""
        return self.environment in SEEDABLE_ENVIRONMENTS

    @property
    def has_shared_secret(self) -> bool:
        """Whether ``JWT_SECRET`` is long enough to be used as configured."""
        return (
            self.secret_key is not None
            and len(self.secret_key) >= SecurityManager.MINIMUM_JWT_SECRET_KEY_LENGTH
        )

    @property
    def security_manager(self) -> SecurityManager:
        """Create a SecurityManager instance from this configuration.

        :return: Configured SecurityManager instance
        """
        if not self.has_shared_secret:
            LOGGER.warning("JWT_SECRET is not set or too short, generating a random key")
            self.secret_key = os.urandom(SecurityManager.MINIMUM_JWT_SECRET_KEY_LENGTH).hex()

        return SecurityManager(
            secret_key=self.secret_key,
            algorithm=self.algorithm,
            expire_minutes=self.access_token_expire_minutes,
            password_min_length=self.password_min_length,
        )


def get_env_str(
    var_name: str,
    default: str | None,
    value_checker: "Callable[[str], bool] | None" = None,
) -> str:
    """Get an environment variable as a string with optional constraints.

    :param var_name: Name of the environment variable
    :param default: Default value if the variable is not set
    :param value_checker: Optional function to validate the value
    :return: The environment variable value
    :raises ValueError: If the value does not meet the constraints
    """
    value = os.getenv(var_name, default)
    if value is None:
        msg = f"Environment variable {var_name} is required"
        raise ValueError(msg)

    if value_checker and not value_checker(value):
        msg = f"Environment variable {var_name} has invalid value: {value}"
        raise ValueError(msg)

    return value


def get_env_int(
    var_name: str,
    default: int,
    value_checker: "Callable[[int], bool] | None" = None,
) -> int:
    """Get an environment variable as an integer with optional constraints.

    :param var_name: Name of the environment variable
    :param default: Default value if the variable is not set
    :param value_checker: Optional function to validate the value
    :return: The environment variable value as an integer
    :raises ValueError: If the value does not meet the constraints or is not an integer
    """
    value_str = os.getenv(var_name)
    if value_str is None or value_str == "":
        return default

    if not value_str.isnumeric():
        msg = f"Environment variable {var_name} must be an integer, got: {value_str}"
        raise ValueError(msg)

    value = int(value_str)

    if value_checker and not value_checker(value):
        msg = f"Environment variable {var_name} has invalid value: {value}"
        raise ValueError(msg)

    return value


def get_env_list(var_name: str, default: list[str]) -> list[str]:
    """Get a comma separated environment variable as a list of strings.

    Blank entries are dropped, so ``"a,,b"`` yields ``["a", "b"]``.

    :param var_name: Name of the environment variable
    :param default: Default value if the variable is not set or empty
    :return: The parsed list
    """
    value_str = os.getenv(var_name)
    if not value_str:
        return default

    values = [item.strip() for item in value_str.split(",") if item.strip()]
    return values or default


def load_config_from_env(env_file: "str | Path | None") -> AppConfig:
    """Load application configuration from environment variables.

    :param env_file: Optional .env file loaded before reading the environment
    :return: An AppConfig instance populated with environment variable values
    """
    if env_file:
        load_dotenv(dotenv_path=env_file)

    return AppConfig(
        database_path=get_env_str("DATABASE_PATH", "./shoplist.db"),
        logging_level=get_env_str("LOGGING_LEVEL", "INFO"),
        root_path=get_env_str("ROOT_PATH", ""),
        environment=get_env_str(
            "ENVIRONMENT",
            "production",
            lambda environment: environment in ENVIRONMENTS,
        ),
        allowed_origins=get_env_list("ALLOWED_ORIGINS", ["*"]),
        secret_key=os.getenv("JWT_SECRET"),
        algorithm=get_env_str(
            "ALGORITHM",
            SecurityManager.DEFAULT_JWT_ALGORITHM,
            lambda algorithm: algorithm in _HMAC_ALGORITHMS,
        ),
        access_token_expire_minutes=get_env_int(
            "ACCESS_TOKEN_EXPIRE_MINUTES",
            _MINUTES_IN_DAY,  # default 1 day
            lambda minutes: minutes > 0,
        ),
        password_min_length=get_env_int(
            "PASSWORD_MIN_LENGTH",
            _DEFAULT_PASSWORD_MIN_LENGTH,
            lambda length: length > 0,
        ),
    )
