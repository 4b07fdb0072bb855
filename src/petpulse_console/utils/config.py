"""
Configuration management utilities.

This module provides environment variable handling with type conversion,
the console's runtime configuration (API base URL, timeouts, currency,
session file location) and logging configuration utilities.
"""

import logging
import logging.config
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union
from urllib.parse import urlparse

from ..exceptions import ConfigurationException

ENV_PREFIX = "PETPULSE_"

DEFAULT_API_BASE_URL = "http://localhost:3000/api"
DEFAULT_SESSION_FILE = Path.home() / ".petpulse" / "session.json"


class ConfigError(ConfigurationException):
    """Exception raised for configuration-related errors."""

    pass


class LogLevel(Enum):
    """Enumeration for log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EnvironmentConfig:
    """Utility class for handling environment variables with type conversion."""

    @staticmethod
    def get_str(
        key: str, default: Optional[str] = None, required: bool = False
    ) -> Optional[str]:
        """
        Get a string environment variable.

        Args:
            key: Environment variable key
            default: Default value if not found
            required: Whether the variable is required

        Returns:
            String value or default

        Raises:
            ConfigError: If required variable is missing
        """
        value = os.getenv(key, default)

        if required and value is None:
            raise ConfigError(f"Required environment variable '{key}' is not set")

        return value

    @staticmethod
    def get_int(
        key: str, default: Optional[int] = None, required: bool = False
    ) -> Optional[int]:
        """
        Get an integer environment variable.

        Raises:
            ConfigError: If required variable is missing or invalid
        """
        value = os.getenv(key)

        if value is None:
            if required:
                raise ConfigError(f"Required environment variable '{key}' is not set")
            return default

        try:
            return int(value)
        except ValueError:
            raise ConfigError(
                f"Environment variable '{key}' must be an integer, got: {value}"
            )

    @staticmethod
    def get_float(
        key: str, default: Optional[float] = None, required: bool = False
    ) -> Optional[float]:
        """
        Get a float environment variable.

        Raises:
            ConfigError: If required variable is missing or invalid
        """
        value = os.getenv(key)

        if value is None:
            if required:
                raise ConfigError(f"Required environment variable '{key}' is not set")
            return default

        try:
            return float(value)
        except ValueError:
            raise ConfigError(
                f"Environment variable '{key}' must be a float, got: {value}"
            )

    @staticmethod
    def get_bool(
        key: str, default: Optional[bool] = None, required: bool = False
    ) -> Optional[bool]:
        """Get a boolean environment variable."""
        value = os.getenv(key)

        if value is None:
            if required:
                raise ConfigError(f"Required environment variable '{key}' is not set")
            return default

        return value.lower() in ("true", "1", "yes", "on", "enabled")


def validate_api_base_url(url: str) -> str:
    """
    Validate the backend base URL and return it without a trailing slash.

    Raises:
        ConfigError: If the URL is empty, has no http(s) scheme or no host
    """
    if not url:
        raise ConfigError("API base URL cannot be empty")

    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise ConfigError(
            f"API base URL must use http or https, got: '{parsed.scheme or url}'"
        )
    if not parsed.hostname:
        raise ConfigError("API base URL must include a hostname")

    return url.rstrip("/")


@dataclass
class ConsoleConfig:
    """Runtime configuration for the console."""

    api_base_url: str = DEFAULT_API_BASE_URL
    timeout: float = 10.0
    currency: str = "usd"
    session_file: Path = DEFAULT_SESSION_FILE
    near_expiry_days: int = 30
    log_level: LogLevel = LogLevel.INFO

    def __post_init__(self) -> None:
        self.api_base_url = validate_api_base_url(self.api_base_url)
        if self.timeout <= 0:
            raise ConfigError("HTTP timeout must be positive")
        if self.near_expiry_days < 0:
            raise ConfigError("Near-expiry window cannot be negative")
        self.currency = self.currency.lower()
        self.session_file = Path(self.session_file).expanduser()

    @classmethod
    def from_environment(cls) -> "ConsoleConfig":
        """
        Build the configuration from ``PETPULSE_*`` environment variables.

        Unset variables fall back to the dataclass defaults.
        """
        level_name = EnvironmentConfig.get_str(f"{ENV_PREFIX}LOG_LEVEL", "INFO")
        try:
            log_level = LogLevel(level_name.upper())
        except ValueError:
            raise ConfigError(
                f"Unknown log level: {level_name}",
                config_key=f"{ENV_PREFIX}LOG_LEVEL",
                config_value=level_name,
            )

        return cls(
            api_base_url=EnvironmentConfig.get_str(
                f"{ENV_PREFIX}API_BASE_URL", DEFAULT_API_BASE_URL
            ),
            timeout=EnvironmentConfig.get_float(f"{ENV_PREFIX}HTTP_TIMEOUT", 10.0),
            currency=EnvironmentConfig.get_str(f"{ENV_PREFIX}CURRENCY", "usd"),
            session_file=Path(
                EnvironmentConfig.get_str(
                    f"{ENV_PREFIX}SESSION_FILE", str(DEFAULT_SESSION_FILE)
                )
            ),
            near_expiry_days=EnvironmentConfig.get_int(
                f"{ENV_PREFIX}NEAR_EXPIRY_DAYS", 30
            ),
            log_level=log_level,
        )


class LoggingConfigurator:
    """Utility class for configuring logging."""

    DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @staticmethod
    def configure_basic_logging(
        level: Union[str, LogLevel] = LogLevel.INFO,
        format_string: Optional[str] = None,
        log_file: Optional[str] = None,
    ) -> None:
        """
        Configure basic logging for the application.

        Args:
            level: Logging level
            format_string: Custom format string
            log_file: Optional log file path
        """
        if isinstance(level, LogLevel):
            level = level.value

        basic_config_args: Dict[str, Any] = {
            "level": level,
            "format": format_string or LoggingConfigurator.DEFAULT_FORMAT,
            "datefmt": "%Y-%m-%d %H:%M:%S",
        }

        if log_file:
            basic_config_args["filename"] = log_file
            basic_config_args["filemode"] = "a"

        logging.basicConfig(**basic_config_args)

    @staticmethod
    def configure_structured_logging(
        config_dict: Optional[Dict[str, Any]] = None,
        config_file: Optional[str] = None,
        level: Union[str, LogLevel] = LogLevel.INFO,
    ) -> None:
        """
        Configure structured logging using a dictionary or file.

        Args:
            config_dict: Logging configuration dictionary
            config_file: Path to logging configuration file
            level: Level for the ``petpulse_console`` logger in the default config
        """
        if isinstance(level, LogLevel):
            level = level.value

        if config_file and Path(config_file).exists():
            logging.config.fileConfig(config_file)
        elif config_dict:
            logging.config.dictConfig(config_dict)
        else:
            default_config = {
                "version": 1,
                "disable_existing_loggers": False,
                "formatters": {
                    "standard": {"format": LoggingConfigurator.DEFAULT_FORMAT},
                },
                "handlers": {
                    "console": {
                        "class": "logging.StreamHandler",
                        "level": level,
                        "formatter": "standard",
                        "stream": "ext://sys.stderr",
                    }
                },
                "loggers": {
                    "petpulse_console": {
                        "level": level,
                        "handlers": ["console"],
                        "propagate": False,
                    },
                    "httpx": {"level": "WARNING"},
                },
                "root": {"level": "WARNING", "handlers": ["console"]},
            }
            logging.config.dictConfig(default_config)
