"""
Configuration management for the configuration watcher.

Handles environment variables and ``.env`` loading, and provides default
settings with validation for watch sessions and package logging.
"""

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from config_watcher.models.exceptions import ConfigurationError


class LogLevel(str, Enum):
    """Logging level enumeration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class WatcherSettings(BaseSettings):
    """
    Central settings for watch sessions.

    Values are read from ``CONFIG_WATCHER_*`` environment variables or a
    ``.env`` file and are used as the defaults of ``WatchOptions``.
    """

    model_config = SettingsConfigDict(
        env_prefix="CONFIG_WATCHER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Watch Session Configuration ===
    debounce_seconds: float = Field(
        default=0.01, ge=0.0, le=60.0, description="Quiet period before a burst of changes is settled"
    )
    log_changes: bool = Field(default=False, description="Log every delivered change through the session logger")
    stop_timeout_seconds: float = Field(
        default=5.0, ge=0.1, le=60.0, description="Maximum wait for the notification observer to stop"
    )

    # === Logging Configuration ===
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    log_file: Path | None = Field(default=None, description="Log file path (stderr if unset)")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s", description="Log message format"
    )

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v):
        """Ensure the log format still renders the message."""
        if "%(message)s" not in v:
            raise ConfigurationError(
                "log_format must contain %(message)s",
                config_key="log_format",
                expected_type="logging format string",
                actual_value=v,
            )
        return v

    def get_log_config(self) -> dict[str, Any]:
        """Get logging configuration dictionary for ``logging.config.dictConfig``."""
        config = {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"standard": {"format": self.log_format}},
            "handlers": {
                "default": {
                    "level": self.log_level.value,
                    "formatter": "standard",
                    "class": "logging.StreamHandler" if not self.log_file else "logging.FileHandler",
                }
            },
            "loggers": {
                "config_watcher": {"handlers": ["default"], "level": self.log_level.value, "propagate": False}
            },
        }

        if self.log_file:
            config["handlers"]["default"]["filename"] = str(self.log_file)

        return config


# Global settings instance
_config: WatcherSettings | None = None


def get_config() -> WatcherSettings:
    """
    Get the global settings instance.

    Creates a new instance on first call and reuses it for subsequent calls.
    """
    global _config
    if _config is None:
        _config = WatcherSettings()
    return _config


def reload_config() -> WatcherSettings:
    """
    Force reload the settings from environment/files.

    Useful for testing or when the environment changed at runtime.
    """
    global _config
    _config = WatcherSettings()
    return _config


def set_config(config: WatcherSettings) -> None:
    """
    Set a custom settings instance.

    Primarily used for testing.
    """
    global _config
    _config = config
