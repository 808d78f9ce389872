"""
Options for a watch session.

Options are captured once when a session starts and never change afterwards;
the ``with_*`` builders return new instances so options can be composed.
"""

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from config_watcher.config.settings import WatcherSettings, get_config
from config_watcher.core.interfaces import ErrorHandler

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.01


def log_error(error: Exception) -> None:
    """Default error handler: log the error and keep watching."""
    logger.error("Watcher error: %s", error)


def null_logger() -> logging.Logger:
    """Get a logger that discards everything it receives."""
    discard = logging.getLogger("config_watcher.discard")
    if not discard.handlers:
        discard.addHandler(logging.NullHandler())
    discard.propagate = False
    return discard


class WatchOptions(BaseModel):
    """Immutable options of a single watch session."""

    debounce_seconds: float = Field(
        default=DEFAULT_DEBOUNCE_SECONDS, ge=0.0, description="Quiet period before a burst of changes is settled"
    )
    error_handler: ErrorHandler = Field(
        default=log_error, description="Called with every isolated reader, source or shutdown failure"
    )
    logger: logging.Logger | logging.LoggerAdapter = Field(
        default_factory=null_logger, description="Receives session messages"
    )
    log_changes: bool = Field(default=False, description="Log every delivered change through the session logger")
    stop_timeout_seconds: float = Field(
        default=5.0, gt=0.0, description="Maximum wait for the notification source to release"
    )

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @classmethod
    def from_settings(cls, settings: WatcherSettings | None = None, **overrides: Any) -> "WatchOptions":
        """
        Build options from watcher settings.

        Args:
            settings: Settings to read defaults from (global settings if None)
            **overrides: Field values taking precedence over the settings

        Returns:
            New options instance
        """
        settings = settings or get_config()
        values: dict[str, Any] = {
            "debounce_seconds": settings.debounce_seconds,
            "log_changes": settings.log_changes,
            "stop_timeout_seconds": settings.stop_timeout_seconds,
        }
        values.update(overrides)
        return cls(**values)

    def _replace(self, **changes: Any) -> "WatchOptions":
        return type(self)(**{**dict(self), **changes})

    def with_debounce(self, seconds: float) -> "WatchOptions":
        return self._replace(debounce_seconds=seconds)

    def with_error_handler(self, handler: ErrorHandler) -> "WatchOptions":
        return self._replace(error_handler=handler)

    def with_logger(self, session_logger: logging.Logger | logging.LoggerAdapter) -> "WatchOptions":
        return self._replace(logger=session_logger)

    def with_change_logging(self, enabled: bool = True) -> "WatchOptions":
        return self._replace(log_changes=enabled)

    def report_error(self, error: Exception) -> None:
        """
        Pass an error to the configured handler.

        A failing handler is logged and never propagates into the session.
        """
        try:
            self.error_handler(error)
        except Exception as e:
            logger.error("Error handler failed while reporting %r: %s", error, e)

    def summary(self) -> dict[str, Any]:
        """Get the plain-value options for statistics output."""
        return {
            "debounce_seconds": self.debounce_seconds,
            "log_changes": self.log_changes,
            "stop_timeout_seconds": self.stop_timeout_seconds,
        }
