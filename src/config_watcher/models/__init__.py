"""Data models and exceptions for the configuration watcher."""

from config_watcher.models.change_event import ChangeEvent, RawSignal, SignalKind, WatcherState
from config_watcher.models.exceptions import (
    BaseError,
    ConfigurationError,
    InitializationError,
    NotificationSourceError,
    ReaderError,
    ShutdownError,
)

__all__ = [
    "ChangeEvent",
    "RawSignal",
    "SignalKind",
    "WatcherState",
    "BaseError",
    "ConfigurationError",
    "InitializationError",
    "NotificationSourceError",
    "ReaderError",
    "ShutdownError",
]
