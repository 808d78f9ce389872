"""Watch a configuration file and stream its settled changes."""

from config_watcher.models import (
    ChangeEvent,
    InitializationError,
    NotificationSourceError,
    ReaderError,
    ShutdownError,
    WatcherState,
)
from config_watcher.monitoring import ChangeStream, ConfigFileWatcher, WatchOptions, watch_config_file
from config_watcher.template import generate_yaml_template

__all__ = [
    "ChangeEvent",
    "ChangeStream",
    "ConfigFileWatcher",
    "InitializationError",
    "NotificationSourceError",
    "ReaderError",
    "ShutdownError",
    "WatchOptions",
    "WatcherState",
    "generate_yaml_template",
    "watch_config_file",
]
