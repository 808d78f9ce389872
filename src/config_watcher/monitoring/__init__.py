"""
Monitoring package for configuration file change detection.

This package provides the components of a watch session: the watchdog-backed
notification source, signal filtering, debouncing, the settle-and-emit actor
and the change stream delivered to consumers.
"""

from .cancellation import CancellationScope, run_until_cancelled
from .change_stream import ChangeStream
from .debouncer import DebounceAggregator, SignalSlot
from .event_filter import RELEVANT_SIGNAL_KINDS, is_relevant_signal
from .file_watcher import ConfigFileWatcher, watch_config_file
from .notification_source import WatchdogNotificationSource
from .options import DEFAULT_DEBOUNCE_SECONDS, WatchOptions
from .settle import SettleActor, invoke_reader

__all__ = [
    "CancellationScope",
    "ChangeStream",
    "ConfigFileWatcher",
    "DebounceAggregator",
    "DEFAULT_DEBOUNCE_SECONDS",
    "RELEVANT_SIGNAL_KINDS",
    "SettleActor",
    "SignalSlot",
    "WatchOptions",
    "WatchdogNotificationSource",
    "invoke_reader",
    "is_relevant_signal",
    "run_until_cancelled",
    "watch_config_file",
]
