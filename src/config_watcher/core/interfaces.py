"""
Abstract interfaces for the configuration watcher.

These interfaces define the contracts for the pluggable collaborators of a
watch session, enabling dependency injection for testing and alternative
notification backends.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, TypeAlias

from config_watcher.models import RawSignal

ConfigReader: TypeAlias = Callable[[], Any] | Callable[[], Awaitable[Any]]
ErrorHandler: TypeAlias = Callable[[Exception], Any]


class INotificationSource(ABC):
    """
    Interface for a source of raw change signals for one watched path.

    Once opened, the source feeds two queues: ``signals`` with ``RawSignal``
    items and ``errors`` with exceptions describing runtime failures of the
    source itself. A ``None`` item on either queue means the source has
    terminated its stream.
    """

    signals: "asyncio.Queue[RawSignal | None]"
    errors: "asyncio.Queue[Exception | None]"

    @property
    @abstractmethod
    def path(self) -> Path:
        """Path being watched."""
        pass

    @abstractmethod
    def open(self) -> None:
        """
        Start producing signals for the watched path.

        Must be called from a running event loop.

        Raises:
            InitializationError: If the path cannot be watched
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """
        Release the underlying resource.

        Must be idempotent and must not block indefinitely.
        """
        pass

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """Check if the source is currently producing signals."""
        pass
