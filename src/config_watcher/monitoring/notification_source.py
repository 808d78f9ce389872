"""
Watchdog-backed notification source for a single configuration file.

Watches the parent directory of the file so that editors which save by
writing a temporary file and renaming it over the original are still seen,
and translates the watchdog events for the file into raw signals.
"""

import asyncio
import logging
import os
import threading
from pathlib import Path

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from config_watcher.core.interfaces import INotificationSource
from config_watcher.models import InitializationError, NotificationSourceError, RawSignal, SignalKind

logger = logging.getLogger(__name__)


class WatchdogNotificationSource(INotificationSource, FileSystemEventHandler):
    """
    Notification source built on a watchdog observer.

    Events are produced on the observer thread and handed to the event loop
    that called ``open`` through ``call_soon_threadsafe``.
    """

    def __init__(self, path: str | os.PathLike, stop_timeout: float = 5.0):
        """
        Initialize the notification source.

        Args:
            path: Path of the configuration file to watch
            stop_timeout: Maximum seconds to wait for the observer thread on close
        """
        super().__init__()
        self._path = Path(path).expanduser().absolute()
        self.stop_timeout = stop_timeout

        self.signals: asyncio.Queue[RawSignal | None] = asyncio.Queue()
        self.errors: asyncio.Queue[Exception | None] = asyncio.Queue()

        self._observer: Observer | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._close_lock = threading.Lock()
        self._terminated = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def watch_directory(self) -> Path:
        return self._path.parent

    def open(self) -> None:
        """
        Start watching the configuration file.

        Raises:
            InitializationError: If the file cannot be watched
        """
        path_str = str(self._path)

        if not self._path.exists():
            raise InitializationError(
                f"File does not exist: {self._path}",
                path=path_str,
                component="notification_source",
                initialization_stage="validate_path",
            )
        if self._path.is_dir():
            raise InitializationError(
                f"Path is a directory, not a file: {self._path}",
                path=path_str,
                component="notification_source",
                initialization_stage="validate_path",
            )
        if not os.access(self._path, os.R_OK):
            raise InitializationError(
                f"Permission denied: {self._path}",
                path=path_str,
                component="notification_source",
                initialization_stage="validate_path",
            )

        try:
            self._loop = asyncio.get_running_loop()
        except RuntimeError as e:
            raise InitializationError(
                "No running event loop to deliver file events to",
                path=path_str,
                component="notification_source",
                initialization_stage="capture_loop",
                underlying_error=e,
            ) from e

        observer = Observer()
        try:
            observer.schedule(self, str(self.watch_directory), recursive=False)
            observer.start()
        except Exception as e:
            logger.error("Failed to start watching %s: %s", self._path, e)
            raise InitializationError(
                f"Failed to watch file {self._path}: {e}",
                path=path_str,
                component="notification_source",
                initialization_stage="start_observer",
                underlying_error=e,
            ) from e

        self._observer = observer
        logger.info("Started watching %s", self._path)

    def close(self) -> None:
        """Stop the observer. Safe to call repeatedly."""
        with self._close_lock:
            observer, self._observer = self._observer, None
        if observer is None:
            return

        observer.stop()
        if observer.is_alive() and threading.current_thread() is not observer:
            observer.join(timeout=self.stop_timeout)
            if observer.is_alive():
                logger.warning("Observer for %s did not stop within %.1fs", self._path, self.stop_timeout)
        logger.info("Stopped watching %s", self._path)

    @property
    def is_open(self) -> bool:
        return self._observer is not None and not self._terminated

    def on_any_event(self, event: FileSystemEvent) -> None:
        """Translate a watchdog event into a raw signal for the watched file."""
        try:
            if event.is_directory:
                self._handle_directory_event(event)
                return

            kind = self._classify(event)
            if kind is None:
                return

            signal = RawSignal(kind=kind, path=self._path)
            logger.debug("Raw signal: %s (%s)", signal, event.event_type)
            self._publish(self.signals, signal)

        except Exception as e:
            logger.debug("Error translating %r: %s", event, e)
            self._publish(
                self.errors,
                NotificationSourceError(
                    f"Failed to process file event: {e}",
                    path=str(self._path),
                    operation="translate_event",
                    underlying_error=e,
                ),
            )

    def _classify(self, event: FileSystemEvent) -> SignalKind | None:
        src = Path(os.fsdecode(event.src_path))
        dest = Path(os.fsdecode(event.dest_path)) if getattr(event, "dest_path", "") else None

        if event.event_type == EVENT_TYPE_MOVED:
            if dest == self._path:
                return SignalKind.CREATE
            if src == self._path:
                return SignalKind.RENAME
            return None

        if src != self._path:
            return None

        if event.event_type == EVENT_TYPE_MODIFIED:
            return SignalKind.WRITE
        if event.event_type == EVENT_TYPE_CREATED:
            return SignalKind.CREATE
        if event.event_type == EVENT_TYPE_DELETED:
            return SignalKind.REMOVE
        return SignalKind.OTHER

    def _handle_directory_event(self, event: FileSystemEvent) -> None:
        # Watchdog stops the emitter once the watched directory itself goes away.
        if event.event_type in (EVENT_TYPE_DELETED, EVENT_TYPE_MOVED):
            if Path(os.fsdecode(event.src_path)) == self.watch_directory:
                logger.warning("Watched directory %s disappeared", self.watch_directory)
                self._terminated = True
                self._publish(self.signals, None)

    def _publish(self, queue: asyncio.Queue, item: object) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            logger.debug("No event loop available for %r", item)
            return
        try:
            loop.call_soon_threadsafe(queue.put_nowait, item)
        except RuntimeError:
            # Loop closed between the check and the call.
            logger.debug("Event loop closed, dropping %r", item)
