"""
File watcher for detecting changes to a single configuration file.

Ties the notification source, signal filter, debounce aggregator and settle
actor together into a watch session, and owns the session's lifecycle from
start to the final close of its change stream.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Any, Generic, TypeVar

from config_watcher.core.interfaces import ConfigReader, INotificationSource
from config_watcher.models import InitializationError, ReaderError, ShutdownError, WatcherState
from config_watcher.monitoring.cancellation import CancellationScope
from config_watcher.monitoring.change_stream import ChangeStream
from config_watcher.monitoring.debouncer import DebounceAggregator
from config_watcher.monitoring.event_filter import is_relevant_signal
from config_watcher.monitoring.notification_source import WatchdogNotificationSource
from config_watcher.monitoring.options import WatchOptions
from config_watcher.monitoring.settle import SettleActor, invoke_reader

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConfigFileWatcher(Generic[T]):
    """
    Watch session for one configuration file.

    Raw signals from the notification source are filtered and debounced; each
    settled burst re-reads the configuration and delivers one ``ChangeEvent``
    through the stream returned by ``start``. The session runs until the
    cancellation event is set, ``stop`` is called, or the source terminates.
    """

    def __init__(
        self,
        path: str | os.PathLike,
        reader: ConfigReader,
        options: WatchOptions | None = None,
        *,
        cancellation: asyncio.Event | None = None,
        notification_source: INotificationSource | None = None,
    ):
        """
        Initialize the watcher.

        Args:
            path: Path of the configuration file to watch
            reader: Callable (sync or async) returning the current configuration
            options: Session options (defaults from ``WatcherSettings`` if None)
            cancellation: Caller-owned event ending the session when set
            notification_source: Optional source (watchdog-backed if not provided)
        """
        self._path = Path(path)
        self._reader = reader
        self.options = options or WatchOptions.from_settings()
        self._cancellation = cancellation or asyncio.Event()
        self._source = notification_source or WatchdogNotificationSource(
            self._path, stop_timeout=self.options.stop_timeout_seconds
        )

        # Internal stop signal observed by every stage
        self._stopping = asyncio.Event()
        self._state = WatcherState.IDLE

        self._stream: ChangeStream[T] | None = None
        self._actor: SettleActor[T] | None = None
        self._aggregator: DebounceAggregator | None = None
        self._drain_task: asyncio.Task | None = None

        self._stats = {
            "signals_received": 0,
            "signals_filtered": 0,
            "source_errors": 0,
        }

    async def start(self) -> ChangeStream[T]:
        """
        Start watching and return the stream of settled changes.

        Returns:
            Stream yielding one ``ChangeEvent`` per settled change

        Raises:
            InitializationError: If the file cannot be watched or the initial
                configuration cannot be read
        """
        if self._state is not WatcherState.IDLE:
            raise InitializationError(
                f"Watcher already started (state: {self._state.value})",
                path=str(self._path),
                component="file_watcher",
                initialization_stage="start",
            )

        self._source.open()

        try:
            baseline = await invoke_reader(self._reader)
        except ReaderError as e:
            logger.error("Initial configuration read failed for %s: %s", self._path, e)
            await asyncio.to_thread(self._source.close)
            raise InitializationError(
                f"Failed to read initial configuration: {e}",
                path=str(self._path),
                component="config_reader",
                initialization_stage="initial_read",
                underlying_error=e,
            ) from e

        # Stages observe the caller's event as well as the internal stop.
        scope = CancellationScope(self._stopping, self._cancellation)
        self._stream = ChangeStream(scope, on_close=self.stop)
        self._actor = SettleActor(self._reader, baseline, self._stream, self.options, scope)
        self._aggregator = DebounceAggregator(self.options.debounce_seconds, self._actor.settle, scope)

        self._aggregator.start()
        self._drain_task = asyncio.create_task(self._run(), name="config-watcher-drain")
        self._state = WatcherState.ACTIVE

        logger.info("Watching %s (debounce: %.3fs)", self._path, self.options.debounce_seconds)
        return self._stream

    async def stop(self) -> None:
        """Stop watching and wait until the change stream is closed."""
        if self._state is WatcherState.IDLE:
            self._state = WatcherState.CLOSED
            return
        self._stopping.set()
        if self._drain_task is not None:
            await asyncio.shield(self._drain_task)

    async def _run(self) -> None:
        try:
            await self._drain_source()
        finally:
            await self._shutdown()

    async def _drain_source(self) -> None:
        """Wait on the next signal, the next source error, or cancellation."""
        cancelled = asyncio.ensure_future(self._cancellation.wait())
        stopping = asyncio.ensure_future(self._stopping.wait())
        next_signal: asyncio.Future | None = None
        next_error: asyncio.Future | None = None

        try:
            while True:
                if next_signal is None:
                    next_signal = asyncio.ensure_future(self._source.signals.get())
                if next_error is None:
                    next_error = asyncio.ensure_future(self._source.errors.get())

                done, _ = await asyncio.wait(
                    {cancelled, stopping, next_signal, next_error}, return_when=asyncio.FIRST_COMPLETED
                )

                if cancelled in done or stopping in done:
                    self.options.logger.info("Watcher stopped by cancellation")
                    return

                if next_error in done:
                    error, next_error = next_error.result(), None
                    if error is None:
                        logger.warning("Notification source error stream ended for %s", self._path)
                        return
                    self._stats["source_errors"] += 1
                    self.options.report_error(error)

                if next_signal in done:
                    signal, next_signal = next_signal.result(), None
                    if signal is None:
                        logger.warning("Notification source stopped for %s", self._path)
                        return
                    self._stats["signals_received"] += 1
                    if is_relevant_signal(signal):
                        self._aggregator.offer(signal)
                    else:
                        self._stats["signals_filtered"] += 1
                        logger.debug("Ignoring %s", signal)
        finally:
            for waiter in (cancelled, stopping, next_signal, next_error):
                if waiter is not None and not waiter.done():
                    waiter.cancel()

    async def _shutdown(self) -> None:
        if self._state in (WatcherState.SHUTTING_DOWN, WatcherState.CLOSED):
            return
        self._state = WatcherState.SHUTTING_DOWN
        self._stopping.set()
        logger.info("Shutting down watcher for %s", self._path)

        try:
            await self._aggregator.stop()

            try:
                await asyncio.to_thread(self._source.close)
            except Exception as e:
                logger.error("Failed to release notification source for %s: %s", self._path, e)
                self.options.report_error(
                    ShutdownError(
                        f"Failed to release notification source: {e}",
                        component="notification_source",
                        shutdown_stage="close_source",
                        underlying_error=e,
                    )
                )
        finally:
            self._stream.close()
            self._state = WatcherState.CLOSED
            logger.info("Watcher for %s closed", self._path)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def state(self) -> WatcherState:
        """Get the lifecycle state of the session."""
        return self._state

    @property
    def is_watching(self) -> bool:
        """Check if the session is active."""
        return self._state is WatcherState.ACTIVE

    @property
    def baseline(self) -> T | None:
        """Get the last delivered (or initial) configuration value."""
        return self._actor.baseline if self._actor is not None else None

    def get_watch_stats(self) -> dict[str, Any]:
        """
        Get watch session statistics.

        Returns:
            Dictionary with watch session statistics
        """
        actor = self._actor
        aggregator = self._aggregator
        return {
            "state": self._state.value,
            "path": str(self._path),
            "source_open": self._source.is_open,
            "signals": {
                "received": self._stats["signals_received"],
                "filtered": self._stats["signals_filtered"],
                "superseded": aggregator.superseded_signals if aggregator else 0,
                "pending": aggregator.pending_signals if aggregator else 0,
            },
            "settle": {
                "cycles": actor.settle_cycles if actor else 0,
                "events_emitted": actor.events_emitted if actor else 0,
                "reader_failures": actor.reader_failures if actor else 0,
                "timer_armed": aggregator.has_pending_timer if aggregator else False,
            },
            "source_errors": self._stats["source_errors"],
            "configuration": self.options.summary(),
        }


async def watch_config_file(
    path: str | os.PathLike,
    reader: ConfigReader,
    options: WatchOptions | None = None,
    *,
    cancellation: asyncio.Event | None = None,
    notification_source: INotificationSource | None = None,
) -> ChangeStream[Any]:
    """
    Watch a configuration file and stream its settled changes.

    The reader is called once up front for the initial baseline and again
    after every settled burst of writes. Reader and source failures are
    passed to ``options.error_handler`` and never end the session.

    Args:
        path: Path of the configuration file to watch
        reader: Callable (sync or async) returning the current configuration
        options: Session options
        cancellation: Event ending the session when set
        notification_source: Optional source (watchdog-backed if not provided)

    Returns:
        Stream of ``ChangeEvent`` items; iteration ends with the session

    Raises:
        InitializationError: If the file cannot be watched
    """
    watcher = ConfigFileWatcher(
        path, reader, options, cancellation=cancellation, notification_source=notification_source
    )
    return await watcher.start()
