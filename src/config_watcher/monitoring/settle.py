"""
Settle-and-emit stage of a watch session.

Re-reads the configuration once a burst of changes has settled and delivers
the before/after pair to the consumer. Reader failures are isolated to the
cycle in which they happen.
"""

import asyncio
import inspect
import logging
from typing import Any, Generic, TypeVar

from config_watcher.core.interfaces import ConfigReader
from config_watcher.models import ChangeEvent, RawSignal, ReaderError
from config_watcher.monitoring.cancellation import CancellationScope
from config_watcher.monitoring.change_stream import ChangeStream
from config_watcher.monitoring.options import WatchOptions

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _reader_name(reader: ConfigReader) -> str:
    return getattr(reader, "__qualname__", None) or repr(reader)


async def invoke_reader(reader: ConfigReader) -> Any:
    """
    Call the configuration reader behind a failure boundary.

    Coroutine functions are awaited on the loop; plain callables run in a
    worker thread so a slow read does not stall the session. An awaitable
    result is awaited as well.

    Args:
        reader: User-supplied configuration reader

    Returns:
        The value produced by the reader

    Raises:
        ReaderError: If the reader raised or exited through ``SystemExit``
    """
    try:
        if inspect.iscoroutinefunction(reader):
            result = await reader()
        else:
            result = await asyncio.to_thread(reader)
            if inspect.isawaitable(result):
                result = await result
    except (Exception, SystemExit) as e:
        raise ReaderError(
            f"Configuration reader failed: {e}", reader=_reader_name(reader), underlying_error=e
        ) from e
    return result


class SettleActor(Generic[T]):
    """
    Sole owner of the baseline value.

    Every settle cycle runs under one lock, so reads and emissions of a
    session never overlap and nobody observes a half-updated baseline.
    """

    def __init__(
        self,
        reader: ConfigReader,
        baseline: T,
        stream: ChangeStream[T],
        options: WatchOptions,
        cancellation: asyncio.Event | CancellationScope,
    ):
        """
        Initialize the actor.

        Args:
            reader: User-supplied configuration reader
            baseline: Initial configuration value
            stream: Stream events are delivered through
            options: Session options (error handler, logger)
            cancellation: Event that aborts pending emissions when set
        """
        self._reader = reader
        self._baseline = baseline
        self._stream = stream
        self._options = options
        self._cancellation = cancellation
        self._lock = asyncio.Lock()

        self.settle_cycles = 0
        self.events_emitted = 0
        self.reader_failures = 0

    @property
    def baseline(self) -> T:
        """Get the last delivered (or initial) configuration value."""
        return self._baseline

    @property
    def is_settling(self) -> bool:
        """Check if a settle cycle is in progress."""
        return self._lock.locked()

    async def settle(self, signal: RawSignal | None = None) -> ChangeEvent[T] | None:
        """
        Run one settle cycle.

        Args:
            signal: Signal that triggered the cycle, used for change logging only

        Returns:
            The delivered event, or None if the read failed or the session
            was cancelled before delivery
        """
        async with self._lock:
            if self._cancellation.is_set():
                return None

            self.settle_cycles += 1
            try:
                current = await invoke_reader(self._reader)
            except ReaderError as e:
                self.reader_failures += 1
                logger.debug("Settle cycle %d failed: %s", self.settle_cycles, e)
                self._options.report_error(e)
                return None

            if self._cancellation.is_set():
                logger.debug("Settle cycle %d dropped, session cancelled during read", self.settle_cycles)
                return None

            event = ChangeEvent(previous=self._baseline, current=current)

            def accept(taken: ChangeEvent[T]) -> None:
                self._baseline = taken.current
                self.events_emitted += 1
                if self._options.log_changes:
                    changed = signal.path if signal is not None else "unknown"
                    self._options.logger.info("File changed: %s", changed)

            if not await self._stream.deliver(event, on_taken=accept):
                logger.debug("Settle cycle %d dropped, session cancelled during delivery", self.settle_cycles)
                return None
            return event
