"""
Debouncing of accepted change signals.

Collapses a burst of signals for the watched file into a single settle
cycle: every accepted signal restarts one countdown timer, and only a timer
that elapses undisturbed starts a cycle.
"""

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable

from config_watcher.models import RawSignal
from config_watcher.monitoring.cancellation import CancellationScope, run_until_cancelled

logger = logging.getLogger(__name__)


class SignalSlot:
    """
    Single-slot overwrite buffer for pending signals.

    ``offer`` never blocks: a newer signal replaces the pending one. Only the
    fact that something changed matters since every settle cycle re-reads the
    current file state.
    """

    def __init__(self):
        self._signal: RawSignal | None = None
        self._ready = asyncio.Event()
        self.superseded = 0

    def offer(self, signal: RawSignal) -> None:
        if self._ready.is_set():
            self.superseded += 1
        self._signal = signal
        self._ready.set()

    async def take(self) -> RawSignal:
        await self._ready.wait()
        self._ready.clear()
        signal, self._signal = self._signal, None
        return signal

    def clear(self) -> None:
        self._ready.clear()
        self._signal = None

    def __len__(self) -> int:
        return 1 if self._ready.is_set() else 0


class DebounceAggregator:
    """
    Holds at most one pending signal and one live countdown timer.

    A drain task takes signals out of the slot and rearms the timer for each
    of them. When the timer elapses without being rearmed, ``on_elapsed`` runs
    once in its own task.
    """

    def __init__(
        self,
        debounce_seconds: float,
        on_elapsed: Callable[[RawSignal], Awaitable[object]],
        cancellation: asyncio.Event | CancellationScope,
    ):
        """
        Initialize the aggregator.

        Args:
            debounce_seconds: Quiet period required before a cycle starts
            on_elapsed: Coroutine function started once per elapsed timer
            cancellation: Event that stops all further scheduling when set
        """
        self.debounce_seconds = debounce_seconds
        self._on_elapsed = on_elapsed
        self._cancellation = cancellation

        self._slot = SignalSlot()
        self._timer: asyncio.TimerHandle | None = None
        self._drain_task: asyncio.Task | None = None
        self._settle_tasks: set[asyncio.Task] = set()

    def start(self) -> None:
        """Start draining the pending-signal slot."""
        if self._drain_task is None:
            self._drain_task = asyncio.create_task(self._drain(), name="config-watcher-debounce")

    def offer(self, signal: RawSignal) -> bool:
        """
        Hand an accepted signal to the aggregator without blocking.

        Returns:
            False if the aggregator is already cancelled
        """
        if self._cancellation.is_set():
            return False
        self._slot.offer(signal)
        return True

    async def _drain(self) -> None:
        while True:
            received, signal = await run_until_cancelled(self._slot.take(), self._cancellation)
            if not received:
                logger.debug("Debounce drain stopped")
                return
            self._rearm(signal)

    def _rearm(self, signal: RawSignal) -> None:
        if self._timer is not None:
            self._timer.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.debounce_seconds, self._elapsed, signal)
        logger.debug("Debounce timer armed for %s (%.3fs)", signal, self.debounce_seconds)

    def _elapsed(self, signal: RawSignal) -> None:
        self._timer = None
        if self._cancellation.is_set():
            return
        task = asyncio.create_task(self._on_elapsed(signal), name="config-watcher-settle")
        self._settle_tasks.add(task)
        task.add_done_callback(self._settle_tasks.discard)

    async def stop(self) -> None:
        """Cancel the live timer, stop draining and wait for in-flight cycles."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

        if self._drain_task is not None:
            if not self._drain_task.done():
                self._drain_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._drain_task

        self._slot.clear()

        if self._settle_tasks:
            await asyncio.gather(*self._settle_tasks, return_exceptions=True)

    @property
    def has_pending_timer(self) -> bool:
        """Check if a countdown timer is currently armed."""
        return self._timer is not None

    @property
    def pending_signals(self) -> int:
        """Get count of signals waiting in the slot (0 or 1)."""
        return len(self._slot)

    @property
    def superseded_signals(self) -> int:
        """Get count of signals replaced by a newer one before being taken."""
        return self._slot.superseded
