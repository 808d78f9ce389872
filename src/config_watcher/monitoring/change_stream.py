"""
Output stream of a watch session.

The stream is an async iterator of ``ChangeEvent`` items. Delivery is a
handoff: the sender waits until the consumer has taken the event, and gives
up as soon as the session is cancelled.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

from config_watcher.models import ChangeEvent
from config_watcher.monitoring.cancellation import CancellationScope, run_until_cancelled

logger = logging.getLogger(__name__)

T = TypeVar("T")

_END_OF_STREAM = object()


class ChangeStream(Generic[T]):
    """
    Async iterator over the settled changes of one watch session.

    Iteration ends when the session shuts down, either through cancellation,
    ``aclose()``, or because the notification source stopped.
    """

    def __init__(
        self,
        cancellation: asyncio.Event | CancellationScope,
        on_close: Callable[[], Awaitable[None]] | None = None,
    ):
        """
        Initialize the stream.

        Args:
            cancellation: Event bounding every blocked delivery
            on_close: Coroutine function that shuts the session down, used by ``aclose``
        """
        self._cancellation = cancellation
        self._on_close = on_close
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=1)
        self._closed = asyncio.Event()

    def __aiter__(self) -> "ChangeStream[T]":
        return self

    async def __anext__(self) -> ChangeEvent[T]:
        item = await self._queue.get()
        self._queue.task_done()
        if item is _END_OF_STREAM:
            # Leave the marker for any other consumer still waiting.
            self._queue.put_nowait(_END_OF_STREAM)
            raise StopAsyncIteration
        event, on_taken = item
        if on_taken is not None:
            on_taken(event)
        return event

    async def deliver(
        self,
        event: ChangeEvent[T],
        on_taken: Callable[[ChangeEvent[T]], None] | None = None,
    ) -> bool:
        """
        Hand an event to the consumer.

        Args:
            event: Event to deliver
            on_taken: Called with the event at the moment a consumer takes it,
                before the consumer sees it; never called for a withdrawn event

        Returns:
            True once the consumer has taken the event, False if the session
            was cancelled first (the event is withdrawn)
        """
        if self._cancellation.is_set() or self._closed.is_set():
            return False

        self._queue.put_nowait((event, on_taken))
        taken, _ = await run_until_cancelled(self._queue.join(), self._cancellation)
        if taken:
            return True

        try:
            self._queue.get_nowait()
        except asyncio.QueueEmpty:
            # The consumer picked it up while the cancellation was observed.
            return True
        self._queue.task_done()
        logger.debug("Delivery of %s withdrawn after cancellation", event)
        return False

    def close(self) -> None:
        """End iteration for all current and future consumers."""
        if self._closed.is_set():
            return
        self._closed.set()

        while not self._queue.empty():
            self._queue.get_nowait()
            self._queue.task_done()
        self._queue.put_nowait(_END_OF_STREAM)

    async def aclose(self) -> None:
        """Shut the watch session down and wait for the stream to close."""
        if self._on_close is not None:
            await self._on_close()
        else:
            self._cancellation.set()
            self.close()
        await self._closed.wait()

    async def wait_closed(self) -> None:
        await self._closed.wait()

    @property
    def closed(self) -> bool:
        """Check if the stream has ended."""
        return self._closed.is_set()

    async def __aenter__(self) -> "ChangeStream[T]":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
