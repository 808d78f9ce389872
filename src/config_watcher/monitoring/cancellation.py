"""
Cancellation-aware waiting.

Every suspension point of a watch session must also wake up when the session
is cancelled; these helpers race an awaitable against a cancellation event.
"""

import asyncio
import contextlib
from collections.abc import Awaitable
from typing import Any


class CancellationScope:
    """
    Cancellation that fires when any of several events is set.

    Exposes the ``is_set``/``set``/``wait`` subset of ``asyncio.Event`` so it
    can stand in wherever a single event is observed. ``set`` only sets the
    first (owned) event; the others belong to callers and are never touched.
    """

    def __init__(self, owned: asyncio.Event, *observed: asyncio.Event):
        self._owned = owned
        self._events = (owned, *observed)

    def is_set(self) -> bool:
        return any(event.is_set() for event in self._events)

    def set(self) -> None:
        self._owned.set()

    async def wait(self) -> bool:
        if self.is_set():
            return True
        waiters = [asyncio.ensure_future(event.wait()) for event in self._events]
        try:
            await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for waiter in waiters:
                waiter.cancel()
        return True


async def run_until_cancelled(
    awaitable: Awaitable[Any], cancellation: asyncio.Event | CancellationScope
) -> tuple[bool, Any]:
    """
    Await ``awaitable`` unless ``cancellation`` fires first.

    Args:
        awaitable: Coroutine or future to wait for
        cancellation: Event that aborts the wait when set

    Returns:
        ``(True, result)`` if the awaitable completed, ``(False, None)`` if the
        cancellation won. The awaitable is cancelled when it loses.
    """
    if cancellation.is_set():
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        return False, None

    task = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(cancellation.wait())
    try:
        done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        waiter.cancel()
        if not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    if task in done:
        return True, task.result()
    return False, None
