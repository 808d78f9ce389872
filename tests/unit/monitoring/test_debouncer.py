"""Unit tests for the debounce aggregator."""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from config_watcher.models import RawSignal, SignalKind
from config_watcher.monitoring import DebounceAggregator, SignalSlot


def _signal(kind: SignalKind = SignalKind.WRITE) -> RawSignal:
    return RawSignal(kind=kind, path=Path("/test/config.yaml"))


class TestSignalSlot:
    """Test cases for SignalSlot."""

    @pytest.mark.asyncio
    async def test_latest_signal_wins(self):
        """Test that a newer signal replaces a pending one."""
        slot = SignalSlot()
        first = _signal(SignalKind.CREATE)
        second = _signal(SignalKind.WRITE)

        slot.offer(first)
        slot.offer(second)

        assert len(slot) == 1
        assert slot.superseded == 1
        assert await slot.take() is second
        assert len(slot) == 0

    @pytest.mark.asyncio
    async def test_take_waits_for_offer(self):
        """Test that take blocks until a signal is offered."""
        slot = SignalSlot()
        taker = asyncio.create_task(slot.take())
        await asyncio.sleep(0.01)
        assert not taker.done()

        signal = _signal()
        slot.offer(signal)

        assert await asyncio.wait_for(taker, timeout=1.0) is signal

    def test_clear(self):
        """Test clearing a pending signal."""
        slot = SignalSlot()
        slot.offer(_signal())
        slot.clear()

        assert len(slot) == 0


class TestDebounceAggregator:
    """Test cases for DebounceAggregator."""

    @pytest.fixture
    def cancellation(self):
        return asyncio.Event()

    @pytest.fixture
    def on_elapsed(self):
        return AsyncMock()

    @pytest.fixture
    def aggregator(self, on_elapsed, cancellation):
        """Create an aggregator with a short debounce."""
        return DebounceAggregator(0.05, on_elapsed, cancellation)

    @pytest.mark.asyncio
    async def test_burst_triggers_one_cycle(self, aggregator, on_elapsed):
        """Test that signals arriving within the debounce window settle once."""
        aggregator.start()

        last = None
        for _ in range(5):
            last = _signal()
            aggregator.offer(last)
            await asyncio.sleep(0.01)

        await asyncio.sleep(0.15)

        on_elapsed.assert_awaited_once_with(last)
        await aggregator.stop()

    @pytest.mark.asyncio
    async def test_separate_bursts_trigger_separate_cycles(self, aggregator, on_elapsed):
        """Test that a quiet period between signals yields one cycle per burst."""
        aggregator.start()

        aggregator.offer(_signal())
        await asyncio.sleep(0.15)
        aggregator.offer(_signal())
        await asyncio.sleep(0.15)

        assert on_elapsed.await_count == 2
        await aggregator.stop()

    @pytest.mark.asyncio
    async def test_timer_rearmed_on_each_signal(self, aggregator, on_elapsed):
        """Test that the timer is pending while signals keep arriving."""
        aggregator.start()

        aggregator.offer(_signal())
        await asyncio.sleep(0.01)
        assert aggregator.has_pending_timer

        aggregator.offer(_signal())
        await asyncio.sleep(0.03)
        on_elapsed.assert_not_awaited()

        await asyncio.sleep(0.1)
        assert not aggregator.has_pending_timer
        on_elapsed.assert_awaited_once()
        await aggregator.stop()

    @pytest.mark.asyncio
    async def test_zero_debounce_settles_immediately(self, on_elapsed, cancellation):
        """Test that a zero debounce runs the cycle on the next loop iteration."""
        aggregator = DebounceAggregator(0, on_elapsed, cancellation)
        aggregator.start()

        aggregator.offer(_signal())
        await asyncio.sleep(0.02)

        on_elapsed.assert_awaited_once()
        await aggregator.stop()

    @pytest.mark.asyncio
    async def test_stop_cancels_pending_timer(self, aggregator, on_elapsed, cancellation):
        """Test that stopping drops a change still waiting on the timer."""
        aggregator.start()
        aggregator.offer(_signal())
        await asyncio.sleep(0.01)

        cancellation.set()
        await aggregator.stop()
        await asyncio.sleep(0.1)

        assert not aggregator.has_pending_timer
        on_elapsed.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_offer_after_cancellation_is_rejected(self, aggregator, cancellation):
        """Test that no signal is accepted once cancelled."""
        cancellation.set()

        assert aggregator.offer(_signal()) is False
        assert aggregator.pending_signals == 0

    @pytest.mark.asyncio
    async def test_stop_waits_for_in_flight_cycle(self, cancellation):
        """Test that stop returns only after a running cycle finishes."""
        finished = asyncio.Event()

        async def slow_cycle(signal):
            await asyncio.sleep(0.1)
            finished.set()

        aggregator = DebounceAggregator(0, slow_cycle, cancellation)
        aggregator.start()
        aggregator.offer(_signal())
        await asyncio.sleep(0.02)

        cancellation.set()
        await aggregator.stop()

        assert finished.is_set()
