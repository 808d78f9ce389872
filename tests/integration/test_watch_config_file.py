"""Integration tests watching real files through watchdog."""

import asyncio
import time
from pathlib import Path

import pytest
from config_watcher import InitializationError, WatchOptions, watch_config_file


def _write(path: Path, content: str) -> None:
    path.write_text(content)


async def _next_matching(stream, predicate, timeout: float = 5.0):
    """Return the first event matching predicate, skipping intermediate reads."""

    async def _scan():
        async for event in stream:
            if predicate(event):
                return event
        return None

    return await asyncio.wait_for(_scan(), timeout=timeout)


async def _collect(stream):
    return [event async for event in stream]


class TestWatchConfigFile:
    """End-to-end tests of watch_config_file with a real observer."""

    @pytest.mark.asyncio
    async def test_basic_change(self, config_path):
        """Test that modifying the file reports old and new content."""
        stream = await watch_config_file(
            config_path, config_path.read_text, WatchOptions(debounce_seconds=0.1)
        )

        _write(config_path, "updated")
        event = await _next_matching(stream, lambda e: e.current == "updated")

        assert event.previous == "initial"
        assert event.current == "updated"
        await stream.aclose()

    @pytest.mark.asyncio
    async def test_rapid_writes_debounced(self, config_path):
        """Test that rapid writes settle into a single event with the final content."""
        stream = await watch_config_file(
            config_path, config_path.read_text, WatchOptions(debounce_seconds=0.5)
        )

        for content in ("update1", "update2", "update3"):
            _write(config_path, content)

        event = await asyncio.wait_for(anext(stream), timeout=5.0)

        assert event.previous == "initial"
        assert event.current == "update3"
        await stream.aclose()

    @pytest.mark.asyncio
    async def test_atomic_replace_detected(self, config_path):
        """Test that saving through rename over the original file is detected."""
        stream = await watch_config_file(
            config_path, config_path.read_text, WatchOptions(debounce_seconds=0.1)
        )

        staged = config_path.with_name(".config.yaml.tmp")
        staged.write_text("replaced")
        staged.replace(config_path)

        event = await _next_matching(stream, lambda e: e.current == "replaced")

        assert event.previous == "initial"
        await stream.aclose()

    @pytest.mark.asyncio
    async def test_invalid_path(self):
        """Test that an invalid path fails to start."""
        with pytest.raises(InitializationError):
            await watch_config_file("/invalid/path/config.yaml", lambda: "")

    @pytest.mark.asyncio
    async def test_graceful_shutdown_during_long_read(self, config_path):
        """Test that cancellation during a slow read closes the stream without an event."""
        reads = {"count": 0}

        def slow_reader():
            reads["count"] += 1
            if reads["count"] > 1:
                time.sleep(1.0)
            return config_path.read_text()

        cancellation = asyncio.Event()
        stream = await watch_config_file(
            config_path, slow_reader, WatchOptions(debounce_seconds=0.01), cancellation=cancellation
        )

        _write(config_path, "updated")
        await asyncio.sleep(0.5)
        cancellation.set()

        events = await asyncio.wait_for(_collect(stream), timeout=3.0)
        assert events == []
        assert stream.closed

    @pytest.mark.asyncio
    async def test_reader_failure_recovery(self, config_path):
        """Test that the session survives a failing read and reports the next change."""
        reads = {"count": 0}
        errors = []

        def flaky_reader():
            reads["count"] += 1
            if reads["count"] == 2:
                raise RuntimeError("simulated reader crash")
            return config_path.read_text()

        stream = await watch_config_file(
            config_path, flaky_reader, WatchOptions(debounce_seconds=0.2, error_handler=errors.append)
        )

        _write(config_path, "updatedWithFailure")
        for _ in range(100):
            if errors:
                break
            await asyncio.sleep(0.05)
        assert errors

        _write(config_path, "updated")
        event = await _next_matching(stream, lambda e: e.current == "updated")

        assert event.previous == "initial"
        await stream.aclose()
