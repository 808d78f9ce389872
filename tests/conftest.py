"""Shared fixtures for watcher tests."""

import asyncio
from pathlib import Path

import pytest
from config_watcher.core import INotificationSource
from config_watcher.models import InitializationError, RawSignal, SignalKind


class FakeNotificationSource(INotificationSource):
    """In-memory notification source driven directly by tests."""

    def __init__(self, path: Path, fail_on_open: bool = False):
        self._path = path
        self.fail_on_open = fail_on_open
        self.signals = asyncio.Queue()
        self.errors = asyncio.Queue()
        self.open_calls = 0
        self.close_calls = 0
        self._open = False

    @property
    def path(self) -> Path:
        return self._path

    def open(self) -> None:
        self.open_calls += 1
        if self.fail_on_open:
            raise InitializationError("Cannot watch fake path", path=str(self._path))
        self._open = True

    def close(self) -> None:
        self.close_calls += 1
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def emit(self, kind: SignalKind = SignalKind.WRITE) -> None:
        self.signals.put_nowait(RawSignal(kind=kind, path=self._path))

    def fail(self, error: Exception) -> None:
        self.errors.put_nowait(error)

    def terminate(self) -> None:
        self.signals.put_nowait(None)


@pytest.fixture
def config_path(tmp_path):
    """Create a configuration file with initial content."""
    path = tmp_path / "config.yaml"
    path.write_text("initial")
    return path


@pytest.fixture
def fake_source(config_path):
    """Create a fake notification source for the configuration file."""
    return FakeNotificationSource(config_path)
