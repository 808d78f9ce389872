"""
Data models for raw file signals and settled configuration changes.

Raw signals are what the notification source reports for the watched file;
change events are what a watch session delivers to its consumer once a burst
of signals has settled.
"""

import time
from enum import Enum
from pathlib import Path
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class SignalKind(str, Enum):
    """Kind of low-level change reported for the watched path."""

    CREATE = "create"
    WRITE = "write"
    REMOVE = "remove"
    RENAME = "rename"
    CHMOD = "chmod"
    OTHER = "other"


class WatcherState(str, Enum):
    """Lifecycle state of a watch session."""

    IDLE = "idle"
    ACTIVE = "active"
    SHUTTING_DOWN = "shutting_down"
    CLOSED = "closed"


class RawSignal(BaseModel):
    """A single notification reported by the notification source."""

    kind: SignalKind = Field(..., description="Kind of change reported")
    path: Path = Field(..., description="Path the change was reported for")
    timestamp: float = Field(default_factory=time.time, description="Time the signal was observed")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"RawSignal({self.kind.value}: {self.path})"


class ChangeEvent(BaseModel, Generic[T]):
    """
    Configuration state before and after a settled change.

    Produced once per settle cycle. ``previous`` is the baseline the consumer
    last received (or the initial value) and ``current`` is the freshly read
    value; the two may be equal since values are never diffed.
    """

    previous: T = Field(..., description="Configuration value before the change")
    current: T = Field(..., description="Configuration value after the change")

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    def __str__(self) -> str:
        return f"ChangeEvent(previous={self.previous!r}, current={self.current!r})"
