"""Filtering of raw signals down to the ones that can change file content."""

from config_watcher.models import RawSignal, SignalKind

RELEVANT_SIGNAL_KINDS = frozenset({SignalKind.WRITE, SignalKind.CREATE})


def is_relevant_signal(signal: RawSignal) -> bool:
    """
    Check if a raw signal should be passed on to the debounce stage.

    Only writes and creations are kept; metadata changes, removals and
    renames away from the path are dropped.
    """
    return signal.kind in RELEVANT_SIGNAL_KINDS
