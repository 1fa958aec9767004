"""Counters and timings for recognizer runs.

A tracker is activated per context with :func:`use_tracker`; engine code
reports into whichever tracker is active and does nothing when none is.
"""
from __future__ import annotations

from contextlib import AbstractContextManager, contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from time import perf_counter
from typing import Dict, Iterator, Optional


_TRACKER_VAR: ContextVar["MetricsTracker | None"] = ContextVar(
    "stroke_recognizer_metrics_tracker", default=None
)


@dataclass
class MetricsTracker:
    timings: Dict[str, float] = field(default_factory=dict)
    counters: Dict[str, int] = field(default_factory=dict)

    def add_time(self, key: str, duration: float) -> None:
        if duration < 0.0:
            return
        self.timings[key] = self.timings.get(key, 0.0) + duration

    def increment(self, key: str, value: int = 1) -> None:
        self.counters[key] = self.counters.get(key, 0) + value

    def get_time(self, key: str) -> float:
        return self.timings.get(key, 0.0)

    def get_count(self, key: str) -> int:
        return self.counters.get(key, 0)

    def summary(self) -> str:
        return (
            f"recognize calls={self.get_count('recognize.calls')} | "
            f"alignments={self.get_count('align.calls')} | "
            f"reversed={self.get_count('recognize.reversed')} | "
            f"out of order={self.get_count('recognize.out_of_order')} | "
            f"dp={self.get_time('align.dp') * 1000:.1f} ms"
        )


def get_tracker() -> "MetricsTracker | None":
    return _TRACKER_VAR.get()


def count(key: str, value: int = 1) -> None:
    tracker = get_tracker()
    if tracker is not None:
        tracker.increment(key, value)


@contextmanager
def use_tracker(tracker: MetricsTracker) -> Iterator[MetricsTracker]:
    """Activate *tracker* for the duration of the context."""

    token = _TRACKER_VAR.set(tracker)
    try:
        yield tracker
    finally:
        _TRACKER_VAR.reset(token)


class Timer(AbstractContextManager["Timer"]):
    """Adds the elapsed wall-clock time of the block to the active tracker."""

    def __init__(self, key: str, *, tracker: Optional[MetricsTracker] = None) -> None:
        self.key = key
        self._tracker = tracker
        self.duration: float = 0.0
        self._start: float | None = None

    def __enter__(self) -> "Timer":  # type: ignore[override]
        self._start = perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        if self._start is None:
            return None
        self.duration = perf_counter() - self._start
        tracker = self._tracker or get_tracker()
        if tracker is not None:
            tracker.add_time(self.key, self.duration)
        return None


__all__ = ["MetricsTracker", "Timer", "count", "get_tracker", "use_tracker"]
