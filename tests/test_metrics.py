import numpy as np

from stroke_recognizer.core.grid_safety import UNREACHABLE, is_reachable, unreachable2d
from stroke_recognizer.metrics import MetricsTracker, Timer, count, get_tracker, use_tracker


def test_count_without_tracker_is_noop() -> None:
    assert get_tracker() is None
    count("recognize.calls")


def test_tracker_scoping() -> None:
    outer = MetricsTracker()
    inner = MetricsTracker()
    with use_tracker(outer):
        count("align.calls")
        with use_tracker(inner):
            count("align.calls", 3)
        count("align.calls")
    assert get_tracker() is None
    assert outer.get_count("align.calls") == 2
    assert inner.get_count("align.calls") == 3


def test_timer_records_into_explicit_tracker() -> None:
    tracker = MetricsTracker()
    with Timer("align.dp", tracker=tracker) as timer:
        pass
    assert timer.duration >= 0.0
    assert tracker.get_time("align.dp") == timer.duration
    tracker.add_time("align.dp", -1.0)
    assert tracker.get_time("align.dp") == timer.duration


def test_summary_mentions_counters() -> None:
    tracker = MetricsTracker()
    tracker.increment("recognize.calls", 4)
    tracker.increment("recognize.reversed")
    summary = tracker.summary()
    assert "recognize calls=4" in summary
    assert "reversed=1" in summary


def test_unreachable_grid() -> None:
    grid = unreachable2d(3, 4)
    assert isinstance(grid, np.ndarray)
    assert grid.shape == (3, 4)
    assert np.all(grid == UNREACHABLE)
    grid[1, 2] = -0.5
    assert is_reachable(grid[1, 2])
    assert not is_reachable(grid[0, 0])
