from __future__ import annotations

import math
import numbers
from typing import Sequence, Tuple

import numpy as np

from .types import InvalidInput, Point, Stroke
from .utils import distance2, subtract


def validate_stroke(points: Sequence[Sequence[float]], name: str = "stroke") -> Tuple[Point, ...]:
    """Return *points* as a tuple of float pairs, rejecting unusable input."""

    try:
        raw = np.asarray(points, dtype=object)
    except (TypeError, ValueError) as exc:
        raise InvalidInput(f"{name} must be a sequence of 2D coordinates") from exc
    if raw.ndim != 2 or raw.shape[1] != 2:
        if raw.ndim == 1 and raw.shape[0] == 0:
            raise InvalidInput(f"{name} needs at least two points, got 0")
        raise InvalidInput(f"{name} must be a sequence of 2D coordinates")
    if raw.shape[0] < 2:
        raise InvalidInput(f"{name} needs at least two points, got {raw.shape[0]}")
    # float() would also accept booleans and numeric strings
    if not all(_is_coordinate(value) for value in raw.flat):
        raise InvalidInput(f"{name} coordinates must be numbers")
    arr = raw.astype(float)
    if not np.all(np.isfinite(arr)):
        raise InvalidInput(f"{name} contains non-finite coordinates")
    return tuple((float(x), float(y)) for x, y in arr)


def _is_coordinate(value: object) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, (bool, np.bool_))


def angle(median: Stroke) -> float:
    diff = subtract(median[-1], median[0])
    return math.atan2(diff[1], diff[0])


def angle_diff(angle1: float, angle2: float) -> float:
    diff = abs(angle1 - angle2)
    return min(diff, 2 * math.pi - diff)


def bounds(median: Stroke) -> Tuple[Point, Point]:
    xs = [point[0] for point in median]
    ys = [point[1] for point in median]
    return (min(xs), min(ys)), (max(xs), max(ys))


def midpoint(median: Stroke) -> Point:
    # centre of the bounding box, not the centroid
    (min_x, min_y), (max_x, max_y) = bounds(median)
    return ((min_x + max_x) / 2, (min_y + max_y) / 2)


def minimum_length(segment: Stroke, min_distance: float) -> float:
    return math.sqrt(distance2(segment[0], segment[1])) + min_distance
