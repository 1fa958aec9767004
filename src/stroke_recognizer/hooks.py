"""Detection of droppable terminal hooks on reference strokes."""
from __future__ import annotations

from typing import Optional, Sequence

from .config import DEFAULT_CONFIG, RecognizerConfig
from .geom import angle, angle_diff
from .types import Point, Stroke

_ORIGIN: Point = (0.0, 0.0)


def match_shape(
    median: Stroke, shape: Sequence[Point], config: Optional[RecognizerConfig] = None
) -> bool:
    """Check whether every segment of *median* follows the matching *shape* vector.

    Each segment is compared against the initial-segment threshold, whatever
    its position in the stroke.
    """

    cfg = config or DEFAULT_CONFIG
    if len(median) != len(shape) + 1:
        return False
    threshold = cfg.angle_threshold
    for i, vector in enumerate(shape):
        diff = angle_diff(angle(median[i:i + 2]), angle((_ORIGIN, vector)))
        if diff >= threshold:
            return False
    return True


def has_hook(median: Stroke, config: Optional[RecognizerConfig] = None) -> bool:
    cfg = config or DEFAULT_CONFIG
    if len(median) < 3:
        return False
    # longer medians are assumed to end in a flourish
    if len(median) > 3:
        return True
    return any(match_shape(median, shape, cfg) for shape in cfg.hook_shapes)
