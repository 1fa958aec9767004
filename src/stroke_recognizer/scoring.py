from __future__ import annotations

import math
from typing import Optional

from .config import DEFAULT_CONFIG, RecognizerConfig
from .geom import angle, angle_diff, midpoint, minimum_length
from .types import Stroke
from .utils import distance2


def score_pairing(
    source: Stroke,
    target: Stroke,
    is_initial_segment: bool,
    config: Optional[RecognizerConfig] = None,
) -> Optional[float]:
    """Score one source segment against one target segment.

    Returns ``None`` when the pair is incompatible, otherwise the negated sum
    of the angle, midpoint-distance and log length-ratio deviations (0 is a
    perfect match). Trailing segments get twice the angular slack of the
    entry segment.
    """

    cfg = config or DEFAULT_CONFIG
    angle_dev = angle_diff(angle(source), angle(target))
    distance_dev = math.sqrt(distance2(midpoint(source), midpoint(target)))
    length_dev = abs(
        math.log(
            minimum_length(source, cfg.min_distance) / minimum_length(target, cfg.min_distance)
        )
    )
    angle_limit = (1 if is_initial_segment else 2) * cfg.angle_threshold
    if (
        angle_dev > angle_limit
        or distance_dev > cfg.distance_threshold
        or length_dev > cfg.length_threshold
    ):
        return None
    return -(angle_dev + distance_dev + length_dev)
