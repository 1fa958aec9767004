from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

Point = Tuple[float, float]
Stroke = Sequence[Point]
Endpoints = Tuple[Point, Point]

SHOULD_HOOK = "Should hook."
STROKE_BACKWARD = "Stroke backward."


class InvalidInput(ValueError):
    """Raised when a stroke cannot be scored (too short, malformed, non-finite)."""


@dataclass(frozen=True)
class Matched:
    score: float
    source: Endpoints
    target: Endpoints
    warning: Optional[str] = None
    penalties: int = 0

    @property
    def matched(self) -> bool:
        return True


@dataclass(frozen=True)
class NoMatch:
    reason: str = "no compatible alignment"

    @property
    def matched(self) -> bool:
        return False


AlignmentResult = Union[Matched, NoMatch]


def score_of(result: AlignmentResult) -> Optional[float]:
    if isinstance(result, Matched):
        return result.score
    return None
