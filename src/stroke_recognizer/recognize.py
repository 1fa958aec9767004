from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Sequence, Tuple

from .align import perform_alignment
from .config import DEFAULT_CONFIG, RecognizerConfig
from .geom import validate_stroke
from .metrics import count
from .types import STROKE_BACKWARD, AlignmentResult, Matched, NoMatch, Point, score_of

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankedCandidate:
    name: str
    offset: int
    result: AlignmentResult


def recognize(
    source: Sequence[Sequence[float]],
    target: Sequence[Sequence[float]],
    offset: int,
    config: Optional[RecognizerConfig] = None,
) -> AlignmentResult:
    """Score a drawn *source* stroke against a reference *target* stroke.

    *offset* is the difference between the stroke's expected position in the
    symbol and the position it was drawn in. A backwards stroke is accepted
    with a penalty unless it would also need a hook dropped.
    """

    cfg = config or DEFAULT_CONFIG
    src = validate_stroke(source, "source")
    tgt = validate_stroke(target, "target")
    count("recognize.calls")

    if abs(offset) > cfg.max_out_of_order:
        count("recognize.out_of_order")
        log.debug("[recognize] offset %d exceeds %d", offset, cfg.max_out_of_order)
        return NoMatch("out of order")

    result = perform_alignment(src, tgt, cfg)
    if isinstance(result, NoMatch):
        log.debug("[recognize] forward alignment failed, trying reversed source")
        alternative = perform_alignment(_reversed(src), tgt, cfg)
        if isinstance(alternative, Matched) and alternative.warning is None:
            count("recognize.reversed")
            result = replace(
                alternative,
                score=alternative.score - cfg.reverse_penalty,
                penalties=alternative.penalties + 1,
                warning=STROKE_BACKWARD,
            )

    if isinstance(result, Matched) and offset:
        result = replace(result, score=result.score - abs(offset) * cfg.out_of_order_penalty)
    return result


def _reversed(stroke: Sequence[Point]) -> Tuple[Point, ...]:
    return tuple(reversed(stroke))


def rank_candidates(
    source: Sequence[Sequence[float]],
    candidates: Iterable[Tuple[str, Sequence[Sequence[float]], int]],
    config: Optional[RecognizerConfig] = None,
) -> List[RankedCandidate]:
    """Score *source* against every ``(name, target, offset)`` candidate.

    Returns the candidates best-first; unmatched ones come last and ties keep
    their input order.
    """

    cfg = config or DEFAULT_CONFIG
    src = validate_stroke(source, "source")
    ranked = [
        RankedCandidate(name=name, offset=offset, result=recognize(src, target, offset, cfg))
        for name, target, offset in candidates
    ]
    ranked.sort(key=_rank_key)
    return ranked


def _rank_key(candidate: RankedCandidate) -> Tuple[int, float]:
    score = score_of(candidate.result)
    if score is None:
        return (1, 0.0)
    return (0, -score)
