"""Dynamic-programming alignment of a drawn stroke onto a reference stroke."""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from .config import DEFAULT_CONFIG, RecognizerConfig
from .core.grid_safety import is_reachable, unreachable2d
from .geom import validate_stroke
from .hooks import has_hook
from .metrics import Timer, count
from .scoring import score_pairing
from .types import SHOULD_HOOK, AlignmentResult, Matched, NoMatch

log = logging.getLogger(__name__)


def perform_alignment(
    source: Sequence[Sequence[float]],
    target: Sequence[Sequence[float]],
    config: Optional[RecognizerConfig] = None,
) -> AlignmentResult:
    """Align the points of *source* onto the segments of *target*.

    ``memo[i, j]`` is the best cumulative pairing score with the first ``i``
    target segments matched and the match ending at source point ``j``. Each
    target segment may consume up to ``max_missed_segments + 1`` source
    segments; every bypassed source point costs ``missed_segment_penalty``.
    If the target has a hook, up to ``hook_droppable_segments`` trailing
    target segments may stay unmatched at the same per-segment cost.
    """

    cfg = config or DEFAULT_CONFIG
    src = validate_stroke(source, "source")
    tgt = validate_stroke(target, "target")
    count("align.calls")

    with Timer("align.dp"):
        memo = unreachable2d(len(tgt), len(src))
        memo[0, 0] = 0.0
        for i in range(1, len(tgt)):
            target_segment = (tgt[i - 1], tgt[i])
            for j in range(1, len(src)):
                best = memo[i, j]
                start = max(j - cfg.max_missed_segments - 1, 0)
                for k in range(start, j):
                    previous = memo[i - 1, k]
                    if not is_reachable(previous):
                        continue
                    score = score_pairing((src[k], src[j]), target_segment, i == 1, cfg)
                    if score is None:
                        continue
                    penalty = (j - k - 1) * cfg.missed_segment_penalty
                    best = max(best, previous + score - penalty)
                memo[i, j] = best

    droppable = cfg.hook_droppable_segments if has_hook(tgt, cfg) else 0
    last = len(tgt) - 1
    result: AlignmentResult = NoMatch("no compatible alignment")
    best_score: Optional[float] = None
    for i in range(max(last - droppable, 1), last + 1):
        value = memo[i, len(src) - 1]
        if not is_reachable(value):
            continue
        score = float(value) - (last - i) * cfg.missed_segment_penalty
        if best_score is None or score > best_score:
            best_score = score
            result = Matched(
                score=score,
                source=(src[0], src[-1]),
                target=(tgt[0], tgt[i]),
                warning=SHOULD_HOOK if i < last else None,
            )

    if isinstance(result, Matched):
        log.debug(
            "[align] %d source points onto %d target points: score=%.4f warning=%s",
            len(src),
            len(tgt),
            result.score,
            result.warning,
        )
    else:
        log.debug("[align] no compatible alignment for %d/%d points", len(src), len(tgt))
    return result
