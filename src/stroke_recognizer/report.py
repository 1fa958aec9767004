from __future__ import annotations

import csv
import math
import os
from typing import List, Optional, Sequence

from .recognize import RankedCandidate
from .types import Matched, NoMatch

FIELDNAMES = [
    "rank",
    "name",
    "offset",
    "matched",
    "score",
    "warning",
    "penalties",
    "source_start",
    "source_end",
    "target_start",
    "target_end",
    "notes",
]


def format_float(value: Optional[float], digits: int) -> str:
    if value is None:
        return "-"
    if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        return "-"
    return f"{value:.{digits}f}"


def format_point(point: Optional[Sequence[float]], digits: int = 3) -> str:
    if point is None:
        return "-"
    return f"({format_float(point[0], digits)}, {format_float(point[1], digits)})"


def gather_notes(candidate: RankedCandidate) -> List[str]:
    notes: List[str] = []
    result = candidate.result
    if isinstance(result, NoMatch):
        notes.append(result.reason)
        return notes
    if result.warning:
        notes.append(result.warning)
    if candidate.offset:
        notes.append(f"drawn {abs(candidate.offset)} out of order")
    return notes


def write_report_csv(path: str, ranked: Sequence[RankedCandidate]) -> str:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(path, "w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=FIELDNAMES)
        writer.writeheader()
        for rank, candidate in enumerate(ranked, start=1):
            result = candidate.result
            matched = isinstance(result, Matched)
            writer.writerow(
                {
                    "rank": rank,
                    "name": candidate.name,
                    "offset": candidate.offset,
                    "matched": int(matched),
                    "score": format_float(result.score, 6) if matched else "",
                    "warning": (result.warning or "") if matched else "",
                    "penalties": result.penalties if matched else "",
                    "source_start": format_point(result.source[0], 6) if matched else "",
                    "source_end": format_point(result.source[1], 6) if matched else "",
                    "target_start": format_point(result.target[0], 6) if matched else "",
                    "target_end": format_point(result.target[1], 6) if matched else "",
                    "notes": "; ".join(gather_notes(candidate)),
                }
            )
    return path
