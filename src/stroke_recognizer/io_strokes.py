"""Loading of stroke documents for the command line.

A stroke is either a list of ``[x, y]`` pairs or an SVG ``points``-style
string (``"0,0 0.5,0.1 1,0"``). Documents are YAML (and therefore JSON).
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Mapping, Tuple

import yaml

from .geom import validate_stroke
from .types import InvalidInput, Point

_NUMBER_RE = re.compile(r"[-+]?(?:\d*\.\d+|\d+)(?:[eE][-+]?\d+)?")


@dataclass(frozen=True)
class Candidate:
    name: str
    target: Tuple[Point, ...]
    offset: int = 0


@dataclass(frozen=True)
class PairDocument:
    source: Tuple[Point, ...]
    target: Tuple[Point, ...]
    offset: int = 0


@dataclass(frozen=True)
class RankDocument:
    source: Tuple[Point, ...]
    candidates: Tuple[Candidate, ...]


def _parse_points_attribute(points: str, name: str) -> List[Point]:
    cleaned = re.sub(r"[\s,]+", " ", points.strip())
    if not cleaned:
        return []
    coords = cleaned.split(" ")
    if len(coords) % 2:
        raise InvalidInput(f"{name}: odd number of coordinates")
    for token in coords:
        if not _NUMBER_RE.fullmatch(token):
            raise InvalidInput(f"{name}: not a number: {token!r}")
    it = iter(coords)
    return [(float(x_str), float(y_str)) for x_str, y_str in zip(it, it)]


def parse_stroke(raw: Any, name: str) -> Tuple[Point, ...]:
    if isinstance(raw, str):
        raw = _parse_points_attribute(raw, name)
    if not isinstance(raw, (list, tuple)):
        raise InvalidInput(f"{name} must be a list of [x, y] pairs or a points string")
    return validate_stroke(raw, name)


def _parse_offset(raw: Any, name: str) -> int:
    if raw is None:
        return 0
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ValueError(f"{name}: offset must be an integer, got {raw!r}")
    return raw


def _load_mapping(path: Path) -> Mapping[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Stroke document not found: {path}")
    if path.is_dir():
        raise FileNotFoundError(f"Stroke document must not be a directory: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Could not read stroke document {path}: {exc}") from exc
    if not isinstance(data, Mapping):
        raise ValueError(f"Stroke document root must be a mapping: {path}")
    return data


def load_pair_document(path: str | Path) -> PairDocument:
    data = _load_mapping(Path(path))
    for key in ("source", "target"):
        if key not in data:
            raise ValueError(f"Stroke document is missing '{key}'")
    return PairDocument(
        source=parse_stroke(data["source"], "source"),
        target=parse_stroke(data["target"], "target"),
        offset=_parse_offset(data.get("offset"), "document"),
    )


def load_rank_document(path: str | Path) -> RankDocument:
    data = _load_mapping(Path(path))
    if "source" not in data:
        raise ValueError("Stroke document is missing 'source'")
    raw_candidates = data.get("candidates")
    if not isinstance(raw_candidates, list) or not raw_candidates:
        raise ValueError("Stroke document needs a non-empty 'candidates' list")

    candidates: List[Candidate] = []
    for index, entry in enumerate(raw_candidates):
        if not isinstance(entry, Mapping):
            raise ValueError(f"candidates[{index}] must be a mapping")
        name = str(entry.get("name", f"#{index + 1}"))
        if "target" not in entry:
            raise ValueError(f"candidate {name} is missing 'target'")
        candidates.append(
            Candidate(
                name=name,
                target=parse_stroke(entry["target"], f"candidate {name}"),
                offset=_parse_offset(entry.get("offset"), f"candidate {name}"),
            )
        )
    return RankDocument(source=parse_stroke(data["source"], "source"), candidates=tuple(candidates))
