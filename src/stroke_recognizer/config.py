from __future__ import annotations

import copy
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Sequence, Tuple

import yaml

from .types import Point

PACKAGE_ROOT = Path(__file__).resolve().parent
DEFAULT_CONFIG_PATH = PACKAGE_ROOT / "configs" / "default.yaml"

HookShape = Tuple[Point, ...]


HARDCODED_DEFAULTS: Dict[str, Any] = {
    "thresholds": {
        # pi / 5
        "angle_deg": 36.0,
        "distance": 0.3,
        "length": 1.5,
        "min_distance": 1.0 / 16.0,
    },
    "alignment": {
        "max_missed_segments": 1,
        "max_out_of_order": 2,
        "hook_droppable_segments": 1,
    },
    "penalties": {
        "missed_segment": 1.0,
        "out_of_order": 2.0,
        "reverse": 2.0,
    },
    "hook_shapes": [
        [[1, 3], [-3, -1]],
        [[3, 3], [0, -1]],
    ],
}


@dataclass(frozen=True)
class RecognizerConfig:
    """Tuning values for the stroke matcher.

    Angles are kept in degrees to mirror the YAML layout; ``angle_threshold``
    gives the radian value the engine works with.
    """

    angle_threshold_deg: float = 36.0
    distance_threshold: float = 0.3
    length_threshold: float = 1.5
    min_distance: float = 1.0 / 16.0
    max_missed_segments: int = 1
    max_out_of_order: int = 2
    hook_droppable_segments: int = 1
    missed_segment_penalty: float = 1.0
    out_of_order_penalty: float = 2.0
    reverse_penalty: float = 2.0
    hook_shapes: Tuple[HookShape, ...] = (
        ((1.0, 3.0), (-3.0, -1.0)),
        ((3.0, 3.0), (0.0, -1.0)),
    )

    @property
    def angle_threshold(self) -> float:
        return math.radians(self.angle_threshold_deg)

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "thresholds": {
                "angle_deg": self.angle_threshold_deg,
                "distance": self.distance_threshold,
                "length": self.length_threshold,
                "min_distance": self.min_distance,
            },
            "alignment": {
                "max_missed_segments": self.max_missed_segments,
                "max_out_of_order": self.max_out_of_order,
                "hook_droppable_segments": self.hook_droppable_segments,
            },
            "penalties": {
                "missed_segment": self.missed_segment_penalty,
                "out_of_order": self.out_of_order_penalty,
                "reverse": self.reverse_penalty,
            },
            "hook_shapes": [[list(vec) for vec in shape] for shape in self.hook_shapes],
        }


def load_config(path: str) -> dict:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {p}")
    return yaml.safe_load(p.read_text(encoding="utf-8"))


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for key in base:
        value = base[key]
        if isinstance(value, Mapping):
            result[key] = copy.deepcopy(value)
        elif isinstance(value, list):
            result[key] = copy.deepcopy(value)
        else:
            result[key] = value
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(result.get(key), Mapping):
            result[key] = _deep_merge(result[key], value)  # type: ignore[arg-type]
        else:
            result[key] = value
    return result


def _set_nested(config: MutableMapping[str, Any], path: Sequence[str], value: Any) -> None:
    if not path:
        return
    cursor: MutableMapping[str, Any] = config
    for key in path[:-1]:
        next_value = cursor.get(key)
        if not isinstance(next_value, MutableMapping):
            next_value = {}
            cursor[key] = next_value
        cursor = next_value
    cursor[path[-1]] = value


def parse_override(entry: str) -> Tuple[Tuple[str, ...], Any]:
    if "=" not in entry:
        raise ValueError("--opts expects 'path=value'")
    raw_path, raw_value = entry.split("=", 1)
    path = tuple(part.strip() for part in raw_path.split(".") if part.strip())
    if not path:
        raise ValueError("--opts needs a key path, e.g. thresholds.angle_deg")
    try:
        value = yaml.safe_load(raw_value)
    except yaml.YAMLError as exc:
        raise ValueError(f"--opts {raw_path}: could not parse value ({exc})") from exc
    return path, value


def apply_overrides(config: MutableMapping[str, Any], entries: Sequence[str]) -> None:
    for entry in entries:
        path, value = parse_override(entry)
        _set_nested(config, path, value)


def _section(cfg: Mapping[str, Any], name: str, allowed: Sequence[str]) -> Mapping[str, Any]:
    section = cfg.get(name, {})
    if not isinstance(section, Mapping):
        raise ValueError(f"{name} config must be a mapping")
    unknown = sorted(set(section) - set(allowed))
    if unknown:
        raise ValueError(f"Unknown keys in {name}: {', '.join(map(str, unknown))}")
    return section


def _positive_float(section: Mapping[str, Any], key: str, label: str) -> float:
    raw = section[key]
    if isinstance(raw, bool):
        raise ValueError(f"{label} must be a number, got {raw!r}")
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{label} must be a number, got {raw!r}") from exc
    if not math.isfinite(value) or value <= 0.0:
        raise ValueError(f"{label} must be positive and finite, got {raw!r}")
    return value


def _non_negative_float(section: Mapping[str, Any], key: str, label: str) -> float:
    raw = section[key]
    if isinstance(raw, bool):
        raise ValueError(f"{label} must be a number, got {raw!r}")
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{label} must be a number, got {raw!r}") from exc
    if not math.isfinite(value) or value < 0.0:
        raise ValueError(f"{label} must be non-negative, got {raw!r}")
    return value


def _non_negative_int(section: Mapping[str, Any], key: str, label: str) -> int:
    raw = section[key]
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ValueError(f"{label} must be an integer, got {raw!r}")
    if raw < 0:
        raise ValueError(f"{label} must be non-negative, got {raw!r}")
    return raw


def _hook_shapes(raw: Any) -> Tuple[HookShape, ...]:
    if not isinstance(raw, (list, tuple)) or not raw:
        raise ValueError("hook_shapes must be a non-empty list of shapes")
    shapes = []
    for index, shape in enumerate(raw):
        if not isinstance(shape, (list, tuple)) or not shape:
            raise ValueError(f"hook_shapes[{index}] must be a non-empty list of vectors")
        vectors = []
        for vec in shape:
            if not isinstance(vec, (list, tuple)) or len(vec) != 2:
                raise ValueError(f"hook_shapes[{index}] vectors must be [dx, dy] pairs")
            not_numeric = f"hook_shapes[{index}] vectors must be numeric, got {list(vec)!r}"
            if any(isinstance(value, bool) for value in vec):
                raise ValueError(not_numeric)
            try:
                dx, dy = float(vec[0]), float(vec[1])
            except (TypeError, ValueError) as exc:
                raise ValueError(not_numeric) from exc
            if dx == 0.0 and dy == 0.0:
                raise ValueError(f"hook_shapes[{index}] contains a zero vector")
            vectors.append((dx, dy))
        shapes.append(tuple(vectors))
    return tuple(shapes)


def config_from_mapping(raw: Mapping[str, Any] | None) -> RecognizerConfig:
    """Build a validated :class:`RecognizerConfig` from a (partial) mapping.

    Missing values fall back to :data:`HARDCODED_DEFAULTS`.
    """

    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise ValueError("Config root must be a mapping")
    unknown = sorted(set(raw) - set(HARDCODED_DEFAULTS))
    if unknown:
        raise ValueError(f"Unknown config sections: {', '.join(map(str, unknown))}")
    cfg = _deep_merge(HARDCODED_DEFAULTS, raw)

    thresholds = _section(cfg, "thresholds", ("angle_deg", "distance", "length", "min_distance"))
    alignment = _section(
        cfg, "alignment", ("max_missed_segments", "max_out_of_order", "hook_droppable_segments")
    )
    penalties = _section(cfg, "penalties", ("missed_segment", "out_of_order", "reverse"))

    return RecognizerConfig(
        angle_threshold_deg=_positive_float(thresholds, "angle_deg", "thresholds.angle_deg"),
        distance_threshold=_positive_float(thresholds, "distance", "thresholds.distance"),
        length_threshold=_positive_float(thresholds, "length", "thresholds.length"),
        min_distance=_positive_float(thresholds, "min_distance", "thresholds.min_distance"),
        max_missed_segments=_non_negative_int(
            alignment, "max_missed_segments", "alignment.max_missed_segments"
        ),
        max_out_of_order=_non_negative_int(
            alignment, "max_out_of_order", "alignment.max_out_of_order"
        ),
        hook_droppable_segments=_non_negative_int(
            alignment, "hook_droppable_segments", "alignment.hook_droppable_segments"
        ),
        missed_segment_penalty=_non_negative_float(
            penalties, "missed_segment", "penalties.missed_segment"
        ),
        out_of_order_penalty=_non_negative_float(
            penalties, "out_of_order", "penalties.out_of_order"
        ),
        reverse_penalty=_non_negative_float(penalties, "reverse", "penalties.reverse"),
        hook_shapes=_hook_shapes(cfg["hook_shapes"]),
    )


def load_recognizer_config(
    path: str | Path | None = None, overrides: Sequence[str] = ()
) -> RecognizerConfig:
    """Read a YAML config, apply ``path=value`` overrides and validate it."""

    try:
        loaded = load_config(str(path if path is not None else DEFAULT_CONFIG_PATH))
    except yaml.YAMLError as exc:
        raise ValueError(f"Config could not be read: {exc}") from exc
    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise ValueError("Config root must be a mapping")
    raw_cfg: Dict[str, Any] = dict(loaded)
    apply_overrides(raw_cfg, overrides)
    return config_from_mapping(raw_cfg)


DEFAULT_CONFIG = RecognizerConfig()
