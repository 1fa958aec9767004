import math
from pathlib import Path

import pytest

from stroke_recognizer.config import (
    DEFAULT_CONFIG,
    DEFAULT_CONFIG_PATH,
    RecognizerConfig,
    apply_overrides,
    config_from_mapping,
    load_config,
    load_recognizer_config,
    parse_override,
)


def test_default_config_values() -> None:
    assert DEFAULT_CONFIG.angle_threshold == pytest.approx(math.pi / 5)
    assert DEFAULT_CONFIG.distance_threshold == 0.3
    assert DEFAULT_CONFIG.length_threshold == 1.5
    assert DEFAULT_CONFIG.max_missed_segments == 1
    assert DEFAULT_CONFIG.max_out_of_order == 2
    assert DEFAULT_CONFIG.min_distance == 1.0 / 16.0
    assert len(DEFAULT_CONFIG.hook_shapes) == 2


def test_bundled_yaml_matches_defaults() -> None:
    assert DEFAULT_CONFIG_PATH.exists()
    assert load_recognizer_config() == RecognizerConfig()


def test_partial_mapping_is_merged_over_defaults() -> None:
    cfg = config_from_mapping({"thresholds": {"distance": 0.5}})
    assert cfg.distance_threshold == 0.5
    assert cfg.length_threshold == DEFAULT_CONFIG.length_threshold
    assert cfg.hook_shapes == DEFAULT_CONFIG.hook_shapes


def test_mapping_round_trip() -> None:
    cfg = config_from_mapping({"alignment": {"max_missed_segments": 3}})
    assert config_from_mapping(cfg.to_mapping()) == cfg


@pytest.mark.parametrize(
    "raw, message",
    [
        ({"scoring": {}}, "Unknown config sections"),
        ({"thresholds": {"angle": 30}}, "Unknown keys in thresholds"),
        ({"thresholds": {"distance": -1}}, "thresholds.distance"),
        ({"thresholds": {"length": "wide"}}, "thresholds.length"),
        ({"alignment": {"max_out_of_order": 1.5}}, "alignment.max_out_of_order"),
        ({"alignment": {"max_missed_segments": True}}, "alignment.max_missed_segments"),
        ({"penalties": {"reverse": -2}}, "penalties.reverse"),
        ({"penalties": []}, "penalties config must be a mapping"),
        ({"hook_shapes": []}, "hook_shapes"),
        ({"hook_shapes": [[[0, 0]]]}, "zero vector"),
        ({"hook_shapes": [[[1, 2, 3]]]}, "pairs"),
        ({"hook_shapes": [[[None, 1], [1, 0]]]}, r"hook_shapes\[0\] vectors must be numeric"),
        ({"hook_shapes": [[[1, 0]], [[1, "up"]]]}, r"hook_shapes\[1\] vectors must be numeric"),
        ({"hook_shapes": [[[True, 0]]]}, "must be numeric"),
    ],
)
def test_invalid_mappings_are_rejected(raw, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        config_from_mapping(raw)


def test_load_config_from_file(tmp_path: Path) -> None:
    path = tmp_path / "cfg.yaml"
    path.write_text("penalties:\n  reverse: 3.5\n", encoding="utf-8")
    cfg = load_recognizer_config(path)
    assert cfg.reverse_penalty == 3.5
    assert cfg.out_of_order_penalty == DEFAULT_CONFIG.out_of_order_penalty


def test_empty_config_file_uses_defaults(tmp_path: Path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_recognizer_config(path) == DEFAULT_CONFIG


def test_missing_config_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.yaml"))


def test_overrides_are_parsed_as_yaml() -> None:
    assert parse_override("thresholds.angle_deg=30") == (("thresholds", "angle_deg"), 30)
    assert parse_override("hook_shapes=[[[1, 0]]]") == (("hook_shapes",), [[[1, 0]]])

    raw = {"thresholds": {"distance": 0.2}}
    apply_overrides(raw, ["thresholds.angle_deg=30", "penalties.reverse=0"])
    cfg = config_from_mapping(raw)
    assert cfg.angle_threshold_deg == 30.0
    assert cfg.distance_threshold == 0.2
    assert cfg.reverse_penalty == 0.0


@pytest.mark.parametrize("entry", ["thresholds.angle_deg", "=3", "a.b=[unclosed"])
def test_bad_overrides(entry: str) -> None:
    with pytest.raises(ValueError):
        parse_override(entry)


def test_load_config_with_overrides(tmp_path: Path) -> None:
    path = tmp_path / "cfg.yaml"
    path.write_text("penalties:\n  reverse: 3.5\n", encoding="utf-8")
    cfg = load_recognizer_config(path, ["penalties.reverse=1", "alignment.max_out_of_order=4"])
    assert cfg.reverse_penalty == 1.0
    assert cfg.max_out_of_order == 4

    cfg = load_recognizer_config(overrides=["hook_shapes=[[[1, 0], [0, 1]]]"])
    assert cfg.hook_shapes == (((1.0, 0.0), (0.0, 1.0)),)


@pytest.mark.parametrize(
    "content, message",
    [
        ("thresholds: [unclosed\n", "Config could not be read"),
        ("- 1\n- 2\n", "Config root must be a mapping"),
    ],
)
def test_unreadable_config_file(tmp_path: Path, content: str, message: str) -> None:
    path = tmp_path / "cfg.yaml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ValueError, match=message):
        load_recognizer_config(path)
