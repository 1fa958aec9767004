import textwrap
from pathlib import Path

import pytest

from stroke_recognizer.io_strokes import (
    load_pair_document,
    load_rank_document,
    parse_stroke,
)
from stroke_recognizer.types import InvalidInput


def _write(path: Path, content: str) -> Path:
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "raw, expected",
    [
        ([[0, 0], [1, 2]], ((0.0, 0.0), (1.0, 2.0))),
        ("0,0 1,2", ((0.0, 0.0), (1.0, 2.0))),
        ("0 0, 0.5 -1e-1 , 1,0", ((0.0, 0.0), (0.5, -0.1), (1.0, 0.0))),
    ],
)
def test_parse_stroke_formats(raw, expected) -> None:
    assert parse_stroke(raw, "stroke") == expected


@pytest.mark.parametrize("raw", ["0,0 1", "0,0 1,x", "", 42, {"x": 1}])
def test_parse_stroke_rejects_malformed(raw) -> None:
    with pytest.raises(InvalidInput):
        parse_stroke(raw, "stroke")


def test_load_pair_document(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "pair.yaml",
        """
        source: [[0, 0], [10, 0]]
        target: "10,0 0,0"
        offset: -1
        """,
    )
    doc = load_pair_document(path)
    assert doc.source == ((0.0, 0.0), (10.0, 0.0))
    assert doc.target == ((10.0, 0.0), (0.0, 0.0))
    assert doc.offset == -1


def test_load_pair_document_accepts_json(tmp_path: Path) -> None:
    path = _write(tmp_path / "pair.json", '{"source": [[0, 0], [1, 1]], "target": [[0, 0], [1, 1]]}')
    assert load_pair_document(path).offset == 0


def test_load_rank_document(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "rank.yaml",
        """
        source: [[0, 0], [10, 0]]
        candidates:
          - name: horizontal
            target: [[0, 0], [10, 0]]
          - target: "0,0 0,10"
            offset: 2
        """,
    )
    doc = load_rank_document(path)
    assert [c.name for c in doc.candidates] == ["horizontal", "#2"]
    assert doc.candidates[1].offset == 2
    assert doc.candidates[1].target == ((0.0, 0.0), (0.0, 10.0))


@pytest.mark.parametrize(
    "content, exc",
    [
        ("source: [[0, 0], [1, 0]]\n", ValueError),
        ("- 1\n- 2\n", ValueError),
        ("source: [[0, 0], [1, 0]]\ntarget: [[0, 0]]\n", InvalidInput),
        ("source: [[0, 0], [1, 0]]\ntarget: [[0, 0], [1, 0]]\noffset: 1.5\n", ValueError),
        ("source: [[0, 0]\n", ValueError),
    ],
)
def test_load_pair_document_errors(tmp_path: Path, content: str, exc) -> None:
    path = _write(tmp_path / "bad.yaml", content)
    with pytest.raises(exc):
        load_pair_document(path)


def test_rank_document_needs_candidates(tmp_path: Path) -> None:
    path = _write(tmp_path / "rank.yaml", "source: [[0, 0], [1, 0]]\ncandidates: []\n")
    with pytest.raises(ValueError, match="candidates"):
        load_rank_document(path)


def test_missing_document(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_pair_document(tmp_path / "nope.yaml")
    with pytest.raises(FileNotFoundError):
        load_rank_document(tmp_path)
