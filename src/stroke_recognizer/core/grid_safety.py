from __future__ import annotations

import numpy as np

UNREACHABLE = -np.inf


def unreachable2d(h: int, w: int) -> np.ndarray:
    """Create a true 2D float array with every cell marked unreachable."""
    return np.full((int(h), int(w)), UNREACHABLE, dtype=float, order="C")


def is_reachable(value: float) -> bool:
    """Unreachable cells hold -inf; everything finite is a real score."""
    return bool(np.isfinite(value))
