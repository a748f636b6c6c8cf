"""
Scroll-driven explosion of the satellite shell.

factor(scroll) = 1 + scroll * EXPLOSION_RATE, unbounded above. At rest the
factor is exactly 1 and points are not displaced.
"""

import math

import numpy as np

from globe_constellation.config import EXPLOSION_RATE


def explosion_factor(scroll_offset: float, rate: float = EXPLOSION_RATE) -> float:
    """Radial expansion factor for a scroll offset in pixels (negative or NaN treated as 0)."""
    if not math.isfinite(scroll_offset) or scroll_offset < 0.0:
        scroll_offset = 0.0
    return 1.0 + scroll_offset * rate


def explode(points: np.ndarray, scroll_offset: float, rate: float = EXPLOSION_RATE) -> np.ndarray:
    """Push points radially away from the globe centre."""
    return np.asarray(points, dtype=float) * explosion_factor(scroll_offset, rate)
