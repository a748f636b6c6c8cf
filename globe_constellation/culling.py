"""
Visibility Culling

Hemisphere test for projected satellite points: a point is kept when its
outward normal (point minus globe centre) faces the viewpoint, i.e. when the
dot product of the unit normal and the unit point-to-viewpoint direction is
strictly positive.

This is not an occlusion test. Points close to the limb can switch between
visible and hidden from one frame to the next.
"""

from typing import Sequence, Tuple

import numpy as np

from globe_constellation.config import GLOBE_SCALE

Vector = Tuple[float, float, float]
ORIGIN: Vector = (0.0, 0.0, 0.0)


def to_globe_frame(
    viewpoint: Sequence[float], globe_position: Sequence[float], globe_scale: float = GLOBE_SCALE
) -> np.ndarray:
    """Express a world-space viewpoint in the globe's local (unscaled) frame."""
    return (np.asarray(viewpoint, dtype=float) - np.asarray(globe_position, dtype=float)) / globe_scale


def cull_points(
    points: np.ndarray, viewpoint: Sequence[float], center: Sequence[float] = ORIGIN
) -> np.ndarray:
    """
    Vectorised hemisphere test.

    Args:
        points: (N, 3) points in the globe frame
        viewpoint: Viewpoint in the globe frame
        center: Globe centre in the globe frame

    Returns:
        (N,) bool mask, True where the point faces the viewpoint. Degenerate
        points (at the centre or at the viewpoint) are not visible.
    """
    points = np.asarray(points, dtype=float).reshape(-1, 3)
    normals = points - np.asarray(center, dtype=float)
    to_view = np.asarray(viewpoint, dtype=float) - points

    normal_len = np.linalg.norm(normals, axis=1)
    view_len = np.linalg.norm(to_view, axis=1)
    usable = (normal_len > 0.0) & (view_len > 0.0)

    dots = np.einsum("ij,ij->i", normals, to_view)
    with np.errstate(invalid="ignore", divide="ignore"):
        dots = dots / (normal_len * view_len)

    return usable & (dots > 0.0)


def is_visible(point: Sequence[float], viewpoint: Sequence[float], center: Sequence[float] = ORIGIN) -> bool:
    return bool(cull_points(np.asarray([point]), viewpoint, center)[0])
