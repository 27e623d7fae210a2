"""
Grid helpers for occupancy masks and signed distance fields.

Masks are ``bool`` numpy arrays indexed ``mask[y, x]``. Off-grid cells always
read as empty.
"""

from typing import List, Optional, Tuple

import numpy as np
from scipy import ndimage

from .sdk import Point

_NEIGHBOURHOOD = np.ones((3, 3), dtype=bool)


def in_bounds(grid: np.ndarray, x: int, y: int) -> bool:
    h, w = grid.shape[:2]
    return 0 <= x < w and 0 <= y < h


def is_set(mask: np.ndarray, x: int, y: int) -> bool:
    return in_bounds(mask, x, y) and bool(mask[y, x])


def inside_margin(dimension: int, margin: int, x: int, y: int) -> bool:
    return margin <= x < dimension - margin and margin <= y < dimension - margin


def sample_clamped(field: np.ndarray, x: int, y: int) -> float:
    h, w = field.shape
    return float(field[min(max(y, 0), h - 1), min(max(x, 0), w - 1)])


# ---------------- Measurements ----------------


def bounding_box(mask: np.ndarray) -> Optional[Tuple[int, int, int, int]]:
    """(left, top, right, bottom), inclusive, or None for an empty mask."""
    ys, xs = np.nonzero(mask)
    if xs.size == 0:
        return None
    return int(xs.min()), int(ys.min()), int(xs.max()), int(ys.max())


def centroid(mask: np.ndarray) -> Point:
    """Rounded mean of occupied cells; the grid centre for an empty mask."""
    ys, xs = np.nonzero(mask)
    h, w = mask.shape
    if xs.size == 0:
        return w // 2, h // 2
    return int(round(xs.mean())), int(round(ys.mean()))


def edge_mask(mask: np.ndarray) -> np.ndarray:
    """Occupied cells with at least one empty or off-grid 8-neighbour."""
    interior = ndimage.binary_erosion(mask, structure=_NEIGHBOURHOOD, border_value=0)
    return mask & ~interior


def edge_points(mask: np.ndarray) -> List[Point]:
    ys, xs = np.nonzero(edge_mask(mask))
    return [(int(x), int(y)) for y, x in zip(ys, xs)]


def touches_mask(mask: np.ndarray) -> np.ndarray:
    """Cells whose 3x3 neighbourhood (self included) holds an occupied cell."""
    return ndimage.binary_dilation(mask, structure=_NEIGHBOURHOOD, border_value=0)


def neighbour_count(mask: np.ndarray) -> np.ndarray:
    """Occupied cells in each 3x3 neighbourhood, self included."""
    return ndimage.convolve(mask.astype(np.int16), _NEIGHBOURHOOD.astype(np.int16), mode="constant", cval=0)


# ---------------- Morphology ----------------


def majority_clean(mask: np.ndarray, passes: int = 1, threshold: int = 3) -> np.ndarray:
    out = mask.copy()
    for _ in range(passes):
        out = neighbour_count(out) >= threshold
    return out


def dilate(mask: np.ndarray) -> np.ndarray:
    return touches_mask(mask)


def erode(mask: np.ndarray) -> np.ndarray:
    return ndimage.binary_erosion(mask, structure=_NEIGHBOURHOOD, border_value=0)


def close(mask: np.ndarray, iterations: int = 1) -> np.ndarray:
    out = mask
    for _ in range(iterations):
        out = erode(dilate(out))
    return out


def enforce_margin(mask: np.ndarray, margin: int) -> np.ndarray:
    out = mask.copy()
    if margin <= 0:
        return out
    out[:margin, :] = False
    out[-margin:, :] = False
    out[:, :margin] = False
    out[:, -margin:] = False
    return out


# ---------------- Distance fields ----------------


def signed_distance(mask: np.ndarray) -> np.ndarray:
    """
    Signed distance field, positive inside.

    Inside cells hold the distance to the nearest empty cell, outside cells the
    negated distance to the nearest occupied cell. An empty mask gives a
    uniformly negative field one grid-diagonal deep.
    """
    if not mask.any():
        h, w = mask.shape
        return np.full(mask.shape, -float(np.hypot(w, h)))
    if mask.all():
        h, w = mask.shape
        return np.full(mask.shape, float(np.hypot(w, h)))
    inside = ndimage.distance_transform_edt(mask)
    outside = ndimage.distance_transform_edt(~mask)
    return inside - outside
