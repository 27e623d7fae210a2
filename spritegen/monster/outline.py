"""
Outline rendering around a mask.

A boundary cell is an occupied cell with at least one empty or off-grid
8-neighbour. The outline ring goes on the empty cells around the shape and
the boundary cells themselves are shaded darker; occupied cells are never
cleared.
"""

from typing import List

import numpy as np

from spritegen.core import get_logger

from . import grid
from .sdk import RGB, Point

log = get_logger("spritegen.outline")

BOUNDARY_DARKEN = 0.75


def is_edge(mask: np.ndarray, x: int, y: int) -> bool:
    if not grid.is_set(mask, x, y):
        return False
    h, w = mask.shape
    if x == 0 or y == 0 or x == w - 1 or y == h - 1:
        return True
    return not mask[y - 1:y + 2, x - 1:x + 2].all()


def edge_points(mask: np.ndarray) -> List[Point]:
    return grid.edge_points(mask)


def draw_mask_outline(layer: np.ndarray, mask: np.ndarray, color: RGB,
                      darken_amount: float = BOUNDARY_DARKEN) -> None:
    """Paint the outline ring in ``color`` and darken the boundary cells in place."""
    edges = grid.edge_mask(mask)
    if not edges.any():
        return

    ring = grid.touches_mask(edges) & ~mask
    layer[ring, :3] = color[:3]
    layer[ring, 3] = 255

    shaded = layer[edges, :3].astype(np.float64) * darken_amount
    layer[edges, :3] = np.clip(shaded, 0, 255).astype(np.uint8)
    layer[edges, 3] = 255

    log.debug(f"[outline] ring={int(ring.sum())} boundary={int(edges.sum())}")
