#!/usr/bin/env python3
"""
Feature placement: eyes, mouth, anchored limbs and appendage tendrils.

All drawing is clipped to the layer; limbs and appendages also stay inside
the margin. Limb placement grows the silhouette, so it returns the updated
mask instead of editing the caller's copy.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

from spritegen.core import get_logger

from . import grid
from .color_engine import darken, lighten
from .rng import RandomSource
from .sdk import RGB, TRANSPARENT, WHITE, EyeStyle, Point

log = get_logger("spritegen.features")

EYE_SNAP_RADIUS = 6
MOUTH_DROP = 3

# (target x, target y) as fractions of the grid, paired with the step direction
LIMB_SLOTS = (
    ((0.25, 1 / 3), (-1, 1)),
    ((0.75, 1 / 3), (1, 1)),
    ((0.25, 0.85), (-1, 2)),
    ((0.75, 0.85), (1, 2)),
)


@dataclass
class LimbResult:
    mask: np.ndarray
    tips: List[Point] = field(default_factory=list)


# ---------------- Pixel helpers ----------------


def set_pixel(layer: np.ndarray, x: int, y: int, color) -> None:
    """Write an opaque colour, or clear with TRANSPARENT. Off-layer writes are ignored."""
    if not grid.in_bounds(layer, x, y):
        return
    if tuple(color) == TRANSPARENT:
        layer[y, x] = 0
        return
    layer[y, x, :3] = color[:3]
    layer[y, x, 3] = 255


def fill_circle(layer: np.ndarray, cx: int, cy: int, r: int, color: RGB) -> None:
    for dy in range(-r, r + 1):
        for dx in range(-r, r + 1):
            if dx * dx + dy * dy <= r * r:
                set_pixel(layer, cx + dx, cy + dy, color)


# ---------------- Lookups ----------------


def estimate_head_center(mask: np.ndarray, max_y: int) -> Optional[Point]:
    """Integer mean of occupied cells with ``y < max_y``; None if there are none."""
    ys, xs = np.nonzero(mask[:max(0, max_y)])
    if xs.size == 0:
        return None
    return int(xs.sum()) // xs.size, int(ys.sum()) // ys.size


def find_nearest_mask_point(mask: np.ndarray, x0: int, y0: int, max_r: int) -> Optional[Point]:
    """Expanding square search around (x0, y0); None if nothing within ``max_r``."""
    for r in range(max_r + 1):
        for dx in range(-r, r + 1):
            for dy in range(-r, r + 1):
                if grid.is_set(mask, x0 + dx, y0 + dy):
                    return x0 + dx, y0 + dy
    return None


def find_edge_near(edges: List[Point], tx: int, ty: int) -> Optional[Point]:
    if not edges:
        return None
    pts = np.asarray(edges)
    d = (pts[:, 0] - tx) ** 2 + (pts[:, 1] - ty) ** 2
    best = int(np.argmin(d))
    return edges[best]


# ============================================================================
# FACE
# ============================================================================


def _draw_eye(layer: np.ndarray, mask: np.ndarray, ex: int, ey: int, r: int,
              style: EyeStyle, accent: RGB) -> None:
    if style == EyeStyle.ACCENT_HIGHLIGHT:
        fill_circle(layer, ex, ey, r + 1, accent)
        set_pixel(layer, ex, ey, TRANSPARENT)
        set_pixel(layer, ex - 1, ey - 1, WHITE)
    elif style == EyeStyle.VERTICAL_SLIT:
        fill_circle(layer, ex, ey, r + 1, accent)
        for dy in range(-r, r + 1):
            set_pixel(layer, ex, ey + dy, TRANSPARENT)
    elif style == EyeStyle.HORIZONTAL_SLIT:
        fill_circle(layer, ex, ey, r + 1, accent)
        for dx in range(-r, r + 1):
            set_pixel(layer, ex + dx, ey, TRANSPARENT)
    elif style == EyeStyle.SPARKLE:
        fill_circle(layer, ex, ey, r + 1, WHITE)
        set_pixel(layer, ex, ey, TRANSPARENT)
        glint = darken(WHITE, 0.6)
        set_pixel(layer, ex - 1, ey - 2, glint)
        set_pixel(layer, ex, ey - 2, glint)
    elif style == EyeStyle.CROSS_HIGHLIGHT:
        fill_circle(layer, ex, ey, r + 1, accent)
        set_pixel(layer, ex, ey, TRANSPARENT)
        light = lighten(accent, 0.5)
        for dx, dy in ((-1, 0), (1, 0), (0, -1), (0, 1)):
            if grid.is_set(mask, ex + dx, ey + dy):
                set_pixel(layer, ex + dx, ey + dy, light)
    else:
        fill_circle(layer, ex, ey, r + 1, WHITE)
        set_pixel(layer, ex, ey, TRANSPARENT)


def add_eyes(layer: np.ndarray, mask: np.ndarray, accent: RGB, rng: RandomSource) -> List[Point]:
    """
    Draw 1-3 eyes of one shared style around the head centre.

    Args:
        layer: Head layer, modified in place
        mask: Head mask the eyes snap onto
        accent: Iris colour for the accent styles
        rng: Random stream

    Returns:
        Centres of the eyes that were drawn (unsnappable eyes are skipped)
    """
    h, w = mask.shape
    center = estimate_head_center(mask, h // 3)
    if center is None:
        log.debug("[eyes] no head cells in the top third, skipping")
        return []

    eye_count = rng.randrange(1, 4)
    spacing = max(2, w // 10)
    start_x = center[0] - spacing * (eye_count - 1) // 2
    style = EyeStyle(rng.randrange(0, len(EyeStyle)))
    r = max(1, w // 24)

    placed = []
    for i in range(eye_count):
        spot = find_nearest_mask_point(mask, start_x + i * spacing, center[1], EYE_SNAP_RADIUS)
        if spot is None:
            continue
        _draw_eye(layer, mask, spot[0], spot[1], r, style, accent)
        placed.append(spot)

    log.debug(f"[eyes] count={eye_count} placed={len(placed)} style={style.name}")
    return placed


def add_mouth(layer: np.ndarray, mask: np.ndarray) -> Optional[Point]:
    """Clear a three-cell mouth a few rows under the head centre."""
    center = estimate_head_center(mask, mask.shape[0] // 3)
    if center is None:
        return None
    mx, my = center[0], center[1] + MOUTH_DROP
    for dx in (-1, 0, 1):
        set_pixel(layer, mx + dx, my, TRANSPARENT)
    return mx, my


# ============================================================================
# LIMBS & APPENDAGES
# ============================================================================


def _draw_limb(layer: np.ndarray, mask: np.ndarray, sx: int, sy: int, dir_x: int, dir_y: int,
               length: int, color: RGB, margin: int) -> Point:
    d = mask.shape[0]
    x, y = sx, sy
    for _ in range(length):
        nx, ny = x + dir_x, y + dir_y
        if not grid.inside_margin(d, margin, nx, ny):
            break
        x, y = nx, ny
        mask[y, x] = True
        set_pixel(layer, x, y, color)
        if grid.inside_margin(d, margin, x, y + 1):
            set_pixel(layer, x, y + 1, color)
    return x, y


def add_anchored_limbs(
    limb_layer: np.ndarray,
    mask: np.ndarray,
    color: RGB,
    margin: int,
    rng: RandomSource,
) -> LimbResult:
    """
    Grow two arms and two legs from the boundary cells nearest fixed targets.

    Returns:
        LimbResult with a copy of ``mask`` extended by the limb cells, and the
        limb tips. The input mask is left untouched.
    """
    out = mask.copy()
    edges = grid.edge_points(mask)
    if not edges:
        log.debug("[limbs] empty body, no limbs")
        return LimbResult(mask=out)

    h, w = mask.shape
    tips = []
    for (fx, fy), (dir_x, dir_y) in LIMB_SLOTS:
        start = find_edge_near(edges, int(w * fx), int(h * fy))
        length = rng.randrange(3, 6)
        tips.append(_draw_limb(limb_layer, out, start[0], start[1], dir_x, dir_y, length, color, margin))

    log.debug(f"[limbs] tips={tips}")
    return LimbResult(mask=out, tips=tips)


def _outward_step(px: int, py: int, origin: Point) -> Point:
    dx, dy = px - origin[0], py - origin[1]
    if dx == 0 and dy == 0:
        return 0, 1
    angle = np.arctan2(dy, dx)
    octant = int(round(angle / (np.pi / 4))) % 8
    return (
        (1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0), (-1, -1), (0, -1), (1, -1)
    )[octant]


def add_appendages(
    layer: np.ndarray,
    mask: np.ndarray,
    color: RGB,
    margin: int,
    rng: RandomSource,
    anchors: Optional[Dict[str, Point]] = None,
) -> int:
    """
    Sprout 2-5 short tendrils from random boundary cells, pointing away from
    the body anchor (or the mask centroid). Tendrils only cover empty cells
    inside the margin; the mask itself is never edited.

    Returns:
        Number of cells painted
    """
    edges = grid.edge_points(mask)
    if not edges:
        return 0

    d = mask.shape[0]
    origin = (anchors or {}).get("body") or grid.centroid(mask)
    painted = 0
    count = rng.randint(2, 5)
    for _ in range(count):
        px, py = edges[rng.randrange(0, len(edges))]
        step_x, step_y = _outward_step(px, py, origin)
        length = rng.randint(1, 4)
        x, y = px, py
        for _ in range(length):
            x, y = x + step_x, y + step_y
            if not grid.inside_margin(d, margin, x, y) or mask[y, x]:
                break
            set_pixel(layer, x, y, color)
            painted += 1

    log.debug(f"[appendages] tendrils={count} cells={painted}")
    return painted
