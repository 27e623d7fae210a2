#!/usr/bin/env python3
"""
Texture Engine for Monster Surfaces

Paints a mask with a noise-driven palette gradient and, optionally, simple
internal patterns. The shading noise is sampled on a mirror-folded column so
the two halves of a sprite shade alike.

Public API:
- paint_surface(layer, mask, base, accent, *, n_colors, mode, seed, ...) -> Palette
- add_internal_patterns(layer, mask, color, rng) -> None

Effects:
- Shading: two fBm channels, one picking the palette position, one sparing accent speckle
- Edge nudges: lower edges darker, upper edges lighter
- Patterns: clipped spots or straight/diagonal stripes
"""

from typing import Optional

import numpy as np

from spritegen.core import get_logger

from .color_engine import build_palette, palette_lookup
from .noise import ValueNoise
from .rng import RandomSource
from .sdk import RGB, Palette, PaletteMode

log = get_logger("spritegen.texture_engine")

HEAD_PALETTE_SEED_OFFSET = 12345
ACCENT_THRESHOLD = 0.9
ACCENT_MIX = 0.75

# (offset applied first, multiplier applied second) when that neighbour is empty
_EDGE_NUDGES = (
    ((1, 0), -0.45, 0.8),   # below
    ((0, 1), 0.2, 1.1),     # right
    ((-1, 0), 0.45, 1.2),   # above
    ((0, -1), 0.2, 1.1),    # left
)


def _neighbour(mask: np.ndarray, dy: int, dx: int) -> np.ndarray:
    """mask[y + dy, x + dx] for every cell, off-grid reading as empty."""
    h, w = mask.shape
    padded = np.zeros((h + 2, w + 2), dtype=bool)
    padded[1:-1, 1:-1] = mask
    return padded[1 + dy:1 + dy + h, 1 + dx:1 + dx + w]


def _shading(noise: ValueNoise, col_x: np.ndarray, ys: np.ndarray) -> np.ndarray:
    return np.abs(noise.sample_grid(col_x, ys)) ** 1.5 * 3.0


def paint_surface(
    layer: np.ndarray,
    mask: np.ndarray,
    base: RGB,
    accent: RGB,
    *,
    n_colors: int,
    mode: PaletteMode,
    seed: int,
    outline: bool = False,
    head_mask: Optional[np.ndarray] = None,
    head_mode: Optional[PaletteMode] = None,
    palette_seed: Optional[int] = None,
) -> Palette:
    """
    Paint every occupied cell of ``mask`` into ``layer``.

    Args:
        layer: RGBA layer, modified in place
        mask: Cells to paint
        base: Base colour the palette derives from
        accent: Colour mixed into sparse speckles
        n_colors: Palette length
        mode: Palette mode (RANDOM resolves once)
        seed: Seeds both shading noise channels
        outline: Clear the empty 4-neighbours of painted cells to transparent
        head_mask: Cells painted from the head palette, seeded at a fixed
            offset from ``palette_seed`` (the body palette itself when it has
            a single colour)
        head_mode: Mode of the head palette, defaults to the resolved body mode
        palette_seed: Sub-seed for the palette's own random draws

    Returns:
        The body palette that was used

    Raises:
        ValueError: If n_colors < 1
    """
    stream = RandomSource(seed)
    noise = ValueNoise(stream.next_seed(), octaves=5, period=30.0, persistence=0.4, lacunarity=3.0)
    noise2 = ValueNoise(stream.next_seed(), octaves=3, period=40.0, persistence=0.4, lacunarity=3.0)

    palette = build_palette(base, mode, n_colors, sub_seed=palette_seed, rng=stream)
    head_palette = None
    if head_mask is not None and len(palette) == 1:
        head_palette = palette
    elif head_mask is not None:
        head_seed = (palette_seed or 0) + HEAD_PALETTE_SEED_OFFSET
        head_palette = build_palette(base, head_mode or palette.mode, n_colors, sub_seed=head_seed)

    ys, xs = np.nonzero(mask)
    if ys.size == 0:
        log.debug("[paint] empty mask, nothing painted")
        return palette

    w = mask.shape[1]
    col_x = np.ceil(np.abs(xs - (w - 1) * 0.5))
    yf = ys.astype(np.float64)
    n = _shading(noise, col_x, yf)
    n2 = _shading(noise2, col_x, yf)

    for (dy, dx), offset, mult in _EDGE_NUDGES:
        open_side = ~_neighbour(mask, dy, dx)[ys, xs]
        n = np.where(open_side, (n + offset) * mult, n)
        if outline:
            carve = _neighbour(mask, -dy, -dx) & ~mask
            layer[carve] = 0

    n = np.clip(n, 0.0, 1.0)
    n2 = np.clip(n2, 0.0, 1.0)

    colors = palette_lookup(palette, n)
    if head_palette is not None:
        on_head = head_mask[ys, xs]
        if on_head.any():
            colors[on_head] = palette_lookup(head_palette, n[on_head])

    # a one-colour palette stays a single flat colour
    if len(palette) > 1:
        speckle = n2 > ACCENT_THRESHOLD
        accent_rgb = np.asarray(accent[:3], dtype=np.float64)
        colors[speckle] = np.clip(
            np.rint(colors[speckle] + (accent_rgb - colors[speckle]) * ACCENT_MIX), 0, 255
        )

    layer[ys, xs, :3] = colors.astype(np.uint8)
    layer[ys, xs, 3] = 255
    log.debug(f"[paint] cells={ys.size} mode={palette.mode.value} colors={len(palette)}")
    return palette


# ============================================================================
# INTERNAL PATTERNS
# ============================================================================


def _fill_circle_clipped(layer: np.ndarray, mask: np.ndarray, cx: int, cy: int, r: int, color: RGB) -> None:
    h, w = mask.shape
    y0, y1 = max(0, cy - r), min(h - 1, cy + r)
    x0, x1 = max(0, cx - r), min(w - 1, cx + r)
    ys, xs = np.ogrid[y0:y1 + 1, x0:x1 + 1]
    disc = ((xs - cx) ** 2 + (ys - cy) ** 2 <= r * r) & mask[y0:y1 + 1, x0:x1 + 1]
    patch = layer[y0:y1 + 1, x0:x1 + 1]
    patch[disc, :3] = color[:3]
    patch[disc, 3] = 255


def add_internal_patterns(layer: np.ndarray, mask: np.ndarray, color: RGB, rng: RandomSource) -> None:
    """Spots or stripes in ``color``, painted only onto occupied cells."""
    h, w = mask.shape
    if rng.chance(0.5):
        spots = rng.randrange(2, 6)
        for _ in range(spots):
            cx = rng.randrange(0, w)
            cy = rng.randrange(0, h)
            r = rng.randrange(1, 3)
            if mask[cy, cx]:
                _fill_circle_clipped(layer, mask, cx, cy, r, color)
        log.debug(f"[patterns] spots={spots}")
        return

    horizontal = rng.chance(0.5)
    lines = rng.randrange(2, 5)
    xs = np.arange(w)
    for line in range(lines):
        off = rng.randrange(0, h)
        if horizontal:
            ys = np.full(w, off + line * 2)
        else:
            ys = (off + xs // 3 + line * 2) % h
        valid = ys < h
        cols, rows = xs[valid], ys[valid]
        hit = mask[rows, cols]
        layer[rows[hit], cols[hit], :3] = color[:3]
        layer[rows[hit], cols[hit], 3] = 255
    log.debug(f"[patterns] stripes={lines} horizontal={horizontal}")
