#!/usr/bin/env python3
"""
Color Engine for the Monster Sprite Generator

Provides the HSV helpers, the per-mode palette builders and the colour-set
derivation used to paint a sprite. Palettes are immutable ordered gradients
built once per generation.

Public API:
- build_palette(base, mode, n, sub_seed=None, rng=None) -> Palette
- palette_color(palette, t) -> RGB
- palette_lookup(palette, ts) -> np.ndarray of RGB rows
- derive_colors(style, rng) -> ColorSet
"""

import math
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from spritegen.core import get_logger

from .rng import RandomSource, ensure_rng
from .sdk import CONCRETE_PALETTE_MODES, RGB, ColorSet, ColorStyle, Palette, PaletteMode

log = get_logger("spritegen.color_engine")

# Saturation / value limits applied to every palette entry
S_MIN, S_MAX = 0.18, 0.95
V_MIN, V_MAX = 0.15, 0.98


# ---------------- Conversions ----------------


def _clamp_byte(v: float) -> int:
    return max(0, min(255, int(v)))


def hex_to_rgb(hex_color: str) -> RGB:
    """Convert hex color to RGB tuple."""
    hex_color = hex_color.lstrip("#")
    return tuple(int(hex_color[i:i + 2], 16) for i in (0, 2, 4))


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Convert RGB tuple to hex color."""
    return f"#{r:02x}{g:02x}{b:02x}"


def wrap_hue(h: float) -> float:
    h %= 360.0
    if h < 0:
        h += 360.0
    return h


def hsv_to_rgb(hue: float, sat: float, val: float) -> RGB:
    """HSV (hue in degrees, s and v in 0-1) to an RGB byte triple."""
    hue = wrap_hue(hue)
    c = val * sat
    x = c * (1 - abs((hue / 60.0) % 2 - 1))
    m = val - c

    if hue < 60:
        r, g, b = c, x, 0.0
    elif hue < 120:
        r, g, b = x, c, 0.0
    elif hue < 180:
        r, g, b = 0.0, c, x
    elif hue < 240:
        r, g, b = 0.0, x, c
    elif hue < 300:
        r, g, b = x, 0.0, c
    else:
        r, g, b = c, 0.0, x

    return _clamp_byte((r + m) * 255), _clamp_byte((g + m) * 255), _clamp_byte((b + m) * 255)


def rgb_to_hsv(rgb: RGB) -> Tuple[float, float, float]:
    """RGB byte triple to (hue degrees, saturation, value)."""
    r, g, b = (c / 255.0 for c in rgb[:3])
    hi = max(r, g, b)
    lo = min(r, g, b)
    d = hi - lo
    s = 0.0 if hi == 0 else d / hi

    if d == 0:
        h = 0.0
    elif hi == r:
        h = 60.0 * (((g - b) / d) % 6)
    elif hi == g:
        h = 60.0 * ((b - r) / d + 2)
    else:
        h = 60.0 * ((r - g) / d + 4)
    if h < 0:
        h += 360.0
    return h, s, hi


# ---------------- Colour picks and adjustments ----------------


def random_harmonious(rng: RandomSource) -> RGB:
    return hsv_to_rgb(rng.randrange(0, 360), 0.6, 0.65)


def random_accent(base: RGB, rng: RandomSource) -> RGB:
    """Hue jittered up to 30 degrees either way, a little more saturated and brighter."""
    h, s, v = rgb_to_hsv(base)
    h = wrap_hue(h + rng.random() * 60 - 30)
    return hsv_to_rgb(int(h), min(1.0, s + 0.12), min(1.0, v + 0.12))


def darken(rgb: RGB, amount: float) -> RGB:
    """Multiply each channel by ``amount`` (0.75 keeps three quarters)."""
    return tuple(_clamp_byte(c * amount) for c in rgb[:3])


def lighten(rgb: RGB, amount: float) -> RGB:
    """Move each channel ``amount`` of the way toward white."""
    return tuple(_clamp_byte(min(255, c + (255 - c) * amount)) for c in rgb[:3])


def lerp_color(a: RGB, b: RGB, t: float) -> RGB:
    return tuple(max(0, min(255, int(round(ca + (cb - ca) * t)))) for ca, cb in zip(a[:3], b[:3]))


# ============================================================================
# PALETTE MODES
# ============================================================================


def _hsv(h: float, s: float, v: float) -> RGB:
    return hsv_to_rgb(wrap_hue(h), min(max(s, S_MIN), S_MAX), min(max(v, V_MIN), V_MAX))


def _t(i: int, n: int) -> float:
    return i / max(1, n - 1)


def _monochrome(h, s, v, n, rng):
    v_min = max(V_MIN, v * 0.35)
    v_max = min(V_MAX, v * 1.15 + 0.04)
    out = []
    for i in range(n):
        t = 0.5 if n == 1 else _t(i, n)
        out.append(_hsv(h, s * (1.0 - 0.12 * (t - 0.5)), v_min + (v_max - v_min) * t))
    return out


def _analogous(h, s, v, n, rng):
    spread = 40.0 + rng.random() * 20.0
    start = wrap_hue(h - spread * 0.5)
    out = []
    for i in range(n):
        t = 0.5 if n == 1 else _t(i, n)
        out.append(_hsv(start + t * spread, s * (0.9 + rng.random() * 0.2), v * (0.85 + (t - 0.5) * 0.2)))
    return out


def _complementary(h, s, v, n, rng):
    comp = wrap_hue(h + 180.0)
    out = []
    for i in range(n):
        t = 0.5 if n == 1 else _t(i, n)
        # base hues in the lower half, complement in the upper half
        if t < 0.5:
            hh = h + (t * 2.0 - 1.0) * 25.0
        else:
            hh = comp + ((t - 0.5) * 2.0 - 1.0) * 25.0
        out.append(_hsv(hh, 0.6 + 0.4 * (1 - abs(0.5 - t)), v * (0.7 + 0.6 * t)))
    return out


def _split_complementary(h, s, v, n, rng):
    comp = wrap_hue(h + 180.0)
    off = 22 + rng.random() * 8
    c1, c2 = comp - off, comp + off
    out = []
    for i in range(n):
        t = _t(i, n)
        hh = h + (t - 0.25) * 40 if t < 0.5 else (c1 if t < 0.75 else c2)
        out.append(_hsv(hh, s * 0.9, v * (0.85 + 0.2 * t)))
    return out


def _triadic(h, s, v, n, rng):
    roots = (h, wrap_hue(h + 120), wrap_hue(h + 240))
    out = []
    for i in range(n):
        which = _t(i, n) * len(roots)
        r0 = min(len(roots) - 1, int(math.floor(which)))
        local_t = which - r0
        out.append(_hsv(roots[r0] + (local_t - 0.5) * 12.0,
                        s * (0.9 + 0.2 * (r0 % 2)),
                        v * (0.8 + 0.25 * r0)))
    return out


def _two_tone_random(h, s, v, n, rng):
    distance = rng.random() * 80 + 60
    sign = 1 if rng.chance(0.5) else -1
    hue2 = wrap_hue(h + distance * sign)
    out = []
    for i in range(n):
        t = _t(i, n)
        out.append(_hsv((1 - t) * h + t * hue2,
                        s * (0.7 + 0.6 * (1 - abs(0.5 - t))),
                        v * (0.6 + 0.8 * t)))
    return out


def _soft_stripes(h, s, v, n, rng):
    spread = 22.0
    return [_hsv(h + math.sin(i * 2.2) * spread, s * 0.85, v * (0.7 + 0.3 * _t(i, n))) for i in range(n)]


PaletteFn = Callable[[float, float, float, int, RandomSource], List[RGB]]

PALETTE_BUILDERS: Dict[PaletteMode, PaletteFn] = {
    PaletteMode.MONOCHROME: _monochrome,
    PaletteMode.ANALOGOUS: _analogous,
    PaletteMode.COMPLEMENTARY: _complementary,
    PaletteMode.SPLIT_COMPLEMENTARY: _split_complementary,
    PaletteMode.TRIADIC: _triadic,
    PaletteMode.TWO_TONE_RANDOM: _two_tone_random,
    PaletteMode.SOFT_STRIPES: _soft_stripes,
}


def resolve_palette_mode(mode: PaletteMode, rng: RandomSource) -> PaletteMode:
    """RANDOM becomes one of the seven concrete modes; others pass through."""
    mode = PaletteMode(mode)
    if mode == PaletteMode.RANDOM:
        return rng.choice(CONCRETE_PALETTE_MODES)
    return mode


def build_palette(
    base: RGB,
    mode: PaletteMode,
    n: int,
    sub_seed: Optional[int] = None,
    rng: Optional[RandomSource] = None,
) -> Palette:
    """
    Build an ordered gradient of ``n`` colours around a base colour.

    Args:
        base: Base RGB colour the hues and shades derive from
        mode: Palette mode; RANDOM resolves to a concrete mode once
        n: Number of colours (at least 1)
        sub_seed: Seeds a private stream for the mode's own random draws
        rng: Stream used when no sub_seed is given

    Returns:
        Palette with exactly ``n`` colours

    Raises:
        ValueError: If n < 1
    """
    if n < 1:
        raise ValueError(f"palette needs at least one colour, got n={n}")

    stream = RandomSource(sub_seed) if sub_seed is not None else ensure_rng(rng)
    concrete = resolve_palette_mode(mode, stream)
    h, s, v = rgb_to_hsv(base)

    colors = PALETTE_BUILDERS[concrete](h, s, v, n, stream)
    log.debug(f"[palette] mode={concrete.value} n={n} base={rgb_to_hex(*base[:3])}")
    return Palette(colors=tuple(colors), mode=concrete)


def palette_color(palette: Palette, t: float) -> RGB:
    """Piecewise-linear sample of the gradient, ``t`` clamped to [0, 1]."""
    if len(palette) == 1:
        return palette.colors[0]
    t = min(max(t, 0.0), 1.0)
    idx = t * (len(palette) - 1)
    i0 = int(math.floor(idx))
    i1 = min(len(palette) - 1, i0 + 1)
    return lerp_color(palette.colors[i0], palette.colors[i1], idx - i0)


def palette_lookup(palette: Palette, ts: np.ndarray) -> np.ndarray:
    """Vectorised ``palette_color`` over an array of positions; returns float RGB rows."""
    colors = np.asarray(palette.colors, dtype=np.float64)
    ts = np.asarray(ts, dtype=np.float64)
    if len(palette) == 1:
        return np.broadcast_to(colors[0], ts.shape + (3,)).copy()
    idx = np.clip(ts, 0.0, 1.0) * (len(palette) - 1)
    i0 = np.floor(idx).astype(np.int64)
    i1 = np.minimum(len(palette) - 1, i0 + 1)
    ft = (idx - i0)[..., None]
    return np.clip(np.rint(colors[i0] + (colors[i1] - colors[i0]) * ft), 0, 255)


# ============================================================================
# COLOUR SETS
# ============================================================================


def derive_colors(style: ColorStyle, rng: RandomSource) -> ColorSet:
    """
    Pick base, accent, pattern and outline colours for one sprite.

    HARMONIOUS derives everything from the base colour; each further style
    swaps one more role for an independent random colour.
    """
    style = ColorStyle(style)
    base = random_harmonious(rng)

    if style == ColorStyle.HARMONIOUS:
        accent = random_accent(base, rng)
    else:
        accent = random_harmonious(rng)

    if style in (ColorStyle.HARMONIOUS, ColorStyle.RANDOM_ACCENT):
        pattern = darken(base, 0.55)
    else:
        pattern = random_harmonious(rng)

    if style == ColorStyle.RANDOM_OUTLINE:
        outline = random_harmonious(rng)
    else:
        outline = darken(base, 0.34)

    log.debug(
        f"[colors] style={style.value} base={rgb_to_hex(*base)} accent={rgb_to_hex(*accent)}"
    )
    return ColorSet(base=base, accent=accent, pattern=pattern, outline=outline, style=style)
