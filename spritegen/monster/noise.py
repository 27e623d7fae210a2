#!/usr/bin/env python3
"""
Value Noise Engine

Multi-octave coherent noise used for silhouette displacement and surface
shading. The lattice values come from an integer mixing hash rather than a
stored permutation table, so a noise field is a pure function of
(x, y, seed, octave parameters).

Public API:
- ValueNoise(seed, octaves, period, persistence, lacunarity).sample(x, y)
- ValueNoise.sample_grid(xs, ys) for numpy arrays
- noise_params_for_width(width, style, rng) -> NoiseParams
"""

from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from spritegen.core import get_logger

from .rng import RandomSource
from .sdk import CONCRETE_NOISE_STYLES, NoiseStyle

log = get_logger("spritegen.noise")

_MASK32 = 0xFFFFFFFF
_HX = np.uint32(374761393)
_HY = np.uint32(668265263)
_HMIX = np.uint32(1274126177)
_SIGN_MASK = np.uint32(0x7FFFFFFF)
_SEED_MULT = 69069
_OCTAVE_SEED_STEP = 1009

ArrayLike = Union[float, np.ndarray]


def _to_u32(values: np.ndarray) -> np.ndarray:
    return (values.astype(np.int64) & _MASK32).astype(np.uint32)


def hash_to_unit(ix: np.ndarray, iy: np.ndarray, seed: int) -> np.ndarray:
    """Deterministic lattice value in [-1, 1] for integer coordinates."""
    n = _to_u32(np.atleast_1d(ix)) * _HX
    n = n + _to_u32(np.atleast_1d(iy)) * _HY
    n = n + np.uint32((seed * _SEED_MULT) & _MASK32)
    n = n ^ (n >> np.uint32(13))
    n = n * _HMIX
    n = n ^ (n >> np.uint32(16))
    return (n & _SIGN_MASK).astype(np.float64) / float(_SIGN_MASK) * 2.0 - 1.0


def smoothstep(t: ArrayLike) -> ArrayLike:
    return t * t * (3.0 - 2.0 * t)


def single_octave(x: np.ndarray, y: np.ndarray, seed: int) -> np.ndarray:
    """Smoothstep-weighted bilinear interpolation of the four lattice corners."""
    x0 = np.floor(x)
    y0 = np.floor(y)
    sx = smoothstep(x - x0)
    sy = smoothstep(y - y0)
    ix = x0.astype(np.int64)
    iy = y0.astype(np.int64)

    v00 = hash_to_unit(ix, iy, seed)
    v10 = hash_to_unit(ix + 1, iy, seed)
    v01 = hash_to_unit(ix, iy + 1, seed)
    v11 = hash_to_unit(ix + 1, iy + 1, seed)

    top = v00 + (v10 - v00) * sx
    bottom = v01 + (v11 - v01) * sx
    return top + (bottom - top) * sy


class ValueNoise:
    """Fractal (fBm) value noise normalised to [-1, 1]."""

    def __init__(
        self,
        seed: int,
        octaves: int = 4,
        period: float = 30.0,
        persistence: float = 0.5,
        lacunarity: float = 2.0,
    ):
        self.seed = int(seed)
        self.octaves = octaves
        self.period = period
        self.persistence = persistence
        self.lacunarity = lacunarity

    def __repr__(self) -> str:
        return (
            f"ValueNoise(seed={self.seed}, octaves={self.octaves}, period={self.period}, "
            f"persistence={self.persistence}, lacunarity={self.lacunarity})"
        )

    def sample_grid(self, xs: ArrayLike, ys: ArrayLike) -> np.ndarray:
        xs, ys = np.broadcast_arrays(
            np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64)
        )
        total = np.zeros(xs.shape, dtype=np.float64)
        amplitude = 1.0
        frequency = 1.0
        max_amp = 0.0
        period = max(1.0, float(self.period))

        for octave in range(max(1, self.octaves)):
            nx = xs * frequency / period
            ny = ys * frequency / period
            total += single_octave(nx, ny, self.seed + octave * _OCTAVE_SEED_STEP) * amplitude
            max_amp += amplitude
            amplitude *= self.persistence
            frequency *= self.lacunarity

        if max_amp == 0:
            return np.zeros(xs.shape, dtype=np.float64)
        return np.clip(total / max_amp, -1.0, 1.0)

    def sample(self, x: float, y: float) -> float:
        return float(self.sample_grid(np.array([x]), np.array([y]))[0])


# ============================================================================
# STYLE PRESETS
# ============================================================================


@dataclass(frozen=True)
class NoiseParams:
    style: NoiseStyle
    base_scale: float
    amplitude_px: float
    octaves: int
    persistence: float


# (min_cells, max_cells, min_amp, max_amp, min_oct, max_oct, min_pers, max_pers, scale_mult)
_STYLE_RANGES = {
    # big smooth blobs, strong displacement
    NoiseStyle.BLOBBY: (1, 3, 0.08, 0.18, 1, 2, 0.28, 0.48, 0.60),
    NoiseStyle.BALANCED: (3, 5, 0.05, 0.11, 2, 3, 0.45, 0.60, 1.00),
    # many fine wiggles, small displacement
    NoiseStyle.DETAILED: (6, 12, 0.02, 0.06, 3, 5, 0.55, 0.80, 1.60),
}


def resolve_noise_style(style: NoiseStyle, rng: RandomSource) -> NoiseStyle:
    if style == NoiseStyle.RANDOM:
        return rng.choice(CONCRETE_NOISE_STYLES)
    return style


def noise_params_for_width(
    width: int, style: NoiseStyle, rng: Optional[RandomSource] = None
) -> NoiseParams:
    """
    Pick silhouette-noise parameters for a sprite width and style.

    Args:
        width: Grid side length (values below 8 are treated as 8)
        style: Noise style; RANDOM resolves to one concrete style first
        rng: Random stream the ranges are sampled from

    Returns:
        NoiseParams with scale, amplitude in cells, octaves and persistence
    """
    rng = rng or RandomSource()
    width = max(8, width)
    style = resolve_noise_style(NoiseStyle(style), rng)
    (min_cells, max_cells, min_amp, max_amp,
     min_oct, max_oct, min_pers, max_pers, scale_mult) = _STYLE_RANGES[style]

    target_cells = rng.randint(min_cells, max_cells)
    amp_factor = min_amp + rng.random() * (max_amp - min_amp)

    base_scale = target_cells / float(width) * scale_mult
    amplitude_px = width * amp_factor

    octaves = rng.randint(min_oct, max_oct)
    persistence = min_pers + rng.random() * (max_pers - min_pers)

    base_scale = min(max(base_scale, 0.004), 0.6)
    amplitude_px = min(max(amplitude_px, max(0.5, width * 0.02)), width * 0.35)
    persistence = min(max(persistence, 0.20), 0.95)

    # more octaves means busier edges, so pull the amplitude back
    amplitude_px *= 1.0 / (1.0 + 0.16 * max(0, octaves - 2))

    params = NoiseParams(
        style=style,
        base_scale=round(base_scale, 6),
        amplitude_px=round(amplitude_px, 3),
        octaves=octaves,
        persistence=round(persistence, 3),
    )
    log.debug(f"[noise] preset {params}")
    return params
