#!/usr/bin/env python3
"""
Core SDK for the Monster Sprite Generator

Single source of truth for the shared types, constants and enums used by the
generation stages. Stage modules import from here to avoid drift.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from spritegen.config.schemas import ColorStyle, MonsterConfig, NoiseStyle, PaletteMode

# ============================================================================
# CONSTANTS
# ============================================================================

RGB = Tuple[int, int, int]
RGBA = Tuple[int, int, int, int]
Point = Tuple[int, int]

TRANSPARENT: RGBA = (0, 0, 0, 0)
WHITE: RGB = (255, 255, 255)

# Layers are composited in this order, bottom first
LAYER_ORDER = ("body", "limbs", "appendages", "head")

ANCHOR_NAMES = ("head", "body", "leftHip", "rightHip", "feetCenter")

CONCRETE_PALETTE_MODES = (
    PaletteMode.MONOCHROME,
    PaletteMode.ANALOGOUS,
    PaletteMode.COMPLEMENTARY,
    PaletteMode.SPLIT_COMPLEMENTARY,
    PaletteMode.TRIADIC,
    PaletteMode.TWO_TONE_RANDOM,
    PaletteMode.SOFT_STRIPES,
)

CONCRETE_NOISE_STYLES = (NoiseStyle.BLOBBY, NoiseStyle.BALANCED, NoiseStyle.DETAILED)


class EyeStyle(IntEnum):
    SOLID_PUPIL = 0
    ACCENT_HIGHLIGHT = 1
    VERTICAL_SLIT = 2
    HORIZONTAL_SLIT = 3
    SPARKLE = 4
    CROSS_HIGHLIGHT = 5


# ============================================================================
# LAYERS
# ============================================================================


def new_layer(dimension: int) -> np.ndarray:
    """Fully transparent RGBA layer, indexed [y, x, channel]."""
    return np.zeros((dimension, dimension, 4), dtype=np.uint8)


def new_mask(dimension: int) -> np.ndarray:
    return np.zeros((dimension, dimension), dtype=bool)


# ============================================================================
# RESULT TYPES
# ============================================================================


@dataclass(frozen=True)
class Palette:
    """Ordered colour gradient built once per generation."""

    colors: Tuple[RGB, ...]
    mode: PaletteMode

    def __len__(self) -> int:
        return len(self.colors)

    def get(self, idx: int) -> RGB:
        return self.colors[idx % len(self.colors)]


@dataclass(frozen=True)
class ColorSet:
    base: RGB
    accent: RGB
    pattern: RGB
    outline: RGB
    style: ColorStyle = ColorStyle.HARMONIOUS


@dataclass
class MaskResult:
    body: np.ndarray
    head: np.ndarray
    combined: np.ndarray
    archetype: int
    body_start_y: int
    noise_params: Any = None

    @property
    def is_empty(self) -> bool:
        return not bool(self.combined.any())


@dataclass
class MonsterSpriteParts:
    body: np.ndarray
    head: np.ndarray
    limbs: np.ndarray
    appendages: np.ndarray
    anchors: Dict[str, Point]
    body_mask: np.ndarray
    head_mask: np.ndarray
    colors: ColorSet
    palette: Palette
    seed: int

    @property
    def dimension(self) -> int:
        return self.body.shape[0]

    def layers(self) -> Dict[str, np.ndarray]:
        return {name: getattr(self, name) for name in LAYER_ORDER}


@dataclass
class AnimationFrame:
    image: np.ndarray
    breath: float
    offsets: Dict[str, int] = field(default_factory=dict)
    anchors: Dict[str, Point] = field(default_factory=dict)


@dataclass
class SpriteResult:
    parts: MonsterSpriteParts
    frames: List[AnimationFrame]
    frame_delay_ms: int
    config: Optional[MonsterConfig] = None

    @property
    def seed(self) -> int:
        return self.parts.seed


__all__ = [
    # Constants
    "RGB", "RGBA", "Point", "TRANSPARENT", "WHITE", "LAYER_ORDER", "ANCHOR_NAMES",
    "CONCRETE_PALETTE_MODES", "CONCRETE_NOISE_STYLES",

    # Enums
    "NoiseStyle", "PaletteMode", "ColorStyle", "EyeStyle",

    # Layers
    "new_layer", "new_mask",

    # Models
    "MonsterConfig", "Palette", "ColorSet", "MaskResult", "MonsterSpriteParts",
    "AnimationFrame", "SpriteResult",
]
