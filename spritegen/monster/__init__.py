"""
Procedural Pixel Monster Generator - Monster Package

This package provides the generation stages (masks, colour, painting,
features, outline, animation) and the SDK types they share.
"""

from .anim_fx import generate_animation, static_composite
from .assembler import compute_anchors, generate_monster, generate_parts, generate_sprite
from .color_engine import build_palette, derive_colors, palette_color, resolve_palette_mode
from .export import save_frames_png, save_gif, to_data_url, to_png_bytes
from .mask_builder import build_mask, build_processed_masks
from .rng import RandomSource
from .sdk import (  # Constants; Enums; Models
    ANCHOR_NAMES,
    LAYER_ORDER,
    AnimationFrame,
    ColorSet,
    ColorStyle,
    EyeStyle,
    MaskResult,
    MonsterConfig,
    MonsterSpriteParts,
    NoiseStyle,
    Palette,
    PaletteMode,
    SpriteResult,
)

__all__ = [
    "LAYER_ORDER",
    "ANCHOR_NAMES",
    "NoiseStyle",
    "PaletteMode",
    "ColorStyle",
    "EyeStyle",
    "MonsterConfig",
    "Palette",
    "ColorSet",
    "MaskResult",
    "MonsterSpriteParts",
    "AnimationFrame",
    "SpriteResult",
    "RandomSource",
    "build_mask",
    "build_processed_masks",
    "build_palette",
    "palette_color",
    "resolve_palette_mode",
    "derive_colors",
    "generate_parts",
    "generate_monster",
    "generate_sprite",
    "compute_anchors",
    "generate_animation",
    "static_composite",
    "to_png_bytes",
    "to_data_url",
    "save_frames_png",
    "save_gif",
]
