#!/usr/bin/env python3
"""
Sprite Assembler

Runs the full generation for one configuration: masks, colours, painted body
and head layers, limbs, anchors and appendages. One RandomSource drives every
stochastic decision, so a seed replays a sprite exactly.

Public API:
- generate_parts(config, rng=None) -> MonsterSpriteParts
- generate_monster(config) -> np.ndarray (static RGBA composite)
- generate_sprite(config) -> SpriteResult (parts + animation frames)
- compute_anchors(body_mask, head_mask, body_start_y) -> Dict[str, Point]
"""

import time
from typing import Dict, Optional

import numpy as np

from spritegen.core import get_logger

from . import grid
from .anim_fx import generate_animation, static_composite
from .color_engine import derive_colors, resolve_palette_mode
from .features import add_anchored_limbs, add_appendages, add_eyes, add_mouth
from .mask_builder import build_processed_masks
from .outline import draw_mask_outline
from .rng import RandomSource
from .sdk import MonsterConfig, MonsterSpriteParts, Point, SpriteResult, new_layer
from .texture_engine import add_internal_patterns, paint_surface

log = get_logger("spritegen.assembler")


# ---------------- Anchors ----------------


def find_attachment_point(mask: np.ndarray, left: bool, body_start_y: int) -> Point:
    """Lowest row first, the left-most (or right-most) body cell of the lower body."""
    h = mask.shape[0]
    start_y = max(0, body_start_y + (h - body_start_y) // 4)
    for y in range(h - 1, start_y - 1, -1):
        xs = np.nonzero(mask[y])[0]
        if xs.size:
            return (int(xs[0]) if left else int(xs[-1])), y
    return grid.centroid(mask)


def find_lowest_center(mask: np.ndarray) -> Point:
    rows = np.nonzero(mask.any(axis=1))[0]
    if rows.size == 0:
        return grid.centroid(mask)
    y = int(rows[-1])
    xs = np.nonzero(mask[y])[0]
    return int(xs.sum()) // xs.size, y


def compute_anchors(body_mask: np.ndarray, head_mask: np.ndarray, body_start_y: int) -> Dict[str, Point]:
    return {
        "head": grid.centroid(head_mask),
        "body": grid.centroid(body_mask),
        "leftHip": find_attachment_point(body_mask, True, body_start_y),
        "rightHip": find_attachment_point(body_mask, False, body_start_y),
        "feetCenter": find_lowest_center(body_mask),
    }


# ---------------- Generation ----------------


def generate_parts(config: MonsterConfig, rng: Optional[RandomSource] = None) -> MonsterSpriteParts:
    """
    Generate the layered sprite for one configuration.

    Args:
        config: Validated generation settings
        rng: Stream to draw from; defaults to one seeded from ``config.seed``
            (a fresh random seed when that is unset)

    Returns:
        MonsterSpriteParts with body, head, limbs and appendage layers, the
        final masks, anchors, colours and the body palette
    """
    rng = rng or RandomSource(config.seed)
    started = time.time()
    d = config.dimension
    margin = config.margin
    log.info(f"[sprite] seed={rng.seed} dimension={d} margin={margin}")

    masks = build_processed_masks(config, rng)
    body_mask, head_mask = masks.body, masks.head

    colors = derive_colors(config.color_style, rng)
    mode = resolve_palette_mode(config.palette_mode, rng)

    # Body
    body = new_layer(d)
    palette_seed = rng.next_seed()
    palette = paint_surface(
        body, body_mask, colors.base, colors.accent,
        n_colors=config.number_of_colors, mode=mode,
        seed=rng.next_seed(), palette_seed=palette_seed,
    )
    if config.draw_patterns:
        add_internal_patterns(body, body_mask, colors.pattern, rng)
    if config.draw_outline:
        draw_mask_outline(body, body_mask, colors.outline)

    # Head
    head = new_layer(d)
    paint_surface(
        head, head_mask, colors.base, colors.accent,
        n_colors=config.number_of_colors, mode=mode,
        seed=rng.next_seed(), head_mask=head_mask, palette_seed=palette_seed,
    )
    add_eyes(head, head_mask, colors.accent, rng)
    add_mouth(head, head_mask)
    if config.draw_outline:
        draw_mask_outline(head, head_mask, colors.outline)

    # Limbs extend the body silhouette
    limbs = new_layer(d)
    limb_result = add_anchored_limbs(limbs, body_mask, colors.accent, margin, rng)
    body_mask = limb_result.mask & ~head_mask

    anchors = compute_anchors(body_mask, head_mask, masks.body_start_y)

    appendages = new_layer(d)
    add_appendages(appendages, body_mask | head_mask, colors.accent, margin, rng, anchors)

    log.info(
        f"[sprite] archetype={masks.archetype} palette={palette.mode.value} "
        f"colors={len(palette)} took={time.time() - started:.3f}s"
    )
    return MonsterSpriteParts(
        body=body,
        head=head,
        limbs=limbs,
        appendages=appendages,
        anchors=anchors,
        body_mask=body_mask,
        head_mask=head_mask,
        colors=colors,
        palette=palette,
        seed=rng.seed,
    )


def generate_monster(config: MonsterConfig) -> np.ndarray:
    """Single flattened RGBA image of a freshly generated sprite."""
    return static_composite(generate_parts(config))


def generate_sprite(config: MonsterConfig, rng: Optional[RandomSource] = None) -> SpriteResult:
    """Generate the parts and the configured number of animation frames."""
    parts = generate_parts(config, rng)
    frames = generate_animation(parts, config.frame_count, config.animation_intensity)
    return SpriteResult(parts=parts, frames=frames, frame_delay_ms=config.frame_delay_ms, config=config)
