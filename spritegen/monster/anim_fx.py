#!/usr/bin/env python3
"""
Breathing Animation for Layered Monster Sprites

Builds looping idle frames from the assembled layers. The body's visible band
is squashed and stretched around its bottom row, limbs and appendages ride the
body's top edge with a small bob of their own, and the head follows with a
phase offset so the parts never move in lockstep.

All offsets are whole pixels; layers are composited with Pillow over a
transparent background in the fixed layer order.
"""

import math
from typing import Dict, List, Tuple

import numpy as np
from PIL import Image

from spritegen.core import get_logger

from .sdk import LAYER_ORDER, AnimationFrame, MonsterSpriteParts, Point

log = get_logger("spritegen.anim_fx")

MAX_STRETCH = 0.06
HEAD_PHASE_OFFSET = 0.10
TWO_PI = 2.0 * math.pi


def _clamp_unit(v: float) -> float:
    return max(-1.0, min(1.0, v))


def breath_signal(t: float) -> float:
    """Slightly asymmetric breathing curve in [-1, 1], one breath per loop."""
    return _clamp_unit(0.75 * math.sin(TWO_PI * t) + 0.25 * math.sin(2 * TWO_PI * t))


def head_breath_signal(t: float) -> float:
    """Breath for the head: phase-shifted, with a damped second harmonic."""
    t = t + HEAD_PHASE_OFFSET
    return _clamp_unit(0.75 * math.sin(TWO_PI * t) + 0.25 * 0.25 * math.sin(2 * TWO_PI * t))


def visible_rows(layer: np.ndarray) -> Tuple[int, int]:
    """First and last row holding a non-transparent pixel; the full height if none."""
    rows = np.nonzero(layer[:, :, 3].any(axis=1))[0]
    if rows.size == 0:
        return 0, layer.shape[0] - 1
    return int(rows[0]), int(rows[-1])


def shift_vertical(layer: np.ndarray, dy: int) -> np.ndarray:
    """Move a layer down by ``dy`` rows (up when negative); uncovered rows are transparent."""
    out = np.zeros_like(layer)
    h = layer.shape[0]
    if dy >= h or dy <= -h:
        return out
    if dy >= 0:
        out[dy:] = layer[:h - dy]
    else:
        out[:h + dy] = layer[-dy:]
    return out


def _resample_band(band: np.ndarray, new_h: int) -> np.ndarray:
    """Nearest-neighbour vertical resize."""
    src_h = band.shape[0]
    src = np.floor((np.arange(new_h) + 0.5) * src_h / new_h).astype(np.int64)
    return band[np.clip(src, 0, src_h - 1)]


def _composite(layers: List[np.ndarray]) -> np.ndarray:
    h, w = layers[0].shape[:2]
    canvas = Image.new("RGBA", (w, h), (0, 0, 0, 0))
    for layer in layers:
        canvas = Image.alpha_composite(canvas, Image.fromarray(np.ascontiguousarray(layer)))
    return np.asarray(canvas, dtype=np.uint8).copy()


def compose_frame(
    parts: MonsterSpriteParts,
    breath: float,
    head_breath: float,
    intensity: float = 1.0,
) -> Tuple[np.ndarray, Dict[str, int]]:
    """
    Composite one frame for the given breath values.

    Returns:
        (RGBA frame, offsets) where offsets holds the body top shift, the
        scaled body height, and the limb and head offsets in rows
    """
    body = parts.body
    h, w = body.shape[:2]
    head_bob = max(1, w // 40)
    limb_bob = max(1, w // 60)

    top, bottom = visible_rows(body)
    content_h = bottom - top + 1
    scale = 1.0 + breath * MAX_STRETCH * intensity
    scaled_h = max(1, int(round(content_h * scale)))

    if scaled_h == content_h:
        body_frame = body.copy()
        top_shift = 0
    else:
        band = _resample_band(body[top:bottom + 1], scaled_h)
        dest_y = bottom - scaled_h + 1
        # rows pushed above the canvas are cropped, the bottom row never moves
        if dest_y < 0:
            band = band[-dest_y:]
        body_frame = np.zeros_like(body)
        start = max(0, dest_y)
        body_frame[start:bottom + 1] = band
        top_shift = dest_y - top

    limb_offset = top_shift + int(round(breath * limb_bob))
    head_offset = top_shift + int(round(head_breath * head_bob))

    shifted = {
        "body": body_frame,
        "limbs": shift_vertical(parts.limbs, limb_offset),
        "appendages": shift_vertical(parts.appendages, limb_offset),
        "head": shift_vertical(parts.head, head_offset),
    }
    frame = _composite([shifted[name] for name in LAYER_ORDER])
    offsets = {
        "body_top": top_shift,
        "body_height": scaled_h,
        "limbs": limb_offset,
        "head": head_offset,
    }
    return frame, offsets


def _shift_anchors(parts: MonsterSpriteParts, offsets: Dict[str, int]) -> Dict[str, Point]:
    top, bottom = visible_rows(parts.body)
    content_h = bottom - top + 1
    ratio = offsets["body_height"] / content_h

    moved = {}
    for name, (x, y) in parts.anchors.items():
        if name == "head":
            moved[name] = (x, y + offsets["head"])
        elif top <= y <= bottom:
            moved[name] = (x, bottom - int(round((bottom - y) * ratio)))
        else:
            moved[name] = (x, y)
    return moved


def static_composite(parts: MonsterSpriteParts) -> np.ndarray:
    """The un-animated sprite: every layer at rest."""
    return _composite([getattr(parts, name) for name in LAYER_ORDER])


def generate_animation(
    parts: MonsterSpriteParts, frame_count: int, intensity: float = 1.0
) -> List[AnimationFrame]:
    """
    Build a looping breathing animation.

    Args:
        parts: Assembled sprite layers and anchors
        frame_count: Number of frames in the loop (1 gives the static sprite)
        intensity: Scales the body squash/stretch

    Returns:
        One AnimationFrame per loop step

    Raises:
        ValueError: If frame_count < 1
    """
    if frame_count < 1:
        raise ValueError(f"frame_count must be at least 1, got {frame_count}")

    if frame_count == 1:
        return [AnimationFrame(image=static_composite(parts), breath=0.0,
                               offsets={"body_top": 0, "limbs": 0, "head": 0},
                               anchors=dict(parts.anchors))]

    frames = []
    for f in range(frame_count):
        t = f / frame_count
        breath = breath_signal(t)
        image, offsets = compose_frame(parts, breath, head_breath_signal(t), intensity)
        frames.append(AnimationFrame(
            image=image, breath=breath, offsets=offsets, anchors=_shift_anchors(parts, offsets)
        ))

    log.info(f"[anim] frames={frame_count} intensity={intensity}")
    return frames
