#!/usr/bin/env python3
"""
Mask Builder for Monster Silhouettes

Builds the occupancy masks a sprite is painted into. A raw primitive (one of
eight body archetypes plus a head, optionally horned) is displaced through its
signed distance field with fractal noise, then varied with segments, lobes,
holes and spikes, cleaned, mirrored with organic jitter, closed, clipped to
the margin and finally split into head and body.

Public API:
- build_processed_masks(config, rng) -> MaskResult
- build_mask(config, rng) -> np.ndarray (combined mask)
- fill_ellipse(mask, cx, cy, rx, ry, margin)
"""

import math
from typing import Optional

import numpy as np

from spritegen.core import get_logger

from . import grid
from .noise import ValueNoise, noise_params_for_width
from .rng import RandomSource
from .sdk import MaskResult, MonsterConfig, new_mask

log = get_logger("spritegen.mask_builder")

ARCHETYPE_COUNT = 8


def _clamp01(v: float) -> float:
    return min(max(v, 0.0), 1.0)


# ============================================================================
# PRIMITIVES
# ============================================================================


def fill_ellipse(mask: np.ndarray, cx: int, cy: int, rx: int, ry: int, margin: int) -> None:
    """
    Set every cell of an axis-aligned ellipse that lies inside the margin.

    Radii are clipped to the room left between the centre and the margin. If a
    radius collapses to zero the centre is pulled inside the margin and the
    radius shrunk to whatever fits, so a positive request always draws
    something. Non-positive requested radii draw nothing.
    """
    if rx <= 0 or ry <= 0:
        return
    h, w = mask.shape

    left = cx - margin
    right = (w - 1 - margin) - cx
    top = cy - margin
    bottom = (h - 1 - margin) - cy

    rx = min(rx, max(0, min(left, right)))
    ry = min(ry, max(0, min(top, bottom)))

    if rx <= 0:
        cx = max(margin + 1, min(w - margin - 2, cx))
        rx = max(1, min(cx - margin, (w - 1 - margin) - cx))
    if ry <= 0:
        cy = max(margin + 1, min(h - margin - 2, cy))
        ry = max(1, min(cy - margin, (h - 1 - margin) - cy))

    x0, x1 = max(margin, cx - rx), min(w - 1 - margin, cx + rx)
    y0, y1 = max(margin, cy - ry), min(h - 1 - margin, cy + ry)
    if x1 < x0 or y1 < y0:
        return

    ys, xs = np.ogrid[y0:y1 + 1, x0:x1 + 1]
    inside = ((xs - cx) / rx) ** 2 + ((ys - cy) / ry) ** 2 <= 1.0
    mask[y0:y1 + 1, x0:x1 + 1] |= inside


def create_body(
    mask: np.ndarray,
    archetype: int,
    body_start_y: int,
    body_height: int,
    margin: int,
    rng: RandomSource,
) -> None:
    """Draw one of the eight body templates into ``mask``."""
    width = mask.shape[1]
    cx = width // 2 + rng.randrange(-4, 5)
    cy = body_start_y + body_height // 2
    top_third = body_start_y + body_height // 3

    if archetype == 1:
        fill_ellipse(mask, cx, cy, int(width * 0.26), int(body_height * 0.6), margin)
        fill_ellipse(mask, cx, top_third, int(width * 0.34), int(body_height * 0.28), margin)
    elif archetype == 2:
        fill_ellipse(mask, cx, cy, int(width * 0.52), int(body_height * 0.36), margin)
    elif archetype == 3:
        # stacked, shrinking circles
        segments = rng.randrange(3, 6)
        seg_r = width // 4
        for i in range(segments):
            r = max(1, seg_r - i)
            fill_ellipse(mask, cx, body_start_y + (i + 1) * body_height // (segments + 1), r, r, margin)
    elif archetype == 4:
        fill_ellipse(mask, cx, top_third, int(width * 0.32), int(body_height * 0.28), margin)
        fill_ellipse(mask, cx, body_start_y + int(body_height * 0.62),
                     int(width * 0.22), int(body_height * 0.32), margin)
        fill_ellipse(mask, cx, body_start_y + body_height // 2,
                     int(width * 0.18), int(body_height * 0.12), margin)
    elif archetype == 5:
        fill_ellipse(mask, cx, cy, int(width * 0.36), int(body_height * 0.45), margin)
        side = int(width * 0.25)
        fill_ellipse(mask, cx - side, top_third, int(width * 0.18), int(body_height * 0.28), margin)
        fill_ellipse(mask, cx + side, top_third, int(width * 0.18), int(body_height * 0.28), margin)
    elif archetype == 6:
        fill_ellipse(mask, cx, cy, int(width * 0.34), int(body_height * 0.44), margin)
        fill_ellipse(mask, cx - int(width * 0.12), top_third,
                     int(width * 0.22), int(body_height * 0.2), margin)
    elif archetype == 7:
        fill_ellipse(mask, cx - int(width * 0.08), cy, int(width * 0.36), int(body_height * 0.4), margin)
        fill_ellipse(mask, cx + int(width * 0.18), body_start_y + int(body_height * 0.6),
                     int(width * 0.18), int(body_height * 0.12), margin)
    else:
        fill_ellipse(mask, cx, cy, int(width * 0.36), int(body_height * 0.45), margin)


def create_head(
    mask: np.ndarray, body_start_y: int, head_height: int, margin: int, rng: RandomSource
) -> None:
    """Draw the head ellipse above the neck, sometimes with horns."""
    width = mask.shape[1]
    head_cx = width // 2 + rng.randrange(-3, 4)
    head_cy = max(margin + 1, body_start_y - head_height // 3 + rng.randrange(-2, 3))
    head_rx = int(width * 0.22) + rng.randrange(-2, 3)
    head_ry = max(3, head_height // 2 + rng.randrange(-2, 3))

    fill_ellipse(mask, head_cx, head_cy, head_rx, head_ry, margin)

    if rng.chance(0.45):
        horn_y = head_cy - head_ry // 2
        if rng.chance(0.5):
            fill_ellipse(mask, head_cx - head_rx + 2, horn_y - 2, 3, 3, margin)
            fill_ellipse(mask, head_cx + head_rx - 2, horn_y - 2, 3, 3, margin)
        else:
            fill_ellipse(mask, head_cx, horn_y - 3, 3, 4, margin)


# ============================================================================
# BODY VARIATION
# ============================================================================


def _displace(raw_body: np.ndarray, signed: np.ndarray, body_start_y: int,
              body_height: int, params, noise_seed: int) -> np.ndarray:
    h, w = raw_body.shape
    noise = ValueNoise(
        noise_seed,
        octaves=params.octaves,
        period=1.0,
        persistence=params.persistence,
        lacunarity=2.0,
    )
    ys, xs = np.mgrid[0:h, 0:w].astype(np.float64)
    field = noise.sample_grid(xs * params.base_scale, ys * params.base_scale)

    # zero near the neck, full strength towards the feet
    v = np.clip((ys - body_start_y) / max(1, body_height), 0.0, 1.0)
    falloff = v * v * (3.0 - 2.0 * v)

    return signed + field * params.amplitude_px * falloff > 0.0


def _segment_variant(mask: np.ndarray, body_start_y: int, body_height: int,
                     margin: int, rng: RandomSource) -> np.ndarray:
    w = mask.shape[1]
    seg = np.zeros_like(mask)
    segments = rng.randrange(2, 6)
    cx_base = w // 2 + rng.randrange(-3, 4)
    for i in range(segments):
        t = 0.5 if segments == 1 else i / (segments - 1)
        cy = body_start_y + int(t * body_height) + rng.randrange(-3, 4)
        rx = max(2, int(w * (0.14 + 0.24 * (0.5 + rng.random() * (1.0 - abs(0.5 - t))))))
        ry = max(2, int(body_height * (0.10 + 0.18 * rng.random())))
        fill_ellipse(seg, cx_base + rng.randrange(-6, 7), cy, rx, ry, margin)

    if rng.chance(0.6):
        return mask | seg
    return seg


def _adjust_lobes(mask: np.ndarray, bbox, margin: int, rng: RandomSource) -> np.ndarray:
    h, w = mask.shape
    left, top, right, bottom = bbox
    out = mask.copy()
    for _ in range(rng.randint(0, 4)):
        bx = rng.randrange(max(margin, left - 4), min(w - margin, right + 4))
        by = rng.randrange(max(margin, top - 4), min(h - margin, bottom + 4))
        brx = max(1, rng.randrange(max(2, w // 24), max(2, w // 8)))
        bry = max(1, rng.randrange(max(2, h // 32), max(2, h // 10)))
        blob = np.zeros_like(mask)
        fill_ellipse(blob, bx, by, brx, bry, margin)
        if rng.chance(0.72):
            out |= blob
        else:
            out &= ~blob
    return out


def _perforate(mask: np.ndarray, bbox, margin: int, rng: RandomSource) -> np.ndarray:
    h, w = mask.shape
    left, top, right, bottom = bbox
    out = mask.copy()
    for _ in range(rng.randint(0, 3)):
        hx = rng.randrange(max(margin, left), min(w - margin, right))
        hy = rng.randrange(max(margin, top), min(h - margin, bottom))
        hrx = max(1, rng.randrange(1, max(2, w // 18)))
        hry = max(1, rng.randrange(1, max(2, h // 20)))
        hole = np.zeros_like(mask)
        fill_ellipse(hole, hx, hy, hrx, hry, margin)
        out &= ~hole
    return out


def _add_spikes(mask: np.ndarray, signed: np.ndarray, body_start_y: int,
                body_height: int, margin: int, rng: RandomSource) -> np.ndarray:
    h, w = mask.shape
    edges = grid.edge_points(mask)
    if not edges:
        return mask

    out = mask.copy()
    lo, hi_x, hi_y = margin, w - margin, h - margin
    spike_max = max(0, min(12, len(edges) // 8 + rng.randrange(0, 5)))
    for _ in range(spike_max):
        px, py = edges[rng.randrange(0, len(edges))]
        gx = grid.sample_clamped(signed, px + 1, py) - grid.sample_clamped(signed, px - 1, py)
        gy = grid.sample_clamped(signed, px, py + 1) - grid.sample_clamped(signed, px, py - 1)
        length = math.hypot(gx, gy)
        if length > 1e-6:
            nx, ny = gx / length, gy / length
        else:
            nx = px - w / 2.0
            ny = py - (body_start_y + body_height / 2.0)
            nl = math.hypot(nx, ny) + 1e-6
            nx, ny = nx / nl, ny / nl

        spike_len = rng.randrange(max(2, w // 40), max(3, w // 18))
        for step in range(1, spike_len + 1):
            sx = px + int(round(nx * step))
            sy = py + int(round(ny * step))
            half = max(0, int(round((1.0 - step / spike_len) * (1 + rng.randrange(0, 2)))))
            x0, x1 = max(lo, sx - half), min(hi_x - 1, sx + half)
            y0, y1 = max(lo, sy - half), min(hi_y - 1, sy + half)
            if x0 <= x1 and y0 <= y1:
                out[y0:y1 + 1, x0:x1 + 1] = True
    return out


def generate_varied_body(
    raw_body: np.ndarray,
    body_start_y: int,
    body_height: int,
    config: MonsterConfig,
    rng: RandomSource,
):
    """
    Turn the raw body primitive into an irregular organic body.

    Returns:
        Tuple of (varied body mask, NoiseParams used for the displacement)
    """
    w = raw_body.shape[1]
    margin = config.margin
    signed = grid.signed_distance(raw_body)

    noise_seed = rng.next_seed()
    params = noise_params_for_width(w, config.noise_style, rng)
    mask = _displace(raw_body, signed, body_start_y, body_height, params, noise_seed)

    if rng.chance(0.5):
        mask = _segment_variant(mask, body_start_y, body_height, margin, rng)

    bbox = grid.bounding_box(mask) or grid.bounding_box(raw_body)
    if bbox is None:
        bbox = (margin, margin, w - 1 - margin, w - 1 - margin)
    mask = _adjust_lobes(mask, bbox, margin, rng)

    if rng.chance(0.45):
        mask = _perforate(mask, bbox, margin, rng)

    if rng.chance(0.55):
        mask = _add_spikes(mask, signed, body_start_y, body_height, margin, rng)

    mask = grid.majority_clean(mask, 1)
    if rng.chance(0.5):
        mask = grid.dilate(mask)
    if rng.chance(0.5):
        mask = grid.erode(mask)
    return mask, params


# ============================================================================
# WHOLE-SHAPE PASSES
# ============================================================================


def add_perimeter_noise(mask: np.ndarray, add_prob: float, remove_prob: float,
                        rng: RandomSource) -> np.ndarray:
    """Randomly nibble boundary cells and grow into touching empty cells."""
    edges = grid.edge_mask(mask)
    growable = grid.touches_mask(mask) & ~mask
    out = mask.copy()
    ys, xs = np.nonzero(edges | growable)
    for y, x in zip(ys, xs):
        if mask[y, x]:
            if rng.chance(remove_prob):
                out[y, x] = False
        elif rng.chance(add_prob):
            out[y, x] = True
    return out


def apply_organic_symmetry(mask: np.ndarray, margin: int, rng: RandomSource,
                           jitter: float = 0.18) -> np.ndarray:
    """
    Mirror the left half onto the right with small per-column and per-cell
    vertical jitter, occasional dropouts and stray probe cells.
    """
    h, w = mask.shape
    half = w // 2
    result = np.zeros_like(mask)
    result[:, :half] = mask[:, :half]

    col_shift = [rng.randrange(-1, 2) if rng.chance(0.35) else 0 for _ in range(half)]

    for x in range(half):
        mx = w - 1 - x
        mx_ok = margin <= mx < w - margin
        for y in np.nonzero(mask[:, x])[0]:
            jitter_y = rng.randrange(-1, 2) if rng.chance(0.28) else 0
            ny = int(y) + col_shift[x] + jitter_y
            if ny < margin or ny >= h - margin or not mx_ok:
                continue
            if rng.chance(jitter * 0.18):
                continue
            result[ny, mx] = True

        if rng.chance(jitter * 0.2):
            probe_y = rng.randrange(margin, h - margin)
            if mx_ok:
                result[probe_y, mx] = True

    if w % 2 == 1:
        c = half
        for y in range(h):
            left_n = bool(result[y, c - 1]) if c - 1 >= 0 else False
            right_n = bool(result[y, c + 1]) if c + 1 < w else False
            if left_n or right_n:
                result[y, c] = rng.chance(0.9) or (left_n and right_n)
            else:
                result[y, c] = False
    return result


# ============================================================================
# PUBLIC API
# ============================================================================


def build_processed_masks(config: MonsterConfig, rng: Optional[RandomSource] = None) -> MaskResult:
    """
    Build the final head and body masks for one sprite.

    Args:
        config: Generation settings (dimension, margin and noise style are used)
        rng: Random stream shared with the rest of the generation

    Returns:
        MaskResult whose head and body partition the combined mask
    """
    rng = rng or RandomSource(config.seed)
    d = config.dimension
    margin = config.margin

    archetype = rng.randrange(0, ARCHETYPE_COUNT)
    body_start_y = d // 3
    body_height = d - body_start_y
    head_height = body_start_y

    raw_body = new_mask(d)
    raw_head = new_mask(d)
    create_body(raw_body, archetype, body_start_y, body_height, margin, rng)
    create_head(raw_head, body_start_y, head_height, margin, rng)

    varied, params = generate_varied_body(raw_body, body_start_y, body_height, config, rng)

    combined = varied | raw_head
    combined = add_perimeter_noise(combined, 0.10, 0.05, rng)
    combined = grid.majority_clean(combined, 1)
    combined = apply_organic_symmetry(combined, margin, rng)
    combined = grid.close(combined, 1)
    combined = grid.enforce_margin(combined, margin)

    head = combined & raw_head
    body = combined & ~raw_head

    log.debug(
        f"[mask] archetype={archetype} style={params.style.value} "
        f"cells={int(combined.sum())} head={int(head.sum())} body={int(body.sum())}"
    )
    if not combined.any():
        log.warning(f"[mask] empty silhouette (dimension={d}, margin={margin})")

    return MaskResult(
        body=body,
        head=head,
        combined=combined,
        archetype=archetype,
        body_start_y=body_start_y,
        noise_params=params,
    )


def build_mask(config: MonsterConfig, rng: Optional[RandomSource] = None) -> np.ndarray:
    """Combined head + body mask only."""
    return build_processed_masks(config, rng).combined
