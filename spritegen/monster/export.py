"""
Image export helpers (PNG, data URL, animated GIF) built on Pillow.

The generator itself only produces RGBA arrays; everything that touches a file
or an encoded byte stream lives here.
"""

import base64
import io
import os
from typing import List, Sequence, Union

import numpy as np
from PIL import Image

from spritegen.core import get_logger

from .sdk import AnimationFrame

log = get_logger("spritegen.export")

FrameLike = Union[AnimationFrame, np.ndarray, Image.Image]


def to_image(layer: FrameLike) -> Image.Image:
    if isinstance(layer, Image.Image):
        return layer.convert("RGBA")
    if isinstance(layer, AnimationFrame):
        layer = layer.image
    return Image.fromarray(np.ascontiguousarray(layer, dtype=np.uint8)).convert("RGBA")


def to_png_bytes(layer: FrameLike) -> bytes:
    buf = io.BytesIO()
    to_image(layer).save(buf, format="PNG")
    return buf.getvalue()


def to_data_url(layer: FrameLike) -> str:
    """``data:image/png;base64,...`` string for embedding in a page."""
    return "data:image/png;base64," + base64.b64encode(to_png_bytes(layer)).decode("ascii")


def _ensure_parent(path: str) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)


def save_png(layer: FrameLike, path: str) -> str:
    _ensure_parent(path)
    to_image(layer).save(path, format="PNG")
    return path


def save_frames_png(frames: Sequence[FrameLike], prefix: str) -> List[str]:
    """Write ``{prefix}_00.png``, ``{prefix}_01.png``, ... and return the paths."""
    paths = [save_png(frame, f"{prefix}_{i:02d}.png") for i, frame in enumerate(frames)]
    log.info(f"[export] wrote {len(paths)} PNG frames with prefix {prefix}")
    return paths


def save_gif(frames: Sequence[FrameLike], path: str, delay_ms: int = 120) -> str:
    """
    Write an infinitely looping animated GIF.

    Args:
        frames: At least one frame
        path: Output file
        delay_ms: Per-frame display time

    Raises:
        ValueError: If no frames are given
    """
    if not frames:
        raise ValueError("cannot write a GIF without frames")
    images = [to_image(f) for f in frames]
    _ensure_parent(path)
    images[0].save(
        path,
        format="GIF",
        save_all=True,
        append_images=images[1:],
        duration=int(delay_ms),
        loop=0,
        disposal=2,
    )
    log.info(f"[export] wrote GIF {path} frames={len(images)} delay={delay_ms}ms")
    return path
