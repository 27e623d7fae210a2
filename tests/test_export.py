import base64

import numpy as np
import pytest
from PIL import Image

from spritegen.monster.export import (
    save_frames_png,
    save_gif,
    save_png,
    to_data_url,
    to_image,
    to_png_bytes,
)
from spritegen.monster.sdk import AnimationFrame, new_layer


def _frame(shade):
    layer = new_layer(16)
    layer[4:12, 4:12] = (shade, 40, 90, 255)
    return layer


def test_to_image_keeps_alpha():
    img = to_image(_frame(200))
    assert img.mode == "RGBA"
    assert img.size == (16, 16)
    assert img.getpixel((0, 0))[3] == 0
    assert img.getpixel((8, 8)) == (200, 40, 90, 255)


def test_png_bytes_and_data_url():
    data = to_png_bytes(_frame(10))
    assert data.startswith(b"\x89PNG")
    url = to_data_url(_frame(10))
    assert url.startswith("data:image/png;base64,")
    assert base64.b64decode(url.split(",", 1)[1]) == data


def test_animation_frames_are_accepted():
    frame = AnimationFrame(image=_frame(50), breath=0.0)
    assert to_image(frame).getpixel((5, 5)) == (50, 40, 90, 255)


def test_save_frames_png(tmp_path):
    paths = save_frames_png([_frame(10), _frame(20), _frame(30)], str(tmp_path / "sub" / "walk"))
    assert [p.rsplit("/", 1)[-1] for p in paths] == ["walk_00.png", "walk_01.png", "walk_02.png"]
    with Image.open(paths[2]) as img:
        assert img.convert("RGBA").getpixel((8, 8)) == (30, 40, 90, 255)


def test_save_png(tmp_path):
    path = save_png(_frame(99), str(tmp_path / "one.png"))
    with Image.open(path) as img:
        assert img.size == (16, 16)


def test_save_gif_loops_forever(tmp_path):
    path = save_gif([_frame(10), _frame(120), _frame(240)], str(tmp_path / "breath.gif"), delay_ms=80)
    with Image.open(path) as img:
        assert img.n_frames == 3
        assert img.info.get("loop") == 0
        assert img.info.get("duration") == 80


def test_save_gif_requires_frames(tmp_path):
    with pytest.raises(ValueError):
        save_gif([], str(tmp_path / "none.gif"))
