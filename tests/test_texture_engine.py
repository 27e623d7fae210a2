import numpy as np

from spritegen.config.schemas import PaletteMode
from spritegen.monster.rng import RandomSource
from spritegen.monster.sdk import new_layer
from spritegen.monster.texture_engine import add_internal_patterns, paint_surface

BASE = (40, 140, 90)
ACCENT = (250, 220, 30)


def _paint(mask, **kw):
    layer = new_layer(mask.shape[0])
    kw.setdefault("n_colors", 6)
    kw.setdefault("mode", PaletteMode.MONOCHROME)
    kw.setdefault("seed", 5)
    palette = paint_surface(layer, mask, BASE, ACCENT, **kw)
    return layer, palette


def test_paints_exactly_the_mask(ellipse_mask):
    layer, palette = _paint(ellipse_mask)
    assert len(palette) == 6
    assert (layer[ellipse_mask, 3] == 255).all()
    assert (layer[~ellipse_mask] == 0).all()


def test_single_colour_palette_paints_one_flat_colour(ellipse_mask):
    for mode in (PaletteMode.MONOCHROME, PaletteMode.ANALOGOUS, PaletteMode.RANDOM):
        layer, palette = _paint(ellipse_mask, n_colors=1, mode=mode, palette_seed=3)
        painted = layer[ellipse_mask, :3]
        assert len(palette) == 1
        assert (painted == np.array(palette.colors[0], dtype=np.uint8)).all()


def test_same_seed_same_pixels(ellipse_mask):
    a, _ = _paint(ellipse_mask, seed=11, palette_seed=4)
    b, _ = _paint(ellipse_mask, seed=11, palette_seed=4)
    assert np.array_equal(a, b)


def test_outline_mode_clears_open_neighbours(ellipse_mask):
    layer = np.full((24, 24, 4), 200, dtype=np.uint8)
    paint_surface(layer, ellipse_mask, BASE, ACCENT, n_colors=4, mode=PaletteMode.TRIADIC,
                  seed=2, outline=True)
    padded = np.pad(ellipse_mask, 1)
    four_neigh = padded[:-2, 1:-1] | padded[2:, 1:-1] | padded[1:-1, :-2] | padded[1:-1, 2:]
    carved = four_neigh & ~ellipse_mask
    assert carved.any()
    assert (layer[carved] == 0).all()
    assert (layer[ellipse_mask, 3] == 255).all()


def test_empty_mask_paints_nothing():
    mask = np.zeros((16, 16), dtype=bool)
    layer, palette = _paint(mask, n_colors=3)
    assert len(palette) == 3
    assert not layer.any()


def test_head_cells_use_head_palette(ellipse_mask):
    head = np.zeros_like(ellipse_mask)
    head[:12] = ellipse_mask[:12]
    layer, _ = _paint(ellipse_mask, head_mask=head, mode=PaletteMode.COMPLEMENTARY, palette_seed=8)
    assert (layer[ellipse_mask, 3] == 255).all()


def test_patterns_stay_on_the_mask(ellipse_mask):
    for seed in range(12):
        layer = new_layer(24)
        add_internal_patterns(layer, ellipse_mask, (1, 2, 3), RandomSource(seed))
        assert not layer[~ellipse_mask].any()


def test_single_colour_head_shares_the_body_colour(ellipse_mask):
    head = np.zeros_like(ellipse_mask)
    head[:12] = ellipse_mask[:12]
    for mode in (PaletteMode.ANALOGOUS, PaletteMode.SPLIT_COMPLEMENTARY, PaletteMode.SOFT_STRIPES):
        layer, palette = _paint(ellipse_mask, n_colors=1, mode=mode, head_mask=head, palette_seed=5)
        colours = {tuple(int(v) for v in c) for c in layer[ellipse_mask, :3]}
        assert colours == {palette.colors[0]}


def test_head_palette_is_tied_to_the_body_seed(ellipse_mask):
    head = np.zeros_like(ellipse_mask)
    head[:12] = ellipse_mask[:12]
    a, _ = _paint(ellipse_mask, n_colors=4, mode=PaletteMode.TRIADIC, head_mask=head, palette_seed=11)
    b, _ = _paint(ellipse_mask, n_colors=4, mode=PaletteMode.TRIADIC, head_mask=head, palette_seed=11)
    assert np.array_equal(a, b)
