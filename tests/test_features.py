import numpy as np

from spritegen.monster.features import (
    add_anchored_limbs,
    add_appendages,
    add_eyes,
    add_mouth,
    estimate_head_center,
    find_nearest_mask_point,
)
from spritegen.monster.rng import RandomSource
from spritegen.monster.sdk import new_layer


def _in_margin(points, d, margin):
    return all(margin <= x < d - margin and margin <= y < d - margin for x, y in points)


def test_head_center_uses_rows_above_limit(head_mask):
    cx, cy = estimate_head_center(head_mask, 16)
    assert 22 <= cx <= 26
    assert cy < 16


def test_head_center_none_without_cells():
    assert estimate_head_center(np.zeros((10, 10), dtype=bool), 5) is None


def test_nearest_mask_point_search():
    m = np.zeros((20, 20), dtype=bool)
    m[10, 14] = True
    assert find_nearest_mask_point(m, 10, 10, 6) == (14, 10)
    assert find_nearest_mask_point(m, 10, 10, 3) is None
    assert find_nearest_mask_point(m, 14, 10, 0) == (14, 10)


def test_eyes_snap_onto_the_head(head_mask):
    layer = new_layer(48)
    eyes = add_eyes(layer, head_mask, (200, 30, 30), RandomSource(3))
    assert 1 <= len(eyes) <= 3
    for x, y in eyes:
        assert head_mask[y, x]


def test_eyes_skipped_on_empty_mask():
    layer = new_layer(32)
    assert add_eyes(layer, np.zeros((32, 32), dtype=bool), (1, 1, 1), RandomSource(1)) == []
    assert not layer.any()


def test_mouth_clears_three_cells(head_mask):
    layer = np.full((48, 48, 4), 255, dtype=np.uint8)
    mx, my = add_mouth(layer, head_mask)
    assert (layer[my, mx - 1:mx + 2] == 0).all()
    assert layer[my - 1, mx, 3] == 255


class TestLimbs:
    def _body(self):
        m = np.zeros((40, 40), dtype=bool)
        m[12:32, 12:28] = True
        return m

    def test_returns_grown_copy(self):
        body = self._body()
        before = body.copy()
        layer = new_layer(40)
        result = add_anchored_limbs(layer, body, (9, 9, 9), 3, RandomSource(2))
        assert np.array_equal(body, before)
        assert (result.mask | before).sum() == result.mask.sum()
        assert result.mask.sum() > before.sum()
        assert len(result.tips) == 4
        assert _in_margin(result.tips, 40, 3)

    def test_limbs_stop_at_margin(self):
        body = np.zeros((20, 20), dtype=bool)
        body[3:17, 3:17] = True
        layer = new_layer(20)
        result = add_anchored_limbs(layer, body, (9, 9, 9), 3, RandomSource(5))
        assert not result.mask[:3].any() and not result.mask[:, :3].any()
        assert not result.mask[17:].any() and not result.mask[:, 17:].any()

    def test_empty_body_draws_nothing(self):
        layer = new_layer(16)
        result = add_anchored_limbs(layer, np.zeros((16, 16), dtype=bool), (9, 9, 9), 2, RandomSource(1))
        assert not result.mask.any()
        assert result.tips == []
        assert not layer.any()


def test_appendages_leave_mask_untouched():
    body = np.zeros((40, 40), dtype=bool)
    body[14:26, 14:26] = True
    before = body.copy()
    for seed in range(10):
        layer = new_layer(40)
        add_appendages(layer, body, (5, 6, 7), 3, RandomSource(seed), anchors={"body": (20, 20)})
        assert np.array_equal(body, before)
        painted = layer[:, :, 3] > 0
        assert not (painted & body).any()
        ys, xs = np.nonzero(painted)
        assert _in_margin(zip(xs, ys), 40, 3)
