import numpy as np
import pytest

from spritegen.config.schemas import MonsterConfig, NoiseStyle
from spritegen.monster.mask_builder import (
    _add_spikes,
    _adjust_lobes,
    _perforate,
    _segment_variant,
    add_perimeter_noise,
    apply_organic_symmetry,
    build_mask,
    build_processed_masks,
    fill_ellipse,
)
from spritegen.monster.rng import RandomSource


def _margin_clear(mask, margin):
    if margin == 0:
        return True
    return not (mask[:margin].any() or mask[-margin:].any()
                or mask[:, :margin].any() or mask[:, -margin:].any())


class TestFillEllipse:
    def test_draws_inside_margin_only(self):
        m = np.zeros((20, 20), dtype=bool)
        fill_ellipse(m, 10, 10, 30, 30, 3)
        assert m.any()
        assert _margin_clear(m, 3)

    def test_collapsed_radius_recentres_instead_of_skipping(self):
        m = np.zeros((16, 16), dtype=bool)
        fill_ellipse(m, 0, 0, 5, 5, 3)
        assert m.any()
        assert _margin_clear(m, 3)

    def test_non_positive_radius_draws_nothing(self):
        m = np.zeros((16, 16), dtype=bool)
        fill_ellipse(m, 8, 8, 0, 4, 2)
        fill_ellipse(m, 8, 8, 4, -1, 2)
        assert not m.any()

    def test_circle_is_symmetric(self):
        m = np.zeros((21, 21), dtype=bool)
        fill_ellipse(m, 10, 10, 4, 4, 0)
        assert np.array_equal(m, m[:, ::-1])
        assert np.array_equal(m, m[::-1, :])


class TestProcessedMasks:
    @pytest.mark.parametrize("dimension", [16, 32, 64])
    def test_margin_invariant(self, dimension):
        for seed in range(8):
            cfg = MonsterConfig(dimension=dimension, margin=3, seed=seed)
            res = build_processed_masks(cfg, RandomSource(seed))
            for m in (res.body, res.head, res.combined):
                assert _margin_clear(m, 3)

    def test_partition_invariant(self):
        for seed in range(10):
            cfg = MonsterConfig(dimension=48, seed=seed, noise_style=NoiseStyle.RANDOM)
            res = build_processed_masks(cfg, RandomSource(seed))
            assert not (res.head & res.body).any()
            assert np.array_equal(res.head | res.body, res.combined)

    def test_deterministic_for_seed(self):
        cfg = MonsterConfig(dimension=48, seed=5)
        a = build_processed_masks(cfg, RandomSource(5))
        b = build_processed_masks(cfg, RandomSource(5))
        assert a.archetype == b.archetype
        assert np.array_equal(a.body, b.body)
        assert np.array_equal(a.head, b.head)

    def test_build_mask_matches_combined(self):
        cfg = MonsterConfig(dimension=32, seed=9)
        combined = build_processed_masks(cfg, RandomSource(9)).combined
        assert np.array_equal(build_mask(cfg, RandomSource(9)), combined)

    def test_zero_margin_is_supported(self):
        cfg = MonsterConfig(dimension=24, margin=0, seed=2)
        res = build_processed_masks(cfg, RandomSource(2))
        assert res.combined.shape == (24, 24)

    def test_scenario_seed_42_is_roughly_symmetric(self):
        cfg = MonsterConfig(dimension=64, margin=3, seed=42)
        res = build_processed_masks(cfg, RandomSource(42))
        assert not res.is_empty
        left = int(res.combined[:, :32].sum())
        right = int(res.combined[:, 32:].sum())
        assert abs(left - right) <= 0.2 * max(left, right) + 4


def test_perimeter_noise_only_touches_the_border_band():
    m = np.zeros((20, 20), dtype=bool)
    m[5:15, 5:15] = True
    out = add_perimeter_noise(m, 1.0, 0.0, RandomSource(1))
    assert out[4:16, 4:16].all()
    assert not out[:3].any()


def test_symmetry_mirrors_left_half():
    m = np.zeros((16, 16), dtype=bool)
    m[6:10, 3:8] = True
    out = apply_organic_symmetry(m, 1, RandomSource(0), jitter=0.0)
    assert np.array_equal(out[:, :8], m[:, :8])
    # right half holds a (possibly vertically jittered) copy of the left block
    rows, cols = np.nonzero(out[:, 8:])
    assert rows.size > 0
    assert rows.min() >= 4 and rows.max() <= 11
    assert set((cols + 8).tolist()) <= {8, 9, 10, 11, 12}


class FixedChance(RandomSource):
    """Stream whose coin flips always land one way; counts can be pinned to their maximum."""

    def __init__(self, seed, outcome, max_counts=False):
        super().__init__(seed)
        self.outcome = outcome
        self.max_counts = max_counts

    def chance(self, p):
        return self.outcome

    def randint(self, low, high):
        if self.max_counts:
            return high
        return super().randint(low, high)


def _interior(d=32, margin=3):
    m = np.zeros((d, d), dtype=bool)
    m[margin:d - margin, margin:d - margin] = True
    return m


class TestBodyVariation:
    def test_segments_union_keeps_the_body(self):
        mask = np.zeros((32, 32), dtype=bool)
        mask[0, :] = True
        mask[14:18, 12:20] = True
        union = _segment_variant(mask, 10, 22, 3, FixedChance(4, True))
        replaced = _segment_variant(mask, 10, 22, 3, FixedChance(4, False))
        assert (union & mask).sum() == mask.sum()
        assert np.array_equal(union, mask | replaced)
        assert union[0].all()

    def test_segments_replace_drops_the_body(self):
        mask = np.zeros((32, 32), dtype=bool)
        mask[0, :] = True
        replaced = _segment_variant(mask, 10, 22, 3, FixedChance(4, False))
        assert replaced.any()
        assert not replaced[0].any()
        assert _margin_clear(replaced, 3)

    def test_lobes_grow_when_added(self):
        mask = np.zeros((32, 32), dtype=bool)
        mask[16, 10:22] = True
        out = _adjust_lobes(mask, (10, 16, 21, 16), 3, FixedChance(9, True, max_counts=True))
        assert (out & mask).sum() == mask.sum()
        assert (out & ~mask).any()
        assert _margin_clear(out, 3)

    def test_lobes_cut_when_removed(self):
        mask = _interior()
        out = _adjust_lobes(mask, (3, 3, 28, 28), 3, FixedChance(9, False, max_counts=True))
        assert not (out & ~mask).any()
        assert out.sum() < mask.sum()
        assert _margin_clear(out, 3)

    def test_perforation_only_removes(self):
        mask = _interior()
        out = _perforate(mask, (3, 3, 28, 28), 3, FixedChance(2, True, max_counts=True))
        assert not (out & ~mask).any()
        assert out.sum() < mask.sum()

    def test_lobe_removal_never_adds_cells(self):
        mask = np.zeros((32, 32), dtype=bool)
        mask[15:17, 15:17] = True
        for seed in range(20):
            out = _adjust_lobes(mask, (15, 15, 16, 16), 3, FixedChance(seed, False))
            assert not (out & ~mask).any()

    def test_spikes_fall_back_to_pointing_away_from_the_body_centre(self):
        # a flat field has no gradient, so every spike direction comes from the centre
        mask = np.zeros((32, 32), dtype=bool)
        mask[8:16, 24] = True
        flat = np.zeros((32, 32))
        out = _add_spikes(mask, flat, 8, 24, 3, RandomSource(5))
        grown = out & ~mask
        assert (out & mask).sum() == mask.sum()
        assert grown.any()
        assert not grown[:, :24].any()
        assert _margin_clear(out, 3)

    def test_spikes_on_empty_mask_are_a_no_op(self):
        empty = np.zeros((16, 16), dtype=bool)
        out = _add_spikes(empty, np.zeros((16, 16)), 5, 11, 2, RandomSource(1))
        assert not out.any()
