import pytest

from spritegen.monster.rng import RandomSource, ensure_rng


def test_same_seed_same_sequence():
    a, b = RandomSource(42), RandomSource(42)
    draws_a = [a.randrange(0, 1000) for _ in range(20)] + [a.random() for _ in range(5)]
    draws_b = [b.randrange(0, 1000) for _ in range(20)] + [b.random() for _ in range(5)]
    assert draws_a == draws_b


def test_reseed_restarts_stream():
    rng = RandomSource(7)
    first = [rng.randrange(0, 100) for _ in range(10)]
    rng.reseed(7)
    assert [rng.randrange(0, 100) for _ in range(10)] == first


def test_randrange_is_half_open():
    rng = RandomSource(3)
    values = {rng.randrange(0, 3) for _ in range(300)}
    assert values == {0, 1, 2}


def test_randrange_empty_range_returns_low():
    rng = RandomSource(3)
    assert rng.randrange(5, 5) == 5
    assert rng.randrange(5, 2) == 5


def test_randint_includes_both_ends():
    rng = RandomSource(9)
    values = {rng.randint(2, 4) for _ in range(300)}
    assert values == {2, 3, 4}


def test_choice_empty_raises():
    with pytest.raises(IndexError):
        RandomSource(1).choice([])


def test_unseeded_source_records_its_seed():
    rng = RandomSource()
    replay = RandomSource(rng.seed)
    assert [rng.random() for _ in range(5)] == [replay.random() for _ in range(5)]


def test_spawn_is_deterministic_and_independent():
    parent_a, parent_b = RandomSource(11), RandomSource(11)
    child_a, child_b = parent_a.spawn(), parent_b.spawn()
    assert child_a.seed == child_b.seed
    assert child_a.seed != parent_a.seed
    assert 0 <= child_a.next_seed() < 2**31 - 1


def test_ensure_rng_passthrough():
    rng = RandomSource(5)
    assert ensure_rng(rng) is rng
    assert ensure_rng(None, seed=5).seed == 5
