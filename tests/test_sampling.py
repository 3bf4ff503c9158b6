import random

from pipeline.sampling import choose, uniform_int


class FixedRandom:
    """Stand-in for random.Random returning a fixed draw."""

    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


def test_degenerate_weights_are_deterministic():
    rng = random.Random(7)
    for _ in range(200):
        assert choose([1, 0, 0], rng) == 0
        assert choose([0, 0, 1], rng) == 2


def test_zero_draw_skips_zero_weight_prefix():
    assert choose([0, 0, 1], FixedRandom(0.0)) == 2


def test_cumulative_scan_boundaries():
    weights = [0.45, 0.35, 0.20]
    assert choose(weights, FixedRandom(0.0)) == 0
    assert choose(weights, FixedRandom(0.44)) == 0
    assert choose(weights, FixedRandom(0.46)) == 1
    assert choose(weights, FixedRandom(0.81)) == 2


def test_overshoot_returns_last_index():
    # a draw past the total weight can only come from rounding
    assert choose([0.1, 0.1], FixedRandom(1.5)) == 1


def test_unnormalized_weights():
    assert choose([2, 6], FixedRandom(0.2)) == 0
    assert choose([2, 6], FixedRandom(0.3)) == 1


def test_frequencies_follow_weights():
    rng = random.Random(1234)
    counts = [0, 0]
    for _ in range(5000):
        counts[choose([0.9, 0.1], rng)] += 1
    assert 0.85 < counts[0] / 5000 < 0.95


def test_uniform_int_inclusive():
    rng = random.Random(3)
    draws = {uniform_int(2, 4, rng) for _ in range(300)}
    assert draws == {2, 3, 4}
