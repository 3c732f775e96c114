"""Tests for pattern accumulation and diagonal normalization."""

import itertools

import numpy as np
import pytest

from mouse_gestures.directions import Direction, DirectionClassifier
from mouse_gestures.patterns import (
    GesturePattern,
    PatternAccumulator,
    accumulate,
    is_pattern_key,
    normalize,
)
from mouse_gestures.sampler import PointerSample


def line(x0, y0, x1, y1, step=2.0):
    """Samples from (x0, y0) to (x1, y1), excluding the start, every ``step`` px."""
    length = float(np.hypot(x1 - x0, y1 - y0))
    n = max(1, int(round(length / step)))
    return [PointerSample(x0 + (x1 - x0) * i / n, y0 + (y1 - y0) * i / n) for i in range(1, n + 1)]


def stroke(*waypoints, step=2.0):
    samples = [PointerSample(*waypoints[0])]
    for (x0, y0), (x1, y1) in zip(waypoints, waypoints[1:]):
        samples.extend(line(x0, y0, x1, y1, step))
    return samples


def random_walk(seed, n=200, scale=8.0):
    rng = np.random.default_rng(seed)
    steps = rng.normal(0, scale, size=(n, 2))
    pts = np.cumsum(steps, axis=0)
    return [PointerSample(float(x), float(y), float(i)) for i, (x, y) in enumerate(pts)]


CLASSIFIER = DirectionClassifier(jitter_px=4)


class TestGesturePattern:
    def test_collapses_repeats(self):
        p = GesturePattern(["R", "R", "D", "D", "R"])
        assert str(p) == "RDR"
        assert len(p) == 3

    def test_empty(self):
        p = GesturePattern()
        assert not p
        assert str(p) == ""
        assert p.last is None

    def test_equality_and_hash(self):
        a = GesturePattern([Direction.RIGHT, Direction.DOWN])
        b = GesturePattern(["R", "D", "D"])
        assert a == b
        assert hash(a) == hash(b)
        assert a != GesturePattern(["D", "R"])

    def test_invalid_token_raises(self):
        with pytest.raises(ValueError):
            GesturePattern(["X"])

    def test_pattern_keys(self):
        assert is_pattern_key("R")
        assert is_pattern_key("URDL")
        assert not is_pattern_key("")
        assert not is_pattern_key("RX")
        assert not is_pattern_key(None)
        assert not is_pattern_key(3)


class TestAccumulator:
    def test_rightward_40px(self):
        samples = stroke((0, 0), (40, 0))
        assert str(accumulate(samples, 18, CLASSIFIER)) == "R"

    def test_right_then_down(self):
        samples = stroke((0, 0), (20, 0), (20, 20))
        assert str(accumulate(samples, 18, CLASSIFIER)) == "RD"

    def test_l_shape_back(self):
        samples = stroke((0, 0), (0, -60), (-60, -60))
        assert str(accumulate(samples, 18, CLASSIFIER)) == "UL"  # U then L

    def test_short_movement_is_empty(self):
        samples = stroke((0, 0), (10, 0))
        assert not accumulate(samples, 18, CLASSIFIER)

    def test_single_sample(self):
        assert not accumulate([PointerSample(0, 0)], 18, CLASSIFIER)

    def test_feed_reports_new_tokens_only(self):
        acc = PatternAccumulator(18, CLASSIFIER)
        emitted = [acc.feed(s) for s in stroke((0, 0), (60, 0))]
        assert [t for t in emitted if t is not None] == [Direction.RIGHT]

    def test_anchor_advances_without_token(self):
        """Sub-jitter hops still move the anchor, so they never add up to a segment."""
        clf = DirectionClassifier(jitter_px=20)
        samples = [PointerSample(0, 0), PointerSample(18, 0), PointerSample(36, 0)]
        assert not accumulate(samples, 18, clf)

    def test_reset(self):
        acc = PatternAccumulator(18, CLASSIFIER)
        for s in stroke((0, 0), (40, 0)):
            acc.feed(s)
        acc.reset()
        assert not acc.pattern
        for s in stroke((0, 0), (0, 40)):
            acc.feed(s)
        assert str(acc.pattern) == "D"

    def test_incremental_matches_batch(self):
        samples = random_walk(7)
        acc = PatternAccumulator(18, CLASSIFIER)
        for s in samples:
            acc.feed(s)
        assert acc.pattern == accumulate(samples, 18, CLASSIFIER)

    def test_deterministic(self):
        samples = random_walk(11)
        first = accumulate(samples, 12, CLASSIFIER)
        for _ in range(5):
            assert accumulate(samples, 12, CLASSIFIER) == first

    @pytest.mark.parametrize("seed", range(10))
    def test_no_adjacent_duplicates(self, seed):
        pattern = accumulate(random_walk(seed, n=400), 6, CLASSIFIER)
        tokens = pattern.tokens
        assert all(a != b for a, b in zip(tokens, tokens[1:]))

    @pytest.mark.parametrize("seed", range(5))
    def test_sub_jitter_trajectory_is_empty(self, seed):
        """Max pairwise displacement under jitter_px produces no tokens."""
        rng = np.random.default_rng(seed)
        pts = rng.uniform(0, 2.5, size=(100, 2))  # pairwise distance < 3.6
        samples = [PointerSample(float(x), float(y)) for x, y in pts]
        assert not accumulate(samples, 1, CLASSIFIER)


class TestNormalize:
    @pytest.mark.parametrize("raw,expected", [
        ("RU", "UR"),
        ("UR", "UR"),
        ("RD", "DR"),
        ("DR", "DR"),
        ("LU", "UL"),
        ("UL", "UL"),
        ("LD", "DL"),
        ("DL", "DL"),
    ])
    def test_two_cardinals_fold(self, raw, expected):
        pattern = GesturePattern(list(raw))  # one token per character
        assert str(normalize(pattern)) == expected
        assert len(normalize(pattern)) == 1

    def test_same_axis_pairs_unchanged(self):
        for raw in ("RL", "LR", "UD", "DU"):
            pattern = GesturePattern(list(raw))
            assert normalize(pattern) == pattern

    def test_three_tokens_unchanged(self):
        pattern = GesturePattern(["R", "D", "L"])
        assert normalize(pattern) == pattern

    def test_pairs_with_diagonals_unchanged(self):
        pattern = GesturePattern([Direction.UP_RIGHT, Direction.DOWN])
        assert normalize(pattern) == pattern

    def test_idempotent(self):
        tokens = list(Direction)
        for n in range(0, 4):
            for combo in itertools.product(tokens, repeat=n):
                p = GesturePattern(combo)
                once = normalize(p)
                assert normalize(once) == once
