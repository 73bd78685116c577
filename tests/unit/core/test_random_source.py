"""Unit tests for random sources."""

import pytest

from balancesim.core.random_source import RandomSource, SeededRandom, wall_clock_random


class TestSeededRandom:
    def test_satisfies_protocol(self):
        assert isinstance(SeededRandom(1), RandomSource)

    def test_same_seed_same_sequence(self):
        a = SeededRandom(123)
        b = SeededRandom(123)
        assert [a.next_in_range(0, 255) for _ in range(50)] == [b.next_in_range(0, 255) for _ in range(50)]
        assert [a.next_probability() for _ in range(10)] == [b.next_probability() for _ in range(10)]

    def test_range_is_inclusive(self):
        rng = SeededRandom(5)
        values = {rng.next_in_range(0, 1) for _ in range(200)}
        assert values == {0, 1}

    def test_degenerate_range(self):
        assert SeededRandom(0).next_in_range(7, 7) == 7

    def test_empty_range_rejected(self):
        with pytest.raises(ValueError):
            SeededRandom(0).next_in_range(3, 2)

    def test_probability_bounds(self):
        rng = SeededRandom(9)
        for _ in range(100):
            assert 0.0 <= rng.next_probability() < 1.0

    def test_does_not_touch_global_random(self):
        import random

        random.seed(11)
        expected = random.random()
        random.seed(11)
        SeededRandom(99).next_probability()
        assert random.random() == expected


class TestWallClockRandom:
    def test_seeded_from_time(self, monkeypatch):
        monkeypatch.setattr("balancesim.core.random_source.time.time", lambda: 1700000000.7)
        rng = wall_clock_random()
        assert rng.seed == 1700000000
