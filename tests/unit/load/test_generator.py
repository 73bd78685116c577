"""Unit tests for RequestGenerator."""

import pytest

from balancesim.core.errors import ConfigurationError
from balancesim.core.random_source import SeededRandom
from balancesim.core.request import JobClass
from balancesim.load.generator import (
    DEFAULT_BATCH_SERVICE_TIME,
    DEFAULT_STREAMING_SERVICE_TIME,
    RequestGenerator,
    ServiceTimeRange,
    generate_address,
)


class ScriptedRandom:
    """RandomSource returning a fixed script of integers."""

    def __init__(self, values):
        self._values = list(values)

    def next_in_range(self, low, high):
        value = self._values.pop(0)
        assert low <= value <= high
        return value

    def next_probability(self):
        return 0.0


class TestServiceTimeRange:
    def test_defaults(self):
        assert DEFAULT_STREAMING_SERVICE_TIME == ServiceTimeRange(10, 13)
        assert DEFAULT_BATCH_SERVICE_TIME == ServiceTimeRange(20, 30)

    def test_zero_lower_bound_rejected(self):
        with pytest.raises(ConfigurationError):
            ServiceTimeRange(0, 5)

    def test_inverted_range_rejected(self):
        with pytest.raises(ConfigurationError):
            ServiceTimeRange(6, 5)

    def test_single_value_range(self):
        assert str(ServiceTimeRange(5, 5)) == "[5, 5]"


class TestGenerateAddress:
    def test_dotted_quad(self):
        rng = SeededRandom(3)
        for _ in range(50):
            parts = generate_address(rng).split(".")
            assert len(parts) == 4
            assert all(0 <= int(p) <= 255 for p in parts)

    def test_uses_four_draws(self):
        assert generate_address(ScriptedRandom([1, 2, 3, 4])) == "1.2.3.4"


class TestRequestGenerator:
    def test_scripted_streaming_request(self):
        script = [193, 10, 1, 1, 8, 8, 8, 8, 0, 11]
        gen = RequestGenerator(ScriptedRandom(script))
        req = gen.generate(tick=6)
        assert req.origin_address == "193.10.1.1"
        assert req.destination_address == "8.8.8.8"
        assert req.job_class is JobClass.STREAMING
        assert req.service_time == 11
        assert req.arrival_tick == 6

    def test_scripted_batch_request(self):
        script = [1, 1, 1, 1, 2, 2, 2, 2, 1, 27]
        req = RequestGenerator(ScriptedRandom(script)).generate(tick=0)
        assert req.job_class is JobClass.BATCH
        assert req.service_time == 27

    def test_service_times_within_class_ranges(self):
        gen = RequestGenerator(
            SeededRandom(42),
            streaming=ServiceTimeRange(2, 4),
            batch=ServiceTimeRange(8, 9),
        )
        for req in gen.generate_batch(200):
            bounds = gen.service_range(req.job_class)
            assert bounds.low <= req.service_time <= bounds.high

    def test_both_classes_appear(self):
        gen = RequestGenerator(SeededRandom(1))
        classes = {req.job_class for req in gen.generate_batch(100)}
        assert classes == {JobClass.STREAMING, JobClass.BATCH}

    def test_fixed_service_time(self):
        gen = RequestGenerator(
            SeededRandom(8),
            streaming=ServiceTimeRange(5, 5),
            batch=ServiceTimeRange(5, 5),
        )
        assert {req.service_time for req in gen.generate_batch(30)} == {5}

    def test_generated_counter(self):
        gen = RequestGenerator(SeededRandom(0))
        gen.generate_batch(7, tick=2)
        gen.generate(3)
        assert gen.generated == 8

    def test_deterministic_under_seed(self):
        a = RequestGenerator(SeededRandom(77)).generate_batch(20)
        b = RequestGenerator(SeededRandom(77)).generate_batch(20)
        assert a == b
