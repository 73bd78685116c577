"""Unit tests for SimulationConfig and PolicyConfig."""

import pytest

from balancesim.components.admission import BlockedRange
from balancesim.components.auto_scaler import ScaleDownMode
from balancesim.config import PolicyConfig, SimulationConfig
from balancesim.core.errors import ConfigurationError
from balancesim.load.generator import ServiceTimeRange


class TestPolicyConfig:
    def test_defaults(self):
        policy = PolicyConfig()
        assert policy.admission_probability == 0.90
        assert policy.blocked_ranges == (BlockedRange(192, 192),)
        assert policy.cooldown_ticks == 3
        assert policy.scale_up_factor == 25
        assert policy.scale_down_factor == 15
        assert policy.min_workers == 1
        assert policy.max_workers is None
        assert policy.scale_down_mode is ScaleDownMode.DROP_IN_FLIGHT
        assert policy.backlog_per_worker == 20

    def test_blocked_ranges_stored_as_tuple(self):
        policy = PolicyConfig(blocked_ranges=[BlockedRange(1, 2)])
        assert policy.blocked_ranges == (BlockedRange(1, 2),)
        hash(policy)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"admission_probability": 1.5},
            {"admission_probability": -0.1},
            {"admission_probability": True},
            {"cooldown_ticks": -1},
            {"scale_up_factor": 15, "scale_down_factor": 15},
            {"min_workers": 0},
            {"min_workers": 3, "max_workers": 2},
            {"backlog_per_worker": -1},
            {"scale_down_mode": "drop"},
            {"blocked_ranges": ["192-200"]},
            {"streaming_service_time": (1, 2)},
        ],
    )
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ConfigurationError):
            PolicyConfig(**kwargs)


class TestSimulationConfig:
    def test_valid(self):
        config = SimulationConfig(initial_workers=2, run_length=10, seed=4)
        assert config.policy == PolicyConfig()

    @pytest.mark.parametrize("workers,ticks", [(0, 10), (3, 0), (-1, 5), (2.5, 10), (True, 10)])
    def test_run_parameters_below_one_rejected(self, workers, ticks):
        with pytest.raises(ConfigurationError):
            SimulationConfig(initial_workers=workers, run_length=ticks)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            SimulationConfig(initial_workers=0, run_length=1)

    def test_with_policy(self):
        config = SimulationConfig(1, 10).with_policy(cooldown_ticks=7)
        assert config.policy.cooldown_ticks == 7
        assert config.run_length == 10


class TestFromMapping:
    def test_full_mapping(self):
        config = SimulationConfig.from_mapping({
            "initial_workers": 4,
            "run_length": 200,
            "seed": 9,
            "blocked_ranges": ["192-200", "10"],
            "streaming_service_time": [2, 3],
            "batch_service_time": (4, 6),
            "scale_down_mode": "require-idle",
            "cooldown_ticks": 5,
        })
        assert config.initial_workers == 4
        assert config.seed == 9
        assert config.policy.blocked_ranges == (BlockedRange(192, 200), BlockedRange(10, 10))
        assert config.policy.streaming_service_time == ServiceTimeRange(2, 3)
        assert config.policy.batch_service_time == ServiceTimeRange(4, 6)
        assert config.policy.scale_down_mode is ScaleDownMode.REQUIRE_IDLE
        assert config.policy.cooldown_ticks == 5

    def test_unknown_keys_rejected(self):
        with pytest.raises(ConfigurationError, match="unknown"):
            SimulationConfig.from_mapping({"initial_workers": 1, "run_length": 1, "colour": "red"})

    def test_missing_keys_rejected(self):
        with pytest.raises(ConfigurationError, match="missing"):
            SimulationConfig.from_mapping({"initial_workers": 1})

    def test_bad_mode_rejected(self):
        with pytest.raises(ConfigurationError):
            SimulationConfig.from_mapping({"initial_workers": 1, "run_length": 1, "scale_down_mode": "sometimes"})

    def test_single_range_string(self):
        config = SimulationConfig.from_mapping({"initial_workers": 1, "run_length": 1, "blocked_ranges": "192"})
        assert config.policy.blocked_ranges == (BlockedRange(192, 192),)

    def test_non_sequence_ranges_rejected(self):
        with pytest.raises(ConfigurationError):
            SimulationConfig.from_mapping({"initial_workers": 1, "run_length": 1, "blocked_ranges": 192})


class TestFromEnv:
    def test_reads_variables(self):
        config = SimulationConfig.from_env({"BS_WORKERS": "3", "BS_TICKS": "50", "BS_SEED": "1"})
        assert (config.initial_workers, config.run_length, config.seed) == (3, 50, 1)

    def test_non_integer_rejected(self):
        with pytest.raises(ConfigurationError):
            SimulationConfig.from_env({"BS_WORKERS": "three", "BS_TICKS": "50"})

    def test_missing_rejected(self):
        with pytest.raises(ConfigurationError):
            SimulationConfig.from_env({})

    def test_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv("BS_WORKERS", "2")
        monkeypatch.setenv("BS_TICKS", "8")
        monkeypatch.delenv("BS_SEED", raising=False)
        config = SimulationConfig.from_env()
        assert config.initial_workers == 2
        assert config.seed is None
