"""Run parameters and policy settings.

SimulationConfig carries the two required run parameters (initial worker
count and run length) plus an optional seed and a PolicyConfig with every
tunable knob. Both validate on construction and raise ConfigurationError;
values are never clamped.

Loaders:
    SimulationConfig.from_mapping({"initial_workers": 3, "run_length": 500})
    SimulationConfig.from_env()   # BS_WORKERS, BS_TICKS, BS_SEED
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from typing import Any

from balancesim.components.admission import DEFAULT_BLOCKED_RANGES, BlockedRange
from balancesim.components.auto_scaler import ScaleDownMode
from balancesim.core.errors import ConfigurationError
from balancesim.load.generator import (
    DEFAULT_BATCH_SERVICE_TIME,
    DEFAULT_STREAMING_SERVICE_TIME,
    ServiceTimeRange,
)

logger = logging.getLogger(__name__)

ENV_WORKERS = "BS_WORKERS"
ENV_TICKS = "BS_TICKS"
ENV_SEED = "BS_SEED"


def _require_int(name: str, value: Any, minimum: int) -> None:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")


@dataclass(frozen=True)
class PolicyConfig:
    """Tunable policy of a simulation run.

    Attributes:
        admission_probability: Chance of one arrival per tick.
        blocked_ranges: Leading-octet ranges rejected at admission.
        streaming_service_time: Service-time range of streaming requests.
        batch_service_time: Service-time range of batch requests.
        cooldown_ticks: Ticks to wait after a scaling action.
        scale_up_factor: Add a worker when queue > factor * workers.
        scale_down_factor: Remove a worker when queue < factor * workers.
        min_workers: Never scale below this many workers.
        max_workers: Never scale above this many workers (None: no cap).
        scale_down_mode: Behaviour when the worker to remove is busy.
        backlog_per_worker: Requests seeded into the queue per initial
            worker before the first tick.
    """

    admission_probability: float = 0.90
    blocked_ranges: tuple[BlockedRange, ...] = DEFAULT_BLOCKED_RANGES
    streaming_service_time: ServiceTimeRange = DEFAULT_STREAMING_SERVICE_TIME
    batch_service_time: ServiceTimeRange = DEFAULT_BATCH_SERVICE_TIME
    cooldown_ticks: int = 3
    scale_up_factor: int = 25
    scale_down_factor: int = 15
    min_workers: int = 1
    max_workers: int | None = None
    scale_down_mode: ScaleDownMode = ScaleDownMode.DROP_IN_FLIGHT
    backlog_per_worker: int = 20

    def __post_init__(self) -> None:
        # Accept any iterable of ranges but store a tuple so the config stays hashable
        object.__setattr__(self, "blocked_ranges", tuple(self.blocked_ranges))
        self.validate()

    def validate(self) -> None:
        """Raise ConfigurationError on the first invalid setting."""
        p = self.admission_probability
        if isinstance(p, bool) or not isinstance(p, (int, float)) or not 0.0 <= p <= 1.0:
            raise ConfigurationError(f"admission_probability must be in [0, 1], got {p!r}")
        for r in self.blocked_ranges:
            if not isinstance(r, BlockedRange):
                raise ConfigurationError(f"blocked_ranges entries must be BlockedRange, got {r!r}")
        for name in ("streaming_service_time", "batch_service_time"):
            if not isinstance(getattr(self, name), ServiceTimeRange):
                raise ConfigurationError(f"{name} must be a ServiceTimeRange")
        _require_int("cooldown_ticks", self.cooldown_ticks, 0)
        _require_int("scale_up_factor", self.scale_up_factor, 1)
        _require_int("scale_down_factor", self.scale_down_factor, 0)
        if self.scale_up_factor <= self.scale_down_factor:
            raise ConfigurationError(
                "scale_up_factor must exceed scale_down_factor "
                f"({self.scale_up_factor} <= {self.scale_down_factor})"
            )
        _require_int("min_workers", self.min_workers, 1)
        if self.max_workers is not None:
            _require_int("max_workers", self.max_workers, self.min_workers)
        if not isinstance(self.scale_down_mode, ScaleDownMode):
            raise ConfigurationError(f"unknown scale_down_mode {self.scale_down_mode!r}")
        _require_int("backlog_per_worker", self.backlog_per_worker, 0)


@dataclass(frozen=True)
class SimulationConfig:
    """Everything needed to construct a LoadBalancer run."""

    initial_workers: int
    run_length: int
    seed: int | None = None
    policy: PolicyConfig = field(default_factory=PolicyConfig)

    def __post_init__(self) -> None:
        _require_int("initial_workers", self.initial_workers, 1)
        _require_int("run_length", self.run_length, 1)
        if self.seed is not None:
            _require_int("seed", self.seed, 0)
        if not isinstance(self.policy, PolicyConfig):
            raise ConfigurationError(f"policy must be a PolicyConfig, got {self.policy!r}")

    def with_policy(self, **overrides: Any) -> SimulationConfig:
        """Return a copy with some policy fields replaced."""
        return replace(self, policy=replace(self.policy, **overrides))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> SimulationConfig:
        """Build a config from a flat mapping of run and policy keys.

        Unknown keys are rejected. ``blocked_ranges`` may hold strings
        such as ``"192-200"``; service-time ranges may be ``(low, high)``
        pairs; ``scale_down_mode`` may be the mode's string value.
        """
        policy_names = {f.name for f in fields(PolicyConfig)}
        run_names = {"initial_workers", "run_length", "seed"}
        unknown = set(data) - policy_names - run_names
        if unknown:
            raise ConfigurationError(f"unknown configuration keys: {sorted(unknown)}")

        missing = {"initial_workers", "run_length"} - set(data)
        if missing:
            raise ConfigurationError(f"missing required keys: {sorted(missing)}")

        policy_kwargs = {k: _coerce_policy_value(k, v) for k, v in data.items() if k in policy_names}
        return cls(
            initial_workers=data["initial_workers"],
            run_length=data["run_length"],
            seed=data.get("seed"),
            policy=PolicyConfig(**policy_kwargs),
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> SimulationConfig:
        """Build a config from BS_WORKERS, BS_TICKS and optional BS_SEED."""
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for key, name in ((ENV_WORKERS, "initial_workers"), (ENV_TICKS, "run_length"), (ENV_SEED, "seed")):
            raw = env.get(key, "").strip()
            if not raw:
                continue
            try:
                values[name] = int(raw)
            except ValueError as exc:
                raise ConfigurationError(f"{key} must be an integer, got {raw!r}") from exc
        logger.debug("Loaded configuration from environment: %s", values)
        return cls.from_mapping(values)


def _coerce_policy_value(name: str, value: Any) -> Any:
    if name == "blocked_ranges":
        if isinstance(value, str):
            value = (value,)
        elif not isinstance(value, (tuple, list)):
            raise ConfigurationError(f"blocked_ranges must be a list of ranges, got {value!r}")
        return tuple(BlockedRange.parse(v) if isinstance(v, str) else v for v in value)
    if name in ("streaming_service_time", "batch_service_time") and isinstance(value, (tuple, list)):
        if len(value) != 2:
            raise ConfigurationError(f"{name} must be a (low, high) pair, got {value!r}")
        return ServiceTimeRange(*value)
    if name == "scale_down_mode" and isinstance(value, str):
        try:
            return ScaleDownMode(value)
        except ValueError as exc:
            raise ConfigurationError(f"unknown scale_down_mode {value!r}") from exc
    return value
