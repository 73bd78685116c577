"""Core value types: requests, workers, randomness and errors."""

from balancesim.core.errors import (
    AddressParseError,
    BalanceSimError,
    ConfigurationError,
    InvariantViolation,
    SimulationFinished,
)
from balancesim.core.random_source import RandomSource, SeededRandom, wall_clock_random
from balancesim.core.request import JobClass, Request
from balancesim.core.worker import Worker, WorkerState, WorkerStats

__all__ = [
    # Errors
    "BalanceSimError",
    "ConfigurationError",
    "InvariantViolation",
    "AddressParseError",
    "SimulationFinished",
    # Randomness
    "RandomSource",
    "SeededRandom",
    "wall_clock_random",
    # Requests and workers
    "JobClass",
    "Request",
    "Worker",
    "WorkerState",
    "WorkerStats",
]
