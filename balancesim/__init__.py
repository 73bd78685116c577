"""balancesim: discrete-time load balancer simulation.

A pool of single-slot workers drains a FIFO request queue. Each tick a
synthetic request may arrive and is filtered by origin address range;
a hysteresis auto-scaler with cooldown grows or shrinks the pool.

Quick start:
    from balancesim import LoadBalancer

    summary = LoadBalancer(initial_workers=5, run_length=1000, seed=1).run()
    print(summary)

Logging is silent by default; see balancesim.logging_config.
"""

import logging

from balancesim.components import (
    AdmissionDecision,
    AdmissionFilter,
    AdmissionOutcome,
    AutoScaler,
    BlockedRange,
    HysteresisScaling,
    ScaleDownMode,
    ScalingEvent,
)
from balancesim.config import PolicyConfig, SimulationConfig
from balancesim.core import (
    AddressParseError,
    BalanceSimError,
    ConfigurationError,
    InvariantViolation,
    JobClass,
    RandomSource,
    Request,
    SeededRandom,
    SimulationFinished,
    Worker,
    WorkerState,
    wall_clock_random,
)
from balancesim.instrumentation import (
    ConsoleSink,
    FanOutSink,
    HistorySink,
    LogFileSink,
    LoggingSink,
    NullSink,
    ReportingSink,
    SimulationSummary,
    StateRecord,
)
from balancesim.load import RequestGenerator, ServiceTimeRange
from balancesim.logging_config import (
    configure_from_env,
    disable_logging,
    enable_console_logging,
    enable_file_logging,
    enable_json_logging,
    set_level,
    set_module_level,
)
from balancesim.simulation import LoadBalancer

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    # Engine
    "LoadBalancer",
    "SimulationConfig",
    "PolicyConfig",
    # Core
    "Request",
    "JobClass",
    "Worker",
    "WorkerState",
    "RandomSource",
    "SeededRandom",
    "wall_clock_random",
    "RequestGenerator",
    "ServiceTimeRange",
    # Components
    "AdmissionFilter",
    "AdmissionDecision",
    "AdmissionOutcome",
    "BlockedRange",
    "AutoScaler",
    "HysteresisScaling",
    "ScaleDownMode",
    "ScalingEvent",
    # Reporting
    "StateRecord",
    "SimulationSummary",
    "ReportingSink",
    "NullSink",
    "LoggingSink",
    "ConsoleSink",
    "LogFileSink",
    "HistorySink",
    "FanOutSink",
    # Errors
    "BalanceSimError",
    "ConfigurationError",
    "InvariantViolation",
    "AddressParseError",
    "SimulationFinished",
    # Logging
    "configure_from_env",
    "disable_logging",
    "enable_console_logging",
    "enable_file_logging",
    "enable_json_logging",
    "set_level",
    "set_module_level",
]
