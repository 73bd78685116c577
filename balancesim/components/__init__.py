"""Policy components driven by the dispatch engine."""

from balancesim.components.admission import (
    DEFAULT_BLOCKED_RANGES,
    AdmissionDecision,
    AdmissionFilter,
    AdmissionFilterStats,
    AdmissionOutcome,
    BlockedRange,
    parse_leading_octet,
)
from balancesim.components.auto_scaler import (
    SCALE_IN,
    SCALE_OUT,
    AutoScaler,
    AutoScalerStats,
    HysteresisScaling,
    ScaleDownMode,
    ScalingEvent,
    ScalingPolicy,
    WorkerPool,
)

__all__ = [
    # Admission
    "AdmissionFilter",
    "AdmissionFilterStats",
    "AdmissionDecision",
    "AdmissionOutcome",
    "BlockedRange",
    "DEFAULT_BLOCKED_RANGES",
    "parse_leading_octet",
    # Auto Scaler
    "AutoScaler",
    "AutoScalerStats",
    "HysteresisScaling",
    "ScaleDownMode",
    "ScalingEvent",
    "ScalingPolicy",
    "WorkerPool",
    "SCALE_OUT",
    "SCALE_IN",
]
