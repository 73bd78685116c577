"""Synthetic load generation."""

from balancesim.load.generator import (
    DEFAULT_BATCH_SERVICE_TIME,
    DEFAULT_STREAMING_SERVICE_TIME,
    RequestGenerator,
    ServiceTimeRange,
    generate_address,
)

__all__ = [
    "RequestGenerator",
    "ServiceTimeRange",
    "generate_address",
    "DEFAULT_STREAMING_SERVICE_TIME",
    "DEFAULT_BATCH_SERVICE_TIME",
]
