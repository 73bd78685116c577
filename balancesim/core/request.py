"""Request value type."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from balancesim.core.errors import InvariantViolation


class JobClass(Enum):
    """Kind of work a request carries. Selects its service-time range."""

    STREAMING = "streaming"
    BATCH = "batch"


@dataclass(frozen=True)
class Request:
    """One unit of work entering the load balancer.

    Attributes:
        origin_address: Source address. Opaque except for its first
            dotted component, which the admission filter inspects.
        destination_address: Target address. Never interpreted.
        job_class: Streaming or batch.
        service_time: Ticks of work needed to complete. Always >= 1.
        arrival_tick: Tick at which the request was generated.
    """

    origin_address: str
    destination_address: str
    job_class: JobClass
    service_time: int
    arrival_tick: int = 0

    def __post_init__(self) -> None:
        for name in ("service_time", "arrival_tick"):
            value = getattr(self, name)
            # bool is an int subclass; reject it explicitly
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvariantViolation(f"request {name} must be an integer, got {value!r}")
        if self.service_time < 1:
            raise InvariantViolation(
                f"request service_time must be >= 1, got {self.service_time}"
            )
        if self.arrival_tick < 0:
            raise InvariantViolation(
                f"request arrival_tick must be >= 0, got {self.arrival_tick}"
            )

    @property
    def is_streaming(self) -> bool:
        return self.job_class is JobClass.STREAMING
