"""Synthetic request generation.

RequestGenerator builds requests with random dotted-quad addresses, a
coin-flip job class and a service time drawn from the class's range. It
is used both for the initial backlog and for per-tick arrivals.

Example:
    from balancesim.core import SeededRandom
    from balancesim.load import RequestGenerator, ServiceTimeRange

    gen = RequestGenerator(
        SeededRandom(7),
        streaming=ServiceTimeRange(10, 13),
        batch=ServiceTimeRange(20, 30),
    )
    request = gen.generate(tick=0)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from balancesim.core.errors import ConfigurationError
from balancesim.core.random_source import RandomSource
from balancesim.core.request import JobClass, Request

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceTimeRange:
    """Inclusive integer range of service times, in ticks."""

    low: int
    high: int

    def __post_init__(self) -> None:
        if self.low < 1:
            raise ConfigurationError(f"service time lower bound must be >= 1, got {self.low}")
        if self.high < self.low:
            raise ConfigurationError(
                f"service time range is empty: [{self.low}, {self.high}]"
            )

    def __str__(self) -> str:
        return f"[{self.low}, {self.high}]"


DEFAULT_STREAMING_SERVICE_TIME = ServiceTimeRange(10, 13)
DEFAULT_BATCH_SERVICE_TIME = ServiceTimeRange(20, 30)


def generate_address(random_source: RandomSource) -> str:
    """Return a random dotted-quad address, each octet uniform in [0, 255]."""
    return ".".join(str(random_source.next_in_range(0, 255)) for _ in range(4))


class RequestGenerator:
    """Produces synthetic Request instances.

    Draw order per request is fixed (origin octets, destination octets,
    job class, service time) so a pinned random source yields a
    reproducible request stream.
    """

    def __init__(
        self,
        random_source: RandomSource,
        streaming: ServiceTimeRange = DEFAULT_STREAMING_SERVICE_TIME,
        batch: ServiceTimeRange = DEFAULT_BATCH_SERVICE_TIME,
    ):
        self._random = random_source
        self._ranges = {
            JobClass.STREAMING: streaming,
            JobClass.BATCH: batch,
        }
        self._generated = 0

    @property
    def generated(self) -> int:
        """Total requests produced so far."""
        return self._generated

    def service_range(self, job_class: JobClass) -> ServiceTimeRange:
        return self._ranges[job_class]

    def generate(self, tick: int) -> Request:
        """Build one request stamped with ``tick`` as its arrival tick."""
        origin = generate_address(self._random)
        destination = generate_address(self._random)

        job_class = JobClass.STREAMING if self._random.next_in_range(0, 1) == 0 else JobClass.BATCH
        bounds = self._ranges[job_class]
        service_time = self._random.next_in_range(bounds.low, bounds.high)

        self._generated += 1
        return Request(
            origin_address=origin,
            destination_address=destination,
            job_class=job_class,
            service_time=service_time,
            arrival_tick=tick,
        )

    def generate_batch(self, count: int, tick: int = 0) -> list[Request]:
        """Build ``count`` requests sharing the same arrival tick."""
        return [self.generate(tick) for _ in range(count)]
