"""Single-slot worker state machine.

A Worker serves at most one Request at a time::

    IDLE --assign(request)--> BUSY --tick() x service_time--> IDLE

``tick()`` spends one unit of the in-flight request's remaining time. The
tick on which ``remaining_time`` reaches zero is the completion tick; the
worker returns the finished request so the engine can count it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from balancesim.core.errors import InvariantViolation
from balancesim.core.request import Request

logger = logging.getLogger(__name__)


class WorkerState(Enum):
    IDLE = "idle"
    BUSY = "busy"


@dataclass(frozen=True)
class WorkerStats:
    """Statistics tracked by Worker."""

    completed: int = 0
    busy_ticks: int = 0
    assigned: int = 0


class Worker:
    """Processing unit with capacity for exactly one request.

    Attributes:
        id: Stable identifier, assigned in pool-append order.
    """

    def __init__(self, worker_id: int):
        self.id = worker_id
        self._state = WorkerState.IDLE
        self._current_request: Request | None = None
        self._remaining_time = 0

        self._completed = 0
        self._busy_ticks = 0
        self._assigned = 0

    @property
    def state(self) -> WorkerState:
        return self._state

    @property
    def is_idle(self) -> bool:
        return self._state is WorkerState.IDLE

    @property
    def current_request(self) -> Request | None:
        """The request being served, or None while idle."""
        return self._current_request

    @property
    def remaining_time(self) -> int:
        return self._remaining_time

    @property
    def stats(self) -> WorkerStats:
        """Return a frozen snapshot of current statistics."""
        return WorkerStats(
            completed=self._completed,
            busy_ticks=self._busy_ticks,
            assigned=self._assigned,
        )

    def assign(self, request: Request) -> None:
        """Start serving ``request``.

        Raises:
            InvariantViolation: If the worker is busy or the request has
                no work to do.
        """
        if self._state is not WorkerState.IDLE:
            raise InvariantViolation(
                f"worker {self.id} is busy ({self._remaining_time} ticks left); "
                "cannot assign another request"
            )
        if request.service_time < 1:
            raise InvariantViolation(
                f"worker {self.id} was handed a request with service_time "
                f"{request.service_time}"
            )

        self._current_request = request
        self._remaining_time = request.service_time
        self._state = WorkerState.BUSY
        self._assigned += 1

    def tick(self) -> Request | None:
        """Advance the in-flight request by one tick.

        Returns:
            The request that completed on this tick, otherwise None.
            Idle workers are unaffected.
        """
        if self._state is WorkerState.IDLE:
            return None

        self._remaining_time -= 1
        self._busy_ticks += 1
        if self._remaining_time > 0:
            return None

        finished = self._current_request
        self._current_request = None
        self._state = WorkerState.IDLE
        self._completed += 1
        return finished

    def release(self) -> Request | None:
        """Detach the in-flight request without completing it.

        Used when the worker is removed from the pool while busy. The
        returned request is not counted as completed.
        """
        request = self._current_request
        self._current_request = None
        self._remaining_time = 0
        self._state = WorkerState.IDLE
        return request

    def __repr__(self) -> str:
        if self._state is WorkerState.IDLE:
            return f"Worker(id={self.id}, idle)"
        return f"Worker(id={self.id}, busy, remaining={self._remaining_time})"
