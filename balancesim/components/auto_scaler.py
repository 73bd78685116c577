"""Hysteresis auto-scaler for the worker pool.

Evaluated once per tick, after dispatch. While a cooldown is pending the
scaler only counts it down. Otherwise the policy compares the pending
queue length ``q`` with the pool size ``n``:

- ``q > scale_up_factor * n``: append one worker.
- ``q < scale_down_factor * n`` and ``n > min_workers``: remove the most
  recently added worker.
- anything in between is the dead band; nothing happens.

Any scaling action starts a new cooldown of ``cooldown_ticks``.

Removing a busy worker is governed by ScaleDownMode. DROP_IN_FLIGHT
removes it anyway and its request is lost; REQUIRE_IDLE skips the
scale-down for that tick.

Example:
    from balancesim.components import AutoScaler, HysteresisScaling

    scaler = AutoScaler(
        pool=lb,
        policy=HysteresisScaling(scale_up_factor=25, scale_down_factor=15),
        cooldown_ticks=3,
    )
    event = scaler.evaluate(tick)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable

from balancesim.core.errors import ConfigurationError
from balancesim.core.request import Request
from balancesim.core.worker import Worker

logger = logging.getLogger(__name__)

SCALE_OUT = "scale_out"
SCALE_IN = "scale_in"


class ScaleDownMode(Enum):
    """What to do when the worker chosen for removal is busy."""

    DROP_IN_FLIGHT = "drop"
    REQUIRE_IDLE = "require-idle"


@runtime_checkable
class WorkerPool(Protocol):
    """What the scaler needs from the engine it manages."""

    @property
    def workers(self) -> Sequence[Worker]: ...

    @property
    def queue_length(self) -> int: ...

    def add_worker(self) -> Worker: ...

    def remove_last_worker(self) -> tuple[Worker, Request | None]: ...


@runtime_checkable
class ScalingPolicy(Protocol):
    """Protocol for scaling decision algorithms."""

    def evaluate(
        self,
        queue_length: int,
        current_count: int,
        min_workers: int,
        max_workers: int | None,
    ) -> int:
        """Return the desired worker count."""
        ...


class HysteresisScaling:
    """Queue-pressure thresholds with a dead band between them.

    Moves the pool by at most one worker per evaluation.
    """

    def __init__(self, scale_up_factor: int = 25, scale_down_factor: int = 15):
        if scale_down_factor < 0:
            raise ConfigurationError(
                f"scale_down_factor must be >= 0, got {scale_down_factor}"
            )
        if scale_up_factor <= scale_down_factor:
            raise ConfigurationError(
                "scale_up_factor must exceed scale_down_factor "
                f"({scale_up_factor} <= {scale_down_factor})"
            )
        self._scale_up_factor = scale_up_factor
        self._scale_down_factor = scale_down_factor

    @property
    def scale_up_factor(self) -> int:
        return self._scale_up_factor

    @property
    def scale_down_factor(self) -> int:
        return self._scale_down_factor

    def evaluate(
        self,
        queue_length: int,
        current_count: int,
        min_workers: int,
        max_workers: int | None,
    ) -> int:
        if queue_length > self._scale_up_factor * current_count:
            if max_workers is not None and current_count >= max_workers:
                return current_count
            return current_count + 1
        if queue_length < self._scale_down_factor * current_count and current_count > min_workers:
            return current_count - 1
        return current_count


@dataclass(frozen=True)
class ScalingEvent:
    """Record of a scaling action."""

    tick: int
    action: str  # SCALE_OUT or SCALE_IN
    from_count: int
    to_count: int
    reason: str
    dropped_request: Request | None = None

    def describe(self) -> str:
        text = f"[Cycle {self.tick}] {self.action} {self.from_count} -> {self.to_count} ({self.reason})"
        if self.dropped_request is not None:
            text += (
                f"; dropped in-flight request from {self.dropped_request.origin_address}"
            )
        return text


@dataclass(frozen=True)
class AutoScalerStats:
    """Statistics tracked by AutoScaler."""

    evaluations: int = 0
    scale_out_count: int = 0
    scale_in_count: int = 0
    cooldown_ticks: int = 0
    skipped_scale_ins: int = 0
    dropped_requests: int = 0


class AutoScaler:
    """Grows or shrinks a WorkerPool in response to queue pressure.

    Attributes:
        scaling_history: Every scaling action, in order.
    """

    def __init__(
        self,
        pool: WorkerPool,
        policy: ScalingPolicy | None = None,
        cooldown_ticks: int = 3,
        min_workers: int = 1,
        max_workers: int | None = None,
        scale_down_mode: ScaleDownMode = ScaleDownMode.DROP_IN_FLIGHT,
    ):
        if cooldown_ticks < 0:
            raise ConfigurationError(f"cooldown_ticks must be >= 0, got {cooldown_ticks}")
        if min_workers < 1:
            raise ConfigurationError(f"min_workers must be >= 1, got {min_workers}")
        if max_workers is not None and max_workers < min_workers:
            raise ConfigurationError(
                f"max_workers ({max_workers}) is below min_workers ({min_workers})"
            )

        self._pool = pool
        self._policy = policy or HysteresisScaling()
        self._cooldown_ticks = cooldown_ticks
        self._min_workers = min_workers
        self._max_workers = max_workers
        self._scale_down_mode = scale_down_mode

        self._cooldown = 0

        self._evaluations = 0
        self._scale_out_count = 0
        self._scale_in_count = 0
        self._cooldown_blocks = 0
        self._skipped_scale_ins = 0
        self._dropped_requests = 0
        self.scaling_history: list[ScalingEvent] = []

        logger.debug(
            "AutoScaler initialized: cooldown=%d, min=%d, max=%s, mode=%s",
            cooldown_ticks,
            min_workers,
            max_workers,
            scale_down_mode.value,
        )

    @property
    def cooldown(self) -> int:
        """Ticks remaining before another scaling action is allowed."""
        return self._cooldown

    @property
    def policy(self) -> ScalingPolicy:
        return self._policy

    @property
    def scale_down_mode(self) -> ScaleDownMode:
        return self._scale_down_mode

    @property
    def stats(self) -> AutoScalerStats:
        """Return a frozen snapshot of current statistics."""
        return AutoScalerStats(
            evaluations=self._evaluations,
            scale_out_count=self._scale_out_count,
            scale_in_count=self._scale_in_count,
            cooldown_ticks=self._cooldown_blocks,
            skipped_scale_ins=self._skipped_scale_ins,
            dropped_requests=self._dropped_requests,
        )

    def evaluate(self, tick: int) -> ScalingEvent | None:
        """Run one scaling evaluation.

        Returns:
            The ScalingEvent if the pool changed, otherwise None.
        """
        self._evaluations += 1

        if self._cooldown > 0:
            self._cooldown -= 1
            self._cooldown_blocks += 1
            return None

        current = len(self._pool.workers)
        queue_length = self._pool.queue_length
        desired = self._policy.evaluate(
            queue_length, current, self._min_workers, self._max_workers
        )

        if desired > current:
            return self._scale_out(tick, current, queue_length)
        if desired < current:
            return self._scale_in(tick, current, queue_length)
        return None

    def _scale_out(self, tick: int, current: int, queue_length: int) -> ScalingEvent:
        worker = self._pool.add_worker()
        new_count = len(self._pool.workers)
        self._cooldown = self._cooldown_ticks
        self._scale_out_count += 1

        event = ScalingEvent(
            tick=tick,
            action=SCALE_OUT,
            from_count=current,
            to_count=new_count,
            reason=f"queue {queue_length} above threshold, added worker {worker.id}",
        )
        self.scaling_history.append(event)
        logger.info("[Cycle %d] Scale out: %d -> %d (queue=%d)", tick, current, new_count, queue_length)
        return event

    def _scale_in(self, tick: int, current: int, queue_length: int) -> ScalingEvent | None:
        candidate = self._pool.workers[-1]
        if not candidate.is_idle and self._scale_down_mode is ScaleDownMode.REQUIRE_IDLE:
            self._skipped_scale_ins += 1
            logger.debug(
                "[Cycle %d] Scale in skipped: worker %d busy (%d ticks left)",
                tick,
                candidate.id,
                candidate.remaining_time,
            )
            return None

        worker, dropped = self._pool.remove_last_worker()
        new_count = len(self._pool.workers)
        self._cooldown = self._cooldown_ticks
        self._scale_in_count += 1

        reason = f"queue {queue_length} below threshold, removed worker {worker.id}"
        if dropped is not None:
            self._dropped_requests += 1

        event = ScalingEvent(
            tick=tick,
            action=SCALE_IN,
            from_count=current,
            to_count=new_count,
            reason=reason,
            dropped_request=dropped,
        )
        self.scaling_history.append(event)
        logger.info("[Cycle %d] Scale in: %d -> %d (queue=%d)", tick, current, new_count, queue_length)
        return event
