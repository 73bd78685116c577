"""Discrete-time dispatch engine.

LoadBalancer owns the worker pool, the FIFO pending queue and every
counter. One call to ``step()`` is one tick, executed in this order:

1. Arrival: with ``admission_probability``, generate a request and run
   it through the admission filter; accepted requests join the queue.
2. Advance: ``tick()`` every worker in pool order; each completion
   increments ``processed_count``.
3. Dispatch: in pool order, every idle worker takes the queue head. A
   request dispatched here is first advanced on the next tick.
4. Autoscale: the AutoScaler grows or shrinks the pool.
5. Report: a StateRecord goes to the reporting sink.

Reordering Advance and Dispatch shifts every completion by one tick.

``run()`` steps until the run length is reached, then reports a
SimulationSummary. Queued or in-flight work is left as is.

Example:
    from balancesim import HistorySink, LoadBalancer, PolicyConfig

    history = HistorySink()
    lb = LoadBalancer(initial_workers=3, run_length=500, seed=42, sink=history)
    summary = lb.run()
    print(summary)
"""

from __future__ import annotations

import logging
import time
from collections import deque
from collections.abc import Sequence

from balancesim.components.admission import AdmissionDecision, AdmissionFilter, AdmissionOutcome
from balancesim.components.auto_scaler import AutoScaler, HysteresisScaling, ScalingEvent
from balancesim.config import PolicyConfig, SimulationConfig
from balancesim.core.errors import ConfigurationError, InvariantViolation, SimulationFinished
from balancesim.core.random_source import RandomSource, SeededRandom, wall_clock_random
from balancesim.core.request import Request
from balancesim.core.worker import Worker, WorkerState
from balancesim.instrumentation.records import StateRecord
from balancesim.instrumentation.sinks import NullSink, ReportingSink
from balancesim.instrumentation.summary import SimulationSummary
from balancesim.load.generator import RequestGenerator

logger = logging.getLogger(__name__)


class LoadBalancer:
    """Single-threaded request-dispatch simulation.

    Args:
        initial_workers: Pool size before the first tick. Must be >= 1.
        run_length: Number of ticks ``run()`` executes. Must be >= 1.
        policy: Policy overrides; defaults to PolicyConfig().
        random_source: Source of every random draw. Defaults to
            ``SeededRandom(seed)`` when a seed is given, otherwise a
            wall-clock seeded source.
        sink: Reporting destination. Defaults to NullSink.
        seed: Seed for the default random source. Cannot be combined
            with ``random_source``.

    Raises:
        ConfigurationError: If any parameter is invalid, or both
            ``random_source`` and ``seed`` are given.
    """

    def __init__(
        self,
        initial_workers: int,
        run_length: int,
        policy: PolicyConfig | None = None,
        *,
        random_source: RandomSource | None = None,
        sink: ReportingSink | None = None,
        seed: int | None = None,
    ):
        if random_source is not None and seed is not None:
            raise ConfigurationError("pass either random_source or seed, not both")
        self._config = SimulationConfig(
            initial_workers=initial_workers,
            run_length=run_length,
            seed=seed,
            policy=policy if policy is not None else PolicyConfig(),
        )
        policy = self._config.policy

        if random_source is None:
            random_source = SeededRandom(seed) if seed is not None else wall_clock_random()
        self._random = random_source
        self._sink: ReportingSink = sink if sink is not None else NullSink()

        self._generator = RequestGenerator(
            random_source,
            streaming=policy.streaming_service_time,
            batch=policy.batch_service_time,
        )
        self._admission = AdmissionFilter(policy.blocked_ranges)

        self._tick = 0
        self._workers: list[Worker] = []
        self._pending: deque[Request] = deque()
        self._next_worker_id = 0
        self._peak_workers = 0

        self._processed_count = 0
        self._blocked_count = 0
        self._malformed_count = 0
        self._accepted_count = 0
        self._seeded_count = 0
        self._dispatched_count = 0
        self._dropped_count = 0
        self._summary: SimulationSummary | None = None

        self._scaler = AutoScaler(
            pool=self,
            policy=HysteresisScaling(policy.scale_up_factor, policy.scale_down_factor),
            cooldown_ticks=policy.cooldown_ticks,
            min_workers=policy.min_workers,
            max_workers=policy.max_workers,
            scale_down_mode=policy.scale_down_mode,
        )

        for _ in range(initial_workers):
            self.add_worker()
        self._seed_backlog(initial_workers * policy.backlog_per_worker)

        logger.info(
            "LoadBalancer initialized: workers=%d, run_length=%d, backlog=%d",
            initial_workers,
            run_length,
            len(self._pending),
        )

    @classmethod
    def from_config(
        cls,
        config: SimulationConfig,
        *,
        random_source: RandomSource | None = None,
        sink: ReportingSink | None = None,
    ) -> LoadBalancer:
        """Build an engine from ``config``; a seeded config rejects ``random_source``."""
        return cls(
            config.initial_workers,
            config.run_length,
            config.policy,
            random_source=random_source,
            sink=sink,
            seed=config.seed,
        )

    # === State ===

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def tick(self) -> int:
        return self._tick

    @property
    def run_length(self) -> int:
        return self._config.run_length

    @property
    def is_finished(self) -> bool:
        return self._tick >= self._config.run_length

    @property
    def workers(self) -> Sequence[Worker]:
        """Worker pool in insertion order (read-only view)."""
        return tuple(self._workers)

    @property
    def pending(self) -> Sequence[Request]:
        """Pending queue, head first (read-only copy)."""
        return tuple(self._pending)

    @property
    def queue_length(self) -> int:
        return len(self._pending)

    @property
    def scale_cooldown(self) -> int:
        return self._scaler.cooldown

    @property
    def auto_scaler(self) -> AutoScaler:
        return self._scaler

    @property
    def admission_filter(self) -> AdmissionFilter:
        return self._admission

    @property
    def generator(self) -> RequestGenerator:
        return self._generator

    @property
    def processed_count(self) -> int:
        """Requests completed by a worker."""
        return self._processed_count

    @property
    def blocked_count(self) -> int:
        """Requests rejected at admission, malformed ones included."""
        return self._blocked_count

    @property
    def malformed_count(self) -> int:
        return self._malformed_count

    @property
    def accepted_count(self) -> int:
        return self._accepted_count

    @property
    def seeded_count(self) -> int:
        return self._seeded_count

    @property
    def dispatched_count(self) -> int:
        return self._dispatched_count

    @property
    def dropped_count(self) -> int:
        """In-flight requests lost when a busy worker was scaled away."""
        return self._dropped_count

    @property
    def in_flight(self) -> int:
        return sum(1 for w in self._workers if not w.is_idle)

    # === Pool management (used by AutoScaler) ===

    def add_worker(self) -> Worker:
        """Append a new idle worker with the next sequential id."""
        worker = Worker(self._next_worker_id)
        self._next_worker_id += 1
        self._workers.append(worker)
        self._peak_workers = max(self._peak_workers, len(self._workers))
        logger.debug("Added worker %d (pool size %d)", worker.id, len(self._workers))
        return worker

    def remove_last_worker(self) -> tuple[Worker, Request | None]:
        """Pop the most recently added worker.

        Returns:
            The removed worker and the request it was serving, if any.
            That request is discarded and counted in ``dropped_count``.
        """
        if len(self._workers) <= 1:
            raise InvariantViolation("cannot remove the last remaining worker")
        worker = self._workers.pop()
        dropped = worker.release()
        if dropped is not None:
            self._dropped_count += 1
            logger.warning(
                "[Cycle %d] Worker %d removed while busy; dropped request from %s",
                self._tick,
                worker.id,
                dropped.origin_address,
            )
        return worker, dropped

    # === Requests ===

    def _seed_backlog(self, count: int) -> None:
        for request in self._generator.generate_batch(count, tick=self._tick):
            self._pending.append(request)
        self._seeded_count += count

    def submit(self, request: Request) -> AdmissionDecision:
        """Run ``request`` through admission and enqueue it if accepted."""
        decision = self._admission.check(request)
        if decision.accepted:
            self._pending.append(request)
            self._accepted_count += 1
        else:
            self._blocked_count += 1
            if decision.outcome is AdmissionOutcome.MALFORMED_ADDRESS:
                self._malformed_count += 1
            logger.debug("[Cycle %d] Blocked: %s", self._tick, decision.reason)
        return decision

    # === Tick phases ===

    def _arrive(self) -> None:
        if self._random.next_probability() < self._config.policy.admission_probability:
            self.submit(self._generator.generate(self._tick))

    def _advance(self) -> None:
        for worker in self._workers:
            if worker.tick() is not None:
                self._processed_count += 1

    def _dispatch(self) -> None:
        for worker in self._workers:
            if not self._pending:
                break
            if worker.is_idle:
                worker.assign(self._pending.popleft())
                self._dispatched_count += 1

    def _autoscale(self) -> ScalingEvent | None:
        event = self._scaler.evaluate(self._tick)
        if event is not None:
            self._sink.annotate(event)
        return event

    def snapshot(self) -> StateRecord:
        return StateRecord(
            tick=self._tick,
            worker_count=len(self._workers),
            queue_length=len(self._pending),
            processed_count=self._processed_count,
            blocked_count=self._blocked_count,
        )

    def check_invariants(self) -> None:
        """Verify worker and queue accounting invariants.

        Raises:
            InvariantViolation: If any invariant does not hold.
        """
        for worker in self._workers:
            if worker.remaining_time < 0:
                raise InvariantViolation(f"worker {worker.id} has negative remaining time")
            idle = worker.state is WorkerState.IDLE
            if idle != (worker.remaining_time == 0):
                raise InvariantViolation(
                    f"worker {worker.id} is {worker.state.value} with "
                    f"{worker.remaining_time} ticks remaining"
                )
        expected = self._seeded_count + self._accepted_count - self._dispatched_count
        if len(self._pending) != expected:
            raise InvariantViolation(
                f"queue holds {len(self._pending)} requests, accounting expects {expected}"
            )

    def step(self) -> StateRecord:
        """Execute one tick and return the reported state.

        Raises:
            SimulationFinished: If the run length has already been reached.
        """
        if self.is_finished:
            raise SimulationFinished(
                f"run length {self._config.run_length} reached at tick {self._tick}"
            )

        self._tick += 1
        self._arrive()
        self._advance()
        self._dispatch()
        self._autoscale()
        self.check_invariants()

        record = self.snapshot()
        self._sink.record(record)
        return record

    # === Run ===

    def summary(self, wall_clock_seconds: float = 0.0) -> SimulationSummary:
        stats = self._scaler.stats
        return SimulationSummary(
            ticks=self._tick,
            initial_workers=self._config.initial_workers,
            final_workers=len(self._workers),
            peak_workers=self._peak_workers,
            processed=self._processed_count,
            blocked=self._blocked_count,
            malformed=self._malformed_count,
            dropped=self._dropped_count,
            seeded=self._seeded_count,
            accepted=self._accepted_count,
            dispatched=self._dispatched_count,
            queue_remaining=len(self._pending),
            in_flight=self.in_flight,
            scale_out_count=stats.scale_out_count,
            scale_in_count=stats.scale_in_count,
            wall_clock_seconds=wall_clock_seconds,
        )

    def run(self) -> SimulationSummary:
        """Step until the run length is reached and report the summary.

        Raises:
            SimulationFinished: If the run already completed.
        """
        if self._summary is not None:
            raise SimulationFinished("run() already completed")

        started = time.perf_counter()
        while self._tick < self._config.run_length:
            self.step()

        self._summary = self.summary(wall_clock_seconds=time.perf_counter() - started)
        self._sink.finish(self._summary)
        logger.info(
            "Simulation complete: ticks=%d, processed=%d, blocked=%d, workers=%d",
            self._summary.ticks,
            self._summary.processed,
            self._summary.blocked,
            self._summary.final_workers,
        )
        return self._summary
