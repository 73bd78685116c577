"""Summary generated after a run completes.

SimulationSummary is returned by LoadBalancer.run() and handed to the
reporting sink once the last tick has been processed. Requests still
queued or in flight at that point are reported, never drained.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class SimulationSummary:
    """Cumulative results of one simulation run."""

    ticks: int
    initial_workers: int
    final_workers: int
    peak_workers: int
    processed: int
    blocked: int
    malformed: int
    dropped: int
    seeded: int
    accepted: int
    dispatched: int
    queue_remaining: int
    in_flight: int
    scale_out_count: int
    scale_in_count: int
    wall_clock_seconds: float = 0.0

    @property
    def throughput(self) -> float:
        """Completed requests per tick."""
        return self.processed / self.ticks if self.ticks else 0.0

    def __str__(self) -> str:
        lines = [
            "Simulation complete",
            f"Initial Servers: {self.initial_workers}",
            f"Final Servers: {self.final_workers}",
            f"Requests Processed: {self.processed}",
            f"Blocked Requests: {self.blocked}",
        ]
        if self.malformed:
            lines.append(f"  of which malformed: {self.malformed}")
        if self.dropped:
            lines.append(f"Dropped In-Flight Requests: {self.dropped}")
        lines.extend([
            f"Peak Servers: {self.peak_workers}",
            f"Scale events: {self.scale_out_count} out / {self.scale_in_count} in",
            f"Left in queue: {self.queue_remaining}, in flight: {self.in_flight}",
            f"Throughput: {self.throughput:.3f} requests/tick over {self.ticks} ticks",
        ])
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        result = asdict(self)
        result["throughput"] = self.throughput
        return result
