"""Per-tick state snapshot emitted by the engine."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class StateRecord:
    """Engine state observed at the end of one tick."""

    tick: int
    worker_count: int
    queue_length: int
    processed_count: int
    blocked_count: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def format(self) -> str:
        """Render in the load balancer's log-line format."""
        return (
            f"[Cycle {self.tick}] Servers: {self.worker_count}, "
            f"Queue: {self.queue_length}, "
            f"Processed: {self.processed_count}, "
            f"Blocked: {self.blocked_count}"
        )

    def csv_row(self) -> str:
        return (
            f"{self.tick},{self.worker_count},{self.queue_length},"
            f"{self.processed_count},{self.blocked_count}"
        )


CSV_HEADER = "Clock,Servers,QueueSize,Processed,Blocked"
