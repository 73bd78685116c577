"""In-memory run history with pandas export."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pandas as pd

from balancesim.instrumentation.records import StateRecord
from balancesim.instrumentation.sinks import BaseSink
from balancesim.instrumentation.summary import SimulationSummary

if TYPE_CHECKING:
    from balancesim.components.auto_scaler import ScalingEvent


class HistorySink(BaseSink):
    """Keeps every sampled record, every scaling event and the summary.

    Attributes:
        records: Sampled StateRecords in tick order.
        events: ScalingEvents in the order they fired.
        summary: The final summary, once the run has finished.
    """

    RECORD_COLUMNS = ["tick", "worker_count", "queue_length", "processed_count", "blocked_count"]
    EVENT_COLUMNS = ["tick", "action", "from_count", "to_count", "reason", "dropped"]

    def __init__(self, interval: int = 1):
        super().__init__(interval)
        self.records: list[StateRecord] = []
        self.events: list[ScalingEvent] = []
        self.summary: SimulationSummary | None = None

    def _emit_record(self, record: StateRecord) -> None:
        self.records.append(record)

    def _emit_annotation(self, event: ScalingEvent) -> None:
        self.events.append(event)

    def _emit_summary(self, summary: SimulationSummary) -> None:
        self.summary = summary

    def to_dataframe(self) -> pd.DataFrame:
        """Records as a DataFrame indexed by tick."""
        df = pd.DataFrame([r.to_dict() for r in self.records], columns=self.RECORD_COLUMNS)
        return df.set_index("tick")

    def events_dataframe(self) -> pd.DataFrame:
        rows = [
            {
                "tick": e.tick,
                "action": e.action,
                "from_count": e.from_count,
                "to_count": e.to_count,
                "reason": e.reason,
                "dropped": e.dropped_request is not None,
            }
            for e in self.events
        ]
        return pd.DataFrame(rows, columns=self.EVENT_COLUMNS)

    def per_tick_completions(self) -> pd.Series:
        """Completions between consecutive sampled records."""
        df = self.to_dataframe()
        return df["processed_count"].diff().fillna(df["processed_count"]).astype(int)
