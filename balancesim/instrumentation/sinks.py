"""Reporting sinks.

The engine reports through a single ReportingSink: one StateRecord per
tick, one ScalingEvent per scaling action and one SimulationSummary at
the end. Sinks are write-only from the engine's point of view; replacing
a sink with NullSink changes no simulation outcome.

Sampling is the sink's concern. Each sink built on BaseSink forwards
only records whose tick is a multiple of its ``interval``; annotations
and the summary are always forwarded. Use FanOutSink to report to
several destinations with different intervals.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import IO, TYPE_CHECKING, Protocol, runtime_checkable

from balancesim.core.errors import ConfigurationError
from balancesim.instrumentation.records import CSV_HEADER, StateRecord
from balancesim.instrumentation.summary import SimulationSummary

if TYPE_CHECKING:
    from balancesim.components.auto_scaler import ScalingEvent

logger = logging.getLogger(__name__)


@runtime_checkable
class ReportingSink(Protocol):
    """Destination for engine reports."""

    def record(self, record: StateRecord) -> None: ...

    def annotate(self, event: ScalingEvent) -> None: ...

    def finish(self, summary: SimulationSummary) -> None: ...


class BaseSink:
    """Sink with tick sampling. Subclasses override the ``_emit_*`` hooks."""

    def __init__(self, interval: int = 1):
        if interval < 1:
            raise ConfigurationError(f"report interval must be >= 1, got {interval}")
        self.interval = interval

    def record(self, record: StateRecord) -> None:
        if record.tick % self.interval == 0:
            self._emit_record(record)

    def annotate(self, event: ScalingEvent) -> None:
        self._emit_annotation(event)

    def finish(self, summary: SimulationSummary) -> None:
        self._emit_summary(summary)

    def _emit_record(self, record: StateRecord) -> None:
        pass

    def _emit_annotation(self, event: ScalingEvent) -> None:
        pass

    def _emit_summary(self, summary: SimulationSummary) -> None:
        pass


class NullSink(BaseSink):
    """Discards everything."""


class LoggingSink(BaseSink):
    """Reports through the ``logging`` module."""

    def __init__(self, interval: int = 50, logger_name: str = "balancesim.report"):
        super().__init__(interval)
        self._logger = logging.getLogger(logger_name)

    def _emit_record(self, record: StateRecord) -> None:
        self._logger.info("%s", record.format())

    def _emit_annotation(self, event: ScalingEvent) -> None:
        level = logging.WARNING if event.dropped_request is not None else logging.INFO
        self._logger.log(level, "%s", event.describe())

    def _emit_summary(self, summary: SimulationSummary) -> None:
        for line in str(summary).splitlines():
            self._logger.info("%s", line)


class ConsoleSink(BaseSink):
    """Prints periodic state lines and the final summary to a stream."""

    def __init__(self, interval: int = 50, stream: IO[str] | None = None, show_events: bool = False):
        super().__init__(interval)
        self._stream = stream
        self._show_events = show_events

    @property
    def stream(self) -> IO[str]:
        # Resolved lazily so pytest's capsys replacement of sys.stdout is honoured
        return self._stream if self._stream is not None else sys.stdout

    def _emit_record(self, record: StateRecord) -> None:
        print(record.format(), file=self.stream)

    def _emit_annotation(self, event: ScalingEvent) -> None:
        if self._show_events:
            print(event.describe(), file=self.stream)

    def _emit_summary(self, summary: SimulationSummary) -> None:
        print(f"\n{summary}", file=self.stream)


class LogFileSink(BaseSink):
    """Writes the run log file.

    Layout: a ``Clock,Servers,QueueSize,Processed,Blocked`` header, one
    ``[Cycle N] ...`` line per sampled record, scaling annotations, then
    the summary block. The file is opened on first use and closed by
    ``finish()`` or ``close()``.
    """

    def __init__(self, path: str | Path, interval: int = 1, annotate_events: bool = True):
        super().__init__(interval)
        self.path = Path(path)
        self._annotate_events = annotate_events
        self._file: IO[str] | None = None

    def _handle(self) -> IO[str]:
        if self._file is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._file = self.path.open("w", encoding="utf-8")
            self._file.write(CSV_HEADER + "\n")
            logger.debug("Opened log file %s", self.path)
        return self._file

    def _emit_record(self, record: StateRecord) -> None:
        self._handle().write(record.format() + "\n")

    def _emit_annotation(self, event: ScalingEvent) -> None:
        if self._annotate_events:
            self._handle().write(event.describe() + "\n")

    def _emit_summary(self, summary: SimulationSummary) -> None:
        self._handle().write(str(summary) + "\n")
        self.close()

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> LogFileSink:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class FanOutSink:
    """Forwards every report to each wrapped sink, in order."""

    def __init__(self, sinks: Iterable[ReportingSink]):
        self.sinks = list(sinks)

    def record(self, record: StateRecord) -> None:
        for sink in self.sinks:
            sink.record(record)

    def annotate(self, event: ScalingEvent) -> None:
        for sink in self.sinks:
            sink.annotate(event)

    def finish(self, summary: SimulationSummary) -> None:
        for sink in self.sinks:
            sink.finish(summary)

    def close(self) -> None:
        """Close every wrapped sink that holds a resource."""
        for sink in self.sinks:
            close = getattr(sink, "close", None)
            if close is not None:
                close()
