"""Reporting: state records, summaries and sinks."""

from balancesim.instrumentation.history import HistorySink
from balancesim.instrumentation.records import CSV_HEADER, StateRecord
from balancesim.instrumentation.sinks import (
    BaseSink,
    ConsoleSink,
    FanOutSink,
    LogFileSink,
    LoggingSink,
    NullSink,
    ReportingSink,
)
from balancesim.instrumentation.summary import SimulationSummary

__all__ = [
    "StateRecord",
    "CSV_HEADER",
    "SimulationSummary",
    "ReportingSink",
    "BaseSink",
    "NullSink",
    "LoggingSink",
    "ConsoleSink",
    "LogFileSink",
    "HistorySink",
    "FanOutSink",
]
