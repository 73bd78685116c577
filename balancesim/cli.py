"""Command-line entry point.

Runs one simulation and prints its summary. The initial worker count and
run length are prompted for when not given as flags; invalid answers are
re-prompted. Invalid flag values exit with status 2.

    balance-simulator --workers 10 --ticks 10000 --seed 42 --plot run.png
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Callable

from balancesim.analysis.plots import plot_history
from balancesim.components.admission import BlockedRange
from balancesim.components.auto_scaler import ScaleDownMode
from balancesim.config import PolicyConfig, SimulationConfig
from balancesim.core.errors import ConfigurationError
from balancesim.instrumentation.history import HistorySink
from balancesim.instrumentation.sinks import ConsoleSink, FanOutSink, LogFileSink, ReportingSink
from balancesim.logging_config import configure_from_env, enable_console_logging
from balancesim.simulation import LoadBalancer

logger = logging.getLogger(__name__)

EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="balance-simulator",
        description="Discrete-time load balancer simulation with autoscaling",
    )
    parser.add_argument("--workers", type=int, help="Initial number of workers (prompted if omitted)")
    parser.add_argument("--ticks", type=int, help="Number of clock cycles to run (prompted if omitted)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed (default: wall clock)")
    parser.add_argument(
        "--admission-probability", type=float, default=0.90,
        help="Chance of one new request per tick",
    )
    parser.add_argument(
        "--blocked-range", action="append", default=None, metavar="LOW-HIGH",
        help="Leading-octet range to block; repeatable (default: 192)",
    )
    parser.add_argument("--no-blocking", action="store_true", help="Admit every well-formed address")
    parser.add_argument("--cooldown", type=int, default=3, help="Ticks between scaling actions")
    parser.add_argument("--max-workers", type=int, default=None, help="Upper bound on pool size")
    parser.add_argument(
        "--scale-down-mode", choices=[m.value for m in ScaleDownMode],
        default=ScaleDownMode.DROP_IN_FLIGHT.value,
        help="'drop' removes busy workers and loses their request; "
             "'require-idle' waits until the last worker is idle",
    )
    parser.add_argument("--backlog", type=int, default=20, help="Initial queued requests per worker")
    parser.add_argument("--log-file", type=str, default="loadbalancer.log", help="Run log path")
    parser.add_argument("--no-log-file", action="store_true", help="Do not write the run log")
    parser.add_argument("--report-interval", type=int, default=50, help="Ticks between console lines")
    parser.add_argument("--plot", type=str, default=None, metavar="PATH", help="Save a chart of the run")
    parser.add_argument("--json", action="store_true", help="Print the summary as JSON")
    parser.add_argument(
        "--log-level", type=str, default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Enable library logging to stderr",
    )
    return parser


def prompt_positive_int(
    prompt: str,
    retry: str,
    input_fn: Callable[[str], str] = input,
) -> int:
    """Ask for an integer >= 1 until one is given.

    Raises:
        ConfigurationError: If input ends before a valid answer.
    """
    message = prompt
    while True:
        try:
            answer = input_fn(message)
        except EOFError as exc:
            raise ConfigurationError("input ended before a value was given") from exc
        try:
            value = int(answer.strip())
        except ValueError:
            value = 0
        if value >= 1:
            return value
        message = retry


def build_policy(args: argparse.Namespace) -> PolicyConfig:
    if args.no_blocking:
        ranges: tuple[BlockedRange, ...] = ()
    elif args.blocked_range:
        ranges = tuple(BlockedRange.parse(text) for text in args.blocked_range)
    else:
        ranges = PolicyConfig().blocked_ranges
    return PolicyConfig(
        admission_probability=args.admission_probability,
        blocked_ranges=ranges,
        cooldown_ticks=args.cooldown,
        max_workers=args.max_workers,
        scale_down_mode=ScaleDownMode(args.scale_down_mode),
        backlog_per_worker=args.backlog,
    )


def build_sink(args: argparse.Namespace, history: HistorySink | None) -> FanOutSink:
    sinks: list[ReportingSink] = [ConsoleSink(interval=args.report_interval)]
    if not args.no_log_file:
        sinks.append(LogFileSink(args.log_file))
    if history is not None:
        sinks.append(history)
    return FanOutSink(sinks)


def main(argv: list[str] | None = None, input_fn: Callable[[str], str] = input) -> int:
    args = build_parser().parse_args(argv)

    if args.log_level:
        enable_console_logging(level=args.log_level)
    else:
        configure_from_env()

    try:
        workers = args.workers
        if workers is None:
            workers = prompt_positive_int(
                "Enter initial number of web servers: ",
                "Number of servers must be at least 1. Try again: ",
                input_fn,
            )
        ticks = args.ticks
        if ticks is None:
            ticks = prompt_positive_int(
                "Enter number of clock cycles to run the load balancer: ",
                "Runtime must be at least 1. Try again: ",
                input_fn,
            )
        config = SimulationConfig(
            initial_workers=workers,
            run_length=ticks,
            seed=args.seed,
            policy=build_policy(args),
        )
        history = HistorySink() if args.plot else None
        sink = build_sink(args, history)
    except ConfigurationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    print("\nStarting load balancer...\n")
    try:
        summary = LoadBalancer.from_config(config, sink=sink).run()
    finally:
        sink.close()

    if history is not None:
        plot_history(history, args.plot)
    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
    print("\nLoad Balancer completed.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
