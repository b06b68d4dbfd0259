from __future__ import annotations

import argparse
import asyncio
import logging
import platform
import subprocess
import sys
from importlib import metadata
from pathlib import Path
from typing import NoReturn

from rich.console import Console
from rich.text import Text

from rlm import logging_setup
from rlm.analysis import error_windows, latency_breaches, load_log, summarize
from rlm.config import (
    ConfigError,
    MonitorConfig,
    OutputConfig,
    ProbeMode,
    TargetConfig,
    TimestampStyle,
)
from rlm.output import sink_for
from rlm.output.base import RecordSink
from rlm.sampler import StartupError, run_monitor

APP = "Redis Latency Monitor"
VERSION = "3.2.3"
DESC = "Tiny Redis client for latency measurement"

DEPENDENCIES = ("numpy", "pandas", "rich")

logger = logging.getLogger(__name__)


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog="redis-latency-monitor",
        description="Shows PING command latency or connection latency in milliseconds.",
        add_help=False,
    )
    parser.add_argument("-h", "--host", default="127.0.0.1", help="Server hostname (127.0.0.1 by default)")
    parser.add_argument("-p", "--port", type=int, default=6379, help="Server port (6379 by default)")
    parser.add_argument("-a", "--password", default=None, help="Password to use when connecting to the server")
    parser.add_argument("-t", "--timeout", type=int, default=3, help="Connection timeout in seconds, 1-300 (3 by default)")
    parser.add_argument("-i", "--interval", type=int, default=60, help="Interval in seconds, 1-3600 (60 by default)")
    parser.add_argument(
        "-c", "--connect", action="store_true", help="Measure connection latency instead of command latency"
    )
    parser.add_argument("-T", "--timestamps", action="store_true", help="Use unix timestamps in output")
    parser.add_argument("-o", "--output", type=Path, default=None, help="Path to output CSV file")
    parser.add_argument("-e", "--error-log", type=Path, default=None, help="Path to log with error messages")
    parser.add_argument("-nc", "--no-color", action="store_true", help="Disable colors in output")
    parser.add_argument("--report", type=Path, default=None, metavar="FILE", help="Summarize a CSV log and exit")
    parser.add_argument(
        "--slo-ms", type=float, default=10.0, help="p99 threshold in milliseconds used by --report (10 by default)"
    )
    parser.add_argument("-v", "--version", action="store_true", help="Show version")
    parser.add_argument("-vv", "--verbose-version", action="store_true", help="Show verbose information")
    parser.add_argument("--help", action="help", help="Show this help message")
    return parser


def _build_config(args: argparse.Namespace) -> MonitorConfig:
    target = TargetConfig(
        host=args.host,
        port=args.port,
        password=args.password or None,
        timeout_sec=args.timeout,
    )
    output = OutputConfig(
        csv_path=args.output,
        timestamp_style=TimestampStyle.UNIX if args.timestamps else TimestampStyle.HUMAN,
        color=not args.no_color,
    )
    return MonitorConfig(
        target=target,
        interval_sec=args.interval,
        probe_mode=ProbeMode.CONNECT if args.connect else ProbeMode.COMMAND,
        output=output,
        error_log=args.error_log,
    )


def _open_sink(config: MonitorConfig) -> RecordSink:
    try:
        return sink_for(config.output)
    except OSError as exc:
        msg = f"Can't open output file {config.output.csv_path}"
        raise StartupError(msg) from exc


def _print_error(message: str) -> None:
    Console(stderr=True, highlight=False).print(Text(message, style="red"))


def _redis_version() -> str:
    try:
        output = subprocess.run(
            ["redis-server", "--version"], capture_output=True, text=True, check=True
        ).stdout
    except (OSError, subprocess.CalledProcessError):
        return ""
    for field in output.split():
        if field.startswith("v="):
            return field[2:]
    return ""


def _print_verbose_version(console: Console) -> None:
    console.print(Text(f"{APP} {VERSION}", style="bold"))
    console.print(f"Python   {platform.python_version()} ({platform.system()} {platform.machine()})")
    for name in DEPENDENCIES:
        try:
            version = metadata.version(name)
        except metadata.PackageNotFoundError:
            version = "not installed"
        console.print(f"{name:<8} {version}")
    console.print(f"{'Redis':<8} {_redis_version() or 'not found'}")


def _print_report(path: Path, slo_ms: float, console: Console) -> None:
    df = load_log(path)
    summary = summarize(df)
    console.print(Text(f"Report for {path}", style="bold"))
    console.print(f"Intervals:  {summary.intervals:,}")
    console.print(f"Samples:    {summary.samples:,}")
    console.print(f"Errors:     {summary.errors:,} ({summary.error_rate:.3%})")
    console.print(f"Mean:       {summary.mean_ms:.3f} ms")
    console.print(f"Worst max:  {summary.worst_max_ms:.3f} ms")
    console.print(f"p99 median: {summary.median_p99_ms:.3f} ms, worst: {summary.worst_p99_ms:.3f} ms")
    windows = latency_breaches(df, slo_ms) + error_windows(df)
    if not windows:
        console.print(Text(f"No p99 breaches over {slo_ms:g} ms and no errors", style="green"))
        return
    for window in sorted(windows, key=lambda w: w.start):
        console.print(
            Text(f"{window.label}: {window.start} -> {window.end} ({window.intervals} intervals)", style="yellow")
        )


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    if args.version:
        print(f"{APP} {VERSION} - {DESC}")
        return 0
    if args.verbose_version:
        _print_verbose_version(Console(highlight=False))
        return 0
    if args.report is not None:
        try:
            _print_report(args.report, args.slo_ms, Console(no_color=args.no_color, highlight=False))
        except (OSError, ValueError) as exc:
            _print_error(f"Can't read report file {args.report}: {exc}")
            return 1
        return 0

    try:
        config = _build_config(args)
    except ConfigError as exc:
        _print_error(str(exc))
        return 1
    try:
        log_runtime = logging_setup.configure(config.error_log)
    except OSError as exc:
        _print_error(f"Can't open error log {config.error_log}: {exc}")
        return 1
    logger.debug("logging configured level=%s file=%s", log_runtime.level_name, log_runtime.file_path or "-")

    try:
        sink = _open_sink(config)
        asyncio.run(run_monitor(config, sink))
    except StartupError as exc:
        logger.error("%s: %s", exc, exc.__cause__)
        _print_error(str(exc))
        return 1
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())
