from __future__ import annotations

from rlm.analysis.report import (
    LogSummary,
    SignalWindow,
    error_windows,
    latency_breaches,
    load_log,
    summarize,
)

__all__ = [
    "LogSummary",
    "SignalWindow",
    "error_windows",
    "latency_breaches",
    "load_log",
    "summarize",
]
