from __future__ import annotations

from rlm.sampler.runner import StartupError, run_monitor
from rlm.sampler.scheduler import IntervalScheduler, SchedulerState, Ticker, next_boundary

__all__ = [
    "IntervalScheduler",
    "SchedulerState",
    "StartupError",
    "Ticker",
    "next_boundary",
    "run_monitor",
]
