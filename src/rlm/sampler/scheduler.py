from __future__ import annotations

import asyncio
import logging
import math
import time
from enum import Enum
from typing import Awaitable, Callable

from rlm.metrics import AggregatedRecord, IntervalBuffer, ProbeResult, aggregate_interval
from rlm.output.base import RecordSink
from rlm.probe import Prober

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]


class SchedulerState(str, Enum):
    ALIGNING = "aligning"
    SAMPLING = "sampling"
    FLUSHING = "flushing"
    STOPPED = "stopped"


def next_boundary(now: float, interval_sec: int) -> float:
    """Wall-clock time of the next aligned interval start after ``now``.

    Intervals of a minute or more start on whole minutes. Shorter intervals
    start on multiples of the interval within the minute; a trailing step
    that would cross the minute snaps to the next whole minute.
    """
    minute = math.floor(now / 60) * 60
    if interval_sec >= 60:
        return minute + 60
    step = (math.floor((now - minute) / interval_sec) + 1) * interval_sec
    return minute + min(step, 60)


class Ticker:
    """Fixed-rate ticks anchored at ``reset``; missed ticks are dropped."""

    def __init__(self, period_sec: float, clock: Clock, sleep: Sleep) -> None:
        self.period_sec = period_sec
        self._clock = clock
        self._sleep = sleep
        self._start = 0.0
        self._ticks = 0

    def reset(self, start: float) -> None:
        self._start = start
        self._ticks = 0

    async def wait(self) -> float:
        now = self._clock()
        self._ticks += 1
        deadline = self._start + self._ticks * self.period_sec
        if deadline < now:
            self._ticks = math.floor((now - self._start) / self.period_sec) + 1
            deadline = self._start + self._ticks * self.period_sec
        await self._sleep(max(0.0, deadline - now))
        return deadline


class IntervalScheduler:
    def __init__(
        self,
        interval_sec: int,
        sample_rate_ms: int,
        prober: Prober,
        sink: RecordSink,
        buffer: IntervalBuffer,
        *,
        clock: Clock = time.monotonic,
        wall_clock: Clock = time.time,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.interval_sec = interval_sec
        self.prober = prober
        self.sink = sink
        self.buffer = buffer
        self.state = SchedulerState.ALIGNING
        self._clock = clock
        self._wall_clock = wall_clock
        self._sleep = sleep
        self._ticker = Ticker(sample_rate_ms / 1000.0, clock, sleep)
        self._last_flush = 0.0

    async def run(self, max_ticks: int | None = None) -> None:
        try:
            await self.align()
            ticks = 0
            while max_ticks is None or ticks < max_ticks:
                await self._ticker.wait()
                await self.sample_once()
                ticks += 1
        finally:
            self.state = SchedulerState.STOPPED

    async def align(self) -> None:
        self.state = SchedulerState.ALIGNING
        now = self._wall_clock()
        delay = next_boundary(now, self.interval_sec) - now
        logger.debug("aligning to interval boundary in %.3fs", delay)
        await self._sleep(delay)
        self._last_flush = self._clock()
        self._ticker.reset(self._last_flush)
        self.state = SchedulerState.SAMPLING

    async def sample_once(self) -> AggregatedRecord | None:
        """Run one probe; returns the flushed record when a boundary was crossed.

        The probe that crosses the boundary is kept out of the flushed
        interval and opens the next one.
        """
        tick_start = self._clock()
        result = await self.prober.probe()
        record = None
        if self._clock() - self._last_flush >= self.interval_sec:
            record = self.flush()
            self._last_flush = tick_start
        self._record(result)
        return record

    def flush(self) -> AggregatedRecord:
        self.state = SchedulerState.FLUSHING
        record = aggregate_interval(self.buffer, self._wall_clock())
        self.sink.write(record)
        self.buffer.reset()
        self.state = SchedulerState.SAMPLING
        return record

    def _record(self, result: ProbeResult) -> None:
        if result.failed:
            self.buffer.record_error()
        else:
            self.buffer.append(result.elapsed_us)
