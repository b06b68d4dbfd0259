from __future__ import annotations

import asyncio
import logging
import signal
from contextlib import suppress

from rlm.config import MonitorConfig, ProbeMode
from rlm.metrics import IntervalBuffer
from rlm.output.base import RecordSink
from rlm.probe import ConnectionManager, probe_for
from rlm.probe.probes import ProbeErrors
from rlm.sampler.scheduler import IntervalScheduler

logger = logging.getLogger(__name__)

STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class StartupError(RuntimeError):
    pass


async def run_monitor(
    config: MonitorConfig,
    sink: RecordSink,
    max_ticks: int | None = None,
) -> None:
    """Measure until cancelled (or for ``max_ticks`` ticks), then clean up.

    Cancellation drops the interval in progress; nothing partial is written.
    """
    connection = ConnectionManager(config.target)
    prober = probe_for(config, connection)
    try:
        if config.probe_mode is ProbeMode.COMMAND:
            await _initial_connect(connection)
        scheduler = IntervalScheduler(
            config.interval_sec,
            config.sample_rate_ms,
            prober,
            sink,
            IntervalBuffer(config.buffer_capacity()),
        )
        logger.info("monitor started: %s", dict(config.to_metadata()))
        sink.start()
        await _run_until_stopped(scheduler, max_ticks)
    finally:
        await prober.close()
        await sink.close()
        logger.info("monitor stopped")


async def _initial_connect(connection: ConnectionManager) -> None:
    try:
        await connection.connect()
    except ProbeErrors as exc:
        msg = f"Can't connect to Redis on {connection.target.address}"
        raise StartupError(msg) from exc


async def _run_until_stopped(scheduler: IntervalScheduler, max_ticks: int | None) -> None:
    loop = asyncio.get_running_loop()
    task = asyncio.create_task(scheduler.run(max_ticks))
    installed = []
    for sig in STOP_SIGNALS:
        # Not available on every platform or outside the main thread.
        with suppress(NotImplementedError, RuntimeError, ValueError):
            loop.add_signal_handler(sig, task.cancel)
            installed.append(sig)
    try:
        await task
    except asyncio.CancelledError:
        logger.info("stop requested, shutting down")
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)
