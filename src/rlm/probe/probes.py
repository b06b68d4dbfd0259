from __future__ import annotations

import asyncio
import logging
import time
from contextlib import suppress

from rlm.metrics import ProbeResult
from rlm.probe.base import FailureReporter
from rlm.probe.connection import ConnectionManager

logger = logging.getLogger(__name__)

PING_COMMAND = b"PING\r\n"

# readline raises ValueError when a reply overruns the stream buffer limit.
ProbeErrors = (OSError, asyncio.TimeoutError, ValueError)


def _elapsed_us(start: float) -> int:
    return max(0, int((time.perf_counter() - start) * 1_000_000))


class CommandProbe:
    """Times a PING round-trip over the persistent connection."""

    def __init__(self, connection: ConnectionManager) -> None:
        self.connection = connection
        self.reporter = FailureReporter(logger, connection.target.address)

    async def probe(self) -> ProbeResult:
        if not self.connection.connected:
            try:
                await self.connection.connect()
            except ProbeErrors as exc:
                self.reporter.failed(exc)
                return ProbeResult(elapsed_us=0, failed=True)
            logger.info("reconnected to %s", self.connection.target.address)
        reader, writer = self.connection.stream
        start = time.perf_counter()
        try:
            writer.write(PING_COMMAND)
            await writer.drain()
            # EOF returns whatever was read so far, which counts as a reply.
            reply = await reader.readline()
        except ProbeErrors as exc:
            elapsed = _elapsed_us(start)
            self.connection.invalidate()
            self.reporter.failed(exc)
            return ProbeResult(elapsed_us=elapsed, failed=True)
        elapsed = _elapsed_us(start)
        if not reply.endswith(b"\n"):
            logger.debug("%s closed the connection", self.connection.target.address)
            self.connection.invalidate()
        self.reporter.succeeded()
        return ProbeResult(elapsed_us=elapsed, failed=False)

    async def close(self) -> None:
        await self.connection.close()


class ConnectProbe:
    """Times opening and closing a fresh TCP connection."""

    def __init__(self, connection: ConnectionManager) -> None:
        self.connection = connection
        self.reporter = FailureReporter(logger, connection.target.address)

    async def probe(self) -> ProbeResult:
        start = time.perf_counter()
        try:
            _, writer = await self.connection.dial()
        except ProbeErrors as exc:
            elapsed = _elapsed_us(start)
            self.reporter.failed(exc)
            return ProbeResult(elapsed_us=elapsed, failed=True)
        writer.close()
        with suppress(OSError):
            await writer.wait_closed()
        elapsed = _elapsed_us(start)
        self.reporter.succeeded()
        return ProbeResult(elapsed_us=elapsed, failed=False)

    async def close(self) -> None:
        await self.connection.close()
