from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Iterator

import pytest

from rlm import logging_setup
from rlm.metrics import AggregatedRecord, ProbeResult

# A whole minute, so alignment from t=0 waits exactly one granularity.
WALL_BASE = 1_699_999_980.0


class FakeClock:
    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def monotonic(self) -> float:
        return self.now

    def wall(self) -> float:
        return WALL_BASE + self.now

    async def sleep(self, delay: float) -> None:
        self.now = round(self.now + max(0.0, delay), 9)


class FakeProber:
    def __init__(self, clock: FakeClock, results: list[ProbeResult] | None = None, duration: float = 0.0) -> None:
        self.clock = clock
        self.results = list(results or [])
        self.duration = duration
        self.calls = 0
        self.closed = False

    async def probe(self) -> ProbeResult:
        self.calls += 1
        self.clock.now = round(self.clock.now + self.duration, 9)
        if self.results:
            return self.results.pop(0)
        return ProbeResult(elapsed_us=self.calls * 10, failed=False)

    async def close(self) -> None:
        self.closed = True


class RecordingSink:
    def __init__(self) -> None:
        self.records: list[AggregatedRecord] = []
        self.started = False
        self.closed = False

    def start(self) -> None:
        self.started = True

    def write(self, record: AggregatedRecord) -> None:
        self.records.append(record)

    async def close(self) -> None:
        self.closed = True


Handler = Callable[[asyncio.StreamReader, asyncio.StreamWriter], Awaitable[None]]


async def pong_handler(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
    while await reader.readline():
        writer.write(b"+PONG\r\n")
        await writer.drain()
    writer.close()


async def closed_port() -> int:
    server = await asyncio.start_server(pong_handler, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    server.close()
    await server.wait_closed()
    return port


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def reset_logging(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.delenv(logging_setup.LEVEL_ENV, raising=False)
    yield
    monkeypatch.delenv(logging_setup.LEVEL_ENV, raising=False)
    logging_setup.configure(None)
