from __future__ import annotations

import asyncio
from unittest.mock import Mock

from conftest import closed_port, pong_handler
from rlm.config import MonitorConfig, ProbeMode, TargetConfig
from rlm.metrics import ProbeResult
from rlm.probe import CommandProbe, ConnectionManager, ConnectProbe, FailureReporter, probe_for


def test_command_probe_round_trip() -> None:
    async def scenario() -> ProbeResult:
        server = await asyncio.start_server(pong_handler, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        async with server:
            connection = ConnectionManager(TargetConfig(port=port))
            await connection.connect()
            probe = CommandProbe(connection)
            result = await probe.probe()
            assert connection.connected
            await probe.close()
            assert not connection.connected
        return result

    result = asyncio.run(scenario())
    assert not result.failed
    assert result.elapsed_us > 0


def test_auth_is_sent_once_before_probing() -> None:
    lines: list[bytes] = []

    async def recording_handler(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        while line := await reader.readline():
            lines.append(line)
            writer.write(b"+OK\r\n")
            await writer.drain()
        writer.close()

    async def scenario() -> None:
        server = await asyncio.start_server(recording_handler, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        async with server:
            connection = ConnectionManager(TargetConfig(port=port, password="secret"))
            await connection.connect()
            probe = CommandProbe(connection)
            for _ in range(2):
                assert not (await probe.probe()).failed
            await probe.close()

    asyncio.run(scenario())
    assert lines == [b"AUTH secret\r\n", b"PING\r\n", b"PING\r\n"]


def test_end_of_stream_is_not_a_failure() -> None:
    async def hang_up(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        await reader.readline()
        writer.close()

    async def scenario() -> tuple[ProbeResult, bool]:
        server = await asyncio.start_server(hang_up, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        async with server:
            connection = ConnectionManager(TargetConfig(port=port))
            await connection.connect()
            probe = CommandProbe(connection)
            result = await probe.probe()
            connected = connection.connected
            await probe.close()
        return result, connected

    result, connected = asyncio.run(scenario())
    assert not result.failed
    # The next probe dials a fresh connection.
    assert not connected


def test_command_probe_reconnect_failure_is_counted() -> None:
    async def scenario() -> list[ProbeResult]:
        port = await closed_port()
        probe = CommandProbe(ConnectionManager(TargetConfig(port=port, timeout_sec=1)))
        results = [await probe.probe(), await probe.probe()]
        await probe.close()
        return results

    results = asyncio.run(scenario())
    assert all(result.failed for result in results)


def test_connect_probe() -> None:
    async def scenario() -> tuple[ProbeResult, ProbeResult]:
        server = await asyncio.start_server(pong_handler, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        async with server:
            probe = ConnectProbe(ConnectionManager(TargetConfig(port=port)))
            ok = await probe.probe()
            assert not probe.connection.connected
        refused = await ConnectProbe(ConnectionManager(TargetConfig(port=await closed_port()))).probe()
        return ok, refused

    ok, refused = asyncio.run(scenario())
    assert not ok.failed
    assert ok.elapsed_us > 0
    assert refused.failed


def test_failure_reporter_logs_once_per_run() -> None:
    logger = Mock()
    reporter = FailureReporter(logger, "127.0.0.1:6379")
    reporter.failed(ConnectionRefusedError("refused"))
    reporter.failed(ConnectionRefusedError("refused"))
    assert logger.error.call_count == 1

    reporter.succeeded()
    assert not reporter.logged
    reporter.failed(TimeoutError())
    assert logger.error.call_count == 2
    assert logger.error.call_args.args[-1] == "TimeoutError"


def test_probe_for_mode() -> None:
    connection = ConnectionManager(TargetConfig())
    assert isinstance(probe_for(MonitorConfig(), connection), CommandProbe)
    assert isinstance(probe_for(MonitorConfig(probe_mode=ProbeMode.CONNECT), connection), ConnectProbe)


def test_oversized_reply_is_counted_as_failure() -> None:
    async def unterminated_reply(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        try:
            while await reader.readline():
                writer.write(b"x" * 70_000)
                await writer.drain()
        except ConnectionError:
            pass
        writer.close()

    async def scenario() -> tuple[list[ProbeResult], bool]:
        server = await asyncio.start_server(unterminated_reply, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        async with server:
            connection = ConnectionManager(TargetConfig(port=port, timeout_sec=1))
            await connection.connect()
            probe = CommandProbe(connection)
            first = await probe.probe()
            connected = connection.connected
            second = await probe.probe()
            await probe.close()
        return [first, second], connected

    results, connected = asyncio.run(scenario())
    assert all(result.failed for result in results)
    assert not connected
