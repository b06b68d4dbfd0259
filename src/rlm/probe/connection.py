from __future__ import annotations

import asyncio
import logging
from contextlib import suppress

from rlm.config import TargetConfig

logger = logging.getLogger(__name__)

Stream = tuple[asyncio.StreamReader, asyncio.StreamWriter]


class ConnectionManager:
    """Owns the single connection used by the command probe."""

    def __init__(self, target: TargetConfig) -> None:
        self.target = target
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None

    @property
    def connected(self) -> bool:
        return self._writer is not None

    @property
    def stream(self) -> Stream:
        if self._reader is None or self._writer is None:
            msg = f"Not connected to {self.target.address}"
            raise ConnectionError(msg)
        return self._reader, self._writer

    async def dial(self) -> Stream:
        return await asyncio.wait_for(
            asyncio.open_connection(self.target.host, self.target.port),
            timeout=self.target.timeout_sec,
        )

    async def connect(self) -> None:
        self.invalidate()
        reader, writer = await self.dial()
        if self.target.password:
            try:
                await self._auth(reader, writer)
            except BaseException:
                writer.close()
                raise
        self._reader, self._writer = reader, writer
        logger.debug("connected to %s", self.target.address)

    def invalidate(self) -> None:
        writer = self._writer
        self._reader = self._writer = None
        if writer is not None:
            writer.close()

    async def close(self) -> None:
        writer = self._writer
        self.invalidate()
        if writer is not None:
            with suppress(OSError):
                await writer.wait_closed()

    async def _auth(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        writer.write(b"AUTH " + self.target.password.encode() + b"\r\n")
        await asyncio.wait_for(writer.drain(), timeout=self.target.timeout_sec)
        # Only the line terminator matters; the reply itself is not checked.
        await asyncio.wait_for(reader.readline(), timeout=self.target.timeout_sec)
