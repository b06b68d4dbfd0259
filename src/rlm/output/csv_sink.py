from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import TextIO

from rlm.config import TimestampStyle
from rlm.metrics import AggregatedRecord
from rlm.metrics.stats import us_to_ms

logger = logging.getLogger(__name__)

FLUSH_INTERVAL_SEC = 0.25


def format_timestamp(timestamp: float, style: TimestampStyle) -> str:
    if style is TimestampStyle.UNIX:
        return str(int(timestamp))
    moment = datetime.fromtimestamp(timestamp)
    return moment.strftime("%Y/%m/%d %H:%M:%S.") + f"{moment.microsecond // 1000:03d}"


def format_csv_line(record: AggregatedRecord, style: TimestampStyle) -> str:
    fields = [format_timestamp(record.timestamp, style), str(record.samples), str(record.errors)]
    fields.extend(f"{us_to_ms(value):.3f}" for value in record.latencies_us())
    return ";".join(fields) + ";\n"


@dataclass(slots=True)
class CsvSink:
    path: Path
    timestamp_style: TimestampStyle = TimestampStyle.HUMAN
    flush_interval_sec: float = FLUSH_INTERVAL_SEC
    _fh: TextIO = field(init=False, repr=False)
    _flusher: asyncio.Task[None] | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self._fh = open(self.path, "a", encoding="utf-8")

    def start(self) -> None:
        if self._flusher is None:
            self._flusher = asyncio.get_running_loop().create_task(self._flush_periodically())

    def write(self, record: AggregatedRecord) -> None:
        self._fh.write(format_csv_line(record, self.timestamp_style))

    async def close(self) -> None:
        if self._flusher is not None:
            self._flusher.cancel()
            try:
                await self._flusher
            except asyncio.CancelledError:
                pass
            self._flusher = None
        if not self._fh.closed:
            self._fh.flush()
            self._fh.close()
            logger.debug("closed output file %s", self.path)

    async def _flush_periodically(self) -> None:
        while True:
            await asyncio.sleep(self.flush_interval_sec)
            self._fh.flush()
