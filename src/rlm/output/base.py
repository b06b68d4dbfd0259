from __future__ import annotations

from typing import Protocol

from rlm.metrics import AggregatedRecord


class RecordSink(Protocol):
    def start(self) -> None:
        ...

    def write(self, record: AggregatedRecord) -> None:
        ...

    async def close(self) -> None:
        ...
