from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

from rlm.metrics import ProbeResult


class Prober(Protocol):
    async def probe(self) -> ProbeResult:
        ...

    async def close(self) -> None:
        ...


@dataclass(slots=True)
class FailureReporter:
    """Logs the first failure of each consecutive run of failed probes."""

    logger: logging.Logger
    address: str
    logged: bool = field(default=False)

    def failed(self, exc: BaseException) -> None:
        if self.logged:
            return
        self.logger.error("probe against %s failed: %s", self.address, str(exc) or type(exc).__name__)
        self.logged = True

    def succeeded(self) -> None:
        if self.logged:
            self.logger.info("probe against %s recovered", self.address)
        self.logged = False
