from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ProbeResult:
    elapsed_us: int
    failed: bool


@dataclass(frozen=True, slots=True)
class AggregatedRecord:
    timestamp: float
    samples: int
    errors: int
    min_us: int
    max_us: int
    mean_us: int
    stddev_us: int
    p95_us: int
    p99_us: int

    def latencies_us(self) -> tuple[int, int, int, int, int, int]:
        return (self.min_us, self.max_us, self.mean_us, self.stddev_us, self.p95_us, self.p99_us)
