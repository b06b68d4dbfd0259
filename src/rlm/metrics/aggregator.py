from __future__ import annotations

from rlm.metrics import stats
from rlm.metrics.buffer import IntervalBuffer
from rlm.metrics.models import AggregatedRecord


def aggregate_interval(buffer: IntervalBuffer, timestamp: float) -> AggregatedRecord:
    samples = buffer.sorted_samples()
    return AggregatedRecord(
        timestamp=timestamp,
        samples=len(samples),
        errors=buffer.errors,
        min_us=stats.minimum(samples),
        max_us=stats.maximum(samples),
        mean_us=stats.mean(samples),
        stddev_us=stats.standard_deviation(samples),
        p95_us=stats.percentile(samples, 95.0),
        p99_us=stats.percentile(samples, 99.0),
    )
