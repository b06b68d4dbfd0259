from __future__ import annotations

from rlm.metrics.aggregator import aggregate_interval
from rlm.metrics.buffer import IntervalBuffer
from rlm.metrics.models import AggregatedRecord, ProbeResult

__all__ = ["AggregatedRecord", "IntervalBuffer", "ProbeResult", "aggregate_interval"]
