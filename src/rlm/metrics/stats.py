"""Order statistics over sorted latency samples.

Every function expects its input sorted ascending and works on integer
microseconds. Empty input yields 0, which the sinks render as a placeholder.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np


def minimum(samples: Sequence[int]) -> int:
    if len(samples) == 0:
        return 0
    return int(samples[0])


def maximum(samples: Sequence[int]) -> int:
    if len(samples) == 0:
        return 0
    return int(samples[-1])


def _as_ints(samples: Sequence[int]) -> list[int]:
    return np.asarray(samples, dtype=np.uint64).tolist()


def total(samples: Sequence[int]) -> int:
    return sum(_as_ints(samples))


def mean(samples: Sequence[int]) -> int:
    if len(samples) == 0:
        return 0
    return total(samples) // len(samples)


def standard_deviation(samples: Sequence[int]) -> int:
    """Population standard deviation computed with integer intermediates.

    The mean is truncated before deviations are squared and the variance is
    truncated before the square root, so results can sit slightly below the
    floating point value.
    """
    if len(samples) == 0:
        return 0
    avg = mean(samples)
    variance = sum((v - avg) ** 2 for v in _as_ints(samples))
    return math.isqrt(variance // len(samples))


def percentile(samples: Sequence[int], percent: float) -> int:
    """Nearest-rank percentile; no interpolation between samples."""
    n = len(samples)
    if n == 0 or percent > 100:
        return 0
    index = percent * n / 100
    if index == int(index):
        return int(samples[max(int(index) - 1, 0)])
    return int(samples[int(index)])


def us_to_ms(value_us: int) -> float:
    return value_us / 1000.0
