from __future__ import annotations

import logging

import numpy as np

logger = logging.getLogger(__name__)


class IntervalBuffer:
    """Samples and error tally for the interval currently being measured.

    Storage is a preallocated ``uint64`` array that is reused across
    intervals; ``reset`` only rewinds the counters.
    """

    __slots__ = ("_samples", "_count", "errors")

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            msg = f"Buffer capacity must be positive, got {capacity}"
            raise ValueError(msg)
        self._samples = np.zeros(capacity, dtype=np.uint64)
        self._count = 0
        self.errors = 0

    def __len__(self) -> int:
        return self._count

    @property
    def capacity(self) -> int:
        return int(self._samples.shape[0])

    def append(self, sample_us: int) -> None:
        if sample_us < 0:
            msg = f"Sample can't be negative: {sample_us}"
            raise ValueError(msg)
        if self._count == self.capacity:
            self._grow()
        self._samples[self._count] = sample_us
        self._count += 1

    def record_error(self) -> None:
        self.errors += 1

    def sorted_samples(self) -> np.ndarray:
        view = self._samples[: self._count]
        view.sort()
        return view

    def reset(self) -> None:
        self._count = 0
        self.errors = 0

    def _grow(self) -> None:
        new_capacity = self.capacity * 2
        logger.debug("interval buffer full, growing %d -> %d", self.capacity, new_capacity)
        grown = np.zeros(new_capacity, dtype=np.uint64)
        grown[: self._count] = self._samples[: self._count]
        self._samples = grown
