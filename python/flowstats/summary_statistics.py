"""Delay statistics: an incremental aggregator and a buffer summary."""

from __future__ import annotations

from dataclasses import dataclass
from math import sqrt
from typing import Optional, Sequence

import numpy as np


class SummaryStatistics:
    """Incremental count/sum/sum-of-squares aggregator.

    Quantities that need more samples than are available are ``None``
    instead of zero, so callers can report them as undefined.
    """

    __slots__ = ("_count", "_sum", "_sum_sq", "_min", "_max")

    def __init__(self) -> None:
        self._count: int = 0
        self._sum: float = 0.0
        self._sum_sq: float = 0.0
        self._min: Optional[float] = None
        self._max: Optional[float] = None

    def add_value(self, value: float) -> None:
        self._count += 1
        self._sum += value
        self._sum_sq += value * value
        self._min = value if self._min is None else min(self._min, value)
        self._max = value if self._max is None else max(self._max, value)

    @property
    def count(self) -> int:
        return self._count

    @property
    def total(self) -> float:
        return self._sum

    def mean(self) -> Optional[float]:
        if self._count == 0:
            return None
        return self._sum / self._count

    def variance(self) -> Optional[float]:
        if self._count < 2:
            return None
        mean_sq = (self._sum * self._sum) / self._count
        # Rounding can leave a tiny negative residue for constant samples.
        return max((self._sum_sq - mean_sq) / (self._count - 1), 0.0)

    def standard_deviation(self) -> Optional[float]:
        variance = self.variance()
        return None if variance is None else sqrt(variance)

    def maximum(self) -> Optional[float]:
        return self._max

    def minimum(self) -> Optional[float]:
        return self._min


@dataclass(frozen=True)
class DelayStatistics:
    count: int
    mean: Optional[float]
    median: Optional[float]
    maximum: Optional[float]
    jitter: Optional[float]


def summarize_delays(values: Sequence[float]) -> DelayStatistics:
    """Mean/median/max and sample standard deviation over a delay buffer."""
    data = np.asarray(values, dtype=float)
    count = int(data.size)
    if count == 0:
        return DelayStatistics(count=0, mean=None, median=None, maximum=None, jitter=None)
    jitter = float(np.std(data, ddof=1)) if count > 1 else None
    return DelayStatistics(
        count=count,
        mean=float(np.mean(data)),
        median=float(np.median(data)),
        maximum=float(np.max(data)),
        jitter=jitter,
    )


__all__ = ["SummaryStatistics", "DelayStatistics", "summarize_delays"]
