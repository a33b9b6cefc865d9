"""Sample values written to reports, each carrying its own formatter."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from .sim_time import ticks_to_microseconds

UNDEFINED = "undefined"


def format_number(value: Union[int, float]) -> str:
    """Render without exponent notation so spreadsheets read the raw value.

    Floats keep every significant digit, so a nanosecond span in seconds
    reads back as the value the neighbouring throughput was computed from.
    """
    if isinstance(value, int):
        return str(value)
    if value.is_integer():
        return str(int(value))
    return np.format_float_positional(float(value), trim="-")


def format_optional(value: Optional[Union[int, float]]) -> str:
    return UNDEFINED if value is None else format_number(value)


@dataclass(frozen=True)
class TimeValue:
    """Simulated time in ticks, reported in microseconds."""

    ticks: int

    def format(self) -> str:
        return format_number(ticks_to_microseconds(self.ticks))


@dataclass(frozen=True)
class NumericValue:
    value: float

    def format(self) -> str:
        return format_number(self.value)


SampleValue = Union[TimeValue, NumericValue]


__all__ = [
    "UNDEFINED",
    "format_number",
    "format_optional",
    "TimeValue",
    "NumericValue",
    "SampleValue",
]
