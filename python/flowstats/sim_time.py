"""Simulated clock helpers and tick conversions."""

from __future__ import annotations

from typing import Protocol

TICKS_PER_SECOND = 1_000_000_000
TICKS_PER_MICROSECOND = 1_000


def ticks_to_microseconds(ticks: int) -> float:
    return ticks / TICKS_PER_MICROSECOND


def ticks_to_seconds(ticks: int) -> float:
    return ticks / TICKS_PER_SECOND


def seconds_to_ticks(seconds: float) -> int:
    return int(round(seconds * TICKS_PER_SECOND))


def microseconds_to_ticks(micros: float) -> int:
    return int(round(micros * TICKS_PER_MICROSECOND))


class SimClock(Protocol):
    def now(self) -> int:  # pragma: no cover - protocol definition
        ...


class ManualClock:
    """Clock advanced explicitly by the event source."""

    __slots__ = ("_now",)

    def __init__(self, start: int = 0) -> None:
        self._now = int(start)

    def now(self) -> int:
        return self._now

    def advance_to(self, ticks: int) -> None:
        if ticks < self._now:
            raise ValueError(f"clock cannot move backwards: {ticks} < {self._now}")
        self._now = int(ticks)

    def advance(self, delta: int) -> None:
        self.advance_to(self._now + delta)


__all__ = [
    "TICKS_PER_SECOND",
    "TICKS_PER_MICROSECOND",
    "ticks_to_microseconds",
    "ticks_to_seconds",
    "seconds_to_ticks",
    "microseconds_to_ticks",
    "SimClock",
    "ManualClock",
]
