"""Fixed 20 byte stats header carried at the front of every application packet."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import dpkt

from .sim_time import ticks_to_seconds

_U32_MAX = 0xFFFFFFFF
_U64_MAX = 0xFFFFFFFFFFFFFFFF


class MalformedHeaderError(ValueError):
    """Raised when a buffer is too short to hold a stats header."""


class StatsHeader(dpkt.Packet):
    """Wire layout: seq (u32), send timestamp in ticks (u64), node id (u32), app id (u32)."""

    __byte_order__ = ">"
    __hdr__ = (
        ("seq", "I", 0),
        ("ts", "Q", 0),
        ("node_id", "I", 0),
        ("app_id", "I", 0),
    )


STATS_HEADER_LEN = StatsHeader.__hdr_len__


@dataclass(frozen=True)
class StatsRecord:
    seq: int
    ts: int
    node_id: int
    app_id: int

    def __str__(self) -> str:
        return (
            f"(seq={self.seq} time={ticks_to_seconds(self.ts)}s "
            f"nodeId={self.node_id} appId={self.app_id})"
        )


def _check_range(name: str, value: int, upper: int) -> None:
    if not 0 <= value <= upper:
        raise ValueError(f"{name} out of range: {value}")


def encode(record: StatsRecord) -> bytes:
    _check_range("seq", record.seq, _U32_MAX)
    _check_range("ts", record.ts, _U64_MAX)
    _check_range("node_id", record.node_id, _U32_MAX)
    _check_range("app_id", record.app_id, _U32_MAX)
    header = StatsHeader(
        seq=record.seq,
        ts=record.ts,
        node_id=record.node_id,
        app_id=record.app_id,
    )
    return bytes(header)


def decode(buf: Union[bytes, bytearray, memoryview]) -> StatsRecord:
    """Read the header from the front of ``buf``; trailing payload is ignored."""
    raw = bytes(buf[:STATS_HEADER_LEN])
    if len(raw) < STATS_HEADER_LEN:
        raise MalformedHeaderError(
            f"stats header needs {STATS_HEADER_LEN} bytes, got {len(raw)}"
        )
    try:
        header = StatsHeader(raw)
    except dpkt.NeedData as exc:
        raise MalformedHeaderError(str(exc)) from exc
    return StatsRecord(
        seq=header.seq,
        ts=header.ts,
        node_id=header.node_id,
        app_id=header.app_id,
    )


def build_packet(record: StatsRecord, packet_size: int) -> bytes:
    """Header followed by zero padding, the way the source application fills packets."""
    if packet_size < STATS_HEADER_LEN:
        raise ValueError(
            f"packet_size must be at least {STATS_HEADER_LEN} bytes, got {packet_size}"
        )
    return encode(record) + bytes(packet_size - STATS_HEADER_LEN)


__all__ = [
    "MalformedHeaderError",
    "StatsHeader",
    "STATS_HEADER_LEN",
    "StatsRecord",
    "encode",
    "decode",
    "build_packet",
]
