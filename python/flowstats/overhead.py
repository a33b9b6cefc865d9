"""Routing overhead accounting.

The statistics live in an explicit :class:`OverheadStats` value that the
event handler receives and returns, so one run's counters never leak into the
next; call :meth:`OverheadStats.reset` between runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import dpkt

from .aodv_header import MESSAGE_TYPES, parse_control_message
from .append_writer import AppendWriter
from .samples import TimeValue, format_number

logger = logging.getLogger(__name__)

OVERHEAD_HEADER = "Time [us], Packet Type, Length [B], Description, Context"


def _empty_counts() -> Dict[str, int]:
    return {name: 0 for name in MESSAGE_TYPES.values()}


@dataclass
class OverheadStats:
    packets: int = 0
    bytes: int = 0
    first_packet: Optional[int] = None
    last_packet: Optional[int] = None
    counts: Dict[str, int] = field(default_factory=_empty_counts)

    def reset(self) -> None:
        self.packets = 0
        self.bytes = 0
        self.first_packet = None
        self.last_packet = None
        self.counts = _empty_counts()


def trace_control_packet(
    stats: OverheadStats,
    packet: bytes,
    now: int,
    context: str = "",
    writer: Optional[AppendWriter] = None,
) -> OverheadStats:
    """Account one transmitted routing packet and return the updated stats."""
    try:
        parsed = parse_control_message(packet)
    except dpkt.UnpackError:
        parsed = None
    if parsed is None:
        logger.debug(
            "Routing message with unknown type %s, dropped",
            packet[0] if packet else None,
        )
        return stats

    message_type, description = parsed
    stats.counts[message_type] += 1
    stats.packets += 1
    if stats.packets == 1:
        stats.first_packet = now
    stats.last_packet = now
    stats.bytes += len(packet)

    if writer is not None:
        writer.append_row(
            f"{TimeValue(now).format()},{message_type},{len(packet)},{description},{context}"
        )
    logger.debug("Routing overhead: #%d, bytes: %d", stats.packets, stats.bytes)
    return stats


def overhead_summary_rows(stats: OverheadStats) -> List[str]:
    rows = [
        "",
        f"AODV overhead [packets]:,{stats.packets}",
        f"AODV overhead [kB]:,{format_number(stats.bytes / 1000.0)}",
    ]
    rows.extend(f"{name} [packets]:,{stats.counts[name]}" for name in MESSAGE_TYPES.values())
    return rows


__all__ = [
    "OVERHEAD_HEADER",
    "OverheadStats",
    "trace_control_packet",
    "overhead_summary_rows",
]
