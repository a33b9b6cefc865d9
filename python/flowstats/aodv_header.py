"""AODV control message headers, decoded only as far as overhead accounting needs."""

from __future__ import annotations

from typing import Optional, Tuple

import dpkt

from .utils import format_ip

AODVTYPE_RREQ = 1
AODVTYPE_RREP = 2
AODVTYPE_RERR = 3
AODVTYPE_RREP_ACK = 4

MESSAGE_TYPES = {
    AODVTYPE_RREQ: "RREQ",
    AODVTYPE_RREP: "RREP",
    AODVTYPE_RERR: "RERR",
    AODVTYPE_RREP_ACK: "RREP_ACK",
}


class AodvRreq(dpkt.Packet):
    __byte_order__ = ">"
    __hdr__ = (
        ("flags", "B", 0),
        ("reserved", "B", 0),
        ("hop_count", "B", 0),
        ("request_id", "I", 0),
        ("dst", "4s", b"\x00" * 4),
        ("dst_seq", "I", 0),
        ("origin", "4s", b"\x00" * 4),
        ("origin_seq", "I", 0),
    )


class AodvRrep(dpkt.Packet):
    __byte_order__ = ">"
    __hdr__ = (
        ("flags", "B", 0),
        ("prefix_size", "B", 0),
        ("hop_count", "B", 0),
        ("dst", "4s", b"\x00" * 4),
        ("dst_seq", "I", 0),
        ("origin", "4s", b"\x00" * 4),
        ("lifetime", "I", 0),
    )


def _describe(header: dpkt.Packet) -> str:
    return f"O:{format_ip(header.origin)} D:{format_ip(header.dst)} Hop:{header.hop_count}"


def parse_control_message(buf: bytes) -> Optional[Tuple[str, str]]:
    """Return (message type, description) or None for an unknown type.

    Only route requests and replies carry a description.
    """
    if not buf:
        return None
    message_type = MESSAGE_TYPES.get(buf[0])
    if message_type is None:
        return None

    description = ""
    if buf[0] == AODVTYPE_RREQ:
        description = _describe(AodvRreq(buf[1:]))
    elif buf[0] == AODVTYPE_RREP:
        description = _describe(AodvRrep(buf[1:]))
    return message_type, description


__all__ = [
    "AODVTYPE_RREQ",
    "AODVTYPE_RREP",
    "AODVTYPE_RERR",
    "AODVTYPE_RREP_ACK",
    "MESSAGE_TYPES",
    "AodvRreq",
    "AodvRrep",
    "parse_control_message",
]
