"""Utility helpers shared by the report and replay modules."""

from __future__ import annotations

import ipaddress
from typing import Optional, Union

# Files are opened in text mode, which already translates newlines.
LINE_SEP = "\n"
CSV_SUFFIX = ".csv"
OVERHEAD_SUFFIX = "-overhead.csv"


def format_ip(value: Union[bytes, bytearray, str]) -> str:
    """Convert a raw IP buffer into a printable string."""
    if isinstance(value, (bytes, bytearray)):
        if len(value) == 4:
            return ".".join(str(b & 0xFF) for b in value)
        if len(value) == 16:
            return str(ipaddress.IPv6Address(bytes(value)))
    return str(value)


def node_id_from_address(
    address: str,
    network: Union[ipaddress.IPv4Network, ipaddress.IPv6Network],
) -> Optional[int]:
    """Node index of ``address`` when hosts are numbered from the first address.

    The first host address of ``network`` belongs to node 0. Addresses outside
    the network, or the network address itself, have no node.
    """
    ip = ipaddress.ip_address(address)
    if ip.version != network.version or ip not in network:
        return None
    offset = int(ip) - int(network.network_address)
    if offset < 1:
        return None
    return offset - 1


__all__ = ["LINE_SEP", "CSV_SUFFIX", "OVERHEAD_SUFFIX", "format_ip", "node_id_from_address"]
