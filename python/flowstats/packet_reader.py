"""PCAP replay source yielding the UDP datagrams of a simulation capture."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Iterator, Optional, Tuple, Union

import dpkt
from dpkt.ethernet import VLANtag8021Q

from .sim_time import seconds_to_ticks
from .utils import format_ip

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CapturedPacket:
    timestamp: int
    src: str
    dst: str
    src_port: int
    dst_port: int
    payload: bytes

    @property
    def size(self) -> int:
        return len(self.payload)


class PacketReader:
    """Iterates over CapturedPacket instances decoded from an Ethernet PCAP capture."""

    def __init__(
        self,
        pcap_path: Union[str, Path],
        *,
        read_ip4: bool = True,
        read_ip6: bool = False,
    ) -> None:
        path = Path(pcap_path)
        if not path.is_file():
            raise FileNotFoundError(f"PCAP file does not exist: {path}")
        if not read_ip4 and not read_ip6:
            raise ValueError("At least one of read_ip4 or read_ip6 must be enabled")

        self.path = path
        self.read_ip4 = read_ip4
        self.read_ip6 = read_ip6

        self._file: Optional[IO[bytes]] = None
        self._pcap: Optional[dpkt.pcap.Reader] = None
        self._packet_iter: Optional[Iterator[Tuple[float, bytes]]] = None

        self._first_packet_ts: Optional[int] = None
        self._last_packet_ts: Optional[int] = None

    # ------------------------------------------------------------------
    def __enter__(self) -> "PacketReader":
        self._open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        self.close()

    # ------------------------------------------------------------------
    def close(self) -> None:
        if self._pcap is not None:
            self._pcap = None
        if self._file is not None:
            try:
                self._file.close()
            except OSError:
                logger.debug("Failed to close PCAP file", exc_info=True)
            finally:
                self._file = None
        self._packet_iter = None

    # ------------------------------------------------------------------
    def __iter__(self) -> Iterator[CapturedPacket]:
        while True:
            packet = self.next_packet()
            if packet is None:
                break
            yield packet

    def next_packet(self) -> Optional[CapturedPacket]:
        self._ensure_iter()
        assert self._packet_iter is not None
        for ts, buf in self._packet_iter:
            packet = self._decode_packet(ts, buf)
            if packet is not None:
                return packet
        return None

    # ------------------------------------------------------------------
    @property
    def first_packet_timestamp(self) -> Optional[int]:
        return self._first_packet_ts

    @property
    def last_packet_timestamp(self) -> Optional[int]:
        return self._last_packet_ts

    # ------------------------------------------------------------------
    def _ensure_iter(self) -> None:
        if self._pcap is None or self._packet_iter is None:
            self._open()
            assert self._pcap is not None
            self._packet_iter = iter(self._pcap)

    def _open(self) -> None:
        if self._pcap is not None:
            return
        try:
            self._file = self.path.open("rb")
            self._pcap = dpkt.pcap.Reader(self._file)
        except (OSError, ValueError, dpkt.dpkt.NeedData) as exc:
            self.close()
            raise RuntimeError(f"Failed to open PCAP file: {self.path}") from exc

    # ------------------------------------------------------------------
    def _decode_packet(self, timestamp: float, frame: bytes) -> Optional[CapturedPacket]:
        try:
            ethernet = dpkt.ethernet.Ethernet(frame)
        except (dpkt.UnpackError, ValueError):
            logger.debug("Skipping undecodable Ethernet frame", exc_info=True)
            return None

        payload = ethernet.data
        if isinstance(payload, VLANtag8021Q):
            payload = payload.data

        if isinstance(payload, dpkt.ip.IP):
            if not self.read_ip4:
                return None
        elif isinstance(payload, dpkt.ip6.IP6):
            if not self.read_ip6:
                return None
        else:
            return None

        transport = payload.data
        if not isinstance(transport, dpkt.udp.UDP):
            return None

        ticks = seconds_to_ticks(float(timestamp))
        self._register_timestamp(ticks)
        return CapturedPacket(
            timestamp=ticks,
            src=format_ip(payload.src),
            dst=format_ip(payload.dst),
            src_port=transport.sport,
            dst_port=transport.dport,
            payload=bytes(transport.data),
        )

    def _register_timestamp(self, ticks: int) -> None:
        if self._first_packet_ts is None:
            self._first_packet_ts = ticks
        self._last_packet_ts = ticks


__all__ = ["CapturedPacket", "PacketReader"]
