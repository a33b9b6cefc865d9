"""Command-line entry point replaying a simulation capture into flow reports."""

from __future__ import annotations

import argparse
import ipaddress
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .append_writer import AppendWriter
from .flow_data import FlowSummary
from .flow_key import FlowKey
from .overhead import OVERHEAD_HEADER, OverheadStats, overhead_summary_rows, trace_control_packet
from .packet_reader import PacketReader
from .sim_time import ManualClock
from .stats_flows import FlowRegistry
from .utils import OVERHEAD_SUFFIX, node_id_from_address

logger = logging.getLogger(__name__)

DEFAULT_DATA_PORT = 80
DEFAULT_ROUTING_PORT = 654
DEFAULT_NETWORK = "192.168.1.0/24"


@dataclass
class ReplayStats:
    total_packets: int = 0
    data_packets: int = 0
    skipped_packets: int = 0
    malformed_packets: int = 0
    flows: List[FlowSummary] = field(default_factory=list)
    overhead: Optional[OverheadStats] = None
    overhead_path: Optional[Path] = None


class FlowLogger:
    """Logs every flow the registry discovers."""

    def on_flow_registered(self, key: FlowKey) -> None:
        logger.info("Discovered flow %s", key)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Replay a simulation PCAP capture into per-flow delay/loss reports.",
    )
    parser.add_argument(
        "pcap_path",
        type=Path,
        help="PCAP capture containing the stats-header data traffic.",
    )
    parser.add_argument(
        "output_dir",
        type=Path,
        help="Directory where report CSV files will be written.",
    )
    parser.add_argument(
        "--single-file",
        metavar="NAME",
        help="Write every flow into one combined report with an aggregate block.",
    )
    parser.add_argument(
        "--prefix",
        default="Stats",
        help="File name prefix for per-flow reports (default: Stats).",
    )
    parser.add_argument(
        "--memory",
        action="store_true",
        help="Also keep delay samples in memory and log their summary.",
    )
    parser.add_argument(
        "--no-file-write",
        action="store_true",
        help="Do not write flow report files.",
    )
    parser.add_argument(
        "--keep-open",
        action="store_true",
        help="Hold report files open and flush per row instead of reopening them.",
    )
    parser.add_argument(
        "--data-port",
        type=int,
        default=DEFAULT_DATA_PORT,
        help=f"UDP port of the sink applications (default: {DEFAULT_DATA_PORT}).",
    )
    parser.add_argument(
        "--routing-port",
        type=int,
        default=DEFAULT_ROUTING_PORT,
        help=f"UDP port of routing control traffic (default: {DEFAULT_ROUTING_PORT}).",
    )
    parser.add_argument(
        "--no-overhead",
        action="store_true",
        help="Skip the routing overhead report.",
    )
    parser.add_argument(
        "--network",
        default=DEFAULT_NETWORK,
        help=f"Network whose first host is node 0 (default: {DEFAULT_NETWORK}).",
    )
    parser.add_argument(
        "--sink-app-id",
        type=int,
        default=0,
        help="Application id of the sink on every node (default: 0).",
    )
    parser.add_argument(
        "--ipv6",
        action="store_true",
        help="Also read IPv6 datagrams.",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="INFO",
        help="Log level for diagnostic output.",
    )
    return parser


def replay_capture(
    pcap_file: Path,
    output_dir: Path,
    *,
    single_file: Optional[str] = None,
    prefix: str = "Stats",
    memory: bool = False,
    file_write: bool = True,
    keep_open: bool = False,
    data_port: int = DEFAULT_DATA_PORT,
    routing_port: Optional[int] = DEFAULT_ROUTING_PORT,
    network: str = DEFAULT_NETWORK,
    sink_app_id: int = 0,
    read_ip6: bool = False,
) -> ReplayStats:
    stats = ReplayStats()
    subnet = ipaddress.ip_network(network)
    output_dir.mkdir(parents=True, exist_ok=True)

    clock = ManualClock()
    registry = FlowRegistry(
        clock,
        single_file,
        output_dir=output_dir,
        file_name_prefix=prefix,
        file_write_enable=file_write,
        memory_write_enable=memory,
        keep_files_open=keep_open,
    )
    registry.add_listener(FlowLogger())

    overhead_writer: Optional[AppendWriter] = None
    if routing_port is not None:
        stats.overhead = OverheadStats()
        stats.overhead_path = output_dir / f"{pcap_file.stem}{OVERHEAD_SUFFIX}"
        overhead_writer = AppendWriter(stats.overhead_path, keep_open=keep_open)
        overhead_writer.write_header(OVERHEAD_HEADER)

    try:
        with PacketReader(pcap_file, read_ip4=True, read_ip6=read_ip6) as reader:
            for packet in reader:
                stats.total_packets += 1
                # Captures can hold slightly reordered frames; the clock never runs back.
                clock.advance_to(max(packet.timestamp, clock.now()))

                if packet.dst_port == data_port:
                    sink_node = node_id_from_address(packet.dst, subnet)
                    if sink_node is None:
                        logger.debug("Skipping datagram to %s outside %s", packet.dst, subnet)
                        stats.skipped_packets += 1
                        continue
                    index = registry.on_arrival(
                        packet.payload, packet.size, sink_node, sink_app_id
                    )
                    if index is None:
                        stats.malformed_packets += 1
                    else:
                        stats.data_packets += 1
                elif routing_port is not None and packet.dst_port == routing_port:
                    assert stats.overhead is not None
                    stats.overhead = trace_control_packet(
                        stats.overhead,
                        packet.payload,
                        packet.timestamp,
                        f"{packet.src}>{packet.dst}",
                        overhead_writer,
                    )
                else:
                    stats.skipped_packets += 1

        stats.flows = registry.finalize()
        if overhead_writer is not None and stats.overhead is not None:
            overhead_writer.append_rows(overhead_summary_rows(stats.overhead))
    finally:
        if overhead_writer is not None:
            overhead_writer.close()

    return stats


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level))

    try:
        ipaddress.ip_network(args.network)
    except ValueError as exc:
        parser.error(f"--network: {exc}")
    if args.sink_app_id < 0:
        parser.error("--sink-app-id must not be negative.")
    if args.no_file_write and args.single_file:
        parser.error("--single-file needs file writing enabled.")

    if not args.pcap_path.is_file():
        logger.error("PCAP file does not exist: %s", args.pcap_path)
        return 1

    try:
        stats = replay_capture(
            args.pcap_path,
            args.output_dir,
            single_file=args.single_file,
            prefix=args.prefix,
            memory=args.memory,
            file_write=not args.no_file_write,
            keep_open=args.keep_open,
            data_port=args.data_port,
            routing_port=None if args.no_overhead else args.routing_port,
            network=args.network,
            sink_app_id=args.sink_app_id,
            read_ip6=args.ipv6,
        )
    except Exception:  # pragma: no cover - unexpected runtime failures
        logger.exception("Failed processing %s", args.pcap_path)
        return 1

    logger.info(
        "Finished %s: packets=%d, data=%d, flows=%d, malformed=%d",
        args.pcap_path.name,
        stats.total_packets,
        stats.data_packets,
        len(stats.flows),
        stats.malformed_packets,
    )
    for summary in stats.flows:
        if summary.memory_delays is not None:
            logger.info(
                "Flow %s delays [us]: mean=%s median=%s max=%s jitter=%s",
                summary.key,
                summary.memory_delays.mean,
                summary.memory_delays.median,
                summary.memory_delays.maximum,
                summary.memory_delays.jitter,
            )
    if stats.overhead is not None and stats.overhead_path is not None:
        logger.info(
            "Wrote %d routing overhead rows to %s",
            stats.overhead.packets,
            stats.overhead_path,
        )
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
