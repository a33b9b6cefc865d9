from __future__ import annotations

import socket

import dpkt
import pytest

from flowstats import StatsRecord, build_packet
from flowstats.aodv_header import AodvRreq
from flowstats.cli import main


def _frame(src: str, dst: str, dport: int, payload: bytes) -> bytes:
    udp = dpkt.udp.UDP(sport=49153, dport=dport, data=payload)
    udp.ulen = len(udp)
    ip = dpkt.ip.IP(
        src=socket.inet_aton(src),
        dst=socket.inet_aton(dst),
        p=dpkt.ip.IP_PROTO_UDP,
        ttl=64,
        data=udp,
    )
    ip.len = len(ip)
    ethernet = dpkt.ethernet.Ethernet(
        src=b"\xaa\xbb\xcc\xdd\xee\xff",
        dst=b"\x11\x22\x33\x44\x55\x66",
        type=dpkt.ethernet.ETH_TYPE_IP,
        data=ip,
    )
    return bytes(ethernet)


def _build_cli_sample_pcap(path) -> None:
    with path.open("wb") as fh:
        writer = dpkt.pcap.Writer(fh)

        rreq = bytes([1]) + bytes(
            AodvRreq(
                request_id=1,
                dst=socket.inet_aton("192.168.1.3"),
                origin=socket.inet_aton("192.168.1.1"),
            )
        )
        writer.writepkt(_frame("192.168.1.1", "192.168.1.255", 654, rreq), ts=1.0)

        first = build_packet(StatsRecord(seq=0, ts=1_000_005_000, node_id=0, app_id=0), 64)
        writer.writepkt(_frame("192.168.1.1", "192.168.1.3", 80, first), ts=1.00001)

        second = build_packet(StatsRecord(seq=1, ts=1_000_020_000, node_id=0, app_id=0), 64)
        writer.writepkt(_frame("192.168.1.1", "192.168.1.3", 80, second), ts=1.000023)

        # Unrelated traffic is ignored.
        writer.writepkt(_frame("192.168.1.1", "192.168.1.3", 9999, b"noise"), ts=1.00003)

        writer.close()


def test_cli_generates_single_file_report_and_overhead(tmp_path):
    pcap_path = tmp_path / "capture.pcap"
    _build_cli_sample_pcap(pcap_path)

    output_dir = tmp_path / "out"
    exit_code = main(
        [
            str(pcap_path),
            str(output_dir),
            "--single-file",
            "flows.csv",
            "--log-level",
            "ERROR",
        ]
    )

    assert exit_code == 0

    lines = (output_dir / "flows.csv").read_text().splitlines()
    assert lines[:3] == [
        "Flow Index,Time [us],Sequence Id,Delay [us]",
        "0,1000010,0,5",
        "0,1000023,1,3",
    ]
    assert lines[5] == "0,0,0,2,0"
    assert "AVERAGE RESULTS FOR ALL FLOWS" in lines
    assert "Number of all Rx packets:,2" in lines

    overhead_lines = (output_dir / "capture-overhead.csv").read_text().splitlines()
    assert overhead_lines[0] == "Time [us], Packet Type, Length [B], Description, Context"
    assert overhead_lines[1] == (
        "1000000,RREQ,24,O:192.168.1.1 D:192.168.1.3 Hop:0,192.168.1.1>192.168.1.255"
    )
    assert "AODV overhead [packets]:,1" in overhead_lines


def test_cli_per_flow_reports_without_overhead(tmp_path):
    pcap_path = tmp_path / "capture.pcap"
    _build_cli_sample_pcap(pcap_path)

    output_dir = tmp_path / "out"
    exit_code = main(
        [str(pcap_path), str(output_dir), "--no-overhead", "--prefix", "Run", "--log-level", "ERROR"]
    )

    assert exit_code == 0
    assert [p.name for p in output_dir.iterdir()] == [
        "Run-Flow_0-SourceNode_0-SourceApp_0-SinkNode_2-SinkApp_0.csv"
    ]


def test_cli_reports_missing_capture(tmp_path):
    assert main([str(tmp_path / "absent.pcap"), str(tmp_path / "out"), "--log-level", "ERROR"]) == 1


def test_cli_rejects_single_file_without_file_writing(tmp_path):
    with pytest.raises(SystemExit):
        main([str(tmp_path / "x.pcap"), str(tmp_path), "--single-file", "a.csv", "--no-file-write"])
