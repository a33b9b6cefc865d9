import socket
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from flowstats import AppendWriter, OverheadStats, overhead_summary_rows, trace_control_packet
from flowstats.aodv_header import AodvRrep, AodvRreq, parse_control_message


def _rreq(origin: str, dst: str, hops: int) -> bytes:
    header = AodvRreq(
        hop_count=hops,
        request_id=7,
        dst=socket.inet_aton(dst),
        origin=socket.inet_aton(origin),
    )
    return bytes([1]) + bytes(header)


def _rrep(origin: str, dst: str, hops: int) -> bytes:
    header = AodvRrep(
        hop_count=hops,
        dst=socket.inet_aton(dst),
        origin=socket.inet_aton(origin),
        lifetime=3000,
    )
    return bytes([2]) + bytes(header)


class ControlMessageTest(unittest.TestCase):
    def test_route_request_and_reply_descriptions(self) -> None:
        self.assertEqual(
            parse_control_message(_rreq("192.168.1.1", "192.168.1.5", 2)),
            ("RREQ", "O:192.168.1.1 D:192.168.1.5 Hop:2"),
        )
        self.assertEqual(
            parse_control_message(_rrep("192.168.1.5", "192.168.1.1", 3)),
            ("RREP", "O:192.168.1.5 D:192.168.1.1 Hop:3"),
        )
        self.assertEqual(parse_control_message(bytes([3, 0, 0, 0])), ("RERR", ""))
        self.assertEqual(parse_control_message(bytes([4, 0])), ("RREP_ACK", ""))

    def test_unknown_types_are_not_parsed(self) -> None:
        self.assertIsNone(parse_control_message(b""))
        self.assertIsNone(parse_control_message(bytes([9, 0, 0])))


class OverheadStatsTest(unittest.TestCase):
    def test_counts_bytes_and_time_span(self) -> None:
        stats = OverheadStats()
        stats = trace_control_packet(stats, _rreq("192.168.1.1", "192.168.1.5", 0), 1_000_000)
        stats = trace_control_packet(stats, _rrep("192.168.1.5", "192.168.1.1", 1), 2_000_000)
        stats = trace_control_packet(stats, bytes([3, 0, 0, 0]), 3_000_000)

        self.assertEqual(stats.packets, 3)
        self.assertEqual(stats.bytes, 24 + 20 + 4)
        self.assertEqual(stats.first_packet, 1_000_000)
        self.assertEqual(stats.last_packet, 3_000_000)
        self.assertEqual(stats.counts, {"RREQ": 1, "RREP": 1, "RERR": 1, "RREP_ACK": 0})

    def test_unknown_and_truncated_messages_are_dropped(self) -> None:
        stats = OverheadStats()
        stats = trace_control_packet(stats, bytes([9, 1, 2]), 1_000)
        stats = trace_control_packet(stats, bytes([1, 0]), 2_000)

        self.assertEqual(stats.packets, 0)
        self.assertIsNone(stats.first_packet)

    def test_reset_starts_a_new_run(self) -> None:
        stats = trace_control_packet(OverheadStats(), bytes([4, 0]), 5_000)
        stats.reset()

        self.assertEqual(stats, OverheadStats())

    def test_rows_and_summary_written_to_file(self) -> None:
        with TemporaryDirectory() as tmpdir:
            target = Path(tmpdir) / "overhead.csv"
            writer = AppendWriter(target)
            writer.write_header("Time [us], Packet Type, Length [B], Description, Context")
            stats = trace_control_packet(
                OverheadStats(),
                _rreq("192.168.1.1", "192.168.1.5", 2),
                1_500_000,
                "node0",
                writer,
            )
            writer.append_rows(overhead_summary_rows(stats))

            lines = target.read_text().splitlines()

        self.assertEqual(lines[1], "1500,RREQ,24,O:192.168.1.1 D:192.168.1.5 Hop:2,node0")
        self.assertEqual(
            lines[2:],
            [
                "",
                "AODV overhead [packets]:,1",
                "AODV overhead [kB]:,0.024",
                "RREQ [packets]:,1",
                "RREP [packets]:,0",
                "RERR [packets]:,0",
                "RREP_ACK [packets]:,0",
            ],
        )


if __name__ == "__main__":  # pragma: no cover - convenience
    unittest.main()
