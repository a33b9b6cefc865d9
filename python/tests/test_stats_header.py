import unittest

from flowstats import (
    STATS_HEADER_LEN,
    MalformedHeaderError,
    StatsHeader,
    StatsRecord,
    build_packet,
    decode,
    encode,
)


class StatsHeaderTest(unittest.TestCase):
    def test_header_is_twenty_bytes_in_network_order(self) -> None:
        record = StatsRecord(seq=1, ts=2, node_id=3, app_id=4)
        wire = encode(record)

        self.assertEqual(STATS_HEADER_LEN, 20)
        self.assertEqual(len(wire), 20)
        self.assertEqual(
            wire,
            (1).to_bytes(4, "big")
            + (2).to_bytes(8, "big")
            + (3).to_bytes(4, "big")
            + (4).to_bytes(4, "big"),
        )

    def test_round_trip_preserves_every_field(self) -> None:
        records = [
            StatsRecord(seq=0, ts=0, node_id=0, app_id=0),
            StatsRecord(seq=41, ts=10_000_000_123, node_id=59, app_id=1),
            StatsRecord(seq=0xFFFFFFFF, ts=0xFFFFFFFFFFFFFFFF, node_id=0xFFFFFFFF, app_id=0xFFFFFFFF),
        ]
        for record in records:
            with self.subTest(record=record):
                self.assertEqual(decode(encode(record)), record)

    def test_short_buffers_are_malformed(self) -> None:
        wire = encode(StatsRecord(seq=7, ts=8, node_id=9, app_id=10))
        for length in range(STATS_HEADER_LEN):
            with self.subTest(length=length):
                with self.assertRaises(MalformedHeaderError):
                    decode(wire[:length])

    def test_malformed_header_error_is_a_value_error(self) -> None:
        with self.assertRaises(ValueError):
            decode(b"\x00" * 3)

    def test_decode_ignores_trailing_payload(self) -> None:
        record = StatsRecord(seq=5, ts=1_500, node_id=2, app_id=0)
        packet = build_packet(record, 512)

        self.assertEqual(len(packet), 512)
        self.assertEqual(decode(packet), record)
        self.assertEqual(decode(bytearray(packet)), record)

    def test_out_of_range_fields_are_rejected(self) -> None:
        with self.assertRaises(ValueError):
            encode(StatsRecord(seq=-1, ts=0, node_id=0, app_id=0))
        with self.assertRaises(ValueError):
            encode(StatsRecord(seq=0, ts=1 << 64, node_id=0, app_id=0))
        with self.assertRaises(ValueError):
            encode(StatsRecord(seq=0, ts=0, node_id=1 << 32, app_id=0))

    def test_build_packet_requires_room_for_the_header(self) -> None:
        with self.assertRaises(ValueError):
            build_packet(StatsRecord(seq=0, ts=0, node_id=0, app_id=0), 19)

    def test_wire_header_fields(self) -> None:
        header = StatsHeader(encode(StatsRecord(seq=3, ts=99, node_id=4, app_id=1)))

        self.assertEqual(header.seq, 3)
        self.assertEqual(header.ts, 99)
        self.assertEqual(header.node_id, 4)
        self.assertEqual(header.app_id, 1)

    def test_record_string(self) -> None:
        record = StatsRecord(seq=3, ts=1_500_000_000, node_id=4, app_id=1)
        self.assertEqual(str(record), "(seq=3 time=1.5s nodeId=4 appId=1)")


if __name__ == "__main__":  # pragma: no cover - convenience
    unittest.main()
