import unittest

from flowstats import FlowKey


class FlowKeyTest(unittest.TestCase):
    def test_index_is_not_part_of_identity(self) -> None:
        first = FlowKey(1, 0, 5, 0, index=0)
        second = FlowKey(1, 0, 5, 0, index=7)

        self.assertEqual(first, second)
        self.assertEqual(hash(first), hash(second))
        self.assertEqual(len({first, second}), 1)

    def test_any_differing_endpoint_field_changes_identity(self) -> None:
        base = FlowKey(1, 2, 3, 4)
        variants = [
            FlowKey(9, 2, 3, 4),
            FlowKey(1, 9, 3, 4),
            FlowKey(1, 2, 9, 4),
            FlowKey(1, 2, 3, 9),
        ]
        for variant in variants:
            with self.subTest(variant=variant):
                self.assertNotEqual(base, variant)
                self.assertFalse(base.matches(*variant.identity()))

    def test_file_name_and_identity_row(self) -> None:
        key = FlowKey(11, 0, 2, 1, index=3)

        self.assertEqual(
            key.file_name("Stats"),
            "Stats-Flow_3-SourceNode_11-SourceApp_0-SinkNode_2-SinkApp_1.csv",
        )
        self.assertEqual(key.identity_row(), "3,11,0,2,1")


if __name__ == "__main__":  # pragma: no cover - convenience
    unittest.main()
