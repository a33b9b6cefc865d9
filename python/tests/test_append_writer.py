import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from flowstats import AppendWriter


class AppendWriterTest(unittest.TestCase):
    def test_header_then_rows_including_blank_ones(self) -> None:
        with TemporaryDirectory() as tmpdir:
            target = Path(tmpdir) / "nested" / "flows.csv"
            writer = AppendWriter(target)
            writer.write_header("col")
            writer.append_rows(["row1", ""])
            writer.append_row("row2")

            self.assertEqual(target.read_text().splitlines(), ["col", "row1", "", "row2"])
            self.assertEqual(writer.rows_written, 3)

    def test_write_header_truncates_previous_content(self) -> None:
        with TemporaryDirectory() as tmpdir:
            target = Path(tmpdir) / "flows.csv"
            target.write_text("stale\n")
            writer = AppendWriter(target)
            writer.write_header("col")

            self.assertEqual(target.read_text(), "col\n")

    def test_held_open_writer_flushes_every_write(self) -> None:
        with TemporaryDirectory() as tmpdir:
            target = Path(tmpdir) / "flows.csv"
            with AppendWriter(target, keep_open=True) as writer:
                writer.write_header("col")
                writer.append_row("row1")
                # Visible on disk before the writer is closed.
                self.assertEqual(target.read_text().splitlines(), ["col", "row1"])
                writer.append_rows(["row2"])

            self.assertEqual(target.read_text().splitlines(), ["col", "row1", "row2"])

    def test_empty_row_list_writes_nothing(self) -> None:
        with TemporaryDirectory() as tmpdir:
            target = Path(tmpdir) / "flows.csv"
            writer = AppendWriter(target)

            self.assertEqual(writer.append_rows([]), 0)
            self.assertFalse(target.exists())


if __name__ == "__main__":  # pragma: no cover - convenience
    unittest.main()
