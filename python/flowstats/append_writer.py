"""Scoped append-writer used for every report file."""

from __future__ import annotations

from pathlib import Path
from typing import IO, Iterable, Optional, Union

from .utils import LINE_SEP


class AppendWriter:
    """Appends text rows to a report file.

    By default the file is reopened in append mode for every write and closed
    again, so each event is on disk before the next one is processed. With
    ``keep_open`` the handle is held and flushed after every write instead;
    the bytes on disk are the same either way.
    """

    def __init__(self, file_path: Union[str, Path], *, keep_open: bool = False) -> None:
        self.file_path = Path(file_path)
        self.keep_open = keep_open
        self.rows_written = 0
        self._handle: Optional[IO[str]] = None
        self.file_path.parent.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    def __enter__(self) -> "AppendWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        self.close()

    # ------------------------------------------------------------------
    def write_header(self, header: str) -> None:
        """Truncate the file and start it with ``header``."""
        self.close()
        with self.file_path.open("w", encoding="utf-8") as handle:
            handle.write(header + LINE_SEP)

    def append_rows(self, rows: Iterable[str]) -> int:
        row_list = list(rows)
        if not row_list:
            return 0

        text = "".join(row + LINE_SEP for row in row_list)
        if self.keep_open:
            if self._handle is None:
                self._handle = self.file_path.open("a", encoding="utf-8")
            self._handle.write(text)
            self._handle.flush()
        else:
            with self.file_path.open("a", encoding="utf-8") as handle:
                handle.write(text)

        self.rows_written += len(row_list)
        return len(row_list)

    def append_row(self, row: str) -> int:
        return self.append_rows([row])

    def close(self) -> None:
        if self._handle is not None:
            handle, self._handle = self._handle, None
            handle.close()


__all__ = ["AppendWriter"]
