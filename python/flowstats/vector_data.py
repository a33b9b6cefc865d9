"""Per-packet sample sequence with a file sink and a memory sink."""

from __future__ import annotations

from typing import List, Tuple

from .append_writer import AppendWriter
from .samples import SampleValue, TimeValue

REPORT_HEADER_PREFIX = "Flow Index,Time [us],Sequence Id,"


class VectorData:
    def __init__(self, name: str = "vector value") -> None:
        self.name = name
        self.values_written_to_file = 0
        self._values: List[Tuple[int, SampleValue]] = []

    def header(self) -> str:
        return REPORT_HEADER_PREFIX + self.name

    @staticmethod
    def format_row(
        time: int,
        value: SampleValue,
        *,
        flow_index: int = 0,
        seq: int = 0,
        single_file: bool = False,
    ) -> str:
        # In a combined file each flow's values sit ``flow_index`` columns
        # further right so every flow has a column of its own.
        padding = "," * flow_index if single_file else ""
        return f"{flow_index},{TimeValue(time).format()},{seq},{padding}{value.format()}"

    def write_value(
        self,
        writer: AppendWriter,
        time: int,
        value: SampleValue,
        *,
        flow_index: int = 0,
        seq: int = 0,
        single_file: bool = False,
    ) -> None:
        writer.append_row(
            self.format_row(
                time,
                value,
                flow_index=flow_index,
                seq=seq,
                single_file=single_file,
            )
        )
        self.values_written_to_file += 1

    def add_value(self, time: int, value: SampleValue) -> None:
        self._values.append((time, value))

    @property
    def values_written_to_memory(self) -> int:
        return len(self._values)

    def values(self) -> List[Tuple[int, SampleValue]]:
        return list(self._values)


__all__ = ["REPORT_HEADER_PREFIX", "VectorData"]
