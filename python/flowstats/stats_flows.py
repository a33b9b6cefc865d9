"""Flow registry: resolves arrivals to flows and writes the end-of-run report."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from .append_writer import AppendWriter
from .flow_data import FlowAccumulator, FlowSummary
from .flow_key import FlowKey
from .listeners import FlowRegistryListener
from .report import aggregate_rows
from .sim_time import SimClock
from .stats_header import MalformedHeaderError, decode

logger = logging.getLogger(__name__)


class FlowRegistry:
    """Owns every flow accumulator of one run.

    Passing ``file_name`` writes all flows into that single file, one delay
    column per flow, followed by the cross-flow aggregate. Without it each
    flow gets its own file named after its key.
    """

    def __init__(
        self,
        clock: SimClock,
        file_name: Optional[Union[str, Path]] = None,
        *,
        output_dir: Union[str, Path] = ".",
        file_name_prefix: str = "Stats",
        file_write_enable: bool = True,
        memory_write_enable: bool = False,
        keep_files_open: bool = False,
    ) -> None:
        self.clock = clock
        self.output_dir = Path(output_dir)
        self.file_name_prefix = file_name_prefix
        self.file_write_enable = file_write_enable
        self.memory_write_enable = memory_write_enable
        self.keep_files_open = keep_files_open
        self.single_file = file_name is not None
        self.file_path: Optional[Path] = (
            self.output_dir / file_name if file_name is not None else None
        )

        self.flow_keys: List[FlowKey] = []
        self.flows: List[FlowAccumulator] = []
        self.all_rx_packets = 0
        self.malformed_packets = 0
        self._writers: Dict[Path, AppendWriter] = {}
        self._listeners: List[FlowRegistryListener] = []
        self._finalized = False

    def add_listener(self, listener: FlowRegistryListener) -> None:
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    def _writer_for(self, key: FlowKey) -> Optional[AppendWriter]:
        if not self.file_write_enable:
            return None
        if self.file_path is not None:
            path = self.file_path
        else:
            path = self.output_dir / key.file_name(self.file_name_prefix)
        writer = self._writers.get(path)
        if writer is None:
            writer = AppendWriter(path, keep_open=self.keep_files_open)
            self._writers[path] = writer
        return writer

    def identify(
        self,
        source_node_id: int,
        source_app_id: int,
        sink_node_id: int,
        sink_app_id: int,
    ) -> int:
        """Index of the matching flow, registering a new one on first sight."""
        for key in self.flow_keys:
            if key.matches(source_node_id, source_app_id, sink_node_id, sink_app_id):
                logger.debug("Found flow %s", key)
                return key.index

        key = FlowKey(
            source_node_id,
            source_app_id,
            sink_node_id,
            sink_app_id,
            index=len(self.flow_keys),
        )
        self.flow_keys.append(key)
        self.flows.append(
            FlowAccumulator(
                key,
                self._writer_for(key),
                single_file=self.single_file,
                memory_write_enable=self.memory_write_enable,
            )
        )
        logger.info("New flow %s", key)
        for listener in self._listeners:
            listener.on_flow_registered(key)
        return key.index

    def on_arrival(
        self,
        packet: bytes,
        packet_size: Optional[int],
        sink_node_id: int,
        sink_app_id: int,
    ) -> Optional[int]:
        """Account one delivered packet; returns its flow index, or None if dropped."""
        if self._finalized:
            raise RuntimeError("flow registry already finalized")

        try:
            record = decode(packet)
        except MalformedHeaderError as exc:
            self.malformed_packets += 1
            logger.warning(
                "Dropping packet for sink node %d app %d: %s",
                sink_node_id,
                sink_app_id,
                exc,
            )
            return None

        index = self.identify(record.node_id, record.app_id, sink_node_id, sink_app_id)
        self.all_rx_packets += 1
        logger.debug("Packet %d %s -> flow %d", self.all_rx_packets, record, index)
        size = len(packet) if packet_size is None else packet_size
        self.flows[index].packet_received(record, size, self.clock.now())
        return index

    # ------------------------------------------------------------------
    def finalize(self) -> List[FlowSummary]:
        if self._finalized:
            raise RuntimeError("flow registry already finalized")
        self._finalized = True

        try:
            summaries = []
            for flow in self.flows:
                logger.debug("Finalizing flow %d", flow.key.index)
                summaries.append(flow.finalize(self.all_rx_packets))

            if self.single_file and self.file_write_enable:
                assert self.file_path is not None
                writer = self._writers.get(self.file_path)
                if writer is None:
                    # No flow ever opened the file, so it still needs its header.
                    writer = AppendWriter(self.file_path, keep_open=self.keep_files_open)
                    writer.write_header(FlowAccumulator.report_header())
                    self._writers[self.file_path] = writer
                writer.append_rows(aggregate_rows(len(self.flows), self.all_rx_packets))
            elif self.file_write_enable and self.flows:
                logger.info("Per-flow report files written; no aggregate block")
        finally:
            for writer in self._writers.values():
                writer.close()

        return summaries


__all__ = ["FlowRegistry"]
