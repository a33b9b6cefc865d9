"""Per-flow accumulator: running scalars, delay samples and the final report block."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from .append_writer import AppendWriter
from .flow_key import FlowKey
from .report import FIRST_SAMPLE_ROW, delay_column, flow_block_rows
from .samples import TimeValue
from .sim_time import ticks_to_microseconds, ticks_to_seconds
from .stats_header import StatsRecord
from .summary_statistics import DelayStatistics, SummaryStatistics, summarize_delays
from .vector_data import VectorData

logger = logging.getLogger(__name__)

DELAY_VECTOR_NAME = "Delay [us]"


@dataclass
class ScalarData:
    total_rx_packets: int = 0
    # Inferred from the highest sequence number seen, so a lower bound.
    total_tx_packets: int = 0
    total_rx_bytes: int = 0
    packet_size_bytes: int = 0
    first_packet_sent: Optional[int] = None
    last_packet_sent: Optional[int] = None
    first_packet_received: Optional[int] = None
    last_packet_received: Optional[int] = None
    first_delay: Optional[int] = None
    last_delay: Optional[int] = None


@dataclass(frozen=True)
class FlowSummary:
    key: FlowKey
    rx_packets: int
    tx_packets: int
    rx_bytes: int
    tx_bytes: int
    lost_packets: int
    rows_written: int
    rx_first_us: Optional[float]
    rx_last_us: Optional[float]
    rx_duration_s: Optional[float]
    rx_throughput_bps: Optional[float]
    tx_first_us: Optional[float]
    tx_last_us: Optional[float]
    tx_duration_s: Optional[float]
    tx_throughput_bps: Optional[float]
    real_throughput_bps: Optional[float]
    mean_delay_us: Optional[float]
    max_delay_us: Optional[float]
    jitter_us: Optional[float]
    memory_delays: Optional[DelayStatistics] = None


def _span_seconds(start: Optional[int], end: Optional[int]) -> Optional[float]:
    if start is None or end is None:
        return None
    return ticks_to_seconds(end - start)


def _throughput(byte_count: int, seconds: Optional[float]) -> Optional[float]:
    if not seconds:
        return None
    return byte_count * 8.0 / seconds


def _micros(ticks: Optional[int]) -> Optional[float]:
    return None if ticks is None else ticks_to_microseconds(ticks)


class FlowAccumulator:
    """Statistics for one flow, fed one delivered packet at a time."""

    def __init__(
        self,
        key: FlowKey,
        writer: Optional[AppendWriter] = None,
        *,
        single_file: bool = False,
        memory_write_enable: bool = False,
    ) -> None:
        self.key = key
        self.single_file = single_file
        self.memory_write_enable = memory_write_enable
        self.scalar = ScalarData()
        self.delays = VectorData(DELAY_VECTOR_NAME)
        self._delay_stats = SummaryStatistics()
        self._writer = writer

        # A combined file gets its header from the first flow only.
        if self._writer is not None and (key.index == 0 or not single_file):
            self._writer.write_header(self.delays.header())

    @staticmethod
    def report_header() -> str:
        return VectorData(DELAY_VECTOR_NAME).header()

    @property
    def file_write_enable(self) -> bool:
        return self._writer is not None

    # ------------------------------------------------------------------
    def packet_received(self, record: StatsRecord, packet_size: int, now: int) -> None:
        scalar = self.scalar
        scalar.total_rx_packets += 1
        scalar.packet_size_bytes = packet_size
        scalar.total_rx_bytes += packet_size
        # Sequence numbers start at 0, so seq + 1 packets were sent at least.
        scalar.total_tx_packets = max(scalar.total_tx_packets, record.seq + 1)
        scalar.last_packet_received = now
        scalar.last_packet_sent = record.ts
        scalar.last_delay = now - record.ts
        if scalar.total_rx_packets == 1:
            # If the sender's first packet was lost these describe a later one.
            scalar.first_packet_received = scalar.last_packet_received
            scalar.first_packet_sent = scalar.last_packet_sent
            scalar.first_delay = scalar.last_delay

        self._delay_stats.add_value(ticks_to_microseconds(scalar.last_delay))
        delay = TimeValue(scalar.last_delay)
        if self._writer is not None:
            self.delays.write_value(
                self._writer,
                now,
                delay,
                flow_index=self.key.index,
                seq=record.seq,
                single_file=self.single_file,
            )
        if self.memory_write_enable:
            self.delays.add_value(now, delay)

    # ------------------------------------------------------------------
    def memory_delays_us(self) -> List[float]:
        return [ticks_to_microseconds(value.ticks) for _, value in self.delays.values()]

    def summary(self) -> FlowSummary:
        scalar = self.scalar
        rx_duration = _span_seconds(scalar.first_packet_received, scalar.last_packet_received)
        tx_duration = _span_seconds(scalar.first_packet_sent, scalar.last_packet_sent)
        real_duration = _span_seconds(scalar.first_packet_sent, scalar.last_packet_received)
        tx_bytes = scalar.total_tx_packets * scalar.packet_size_bytes

        return FlowSummary(
            key=self.key,
            rx_packets=scalar.total_rx_packets,
            tx_packets=scalar.total_tx_packets,
            rx_bytes=scalar.total_rx_bytes,
            tx_bytes=tx_bytes,
            lost_packets=scalar.total_tx_packets - scalar.total_rx_packets,
            rows_written=self.delays.values_written_to_file,
            rx_first_us=_micros(scalar.first_packet_received),
            rx_last_us=_micros(scalar.last_packet_received),
            rx_duration_s=rx_duration,
            rx_throughput_bps=_throughput(scalar.total_rx_bytes, rx_duration),
            tx_first_us=_micros(scalar.first_packet_sent),
            tx_last_us=_micros(scalar.last_packet_sent),
            tx_duration_s=tx_duration,
            tx_throughput_bps=_throughput(tx_bytes, tx_duration),
            real_throughput_bps=_throughput(scalar.total_rx_bytes, real_duration),
            mean_delay_us=self._delay_stats.mean(),
            max_delay_us=self._delay_stats.maximum(),
            jitter_us=self._delay_stats.standard_deviation(),
            memory_delays=(
                summarize_delays(self.memory_delays_us()) if self.memory_write_enable else None
            ),
        )

    def finalize(self, all_rx_packets: int = 0) -> FlowSummary:
        """Append the trailer block (when writing to file) and return the summary.

        ``all_rx_packets`` is the number of sample rows in a combined file and
        is ignored for per-flow files.
        """
        summary = self.summary()
        if summary.lost_packets < 0:
            logger.warning(
                "Flow %s received %d packets but only %d were inferred as sent",
                self.key,
                summary.rx_packets,
                summary.tx_packets,
            )

        if self._writer is not None:
            if self.single_file:
                last_row = all_rx_packets + FIRST_SAMPLE_ROW - 1
            else:
                last_row = self.scalar.total_rx_packets + FIRST_SAMPLE_ROW - 1
            column = delay_column(self.key.index, self.single_file)
            self._writer.append_rows(flow_block_rows(summary, column, last_row))

        logger.info(
            "Flow %s: rx=%d tx=%d lost=%d mean delay=%s us",
            self.key,
            summary.rx_packets,
            summary.tx_packets,
            summary.lost_packets,
            summary.mean_delay_us,
        )
        return summary


__all__ = ["ScalarData", "FlowSummary", "FlowAccumulator", "DELAY_VECTOR_NAME"]
