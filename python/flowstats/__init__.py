"""Per-flow delay, throughput and loss statistics for simulated networks."""

from .sim_time import ManualClock, SimClock
from .stats_header import (
    STATS_HEADER_LEN,
    MalformedHeaderError,
    StatsHeader,
    StatsRecord,
    build_packet,
    decode,
    encode,
)
from .flow_key import FlowKey
from .samples import UNDEFINED, NumericValue, TimeValue
from .summary_statistics import DelayStatistics, SummaryStatistics, summarize_delays
from .append_writer import AppendWriter
from .vector_data import VectorData
from .flow_data import FlowAccumulator, FlowSummary, ScalarData
from .report import FLOW_BLOCK_ROWS, aggregate_rows, column_letter, flow_block_rows
from .stats_flows import FlowRegistry
from .overhead import OverheadStats, overhead_summary_rows, trace_control_packet
from .packet_reader import CapturedPacket, PacketReader

__all__ = [
    "ManualClock",
    "SimClock",
    "STATS_HEADER_LEN",
    "MalformedHeaderError",
    "StatsHeader",
    "StatsRecord",
    "build_packet",
    "decode",
    "encode",
    "FlowKey",
    "UNDEFINED",
    "NumericValue",
    "TimeValue",
    "DelayStatistics",
    "SummaryStatistics",
    "summarize_delays",
    "AppendWriter",
    "VectorData",
    "FlowAccumulator",
    "FlowSummary",
    "ScalarData",
    "FLOW_BLOCK_ROWS",
    "aggregate_rows",
    "column_letter",
    "flow_block_rows",
    "FlowRegistry",
    "OverheadStats",
    "overhead_summary_rows",
    "trace_control_packet",
    "CapturedPacket",
    "PacketReader",
]
