"""Report rendering: per-flow trailer blocks and the cross-flow aggregate.

Delay statistics are written as spreadsheet formulas over the sample rows so
the report can be recomputed from the raw per-packet data. The aggregate
block locates each flow's cells by row arithmetic, which only works while
every flow block has exactly ``FLOW_BLOCK_ROWS`` rows in the order below.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List

from .samples import UNDEFINED, format_optional

if TYPE_CHECKING:  # pragma: no cover
    from .flow_data import FlowSummary

FLOW_BLOCK_ROWS = 26
FIRST_SAMPLE_ROW = 2
DELAY_COLUMN_INDEX = 3

# Offsets from the last sample row to cells inside the first flow block.
AVERAGE_DELAY_OFFSET = 6
MEDIAN_DELAY_OFFSET = 7
MAX_DELAY_OFFSET = 8
JITTER_OFFSET = 9
TX_COUNT_OFFSET = 21
LOST_PACKETS_OFFSET = 25
REAL_THROUGHPUT_OFFSET = 26

AGGREGATE_TITLE = "AVERAGE RESULTS FOR ALL FLOWS"
FLOW_IDENTITY_HEADER = "Flow Index,Source Node,Source App,Sink Node,Sink App"


def column_letter(index: int) -> str:
    """Spreadsheet column name for a 0-based index (0 -> A, 26 -> AA)."""
    if index < 0:
        raise ValueError(f"column index must be non-negative, got {index}")
    letters = ""
    index += 1
    while index:
        index, remainder = divmod(index - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


def delay_column(flow_index: int, single_file: bool) -> str:
    if single_file:
        return column_letter(DELAY_COLUMN_INDEX + flow_index)
    return column_letter(DELAY_COLUMN_INDEX)


def delay_formula_rows(column: str, last_row: int, count: int) -> List[str]:
    cells = f"{column}{FIRST_SAMPLE_ROW}:{column}{last_row}"
    if count == 0:
        average = median = maximum = UNDEFINED
    else:
        average = f"=SUM({cells})/{count}"
        median = f"=MEDIAN({cells})"
        maximum = f"=MAX({cells})"
    if count < 2:
        jitter = UNDEFINED
    else:
        jitter = f"=SQRT((SUMSQ({cells})-SUM({cells})^2/{count})/{count - 1})"
    return [
        f"E2E average delay [us],{average}",
        f"E2E median delay [us],{median}",
        f"E2E max delay [us],{maximum}",
        f"Jitter [us],{jitter}",
    ]


def flow_block_rows(summary: "FlowSummary", column: str, last_row: int) -> List[str]:
    rows = [
        "",
        FLOW_IDENTITY_HEADER,
        summary.key.identity_row(),
        f"Number of packets for flow,{summary.rx_packets},{summary.rows_written}",
        "",
    ]
    rows.extend(delay_formula_rows(column, last_row, summary.rx_packets))
    rows.append("")
    rows.extend(
        [
            f"Rx,First packet [us]:,{format_optional(summary.rx_first_us)}",
            f"Rx,Last packet [us]:,{format_optional(summary.rx_last_us)}",
            f"Rx,Duration of sending packets [s]:,{format_optional(summary.rx_duration_s)}",
            f"Rx,Count of packets:,{summary.rx_packets}",
            f"Rx,Bytes:,{summary.rx_bytes}",
            f"Rx,Throughput [bps]:,{format_optional(summary.rx_throughput_bps)}",
            "",
            f"Tx,First packet [us]:,{format_optional(summary.tx_first_us)}",
            f"Tx,Last packet [us]:,{format_optional(summary.tx_last_us)}",
            f"Tx,Duration of sending packets [s]:,{format_optional(summary.tx_duration_s)}",
            f"Tx,Count of packets:,{summary.tx_packets}",
            f"Tx,Bytes:,{summary.tx_bytes}",
            f"Tx,Throughput [bps]:,{format_optional(summary.tx_throughput_bps)}",
            "",
            f",Lost packets:,{summary.lost_packets}",
            f",Real throughput [bps]:,{format_optional(summary.real_throughput_bps)}",
        ]
    )
    if len(rows) != FLOW_BLOCK_ROWS:
        raise RuntimeError(f"flow block has {len(rows)} rows, expected {FLOW_BLOCK_ROWS}")
    return rows


def _cell_sum(column: str, last_row: int, offset: int, n_flows: int) -> str:
    return "+".join(
        f"{column}{last_row + i * FLOW_BLOCK_ROWS + offset}" for i in range(n_flows)
    )


def aggregate_rows(n_flows: int, all_rx_packets: int) -> List[str]:
    """Cross-flow trailer appended after the last flow block of a combined file."""
    last_row = all_rx_packets + FIRST_SAMPLE_ROW - 1

    if n_flows == 0:
        average = median = maximum = jitter = UNDEFINED
        tx_total = lost_total = lost_percent = real_throughput = UNDEFINED
    else:
        def averaged(column: str, offset: int) -> str:
            return f"=({_cell_sum(column, last_row, offset, n_flows)})/1000/{n_flows}"

        average = averaged("B", AVERAGE_DELAY_OFFSET)
        median = averaged("B", MEDIAN_DELAY_OFFSET)
        maximum = averaged("B", MAX_DELAY_OFFSET)
        jitter = averaged("B", JITTER_OFFSET)
        tx_total = "=" + _cell_sum("C", last_row, TX_COUNT_OFFSET, n_flows)
        lost = _cell_sum("C", last_row, LOST_PACKETS_OFFSET, n_flows)
        lost_total = "=" + lost
        lost_percent = f"=100*({lost})/({all_rx_packets}+{lost})"
        real_throughput = averaged("C", REAL_THROUGHPUT_OFFSET)

    return [
        "",
        AGGREGATE_TITLE,
        f"Average E2E Delay [ms]:,{average}",
        f"Median E2E Delay [ms]:,{median}",
        f"Max of E2E Delay [ms]:,{maximum}",
        f"Jitter of E2E Delay [ms]:,{jitter}",
        f"Number of all Tx packets:,{tx_total}",
        f"Number of all Rx packets:,{all_rx_packets}",
        f"Number of all lost packets:,{lost_total}",
        f"Lost packets [%]:,{lost_percent}",
        f"Real throughput [kbps]:,{real_throughput}",
    ]


__all__ = [
    "FLOW_BLOCK_ROWS",
    "FIRST_SAMPLE_ROW",
    "AGGREGATE_TITLE",
    "FLOW_IDENTITY_HEADER",
    "column_letter",
    "delay_column",
    "delay_formula_rows",
    "flow_block_rows",
    "aggregate_rows",
]
