from __future__ import annotations

from rlm.config import OutputConfig
from rlm.output.base import RecordSink
from rlm.output.csv_sink import CsvSink, format_csv_line
from rlm.output.table import TableSink


def sink_for(output: OutputConfig) -> RecordSink:
    if output.csv_path is None:
        return TableSink(color=output.color)
    return CsvSink(output.csv_path, timestamp_style=output.timestamp_style)


__all__ = ["CsvSink", "RecordSink", "TableSink", "format_csv_line", "sink_for"]
