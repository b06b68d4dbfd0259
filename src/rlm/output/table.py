from __future__ import annotations

from datetime import datetime

from rich.console import Console
from rich.text import Text

from rlm.metrics import AggregatedRecord

COLUMNS = ("TIME", "SAMPLES", "ERRORS", "MIN", "MAX", "MEAN", "STDDEV", "PERC 95", "PERC 99")
WIDTHS = (12, 8, 8, 8, 10, 8, 8, 8, 8)
SEPARATOR_EVERY = 10
PLACEHOLDER = "------"


def format_latency(value_us: int) -> Text:
    if value_us == 0:
        return Text(PLACEHOLDER, style="dim")
    value_ms = value_us / 1000.0
    if value_ms > 1000:
        text = f"{round(value_ms):,}"
    elif value_ms > 10:
        text = f"{value_ms:,.1f}"
    elif value_ms > 1:
        text = f"{value_ms:.2f}"
    else:
        text = f"{value_ms:.3f}"
    if value_ms >= 100:
        return Text(text, style="red")
    if value_ms >= 10:
        return Text(text, style="yellow")
    return Text(text)


def format_time(timestamp: float) -> Text:
    moment = datetime.fromtimestamp(timestamp)
    text = Text(moment.strftime("%H:%M:%S"))
    text.append(f".{moment.microsecond // 1000:03d}", style="dim")
    return text


class TableSink:
    """Prints one right-aligned table row per interval to the terminal."""

    def __init__(self, console: Console | None = None, color: bool = True) -> None:
        self.console = console or Console(no_color=not color, highlight=False)
        self._rows = 0
        self._header_printed = False

    def start(self) -> None:
        if not self._header_printed:
            self._print_header()

    def write(self, record: AggregatedRecord) -> None:
        if not self._header_printed:
            self._print_header()
        if self._rows and self._rows % SEPARATOR_EVERY == 0:
            self._print_separator()
        cells = [
            format_time(record.timestamp),
            Text(f"{record.samples:,}"),
            Text(f"{record.errors:,}", style="red" if record.errors else ""),
        ]
        cells.extend(format_latency(value) for value in record.latencies_us())
        self.console.print(self._join(cells))
        self._rows += 1

    async def close(self) -> None:
        self.console.file.flush()

    def _print_header(self) -> None:
        self.console.print(self._join([Text(name, style="bold") for name in COLUMNS]))
        self._print_separator()
        self._header_printed = True

    def _print_separator(self) -> None:
        line = " | ".join("-" * width for width in WIDTHS)
        self.console.print(Text(line, style="dim"))

    def _join(self, cells: list[Text]) -> Text:
        line = Text()
        for idx, (cell, width) in enumerate(zip(cells, WIDTHS)):
            if idx:
                line.append(" | ", style="dim")
            cell.align("right", width)
            line.append_text(cell)
        return line
