"""Render collected entries as JSON, tables, TSV or an HTML chart."""

import csv
import io
import json
from pathlib import Path
from typing import Any, List, Optional, TextIO

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from llcm.lifecycle.models import EntryData, OutputType
from llcm.rendering.chart import write_chart

# Wide enough that rich never wraps or truncates a column
TABLE_WIDTH = 10000

_TABLE_BOXES = {
    OutputType.TEXT: box.ASCII,
    OutputType.COMPRESSED_TEXT: box.ASCII,
    OutputType.MARKDOWN: box.MARKDOWN,
}


class Renderer:
    """
    Writes ListEntryData or PreviewEntryData to a stream.

    Args:
        data: Collected entries
        output_type: Format to render
        stream: Destination text stream
        chart_dir: Directory of chart files. Defaults to the working directory.
        open_browser: Open a written chart in the default browser
    """

    def __init__(
        self,
        data: EntryData,
        output_type: OutputType,
        stream: TextIO,
        chart_dir: Optional[Path] = None,
        open_browser: bool = False,
    ):
        self.data = data
        self.output_type = output_type
        self.stream = stream
        self.chart_dir = chart_dir
        self.open_browser = open_browser

    def render(self) -> None:
        if self.output_type in (OutputType.JSON, OutputType.PRETTY_JSON):
            self._render_json()
        elif self.output_type in _TABLE_BOXES:
            self._render_table()
        elif self.output_type is OutputType.BACKLOG:
            self._render_backlog()
        elif self.output_type is OutputType.TSV:
            self._render_tsv()
        elif self.output_type is OutputType.CHART:
            write_chart(self.data, self.chart_dir, self.open_browser)

    def _rows(self) -> List[List[Any]]:
        return [entry.to_row() for entry in self.data.entries]

    def _render_json(self) -> None:
        indent = 2 if self.output_type is OutputType.PRETTY_JSON else None
        json.dump([entry.to_dict() for entry in self.data.entries], self.stream, indent=indent)
        self.stream.write("\n")

    def _render_table(self) -> None:
        rows = self._rows()
        if not rows:
            return

        table = Table(
            box=_TABLE_BOXES[self.output_type],
            show_lines=self.output_type is OutputType.TEXT,
            header_style=None,
            safe_box=True,
        )
        for i, label in enumerate(self.data.header):
            justify = "right" if isinstance(rows[0][i], int) else "left"
            table.add_column(label, justify=justify, no_wrap=True)
        for row in rows:
            # Text avoids markup interpretation of log group names
            table.add_row(*[Text(str(value)) for value in row])

        console = Console(
            file=io.StringIO(),
            width=TABLE_WIDTH,
            color_system=None,
            highlight=False,
            emoji=False,
            markup=False,
        )
        with console.capture() as capture:
            console.print(table)

        # The markdown box draws its outer edges as blank lines
        for line in capture.get().splitlines():
            if line.strip():
                self.stream.write(line.rstrip() + "\n")

    def _render_backlog(self) -> None:
        rows = self._rows()
        if not rows:
            return
        self.stream.write("| " + " | ".join(self.data.header) + " |h\n")
        for row in rows:
            self.stream.write("| " + " | ".join(str(value) for value in row) + " |\n")

    def _render_tsv(self) -> None:
        rows = self._rows()
        if not rows:
            return
        writer = csv.writer(self.stream, delimiter="\t", lineterminator="\n")
        writer.writerow(self.data.header)
        writer.writerows(rows)
