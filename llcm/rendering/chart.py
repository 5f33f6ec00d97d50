"""
HTML charts of collected entries.

List data is drawn as a pie chart of stored bytes, preview data as a
stacked bar chart of remaining and reducible bytes. Figures are rendered
to SVG with matplotlib and embedded in a standalone HTML page written to
``llcm.html`` (or ``llcm1.html``, ``llcm2.html``, ... when taken).
"""

import html
import io
import webbrowser
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import structlog
from matplotlib import rc_context
from matplotlib.figure import Figure

from llcm.lifecycle.models import DesiredState, EntryData, ListEntry, PreviewEntry, PreviewEntryData

logger = structlog.get_logger(__name__)

PAGE_TITLE = "llcm"
BASE_NAME = "llcm"

# Slice and bar counts include the "others" bucket
MAX_PIE_CHART_ITEMS = 11
MAX_BAR_CHART_ITEMS = 31

PIE_CHART_TITLE = "Stored bytes of log groups"
BAR_CHART_TITLE = "The simulation of reductions in log groups"
OTHERS_LABEL = "others"

_PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
</head>
<body>
<div class="chart">
{svg}
</div>
</body>
</html>
"""


@dataclass
class BarItems:
    """Parallel series of the bar chart."""
    names: List[str] = field(default_factory=list)
    remaining: List[int] = field(default_factory=list)
    reducible: List[int] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.names)


def pie_items(entries: Sequence[ListEntry]) -> List[Tuple[str, int]]:
    """
    Build (name, stored bytes) slices from entries sorted largest first.

    Empty log groups are skipped. Entries past the first
    MAX_PIE_CHART_ITEMS - 1 slices are summed into an "others" slice.
    """
    items: List[Tuple[str, int]] = []
    others = 0
    for entry in entries:
        if entry.stored_bytes == 0:
            continue
        if len(items) < MAX_PIE_CHART_ITEMS - 1:
            items.append((entry.name, entry.stored_bytes))
        else:
            others += entry.stored_bytes
    if others > 0:
        items.append((OTHERS_LABEL, others))
    return items


def bar_items(entries: Sequence[PreviewEntry]) -> BarItems:
    """
    Build remaining/reducible series from entries sorted largest first.

    Empty log groups are skipped. Entries past the first
    MAX_BAR_CHART_ITEMS - 1 bars are summed into an "others" bar, each
    series into its own bucket.
    """
    items = BarItems()
    others_remaining = 0
    others_reducible = 0
    for entry in entries:
        if entry.stored_bytes == 0:
            continue
        if len(items) < MAX_BAR_CHART_ITEMS - 1:
            items.names.append(entry.name)
            items.remaining.append(entry.remaining_bytes)
            items.reducible.append(entry.reducible_bytes)
        else:
            others_remaining += entry.remaining_bytes
            others_reducible += entry.reducible_bytes
    if others_remaining > 0 or others_reducible > 0:
        items.names.append(OTHERS_LABEL)
        items.remaining.append(others_remaining)
        items.reducible.append(others_reducible)
    return items


def bar_subtitle(entries: Sequence[PreviewEntry]) -> str:
    if not entries:
        return ""
    desired = entries[0].desired_state
    if desired is DesiredState.DELETE:
        return "Desired state: Delete log groups"
    if desired is DesiredState.INFINITE:
        return "Desired state: Delete retention policy"
    return f"Desired state: Change retention to {int(desired)} days"


def pie_figure(items: Sequence[Tuple[str, int]]) -> Figure:
    fig = Figure(figsize=(12.8, 7.2))
    ax = fig.add_subplot()
    wedges, _, _ = ax.pie(
        [value for _, value in items],
        autopct="%1.1f%%",
        startangle=90,
        counterclock=False,
    )
    ax.set_title(PIE_CHART_TITLE)
    ax.axis("equal")
    fig.legend(wedges, [name for name, _ in items], loc="lower right")
    return fig


def bar_figure(items: BarItems, subtitle: str) -> Figure:
    fig = Figure(figsize=(16, 9), layout="tight")
    ax = fig.add_subplot()
    # Positions, not names, on the x axis: a name can repeat across regions
    positions = list(range(len(items)))
    ax.bar(positions, items.remaining, label="Remaining bytes")
    ax.bar(positions, items.reducible, bottom=items.remaining, label="Reducible bytes")
    ax.set_xticks(positions)
    ax.set_xticklabels(items.names, rotation=45, ha="right")
    ax.grid(axis="x")
    ax.set_axisbelow(True)
    ax.set_title(subtitle)
    ax.legend(loc="upper right")
    fig.suptitle(BAR_CHART_TITLE)
    return fig


def to_html(fig: Figure, title: str = PAGE_TITLE) -> str:
    """Render a figure as a standalone HTML page with an inline SVG."""
    buffer = io.StringIO()
    # Keep text as <text> elements instead of glyph paths
    with rc_context({"svg.fonttype": "none"}):
        fig.savefig(buffer, format="svg")
    svg = buffer.getvalue()
    svg = svg[svg.index("<svg"):]
    return _PAGE_TEMPLATE.format(title=html.escape(title), svg=svg)


def next_chart_path(directory: Path) -> Path:
    """First of llcm.html, llcm1.html, llcm2.html, ... that does not exist."""
    path = directory / f"{BASE_NAME}.html"
    i = 1
    while path.exists():
        path = directory / f"{BASE_NAME}{i}.html"
        i += 1
    return path


def build_figure(data: EntryData) -> Optional[Figure]:
    """Pie chart for list data, bar chart for preview data; None when nothing has bytes."""
    if isinstance(data, PreviewEntryData):
        items = bar_items(data.entries)
        if not items:
            return None
        return bar_figure(items, bar_subtitle(data.entries))
    slices = pie_items(data.entries)
    if not slices:
        return None
    return pie_figure(slices)


def write_chart(data: EntryData, directory: Optional[Path] = None, open_browser: bool = False) -> Optional[Path]:
    """
    Write the chart of the entries to a new HTML file.

    Args:
        data: Collected entries
        directory: Where the file is created. Defaults to the working directory.
        open_browser: Open the file in the default browser once written

    Returns:
        Path of the written file, or None when there is nothing to chart
    """
    if not data.entries:
        return None
    fig = build_figure(data)
    if fig is None:
        logger.info("nothing to chart", entries=len(data.entries))
        return None

    path = next_chart_path(Path(directory) if directory is not None else Path.cwd())
    path.write_text(to_html(fig), encoding="utf-8")
    logger.info("chart written", path=str(path))

    if open_browser:
        webbrowser.open(path.resolve().as_uri())
    return path
