"""
Unit tests for HTML chart rendering.
"""

import io
from datetime import datetime, timezone

import pytest

from llcm.lifecycle.models import (
    DesiredState,
    ListEntry,
    ListEntryData,
    LogGroupEntry,
    OutputType,
    PreviewEntryData,
)
from llcm.lifecycle.simulator import simulate
from llcm.rendering import chart
from llcm.rendering.chart import (
    BAR_CHART_TITLE,
    MAX_BAR_CHART_ITEMS,
    MAX_PIE_CHART_ITEMS,
    OTHERS_LABEL,
    PIE_CHART_TITLE,
    bar_items,
    bar_subtitle,
    next_chart_path,
    pie_items,
    write_chart,
)
from llcm.rendering.renderer import Renderer
from tests.utils.mock_logs import make_log_group

NOW = datetime(2025, 4, 1, tzinfo=timezone.utc)


def log_group_entry(name, stored_bytes, retention_in_days=90):
    return LogGroupEntry.from_log_group(
        make_log_group(name, stored_bytes=stored_bytes, retention_in_days=retention_in_days), "us-east-1", NOW
    )


def list_data(*sizes):
    return ListEntryData(entries=[ListEntry(log_group_entry(f"group-{i:02d}", size)) for i, size in enumerate(sizes)])


def preview_data(count, desired=DesiredState.ONE_MONTH, stored_bytes=900):
    # created 2025-01-01 with 90 days retention: 1month keeps 300 of 900 bytes
    return PreviewEntryData(entries=[
        simulate(log_group_entry(f"group-{i:02d}", stored_bytes), desired) for i in range(count)
    ])


class TestPieItems:
    """Test cases for pie chart slices."""

    def test_one_slice_per_group(self):
        assert pie_items(list_data(300, 200, 100).entries) == [
            ("group-00", 300),
            ("group-01", 200),
            ("group-02", 100),
        ]

    def test_empty_groups_are_skipped(self):
        assert pie_items(list_data(0, 5, 0).entries) == [("group-01", 5)]

    def test_overflow_goes_to_others(self):
        sizes = list(range(100, 88, -1))
        items = pie_items(list_data(*sizes).entries)

        assert len(items) == MAX_PIE_CHART_ITEMS
        assert items[-1] == (OTHERS_LABEL, sum(sizes[MAX_PIE_CHART_ITEMS - 1:]))
        assert sum(value for _, value in items) == sum(sizes)

    def test_empty_groups_do_not_take_a_slice(self):
        sizes = [0] * 5 + [10] * (MAX_PIE_CHART_ITEMS - 1)
        items = pie_items(list_data(*sizes).entries)

        assert len(items) == MAX_PIE_CHART_ITEMS - 1
        assert OTHERS_LABEL not in [name for name, _ in items]


class TestBarItems:
    """Test cases for bar chart series."""

    def test_series_per_group(self):
        items = bar_items(preview_data(2).entries)

        assert items.names == ["group-00", "group-01"]
        assert items.remaining == [300, 300]
        assert items.reducible == [600, 600]

    def test_others_keeps_each_series_apart(self):
        items = bar_items(preview_data(MAX_BAR_CHART_ITEMS + 1).entries)

        assert len(items) == MAX_BAR_CHART_ITEMS
        assert items.names[-1] == OTHERS_LABEL
        assert items.remaining[-1] == 2 * 300
        assert items.reducible[-1] == 2 * 600

    def test_empty_groups_are_skipped(self):
        data = preview_data(1)
        data.entries.append(simulate(log_group_entry("empty", 0), DesiredState.ONE_MONTH))

        assert bar_items(data.entries).names == ["group-00"]

    @pytest.mark.parametrize("desired,subtitle", [
        (DesiredState.DELETE, "Desired state: Delete log groups"),
        (DesiredState.INFINITE, "Desired state: Delete retention policy"),
        (DesiredState.ONE_MONTH, "Desired state: Change retention to 30 days"),
    ])
    def test_subtitle(self, desired, subtitle):
        assert bar_subtitle(preview_data(1, desired=desired).entries) == subtitle

    def test_subtitle_without_entries(self):
        assert bar_subtitle([]) == ""


class TestWriteChart:
    """Test cases for chart files."""

    def test_next_chart_path_skips_existing_files(self, tmp_path):
        assert next_chart_path(tmp_path) == tmp_path / "llcm.html"

        (tmp_path / "llcm.html").write_text("")
        (tmp_path / "llcm1.html").write_text("")

        assert next_chart_path(tmp_path) == tmp_path / "llcm2.html"

    def test_list_writes_pie_chart(self, tmp_path):
        path = write_chart(list_data(300, 200), tmp_path)

        assert path == tmp_path / "llcm.html"
        page = path.read_text(encoding="utf-8")
        assert page.startswith("<!DOCTYPE html>")
        assert "<title>llcm</title>" in page
        assert "<svg" in page
        assert PIE_CHART_TITLE in page
        assert "group-00" in page

    def test_preview_writes_bar_chart(self, tmp_path):
        path = write_chart(preview_data(3), tmp_path)

        page = path.read_text(encoding="utf-8")
        assert BAR_CHART_TITLE in page
        assert "Desired state: Change retention to 30 days" in page

    def test_second_chart_does_not_overwrite(self, tmp_path):
        first = write_chart(list_data(1), tmp_path)
        second = write_chart(list_data(2), tmp_path)

        assert first != second
        assert second.name == "llcm1.html"

    @pytest.mark.parametrize("data", [ListEntryData(), PreviewEntryData(), list_data(0, 0)])
    def test_nothing_to_chart(self, tmp_path, data):
        assert write_chart(data, tmp_path) is None
        assert list(tmp_path.iterdir()) == []

    def test_open_browser(self, tmp_path, monkeypatch):
        opened = []
        monkeypatch.setattr(chart.webbrowser, "open", opened.append)

        path = write_chart(list_data(1), tmp_path, open_browser=True)

        assert opened == [path.resolve().as_uri()]

    def test_renderer_writes_chart_file(self, tmp_path):
        stream = io.StringIO()

        Renderer(list_data(10), OutputType.CHART, stream, chart_dir=tmp_path).render()

        assert stream.getvalue() == ""
        assert (tmp_path / "llcm.html").exists()
