"""Tests for the report assembler and console rendering"""

import pytest
from rich.console import Console

from meshcost.core.base import AggregatedEdge, EdgeKey
from meshcost.reporting import CostReport, build_report
from meshcost.reporting.console import format_cost, render_report


def _edges():
    return [
        AggregatedEdge(EdgeKey("frontend", "us-west1-a", "cart", "us-west1-b"),
                       bytes=2 * 10**9, cost=0.02, priced=True),
        AggregatedEdge(EdgeKey("frontend", "us-west1-a", "db", "us-east1-b"),
                       bytes=10**9, cost=0.5, priced=True),
        AggregatedEdge(EdgeKey("cart", "us-west1-b", "db", "asia-east1-a"),
                       bytes=10**6),
    ]


class TestCostReport:
    """Test CostReport"""

    def test_build_report(self):
        report = build_report(_edges(), 0.52, window="@ now")

        assert isinstance(report, CostReport)
        assert report.total_cost == 0.52
        assert len(report.edges) == 3
        assert isinstance(report.edges, tuple)
        assert report.window == "@ now"
        assert len(report.priced_edges) == 2
        assert [e.destination_locality for e in report.unpriced_edges] == ["asia-east1-a"]
        assert report.total_bytes == 3 * 10**9 + 10**6

    def test_by_source_workload(self):
        rows = build_report(_edges(), 0.52).by_source_workload()

        assert [r["source_workload"] for r in rows] == ["frontend", "cart"]
        assert rows[0]["cost"] == pytest.approx(0.52)
        assert rows[0]["bytes"] == 3 * 10**9
        assert rows[0]["source_localities"] == ["us-west1-a"]

    def test_to_dict(self):
        data = build_report(_edges(), 0.52).to_dict()

        assert data["total_cost"] == 0.52
        assert [e["cost"] for e in data["edges"]] == [0.5, 0.02, 0.0]
        assert data["edges"][2]["priced"] is False


class TestConsoleRendering:
    """Test console output"""

    def test_format_cost(self):
        assert format_cost(0) == "-"
        assert format_cost(0.004) == "<$0.01"
        assert format_cost(12.345) == "$12.35"

    def test_render_summary(self):
        console = Console(record=True, width=200)
        render_report(console, build_report(_edges(), 0.52))
        text = console.export_text()

        assert "Total: $0.52" in text
        assert "frontend" in text
        assert "1 link(s) had no published rate" in text

    def test_render_details(self):
        console = Console(record=True, width=200)
        render_report(console, build_report(_edges(), 0.52), details=True)
        text = console.export_text()

        assert "DESTINATION LOCALITY" in text
        assert "asia-east1-a" in text
        assert "2000.000000" in text
