from rich.console import Console
from rich.table import Table

from .report import CostReport


def format_cost(cost: float) -> str:
    if cost == 0:
        return "-"
    if cost < 0.01:
        return "<$0.01"
    return f"${cost:.2f}"


def render_report(console: Console, report: CostReport, details: bool = False) -> None:
    """Print the report as a borderless, kubectl-style table"""
    console.print(f"\nTotal: [bold]{format_cost(report.total_cost)}[/bold]\n")

    table = Table(box=None, show_edge=False, pad_edge=False, header_style="bold")
    if details:
        for header in ("SOURCE SERVICE", "SOURCE LOCALITY", "DESTINATION SERVICE",
                       "DESTINATION LOCALITY", "TRANSFERRED (MB)", "COST"):
            table.add_column(header)
        for edge in report.sorted_edges():
            table.add_row(
                edge.source_workload, edge.source_locality,
                edge.destination_workload, edge.destination_locality,
                f"{edge.megabytes:f}", format_cost(edge.cost),
            )
    else:
        for header in ("SOURCE SERVICE", "SOURCE LOCALITY", "COST"):
            table.add_column(header)
        for row in report.by_source_workload():
            table.add_row(
                row["source_workload"],
                ", ".join(row["source_localities"]),
                format_cost(row["cost"]),
            )

    console.print(table)

    unpriced = len(report.unpriced_edges)
    if unpriced:
        console.print(f"[yellow]{unpriced} link(s) had no published rate and were not priced[/yellow]")
