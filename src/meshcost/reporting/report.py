from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..core.base import AggregatedEdge


@dataclass(frozen=True)
class CostReport:
    """Priced edges and their total, handed to renderers"""
    total_cost: float
    edges: Tuple[AggregatedEdge, ...]
    window: Optional[str] = None
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def priced_edges(self) -> List[AggregatedEdge]:
        return [e for e in self.edges if e.priced]

    @property
    def unpriced_edges(self) -> List[AggregatedEdge]:
        return [e for e in self.edges if not e.priced]

    @property
    def total_bytes(self) -> int:
        return sum(e.bytes for e in self.edges)

    def sorted_edges(self) -> List[AggregatedEdge]:
        return sorted(self.edges, key=lambda e: e.cost, reverse=True)

    def by_source_workload(self) -> List[Dict[str, Any]]:
        """Cost rolled up per source workload, most expensive first"""
        rollup: Dict[str, Dict[str, Any]] = {}
        for edge in self.edges:
            entry = rollup.setdefault(edge.source_workload, {
                "source_workload": edge.source_workload,
                "source_localities": set(),
                "bytes": 0,
                "cost": 0.0,
            })
            entry["source_localities"].add(edge.source_locality)
            entry["bytes"] += edge.bytes
            entry["cost"] += edge.cost

        rows = []
        for entry in rollup.values():
            entry["source_localities"] = sorted(entry["source_localities"])
            rows.append(entry)
        return sorted(rows, key=lambda r: r["cost"], reverse=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_cost": self.total_cost,
            "window": self.window,
            "generated_at": self.generated_at.isoformat(),
            "edges": [
                {
                    "source_workload": e.source_workload,
                    "source_locality": e.source_locality,
                    "destination_workload": e.destination_workload,
                    "destination_locality": e.destination_locality,
                    "bytes": e.bytes,
                    "cost": e.cost,
                    "priced": e.priced,
                }
                for e in self.sorted_edges()
            ],
        }


def build_report(edges: Iterable[AggregatedEdge], total_cost: float,
                 window: Optional[object] = None) -> CostReport:
    """Snapshot priced edges into a report"""
    return CostReport(
        total_cost=total_cost,
        edges=tuple(edges),
        window=str(window) if window is not None else None,
    )
