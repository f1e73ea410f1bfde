from dataclasses import dataclass, field
from typing import NamedTuple


class EdgeKey(NamedTuple):
    """Identity of a directed workload/locality link"""
    source_workload: str
    source_locality: str
    destination_workload: str
    destination_locality: str

    def __str__(self) -> str:
        return (
            f"{self.source_workload} ({self.source_locality}) -> "
            f"{self.destination_workload} ({self.destination_locality})"
        )


@dataclass(frozen=True)
class RawEdgeSample:
    """One observation of bytes sent over a link"""
    source_workload: str
    source_locality: str
    destination_workload: str
    destination_locality: str
    bytes: int

    @property
    def key(self) -> EdgeKey:
        return EdgeKey(
            self.source_workload,
            self.source_locality,
            self.destination_workload,
            self.destination_locality,
        )


@dataclass
class AggregatedEdge:
    """Accumulated traffic for one link, priced once by the pricing engine"""
    key: EdgeKey
    bytes: int = 0
    cost: float = 0.0
    priced: bool = field(default=False, compare=False)

    @property
    def source_workload(self) -> str:
        return self.key.source_workload

    @property
    def source_locality(self) -> str:
        return self.key.source_locality

    @property
    def destination_workload(self) -> str:
        return self.key.destination_workload

    @property
    def destination_locality(self) -> str:
        return self.key.destination_locality

    @property
    def megabytes(self) -> float:
        return self.bytes / 10**6

    def describe(self) -> str:
        """One-line summary for log messages"""
        return f"{self.key}: {self.bytes} bytes, ${self.cost:.4f}"
