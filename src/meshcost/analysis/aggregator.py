import logging
from typing import Dict, Iterable, List

from ..core.base import AggregatedEdge, EdgeKey, RawEdgeSample

logger = logging.getLogger(__name__)


class LocalityAggregator:
    """Merges raw samples that share a workload/locality link.

    Many pods can produce the same link, so samples are keyed on the link
    identity alone and their byte counts summed.
    """

    def __init__(self):
        self._edges: Dict[EdgeKey, AggregatedEdge] = {}
        self.samples_seen = 0

    def add(self, sample: RawEdgeSample) -> AggregatedEdge:
        self.samples_seen += 1
        key = sample.key
        edge = self._edges.get(key)
        if edge is None:
            edge = self._edges[key] = AggregatedEdge(key=key, bytes=sample.bytes)
        else:
            edge.bytes += sample.bytes
        return edge

    def add_all(self, samples: Iterable[RawEdgeSample]) -> "LocalityAggregator":
        for sample in samples:
            self.add(sample)
        return self

    def edges(self) -> List[AggregatedEdge]:
        """Aggregated edges in no particular order"""
        return list(self._edges.values())

    def __len__(self) -> int:
        return len(self._edges)


def aggregate(samples: Iterable[RawEdgeSample]) -> List[AggregatedEdge]:
    """Collapse raw samples into one edge per unique link"""
    aggregator = LocalityAggregator().add_all(samples)
    logger.debug(
        f"Aggregated {aggregator.samples_seen} samples into {len(aggregator)} edges"
    )
    return aggregator.edges()
