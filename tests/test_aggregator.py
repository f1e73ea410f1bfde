"""Tests for the locality aggregator"""

import itertools

from meshcost.analysis.aggregator import LocalityAggregator, aggregate
from meshcost.core.base import EdgeKey, RawEdgeSample


def _totals(edges):
    return {edge.key: edge.bytes for edge in edges}


class TestAggregate:
    """Test aggregate()"""

    def test_merges_samples_sharing_a_link(self, sample_edges):
        edges = aggregate(sample_edges)

        assert _totals(edges) == {
            EdgeKey("frontend", "us-west1-a", "cart", "us-west1-b"): 400,
            EdgeKey("cart", "us-west1-b", "db", "europe-west1-b"): 4000,
        }
        assert all(edge.cost == 0 for edge in edges)

    def test_order_independent(self, sample_edges):
        expected = _totals(aggregate(sample_edges))
        for permutation in itertools.permutations(sample_edges):
            assert _totals(aggregate(permutation)) == expected

    def test_links_differing_in_any_field_stay_separate(self):
        base = ("a", "us-west1-a", "b", "us-west1-b")
        samples = [RawEdgeSample(*base, 1)]
        for i in range(4):
            fields = list(base)
            fields[i] = fields[i] + "x" if i % 2 == 0 else "us-east1-c"
            samples.append(RawEdgeSample(*fields, 1))

        assert len(aggregate(samples)) == 5

    def test_empty(self):
        assert aggregate([]) == []


class TestLocalityAggregator:
    """Test incremental aggregation"""

    def test_add_returns_running_edge(self):
        aggregator = LocalityAggregator()
        first = aggregator.add(RawEdgeSample("a", "us-west1-a", "b", "us-west1-b", 5))
        second = aggregator.add(RawEdgeSample("a", "us-west1-a", "b", "us-west1-b", 7))

        assert first is second
        assert second.bytes == 12
        assert len(aggregator) == 1
        assert aggregator.samples_seen == 2

    def test_identity_fields(self):
        edge = LocalityAggregator().add(RawEdgeSample("a", "us-west1-a", "b", "us-west1-b", 5))
        assert edge.source_workload == "a"
        assert edge.source_locality == "us-west1-a"
        assert edge.destination_workload == "b"
        assert edge.destination_locality == "us-west1-b"

    def test_describe(self):
        edge = LocalityAggregator().add(RawEdgeSample("a", "us-west1-a", "b", "us-west1-b", 5))
        edge.cost = 0.25
        assert edge.describe() == "a (us-west1-a) -> b (us-west1-b): 5 bytes, $0.2500"
