"""
Egress pricing for aggregated edges.

Two rate-table strategies are supported and kept separate:

* ``FlatRateTable`` - a pairwise ``locality -> locality -> $/GB`` matrix.
* ``TieredRateTable`` - per-continent rates for the inter-zone,
  inter-region and inter-continent tiers; traffic inside one zone is free.

Rates are stored per gigabyte (10^9 bytes). An edge without a published
rate is left at zero cost and excluded from the total.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Optional

from ..core.base import AggregatedEdge, CloudProfile, GCP_PROFILE, Locality, Tier
from ..core.exceptions import LocalityFormatError

logger = logging.getLogger(__name__)

BYTES_PER_GB = 10**9


class RateTable(ABC):
    """Looks up the price per GB for traffic between two localities"""

    @abstractmethod
    def rate_for(self, source: str, destination: str) -> Optional[float]:
        """Price per GB, or None when no rate is published"""
        pass

    @abstractmethod
    def describe(self) -> str:
        pass


@dataclass(frozen=True)
class FlatRateTable(RateTable):
    rates: Mapping[str, Mapping[str, float]] = field(default_factory=dict)

    def rate_for(self, source: str, destination: str) -> Optional[float]:
        return self.rates.get(source, {}).get(destination)

    def describe(self) -> str:
        return f"flat rate table ({len(self.rates)} source localities)"


@dataclass(frozen=True)
class TieredRateTable(RateTable):
    inter_zone: Mapping[str, float] = field(default_factory=dict)
    inter_region: Mapping[str, float] = field(default_factory=dict)
    inter_continent: Mapping[str, float] = field(default_factory=dict)
    profile: CloudProfile = GCP_PROFILE

    def rates(self, tier: Tier) -> Mapping[str, float]:
        return {
            Tier.INTER_ZONE: self.inter_zone,
            Tier.INTER_REGION: self.inter_region,
            Tier.INTER_CONTINENT: self.inter_continent,
        }[tier]

    def tier_for(self, source: str, destination: str) -> Tier:
        return self.profile.classify(
            self.profile.parse_locality(source), self.profile.parse_locality(destination)
        )

    def rate_for(self, source: str, destination: str) -> Optional[float]:
        tier = self.tier_for(source, destination)
        if tier is Tier.SAME_ZONE:
            return 0.0
        # rates are published per destination continent
        continent = Locality.parse(destination).continent
        return self.rates(tier).get(continent)

    def describe(self) -> str:
        return (
            f"tiered rate table ({len(self.inter_zone)} inter-zone, "
            f"{len(self.inter_region)} inter-region, "
            f"{len(self.inter_continent)} inter-continent rates)"
        )


class PricingEngine:
    """Prices aggregated edges against a rate table"""

    def __init__(self, table: RateTable):
        self.table = table
        self.skipped = 0

    def edge_cost(self, edge: AggregatedEdge, rate: float) -> float:
        return rate * edge.bytes / BYTES_PER_GB

    def price(self, edges: Iterable[AggregatedEdge]) -> float:
        """Set each edge's cost in place and return the total.

        Edges with no matching rate keep a zero cost and are left out of
        the total; they never fail the calculation.
        """
        edges = list(edges)
        self.skipped = 0
        total = 0.0
        logger.info(f"calculating egress costs for {len(edges)} call links")

        for edge in edges:
            edge.cost = 0.0
            edge.priced = False
            try:
                rate = self.table.rate_for(edge.source_locality, edge.destination_locality)
            except LocalityFormatError as e:
                self.skipped += 1
                logger.warning(f"cannot price {edge.describe()}: {e}, skipping...")
                continue

            if rate is None:
                self.skipped += 1
                logger.warning(
                    f"unable to find rate for link between {edge.source_locality} "
                    f"and {edge.destination_locality} ({edge.describe()}), skipping..."
                )
                continue

            edge.cost = self.edge_cost(edge, rate)
            edge.priced = True
            total += edge.cost

        if self.skipped:
            logger.warning(f"{self.skipped} of {len(edges)} links had no rate")
        return total


def price_edges(table: RateTable, edges: Iterable[AggregatedEdge]) -> float:
    return PricingEngine(table).price(edges)
