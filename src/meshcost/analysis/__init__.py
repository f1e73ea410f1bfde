from .readiness import ReadinessGate
from .correlator import QueryWindow, TelemetryCorrelator
from .aggregator import LocalityAggregator, aggregate
from .pricing import RateTable, FlatRateTable, TieredRateTable, PricingEngine, price_edges
from .pricing_loader import TieredPricingDocument, load_rate_table

__all__ = [
    'ReadinessGate',
    'QueryWindow', 'TelemetryCorrelator',
    'LocalityAggregator', 'aggregate',
    'RateTable', 'FlatRateTable', 'TieredRateTable', 'PricingEngine', 'price_edges',
    'TieredPricingDocument', 'load_rate_table',
]
