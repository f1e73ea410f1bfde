import logging
from typing import Callable, Optional

from ...analysis.aggregator import aggregate
from ...analysis.correlator import QueryWindow, TelemetryCorrelator
from ...analysis.pricing import PricingEngine, RateTable
from ...analysis.pricing_loader import load_rate_table
from ...analysis.readiness import ReadinessGate
from ...providers.prometheus import PortForwarder, PrometheusClient
from ...reporting import CostReport, build_report
from ..base import CloudProfile, get_cloud_profile
from ..config import Settings
from ..logging import get_performance_logger


class CostPipeline:
    """Runs readiness -> correlation -> aggregation -> pricing -> report.

    Fatal errors (connectivity, malformed pricing or query responses) are
    raised to the caller unchanged; data-quality problems are logged by the
    stage that finds them and the run carries on.
    """

    def __init__(self, correlator: TelemetryCorrelator, rate_table: RateTable,
                 gate: Optional[ReadinessGate] = None,
                 bring_up: Optional[Callable[[], None]] = None,
                 forwarder: Optional[PortForwarder] = None):
        self.correlator = correlator
        self.rate_table = rate_table
        self.gate = gate
        self.forwarder = forwarder
        self.bring_up = bring_up or (forwarder.run if forwarder else None)
        self.logger = logging.getLogger(__name__)
        self.perf = get_performance_logger()

    @classmethod
    def from_settings(cls, settings: Settings, port_forward: bool = True,
                      profile: Optional[CloudProfile] = None) -> "CostPipeline":
        """Wire the pipeline from configuration; loads the rate table once"""
        profile = profile or get_cloud_profile(settings.pricing.cloud or settings.cloud)
        prom = settings.prometheus

        rate_table = load_rate_table(settings.price_location(), profile)
        client = PrometheusClient(prom.endpoint, timeout=prom.request_timeout)
        gate = ReadinessGate(
            prom.endpoint,
            poll_interval=prom.poll_interval,
            max_retries=prom.forward_retries,
            probe_timeout=prom.probe_timeout,
            timeout=prom.ready_timeout,
        )
        forwarder = None
        if port_forward:
            forwarder = PortForwarder(
                namespace=prom.namespace,
                deployment=prom.deployment,
                local_port=prom.local_port,
                remote_port=prom.remote_port,
            )

        return cls(
            correlator=TelemetryCorrelator(client, profile, settings.query),
            rate_table=rate_table,
            gate=gate,
            forwarder=forwarder,
        )

    def run(self, window: Optional[QueryWindow] = None) -> CostReport:
        window = window or QueryWindow.snapshot()
        self.logger.info(f"Starting cost analysis for window {window}")

        if self.gate is not None:
            with self.perf.timer("readiness"):
                self.gate.ensure_reachable(self.bring_up)

        with self.perf.timer("correlation"):
            samples = self.correlator.query(window)

        with self.perf.timer("aggregation"):
            edges = aggregate(samples)
        self.logger.info(f"Aggregated {len(samples)} samples into {len(edges)} links")

        with self.perf.timer("pricing"):
            total = PricingEngine(self.rate_table).price(edges)

        report = build_report(edges, total, window)
        self.logger.info(
            f"Cost analysis complete: {len(report.priced_edges)}/{len(edges)} links priced, "
            f"total ${total:.4f}"
        )
        return report

    def close(self) -> None:
        if self.forwarder is not None:
            self.forwarder.stop()
        self.correlator.client.close()
