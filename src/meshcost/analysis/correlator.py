"""
Telemetry Correlator - turns request-byte counters into raw edge samples.

Snapshot mode takes each row's cumulative counter as the byte count.
Delta mode queries the counter at both ends of a window and emits the
difference for every link seen at both ends.
"""

import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from ..core.base import CloudProfile, EdgeKey, RawEdgeSample
from ..core.config import QueryConfig
from ..providers.prometheus import PrometheusClient, VectorSample

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueryWindow:
    """A single instant (snapshot) or a start/end pair (delta)"""
    end: datetime
    start: Optional[datetime] = None

    def __post_init__(self):
        if self.start is not None and self.start > self.end:
            raise ValueError(f"window start {self.start} is after end {self.end}")

    @property
    def is_delta(self) -> bool:
        return self.start is not None

    @classmethod
    def snapshot(cls, at: Optional[datetime] = None) -> "QueryWindow":
        return cls(end=at or datetime.now(timezone.utc))

    @classmethod
    def between(cls, start: datetime, end: datetime) -> "QueryWindow":
        return cls(end=end, start=start)

    def __str__(self) -> str:
        if self.is_delta:
            return f"{self.start.isoformat()} .. {self.end.isoformat()}"
        return f"@ {self.end.isoformat()}"


class TelemetryCorrelator:
    """Queries the metrics backend and emits validated raw edge samples"""

    def __init__(self, client: PrometheusClient, profile: CloudProfile,
                 query_config: Optional[QueryConfig] = None):
        self.client = client
        self.profile = profile
        self.query_config = query_config or QueryConfig()
        self.dropped_rows = 0

    def query(self, window: QueryWindow) -> List[RawEdgeSample]:
        """Collect raw edge samples for the window.

        Backend failures propagate as QueryError; rows with bad localities
        are dropped and counted in ``dropped_rows``.
        """
        self.dropped_rows = 0
        selector = self.query_config.selector()

        if not window.is_delta:
            rows = self.client.query(selector, window.end)
            samples = [
                self._sample(key, int(value))
                for key, value in self._valid_rows(rows)
            ]
        else:
            start_rows = self.client.query(selector, window.start)
            end_rows = self.client.query(selector, window.end)
            samples = self._deltas(
                self._sum_by_key(self._valid_rows(start_rows)),
                self._sum_by_key(self._valid_rows(end_rows)),
            )

        logger.info(
            f"Correlated {len(samples)} samples for window {window} "
            f"({self.dropped_rows} rows dropped)"
        )
        return samples

    def _valid_rows(self, rows: Iterable[VectorSample]):
        qc = self.query_config
        for row in rows:
            key = EdgeKey(
                source_workload=row.label(qc.source_workload_label),
                source_locality=row.label(qc.source_locality_label),
                destination_workload=row.label(qc.destination_workload_label),
                destination_locality=row.label(qc.destination_locality_label),
            )
            if not self.profile.validate_locality(key.destination_locality):
                self._drop(f"skipping invalid destination locality: {key.destination_locality!r}")
                continue
            if not self.profile.validate_locality(key.source_locality):
                self._drop(f"skipping invalid source locality: {key.source_locality!r}")
                continue
            if not key.source_workload or not key.destination_workload:
                self._drop(f"skipping row without workload labels: {key}")
                continue
            if not math.isfinite(row.value):
                self._drop(f"skipping non-finite counter value {row.value} for {key}")
                continue
            yield key, row.value

    def _drop(self, message: str) -> None:
        self.dropped_rows += 1
        logger.warning(message)

    @staticmethod
    def _sum_by_key(rows) -> Dict[EdgeKey, float]:
        # several series (e.g. one per response code) can share one link
        totals: Dict[EdgeKey, float] = defaultdict(float)
        for key, value in rows:
            totals[key] += value
        return totals

    def _deltas(self, start: Dict[EdgeKey, float],
                end: Dict[EdgeKey, float]) -> List[RawEdgeSample]:
        samples = []
        for key, end_value in end.items():
            if key not in start:
                logger.debug(f"{key} only present at window end, skipping")
                continue
            delta = int(end_value) - int(start[key])
            if delta < 0:
                logger.warning(
                    f"counter for {key} decreased ({int(start[key])} -> {int(end_value)}), "
                    f"possible counter reset"
                )
            samples.append(self._sample(key, delta))
        return samples

    @staticmethod
    def _sample(key: EdgeKey, byte_count: int) -> RawEdgeSample:
        return RawEdgeSample(
            source_workload=key.source_workload,
            source_locality=key.source_locality,
            destination_workload=key.destination_workload,
            destination_locality=key.destination_locality,
            bytes=byte_count,
        )
