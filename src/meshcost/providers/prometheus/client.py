import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from ...core.exceptions import QueryError, QueryTransportError, ResponseFormatError


@dataclass(frozen=True)
class VectorSample:
    """One row of an instant-vector query result"""
    labels: Dict[str, str]
    value: float

    def label(self, name: str) -> str:
        return self.labels.get(name, "")


class PrometheusClient:
    """Minimal client for the Prometheus HTTP query API"""

    QUERY_PATH = "/api/v1/query"

    def __init__(self, endpoint: str, timeout: float = 30.0,
                 client: Optional[httpx.Client] = None):
        self.endpoint = endpoint.rstrip("/")
        self._client = client or httpx.Client(base_url=self.endpoint, timeout=timeout)
        self._owns_client = client is None
        self.logger = logging.getLogger(__name__)

    def __enter__(self) -> "PrometheusClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def query(self, promql: str, at: Optional[datetime] = None) -> List[VectorSample]:
        """Run an instant query and return the resulting vector rows"""
        params = {"query": promql}
        if at is not None:
            if at.tzinfo is None:
                at = at.replace(tzinfo=timezone.utc)
            params["time"] = at.isoformat()

        try:
            response = self._client.get(self.QUERY_PATH, params=params)
        except httpx.HTTPError as e:
            raise QueryTransportError(f"error querying prometheus at {self.endpoint}: {e}") from e

        if response.is_error:
            raise QueryError(
                f"prometheus returned HTTP {response.status_code}: {response.text[:200]}"
            )

        try:
            body = response.json()
        except ValueError as e:
            raise ResponseFormatError(f"prometheus returned a non-JSON body: {e}") from e

        return self._parse_vector(body)

    def _parse_vector(self, body: Any) -> List[VectorSample]:
        if not isinstance(body, dict):
            raise ResponseFormatError("unexpected response: body is not an object")
        if body.get("status") != "success":
            raise QueryError(
                f"query failed: {body.get('errorType', 'unknown')}: {body.get('error', '')}"
            )

        for warning in body.get("warnings") or []:
            self.logger.warning(f"Prometheus warning: {warning}")

        data = body.get("data")
        if not isinstance(data, dict) or data.get("resultType") != "vector":
            result_type = data.get("resultType") if isinstance(data, dict) else None
            raise ResponseFormatError(f"expected a vector result, got {result_type!r}")

        rows = data.get("result")
        if not isinstance(rows, list):
            raise ResponseFormatError("vector result is not a list")

        samples = []
        for row in rows:
            try:
                labels = row["metric"]
                _, raw_value = row["value"]
                samples.append(VectorSample(
                    labels={str(k): str(v) for k, v in labels.items()},
                    value=float(raw_value),
                ))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                raise ResponseFormatError(f"malformed vector row {row!r}: {e}") from e

        return samples
