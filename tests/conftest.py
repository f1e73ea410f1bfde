"""Pytest configuration and fixtures"""

import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from meshcost.core.base import AWS_PROFILE, GCP_PROFILE, RawEdgeSample
from meshcost.core.config import Settings
from meshcost.providers.prometheus import PrometheusClient

PROM_URL = "http://prometheus.test"

WINDOW_END = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
WINDOW_START = WINDOW_END - timedelta(hours=1)


def vector_row(src, src_loc, dst, dst_loc, value, **extra):
    """Build one instant-vector row as Prometheus returns it"""
    metric = {
        "__name__": "istio_request_bytes_sum",
        "source_workload": src,
        "locality": src_loc,
        "destination_workload": dst,
        "destination_locality": dst_loc,
    }
    metric.update(extra)
    return {"metric": metric, "value": [1714564800.0, str(value)]}


def vector_response(rows, warnings=None):
    body = {"status": "success", "data": {"resultType": "vector", "result": rows}}
    if warnings:
        body["warnings"] = warnings
    return httpx.Response(200, json=body)


@pytest.fixture
def test_settings():
    """Create test settings"""
    return Settings(
        environment="test",
        cloud="gcp",
        prometheus={
            "endpoint": PROM_URL,
            "poll_interval": 0.01,
        },
        logging={
            "level": "DEBUG",
            "console": False,
        },
    )


@pytest.fixture
def gcp_profile():
    return GCP_PROFILE


@pytest.fixture
def aws_profile():
    return AWS_PROFILE


@pytest.fixture
def prom_client_factory():
    """Build a PrometheusClient whose responses come from a handler.

    The handler receives the httpx.Request; every request is also recorded
    on ``factory.requests``.
    """
    clients = []

    def factory(handler):
        def recording(request):
            factory.requests.append(request)
            return handler(request)

        http = httpx.Client(base_url=PROM_URL, transport=httpx.MockTransport(recording))
        clients.append(http)
        return PrometheusClient(PROM_URL, client=http)

    factory.requests = []
    yield factory

    for http in clients:
        http.close()


@pytest.fixture
def windowed_client(prom_client_factory):
    """Client answering with different vectors for the window start and end"""
    def build(start_rows, end_rows):
        def handler(request):
            at = request.url.params.get("time")
            if at == WINDOW_START.isoformat():
                return vector_response(start_rows)
            if at == WINDOW_END.isoformat():
                return vector_response(end_rows)
            return httpx.Response(400, json={"status": "error", "error": f"unexpected time {at}"})
        return prom_client_factory(handler)
    return build


@pytest.fixture
def sample_edges():
    """Raw samples for two links, one of them split across pods"""
    return [
        RawEdgeSample("frontend", "us-west1-a", "cart", "us-west1-b", 100),
        RawEdgeSample("frontend", "us-west1-a", "cart", "us-west1-b", 250),
        RawEdgeSample("cart", "us-west1-b", "db", "europe-west1-b", 4000),
        RawEdgeSample("frontend", "us-west1-a", "cart", "us-west1-b", 50),
    ]


@pytest.fixture
def flat_pricing_file(tmp_path):
    path = tmp_path / "valid_pricing.json"
    path.write_text(json.dumps({
        "us-west1-a": {"us-west1-b": 0.01},
        "us-west1-b": {"us-west1-a": 0.01},
    }))
    return path


@pytest.fixture
def tiered_pricing_document():
    return {
        "inter-zone-intra-region": {"us": "0.01", "europe": "0.01"},
        "inter-region-intra-continent": {"us": "0.02", "europe": "0.02"},
        "inter-continent": {"us": "0.08", "europe": "0.08", "asia": "0.12"},
    }


@pytest.fixture
def tiered_pricing_file(tmp_path, tiered_pricing_document):
    path = tmp_path / "tiered_pricing.json"
    path.write_text(json.dumps(tiered_pricing_document))
    return path


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset singleton instances between tests"""
    import meshcost.core.config as config_module
    config_module.settings = None
    config_module.settings_source = None
    yield
    config_module.settings = None
    config_module.settings_source = None


def pytest_configure(config):
    """Configure pytest"""
    config.addinivalue_line(
        "markers", "unit: mark test as unit test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow"
    )
