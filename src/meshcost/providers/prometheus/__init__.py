from .client import PrometheusClient, VectorSample
from .port_forward import PortForwarder

__all__ = ['PrometheusClient', 'VectorSample', 'PortForwarder']
