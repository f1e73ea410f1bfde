"""Custom exceptions for meshcost"""

from typing import Optional


class MeshCostError(Exception):
    """Base exception for all meshcost errors"""
    pass


class ConfigurationError(MeshCostError):
    """Raised when configuration is invalid"""
    pass


class ConnectivityError(MeshCostError):
    """Raised when the metrics backend cannot be reached"""
    pass


class BringUpError(ConnectivityError):
    """Raised when establishing connectivity to the metrics backend fails"""
    def __init__(self, message: str, output: str = "", transient: bool = False):
        self.output = output
        self.transient = transient
        super().__init__(message)


class BackendUnreachableError(ConnectivityError):
    """Raised when the backend did not answer before the readiness deadline"""
    def __init__(self, endpoint: str, waited: Optional[float] = None):
        self.endpoint = endpoint
        self.waited = waited
        message = f"metrics backend {endpoint} is not reachable"
        if waited is not None:
            message += f" after {waited:.1f}s"
        super().__init__(message)


class MalformedInputError(MeshCostError):
    """Base exception for unusable input documents and responses"""
    pass


class PricingDocumentError(MalformedInputError):
    """Raised when the pricing document cannot be loaded or decoded"""
    def __init__(self, location: str, message: str):
        self.location = location
        super().__init__(f"[{location}] {message}")


class QueryError(MeshCostError):
    """Raised when a metrics query fails"""
    pass


class QueryTransportError(QueryError, ConnectivityError):
    """Raised when the metrics backend cannot be reached for a query"""
    pass


class ResponseFormatError(QueryError, MalformedInputError):
    """Raised when a metrics response has an unexpected shape"""
    pass


class LocalityFormatError(MalformedInputError):
    """Raised when a locality string is malformed"""
    def __init__(self, locality: str, reason: str = "malformed locality"):
        self.locality = locality
        super().__init__(f"{reason}: {locality!r}")
