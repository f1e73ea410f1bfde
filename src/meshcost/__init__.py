"""meshcost - inter-service egress cost attribution for Istio meshes"""

__version__ = "0.1.0"
