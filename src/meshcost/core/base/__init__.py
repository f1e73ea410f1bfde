from .locality import Locality, Tier
from .cloud_profile import CloudProvider, CloudProfile, GCP_PROFILE, AWS_PROFILE, get_cloud_profile
from .edge import EdgeKey, RawEdgeSample, AggregatedEdge

__all__ = [
    'Locality', 'Tier',
    'CloudProvider', 'CloudProfile', 'GCP_PROFILE', 'AWS_PROFILE', 'get_cloud_profile',
    'EdgeKey', 'RawEdgeSample', 'AggregatedEdge',
]
