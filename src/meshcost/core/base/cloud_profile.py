import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Pattern

from ..exceptions import ConfigurationError, LocalityFormatError
from .locality import Locality, Tier


class CloudProvider(str, Enum):
    GCP = "gcp"
    AWS = "aws"


@dataclass(frozen=True)
class CloudProfile:
    """Locality format and tier rules for one cloud"""
    provider: CloudProvider
    locality_pattern: Pattern

    def validate_locality(self, text: str) -> bool:
        """Check a locality string against the cloud's format"""
        return bool(text) and self.locality_pattern.match(text) is not None

    def parse_locality(self, text: str) -> Locality:
        if not self.validate_locality(text):
            raise LocalityFormatError(
                text, f"locality does not match {self.provider.value} format"
            )
        return Locality.parse(text)

    def classify(self, source: Locality, destination: Locality) -> Tier:
        """Pick the pricing tier for traffic from source to destination"""
        if source.continent != destination.continent:
            return Tier.INTER_CONTINENT
        if source.region != destination.region:
            return Tier.INTER_REGION
        if source.zone != destination.zone:
            return Tier.INTER_ZONE
        return Tier.SAME_ZONE


GCP_PROFILE = CloudProfile(
    provider=CloudProvider.GCP,
    locality_pattern=re.compile(r"^[a-z]+-[a-z]+\d-[a-z]$"),
)

AWS_PROFILE = CloudProfile(
    provider=CloudProvider.AWS,
    locality_pattern=re.compile(r"^[a-z]+-[a-z]+-\d$"),
)

_PROFILES: Dict[CloudProvider, CloudProfile] = {
    CloudProvider.GCP: GCP_PROFILE,
    CloudProvider.AWS: AWS_PROFILE,
}


def get_cloud_profile(name) -> CloudProfile:
    """Resolve a cloud name (case-insensitive) to its profile"""
    try:
        provider = CloudProvider(str(getattr(name, "value", name)).lower())
    except ValueError:
        raise ConfigurationError(
            f"Unsupported cloud: {name!r} (supported: "
            f"{', '.join(p.value for p in CloudProvider)})"
        )
    return _PROFILES[provider]
