from dataclasses import dataclass
from enum import Enum

from ..exceptions import LocalityFormatError


class Tier(str, Enum):
    """Geographic relationship between two localities"""
    SAME_ZONE = "same_zone"
    INTER_ZONE = "inter_zone"
    INTER_REGION = "inter_region"
    INTER_CONTINENT = "inter_continent"


@dataclass(frozen=True)
class Locality:
    """Placement of a workload instance as continent/region/zone"""
    continent: str
    region: str
    zone: str

    @classmethod
    def parse(cls, text: str) -> "Locality":
        """Split a canonical locality string into its three components"""
        parts = text.split("-") if text else []
        if len(parts) != 3 or not all(parts):
            raise LocalityFormatError(text, "locality must have exactly three components")
        return cls(*parts)

    def __str__(self) -> str:
        return f"{self.continent}-{self.region}-{self.zone}"
