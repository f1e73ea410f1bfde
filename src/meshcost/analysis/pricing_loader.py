"""Loading pricing documents from a local path or an http(s) URL"""

import json
import logging
from pathlib import Path
from typing import Dict, Optional
from urllib.parse import urlparse

import httpx
from pydantic import BaseModel, ConfigDict, Field, NonNegativeFloat, TypeAdapter, ValidationError

from ..core.base import CloudProfile, GCP_PROFILE
from ..core.exceptions import PricingDocumentError
from .pricing import FlatRateTable, RateTable, TieredRateTable

logger = logging.getLogger(__name__)

TIER_SECTIONS = ("inter-zone-intra-region", "inter-region-intra-continent", "inter-continent")


class TieredPricingDocument(BaseModel):
    """Per-continent rates for each tier; rates may be numeric strings"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    inter_zone: Dict[str, NonNegativeFloat] = Field(
        default_factory=dict, alias="inter-zone-intra-region")
    inter_region: Dict[str, NonNegativeFloat] = Field(
        default_factory=dict, alias="inter-region-intra-continent")
    inter_continent: Dict[str, NonNegativeFloat] = Field(
        default_factory=dict, alias="inter-continent")

    def to_table(self, profile: CloudProfile) -> TieredRateTable:
        return TieredRateTable(
            inter_zone=dict(self.inter_zone),
            inter_region=dict(self.inter_region),
            inter_continent=dict(self.inter_continent),
            profile=profile,
        )


_flat_pricing = TypeAdapter(Dict[str, Dict[str, NonNegativeFloat]])


def is_url(location: str) -> bool:
    parsed = urlparse(location)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def read_document(location: str, client: Optional[httpx.Client] = None,
                  timeout: float = 30.0) -> bytes:
    """Fetch the raw pricing document"""
    if not location:
        raise PricingDocumentError(location, "no pricing location given")

    if is_url(location):
        try:
            if client is not None:
                response = client.get(location)
            else:
                response = httpx.get(location, timeout=timeout, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise PricingDocumentError(location, f"cannot fetch pricing: {e}") from e
        return response.content

    try:
        return Path(location).read_bytes()
    except OSError as e:
        raise PricingDocumentError(location, f"unable to read file: {e}") from e


def parse_document(data: bytes, location: str = "<memory>",
                   profile: Optional[CloudProfile] = None) -> RateTable:
    """Decode a flat or tiered pricing document into a rate table"""
    try:
        document = json.loads(data)
    except ValueError as e:
        raise PricingDocumentError(location, f"unable to decode json: {e}") from e

    if not isinstance(document, dict):
        raise PricingDocumentError(location, "pricing document must be a JSON object")

    try:
        if any(section in document for section in TIER_SECTIONS):
            return TieredPricingDocument.model_validate(document).to_table(
                profile or GCP_PROFILE)
        return FlatRateTable(rates=_flat_pricing.validate_python(document))
    except ValidationError as e:
        raise PricingDocumentError(location, f"invalid pricing document: {e}") from e


def load_rate_table(location: str, profile: Optional[CloudProfile] = None,
                    client: Optional[httpx.Client] = None,
                    timeout: float = 30.0) -> RateTable:
    """Load the rate table for one pipeline run"""
    table = parse_document(read_document(location, client, timeout), location, profile)
    logger.info(f"using pricing file: {location} ({table.describe()})")
    return table
