"""Configuration management for meshcost"""

import json
import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

GCP_PRICING_LOCATION = "https://raw.githubusercontent.com/tetratelabs/istio-cost-analyzer/master/pricing/gcp/gcp_pricing.json"
AWS_PRICING_LOCATION = "https://raw.githubusercontent.com/tetratelabs/istio-cost-analyzer/master/pricing/aws/aws_pricing.json"


class PrometheusConfig(BaseModel):
    """Metrics backend connection settings"""
    endpoint: str = "http://localhost:9990"
    namespace: str = "istio-system"
    deployment: str = "prometheus"
    local_port: int = 9990
    remote_port: int = 9090
    poll_interval: float = 0.5
    probe_timeout: float = 2.0
    request_timeout: float = 30.0
    forward_retries: int = 1
    ready_timeout: Optional[float] = None

    @field_validator("poll_interval", "probe_timeout", "request_timeout")
    @classmethod
    def _positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    @field_validator("forward_retries")
    @classmethod
    def _non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must not be negative")
        return v


class QueryConfig(BaseModel):
    """Metric and label names used to correlate traffic"""
    metric: str = "istio_request_bytes_sum"
    source_workload_label: str = "source_workload"
    source_locality_label: str = "locality"
    destination_workload_label: str = "destination_workload"
    destination_locality_label: str = "destination_locality"

    def selector(self) -> str:
        """PromQL selector restricted to rows with a usable destination locality"""
        label = self.destination_locality_label
        return f'{self.metric}{{{label}!="", {label}!="unknown"}}'


class PricingConfig(BaseModel):
    """Where egress rates come from"""
    price_path: Optional[str] = None
    cloud: Optional[str] = None
    gcp_price_url: str = GCP_PRICING_LOCATION
    aws_price_url: str = AWS_PRICING_LOCATION

    def resolve_price_path(self, cloud: Optional[str] = None) -> str:
        """Return the explicit price path, or the default sheet for the cloud"""
        if self.price_path:
            return self.price_path
        cloud = (cloud or self.cloud or "").lower()
        if cloud == "gcp":
            return self.gcp_price_url
        if cloud == "aws":
            return self.aws_price_url
        raise ConfigurationError(
            "when no price path is provided, the only supported clouds are gcp and aws"
        )


class LoggingConfig(BaseModel):
    """Logging configuration"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[Path] = None
    console: bool = True
    structured: bool = False


class Settings(BaseSettings):
    """Main application settings"""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="MESHCOST_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    app_name: str = "meshcost"
    version: str = "0.1.0"
    environment: str = "development"
    debug: bool = False
    cloud: str = "gcp"

    prometheus: PrometheusConfig = Field(default_factory=PrometheusConfig)
    query: QueryConfig = Field(default_factory=QueryConfig)
    pricing: PricingConfig = Field(default_factory=PricingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> "Settings":
        """Load settings from YAML file"""
        if not path.exists():
            logger.warning(f"Configuration file {path} not found, using defaults")
            return cls()

        with open(path, 'r') as f:
            data = yaml.safe_load(f)

        return cls(**data if data else {})

    @classmethod
    def from_json(cls, path: Path) -> "Settings":
        """Load settings from JSON file"""
        if not path.exists():
            logger.warning(f"Configuration file {path} not found, using defaults")
            return cls()

        with open(path, 'r') as f:
            data = json.load(f)

        return cls(**data)

    @classmethod
    def from_file(cls, path: Path) -> "Settings":
        path = Path(path)
        if path.suffix in (".yaml", ".yml"):
            return cls.from_yaml(path)
        return cls.from_json(path)

    def price_location(self) -> str:
        return self.pricing.resolve_price_path(self.pricing.cloud or self.cloud)


# Global settings instance
settings: Optional[Settings] = None
# File the global settings were read from, None for defaults
settings_source: Optional[Path] = None


def get_settings() -> Settings:
    """Get global settings instance"""
    global settings, settings_source
    if settings is None:
        config_paths = [
            Path.home() / ".meshcost" / "config.yaml",
            Path.home() / ".meshcost" / "config.json",
            Path("./config.yaml"),
            Path("./config.json"),
        ]

        for path in config_paths:
            if path.exists():
                settings = Settings.from_file(path)
                settings_source = path
                break
        else:
            settings = Settings()
            settings_source = None

    return settings


def reload_settings(path: Optional[Path] = None) -> Settings:
    """Reload settings from file"""
    global settings, settings_source

    if path:
        settings = Settings.from_file(path)
        settings_source = Path(path) if Path(path).exists() else None
    else:
        settings = None
        settings = get_settings()

    return settings


def log_settings_source() -> None:
    """Report where the global settings came from.

    Settings are loaded before logging is configured from them, so the
    CLI calls this once its handlers are in place.
    """
    if settings_source is not None:
        logger.info(f"Loaded configuration from {settings_source}")
    else:
        logger.info("Using default configuration")
