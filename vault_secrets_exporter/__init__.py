"""Prometheus exporter for the expiry dates of HashiCorp Vault KV v2 secrets."""

from .client import VaultClient
from .collector import (
    ErrorCounter,
    ExpirySample,
    MetricCollector,
    NoExpirySample,
    ScrapeErrorCount,
    parse_expiry,
)
from .errors import (
    AuthenticationError,
    ConfigurationError,
    ExporterError,
    ExpiryParseError,
    MalformedListing,
    VaultRequestError,
)
from .exposition import MetricsFormatter
from .walker import PathWalker

__version__ = "0.1.0"

__all__ = [
    "AuthenticationError",
    "ConfigurationError",
    "ErrorCounter",
    "ExpiryParseError",
    "ExpirySample",
    "ExporterError",
    "MalformedListing",
    "MetricCollector",
    "MetricsFormatter",
    "NoExpirySample",
    "PathWalker",
    "ScrapeErrorCount",
    "VaultClient",
    "VaultRequestError",
    "parse_expiry",
]
