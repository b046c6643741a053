"""
Exception classes for the Vault secrets exporter.
"""
from typing import Any, Dict, Optional


class ExporterError(Exception):
    """Base class for all exporter errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(ExporterError):
    """Required configuration is missing or invalid"""
    pass


class AuthenticationError(ExporterError):
    """Vault login or token verification failed"""
    pass


class VaultRequestError(ExporterError):
    """A Vault API call failed or returned an unusable response"""

    def __init__(self, message: str, path: str = "", status_code: Optional[int] = None):
        self.path = path
        self.status_code = status_code
        super().__init__(message, {"path": path, "status_code": status_code})


class MalformedListing(ExporterError):
    """A directory listing did not contain a list of string keys"""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"invalid key format at path: {path!r}", {"path": path})


class ExpiryParseError(ExporterError):
    """An expiry_date value is not an RFC 3339 timestamp"""

    def __init__(self, value: str, path: str = ""):
        self.value = value
        self.path = path
        super().__init__(f"invalid expiry_date {value!r}", {"path": path, "value": value})
