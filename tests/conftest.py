"""
Pytest configuration and fixtures for the exporter tests.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional
from unittest.mock import MagicMock

import pytest

from vault_secrets_exporter.collector import ErrorCounter, MetricCollector


FIXED_NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FakeVaultClient:
    """In-memory stand-in for VaultClient.

    ``listings`` maps a listing path to its keys (or an exception to raise);
    paths missing from it behave like Vault's 404. ``metadata`` maps a secret
    path to its metadata document (or an exception to raise).
    """

    def __init__(self, listings: Optional[Dict[str, Any]] = None,
                 metadata: Optional[Dict[str, Any]] = None):
        self.listings = listings or {}
        self.metadata = metadata or {}
        self.list_calls = []
        self.read_calls = []
        self.token = "test-token"

    def list_keys(self, path: str = ""):
        self.list_calls.append(path)
        result = self.listings.get(path)
        if isinstance(result, Exception):
            raise result
        return result

    def read_metadata(self, path: str):
        self.read_calls.append(path)
        result = self.metadata.get(path)
        if isinstance(result, Exception):
            raise result
        return result


def make_response(status_code: int = 200, body: Any = None) -> MagicMock:
    """Build a mock requests.Response"""
    response = MagicMock()
    response.status_code = status_code
    if isinstance(body, Exception):
        response.json.side_effect = body
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def fake_client() -> FakeVaultClient:
    """Return an empty fake Vault client."""
    return FakeVaultClient()


@pytest.fixture
def error_counter() -> ErrorCounter:
    """Return a fresh error counter."""
    return ErrorCounter()


@pytest.fixture
def make_collector(error_counter):
    """Return a factory building a collector pinned to FIXED_NOW."""
    def _make(client: FakeVaultClient) -> MetricCollector:
        return MetricCollector(client, error_counter=error_counter, clock=lambda: FIXED_NOW)
    return _make
