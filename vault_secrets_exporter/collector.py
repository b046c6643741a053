"""
Secret metadata to metric sample mapping.

Each scrape walks the mount, fetches the custom metadata of every secret and
turns the optional ``expiry_date``, ``owner_email`` and ``usage_description``
fields into samples:

    vault_secret_has_no_expiry_date{path}                               1 | 0
    vault_secret_expiry_days_remaining{path,owner_email,usage_description}
    vault_exporter_scrape_errors_total                                  cumulative

Per-path failures are counted and skipped; a failed walk drops all secret
samples for the scrape but the error counter is still reported.
"""

import logging
import re
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from .client import VaultClient
from .errors import ExporterError, ExpiryParseError
from .walker import PathWalker

logger = logging.getLogger(__name__)

EXPIRY_DAYS_METRIC = "vault_secret_expiry_days_remaining"
NO_EXPIRY_METRIC = "vault_secret_has_no_expiry_date"
SCRAPE_ERRORS_METRIC = "vault_exporter_scrape_errors_total"

SECONDS_PER_DAY = 86400.0

_RFC3339 = re.compile(
    r'(\d{4}-\d{2}-\d{2})T(\d{2}:\d{2}:\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})'
)


@dataclass(frozen=True)
class ExpirySample:
    path: str
    days_remaining: float
    owner_email: str = ""
    usage_description: str = ""

    name = EXPIRY_DAYS_METRIC

    @property
    def labels(self) -> Dict[str, str]:
        return {
            "path": self.path,
            "owner_email": self.owner_email,
            "usage_description": self.usage_description,
        }

    @property
    def value(self) -> float:
        return self.days_remaining


@dataclass(frozen=True)
class NoExpirySample:
    path: str
    has_no_expiry: bool

    name = NO_EXPIRY_METRIC

    @property
    def labels(self) -> Dict[str, str]:
        return {"path": self.path}

    @property
    def value(self) -> float:
        return 1.0 if self.has_no_expiry else 0.0


@dataclass(frozen=True)
class ScrapeErrorCount:
    count: int

    name = SCRAPE_ERRORS_METRIC

    @property
    def labels(self) -> Dict[str, str]:
        return {}

    @property
    def value(self) -> float:
        return float(self.count)


Sample = Union[ExpirySample, NoExpirySample, ScrapeErrorCount]


class ErrorCounter:
    """Process-wide, monotonically increasing scrape error count"""

    def __init__(self):
        self._value = 0
        self._lock = threading.Lock()

    def inc(self) -> None:
        with self._lock:
            self._value += 1

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


def parse_expiry(value: str, path: str = "") -> datetime:
    """Parse an RFC 3339 date-time into an aware datetime"""
    match = _RFC3339.fullmatch(value)
    if not match:
        raise ExpiryParseError(value, path)

    date_part, time_part, fraction, offset = match.groups()
    # fromisoformat wants exactly six fractional digits on older interpreters
    micros = f".{(fraction + '000000')[:6]}" if fraction else ""
    if offset == 'Z':
        offset = '+00:00'
    try:
        return datetime.fromisoformat(f"{date_part}T{time_part}{micros}{offset}")
    except ValueError as e:
        raise ExpiryParseError(value, path) from e


def string_field(fields: Mapping[str, Any], key: str) -> Optional[str]:
    """Return fields[key] if it is a string, None if absent or of another type"""
    value = fields.get(key)
    if isinstance(value, str):
        return value
    return None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MetricCollector:
    """Build metric samples for every secret under the configured mount"""

    def __init__(self, client: VaultClient, walker: Optional[PathWalker] = None,
                 mount_root: str = "", error_counter: Optional[ErrorCounter] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.client = client
        self.walker = walker or PathWalker(client)
        self.mount_root = mount_root
        self.error_counter = error_counter or ErrorCounter()
        self.clock = clock or _utcnow

    def collect(self) -> List[Sample]:
        """Run one scrape; failures are counted, never raised"""
        samples: List[Sample] = []
        errors_before = self.error_counter.value

        try:
            paths = self.walker.list_all_secrets(self.mount_root)
        except ExporterError as e:
            logger.error(f"Failed to list secrets: {e}")
            self.error_counter.inc()
            paths = []

        for path in paths:
            samples.extend(self._collect_path(path))

        samples.append(ScrapeErrorCount(self.error_counter.value))
        logger.info(
            f"Scraped {len(paths)} secret paths: {len(samples) - 1} samples, "
            f"{self.error_counter.value - errors_before} errors"
        )
        return samples

    def _collect_path(self, path: str) -> List[Sample]:
        try:
            metadata = self.client.read_metadata(path)
        except ExporterError as e:
            logger.warning(f"Failed to get metadata for path {path}: {e}")
            self.error_counter.inc()
            return []

        custom = metadata.get('custom_metadata') if metadata else None
        if not isinstance(custom, dict):
            logger.warning(f"No custom metadata found for path: {path}")
            return [NoExpirySample(path, has_no_expiry=True)]

        expiry_value = string_field(custom, 'expiry_date')
        if not expiry_value:
            logger.warning(f"No 'expiry_date' in metadata for path: {path}")
            return [NoExpirySample(path, has_no_expiry=True)]

        samples: List[Sample] = [NoExpirySample(path, has_no_expiry=False)]

        try:
            expiry = parse_expiry(expiry_value, path)
        except ExpiryParseError:
            logger.warning(f"Invalid date format for path {path}: {expiry_value!r}")
            self.error_counter.inc()
            return samples

        days_remaining = (expiry - self.clock()).total_seconds() / SECONDS_PER_DAY
        samples.append(ExpirySample(
            path=path,
            days_remaining=days_remaining,
            owner_email=string_field(custom, 'owner_email') or "",
            usage_description=string_field(custom, 'usage_description') or "",
        ))
        return samples
