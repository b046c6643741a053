"""Render collected samples in the Prometheus text exposition format."""

import math
from typing import Dict, Iterable, List

from .collector import (
    EXPIRY_DAYS_METRIC,
    NO_EXPIRY_METRIC,
    SCRAPE_ERRORS_METRIC,
    Sample,
)

CONTENT_TYPE = 'text/plain; version=0.0.4; charset=utf-8'

# (name, type, help) in output order
METRIC_FAMILIES = [
    (EXPIRY_DAYS_METRIC, "gauge",
     "Number of days remaining until the secret expires. A negative value means the secret has expired."),
    (NO_EXPIRY_METRIC, "gauge",
     "Indicates if a secret does not have an expiry_date set (1 = no date, 0 = date exists)."),
    (SCRAPE_ERRORS_METRIC, "counter",
     "Total number of errors encountered while scraping metrics from Vault."),
]


class MetricsFormatter:
    """Generate Prometheus metrics text from samples"""

    def _escape_label(self, value: str) -> str:
        """Escape label values for Prometheus format"""
        return value.replace('\\', '\\\\').replace('"', '\\"').replace('\n', '\\n')

    def _escape_help(self, value: str) -> str:
        return value.replace('\\', '\\\\').replace('\n', '\\n')

    def _format_value(self, value: float) -> str:
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "+Inf" if value > 0 else "-Inf"
        return repr(float(value))

    def _format_labels(self, labels: Dict[str, str]) -> str:
        if not labels:
            return ""
        pairs = ','.join(f'{key}="{self._escape_label(val)}"' for key, val in labels.items())
        return f"{{{pairs}}}"

    def render(self, samples: Iterable[Sample]) -> str:
        """Render samples grouped by metric family"""
        by_name: Dict[str, List[Sample]] = {name: [] for name, _, _ in METRIC_FAMILIES}
        for sample in samples:
            by_name[sample.name].append(sample)

        lines = []
        for name, metric_type, help_text in METRIC_FAMILIES:
            lines.append(f"# HELP {name} {self._escape_help(help_text)}")
            lines.append(f"# TYPE {name} {metric_type}")
            for sample in by_name[name]:
                lines.append(f"{name}{self._format_labels(sample.labels)} {self._format_value(sample.value)}")

        return '\n'.join(lines) + '\n'
