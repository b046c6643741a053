"""HTTP endpoint serving the exporter's metrics."""

import json
import logging
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

from .client import VaultClient
from .collector import MetricCollector
from .exposition import CONTENT_TYPE, MetricsFormatter

logger = logging.getLogger(__name__)

INDEX_PAGE = b"""<html>
<head><title>Vault Secrets Exporter</title></head>
<body>
<h1>Vault Secrets Exporter</h1>
<p><a href='/metrics'>Metrics</a></p>
</body>
</html>
"""


class MetricsHandler(BaseHTTPRequestHandler):
    """HTTP handler for Prometheus metrics endpoint"""

    vault_client: VaultClient = None
    collector: MetricCollector = None
    formatter: MetricsFormatter = MetricsFormatter()
    last_scrape: float = 0

    def do_GET(self):
        """Handle GET requests"""
        if self.path == '/metrics':
            self.serve_metrics()
        elif self.path == '/health':
            self.serve_health()
        elif self.path == '/':
            self._send(200, 'text/html; charset=utf-8', INDEX_PAGE)
        else:
            self._send(404, 'text/plain; charset=utf-8', b"404 Not Found")

    def _send(self, status: int, content_type: str, body: bytes):
        self.send_response(status)
        self.send_header('Content-Type', content_type)
        self.send_header('Content-Length', str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def serve_metrics(self):
        """Serve Prometheus metrics, collected fresh for every request"""
        try:
            # Re-authenticate if needed
            if not self.vault_client.token:
                self.vault_client.authenticate()

            samples = self.collector.collect()
            metrics = self.formatter.render(samples)
            self.__class__.last_scrape = time.time()

        except Exception as e:
            logger.exception(f"Error generating metrics: {e}")
            self._send(500, 'text/plain; charset=utf-8', f"Error: {e}".encode('utf-8'))
            return

        self._send(200, CONTENT_TYPE, metrics.encode('utf-8'))

    def serve_health(self):
        """Serve health check endpoint"""
        health = {
            "status": "healthy",
            "vault_addr": self.vault_client.vault_addr,
            "mount": self.vault_client.mount_path,
            "last_scrape": self.last_scrape,
            "scrape_errors_total": self.collector.error_counter.value
        }
        self._send(200, 'application/json', json.dumps(health, indent=2).encode('utf-8'))

    def log_message(self, format, *args):
        """Override to use custom logger"""
        logger.info(f"{self.client_address[0]} - {format % args}")


def create_server(address: str, port: int, vault_client: VaultClient,
                  collector: MetricCollector) -> ThreadingHTTPServer:
    """Bind the metrics server; handler state is set on a per-server subclass"""
    handler = type('BoundMetricsHandler', (MetricsHandler,), {
        'vault_client': vault_client,
        'collector': collector,
        'formatter': MetricsFormatter(),
        'last_scrape': 0,
    })
    return ThreadingHTTPServer((address, port), handler)
