"""
Vault Secrets Prometheus Exporter

Walks a Vault KV v2 mount, reads the custom metadata of every secret and
exposes the days remaining until each secret's ``expiry_date``.

Usage:
    vault-secrets-exporter --vault-addr https://vault.example.com:8200 \\
                           --mount-path secret \\
                           --port 9102

Credentials come from VAULT_TOKEN, or VAULT_ROLE_ID and VAULT_SECRET_ID for
AppRole login (or the matching flags).

Metrics Exposed:
    vault_secret_expiry_days_remaining{path,owner_email,usage_description}
    vault_secret_has_no_expiry_date{path} - 1 if no usable expiry_date, 0 otherwise
    vault_exporter_scrape_errors_total - Listing and metadata failures since start
"""

import logging
from typing import Optional, Sequence

from .client import VaultClient
from .collector import MetricCollector
from .config import load_config
from .errors import AuthenticationError, ConfigurationError
from .logging_config import configure_logging
from .server import create_server

logger = logging.getLogger('vault_secrets_exporter')


def main(argv: Optional[Sequence[str]] = None) -> int:
    try:
        config = load_config(argv)
    except ConfigurationError as e:
        configure_logging()
        logger.error(f"Invalid configuration: {e}")
        return 1

    configure_logging(config.log_level, config.log_format)
    logger.info("Starting Vault Secrets Exporter")
    if config.namespace:
        logger.info(f"Using Vault Enterprise namespace: {config.namespace}")

    vault_client = VaultClient(
        vault_addr=config.vault_addr,
        mount_path=config.mount_path,
        token=config.token,
        role_id=config.role_id,
        secret_id=config.secret_id,
        namespace=config.namespace,
        ca_cert=config.ca_cert,
        timeout=config.request_timeout
    )

    try:
        vault_client.authenticate()
    except AuthenticationError as e:
        logger.error(f"Authentication failed: {e}")
        return 1

    collector = MetricCollector(vault_client)

    server = create_server(config.listen_address, config.port, vault_client, collector)
    logger.info(f"Server listening on {config.listen_address}:{config.port}")
    logger.info(f"Metrics endpoint: http://{config.listen_address}:{config.port}/metrics")

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down exporter...")
    finally:
        server.server_close()
    return 0

