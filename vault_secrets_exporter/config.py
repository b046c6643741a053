"""
Exporter configuration.

Values come from command-line flags first, then environment variables, then
defaults.
"""

import argparse
import os
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from .errors import ConfigurationError

DEFAULT_MOUNT_PATH = "secret"
DEFAULT_PORT = 9102
DEFAULT_LISTEN_ADDRESS = "0.0.0.0"
DEFAULT_TIMEOUT = 10.0
LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']
LOG_FORMATS = ['json', 'text']


@dataclass
class ExporterConfig:
    vault_addr: str
    mount_path: str = DEFAULT_MOUNT_PATH
    namespace: Optional[str] = None
    token: Optional[str] = None
    role_id: Optional[str] = None
    secret_id: Optional[str] = None
    ca_cert: Optional[str] = None
    port: int = DEFAULT_PORT
    listen_address: str = DEFAULT_LISTEN_ADDRESS
    request_timeout: float = DEFAULT_TIMEOUT
    log_level: str = 'INFO'
    log_format: str = 'json'

    def validate(self) -> None:
        """Raise ConfigurationError if the exporter cannot start with these values"""
        if not self.vault_addr:
            raise ConfigurationError("Vault address not provided. Use --vault-addr or set VAULT_ADDR")
        if not self.mount_path.strip('/'):
            raise ConfigurationError("KV mount path must not be empty")
        if not self.token and not (self.role_id and self.secret_id):
            raise ConfigurationError(
                "Vault credentials not provided. Set VAULT_TOKEN or both "
                "VAULT_ROLE_ID and VAULT_SECRET_ID (or the matching flags)"
            )
        if not 0 < self.port < 65536:
            raise ConfigurationError(f"Invalid port: {self.port}", {"port": self.port})
        if self.request_timeout <= 0:
            raise ConfigurationError(f"Invalid request timeout: {self.request_timeout}",
                                     {"request_timeout": self.request_timeout})
        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigurationError(f"Invalid log level: {self.log_level}")
        if self.log_format not in LOG_FORMATS:
            raise ConfigurationError(f"Invalid log format: {self.log_format}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Vault Secrets Prometheus Exporter')
    parser.add_argument('--vault-addr', help='Vault server address (or set VAULT_ADDR env var)')
    parser.add_argument('--mount-path', help=f'KV v2 mount path (or set KV_MOUNT_PATH, default: {DEFAULT_MOUNT_PATH})')
    parser.add_argument('--namespace', help='Vault Enterprise namespace (or set VAULT_NAMESPACE env var)')
    parser.add_argument('--token', help='Vault token (or set VAULT_TOKEN env var)')
    parser.add_argument('--role-id', help='Vault AppRole role ID (or set VAULT_ROLE_ID env var)')
    parser.add_argument('--secret-id', help='Vault AppRole secret ID (or set VAULT_SECRET_ID env var)')
    parser.add_argument('--ca-cert', help='Path to Vault CA certificate (or set VAULT_CACERT env var)')
    parser.add_argument('--port', type=int, help=f'Exporter HTTP port (default: {DEFAULT_PORT})')
    parser.add_argument('--listen-address', help=f'Exporter bind address (default: {DEFAULT_LISTEN_ADDRESS})')
    parser.add_argument('--request-timeout', type=float,
                        help=f'Vault request timeout in seconds (default: {DEFAULT_TIMEOUT:g})')
    parser.add_argument('--log-level', choices=LOG_LEVELS, help='Log level (default: INFO)')
    parser.add_argument('--log-format', choices=LOG_FORMATS, help='Log output format (default: json)')
    return parser


def _number(value: Optional[str], name: str, cast):
    if value is None or value == "":
        return None
    try:
        return cast(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from e


def load_config(argv: Optional[Sequence[str]] = None,
                environ: Optional[Mapping[str, str]] = None) -> ExporterConfig:
    """Parse flags and environment into a validated ExporterConfig"""
    args = build_parser().parse_args(argv)
    env = os.environ if environ is None else environ

    def pick(flag, env_name, default=None):
        if flag is not None:
            return flag
        return env.get(env_name) or default

    port = args.port if args.port is not None else _number(env.get('EXPORTER_PORT'), 'EXPORTER_PORT', int)
    timeout = args.request_timeout
    if timeout is None:
        timeout = _number(env.get('VAULT_REQUEST_TIMEOUT'), 'VAULT_REQUEST_TIMEOUT', float)

    config = ExporterConfig(
        vault_addr=pick(args.vault_addr, 'VAULT_ADDR', ""),
        mount_path=pick(args.mount_path, 'KV_MOUNT_PATH', DEFAULT_MOUNT_PATH),
        namespace=pick(args.namespace, 'VAULT_NAMESPACE'),
        token=pick(args.token, 'VAULT_TOKEN'),
        role_id=pick(args.role_id, 'VAULT_ROLE_ID'),
        secret_id=pick(args.secret_id, 'VAULT_SECRET_ID'),
        ca_cert=pick(args.ca_cert, 'VAULT_CACERT'),
        port=port if port is not None else DEFAULT_PORT,
        listen_address=pick(args.listen_address, 'EXPORTER_LISTEN_ADDRESS', DEFAULT_LISTEN_ADDRESS),
        request_timeout=timeout if timeout is not None else DEFAULT_TIMEOUT,
        log_level=pick(args.log_level, 'LOG_LEVEL', 'INFO').upper(),
        log_format=pick(args.log_format, 'LOG_FORMAT', 'json').lower(),
    )
    config.validate()
    return config
