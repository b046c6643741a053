"""
Vault HTTP API client used by the exporter.

Only the calls the exporter needs are implemented: token/AppRole login and
the KV v2 metadata endpoints (LIST for directory listings, GET for custom
metadata).
"""

import logging
import threading
from typing import Any, Dict, Optional

import requests

from .errors import AuthenticationError, VaultRequestError

logger = logging.getLogger(__name__)


def join_path(*parts: str) -> str:
    """Join path segments with a single '/' and no leading/trailing separator"""
    return '/'.join(part.strip('/') for part in parts if part and part.strip('/'))


class VaultClient:
    """Vault API client for KV v2 secret metadata queries"""

    def __init__(self, vault_addr: str, mount_path: str = "secret",
                 token: Optional[str] = None, role_id: Optional[str] = None,
                 secret_id: Optional[str] = None, namespace: Optional[str] = None,
                 ca_cert: Optional[str] = None, timeout: float = 10,
                 session: Optional[requests.Session] = None):
        self.vault_addr = vault_addr.rstrip('/')
        self.mount_path = mount_path.strip('/')
        self.role_id = role_id
        self.secret_id = secret_id
        self.namespace = namespace
        self.ca_cert = ca_cert
        self.timeout = timeout
        self._configured_token = token
        self.token: Optional[str] = None
        self._shared_session = session
        self._local = threading.local()

    @property
    def session(self) -> requests.Session:
        """Session for the calling thread; scrapes may overlap on the HTTP server"""
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._local.session = requests.Session()
        return session

    def _headers(self) -> Dict[str, str]:
        headers = {}
        if self.token:
            headers["X-Vault-Token"] = self.token
        if self.namespace:
            headers["X-Vault-Namespace"] = self.namespace
        return headers

    def _request(self, method: str, api_path: str, **kwargs) -> requests.Response:
        url = f"{self.vault_addr}/v1/{api_path}"
        try:
            return self.session.request(
                method,
                url,
                headers=self._headers(),
                verify=self.ca_cert if self.ca_cert else True,
                timeout=self.timeout,
                **kwargs
            )
        except requests.RequestException as e:
            raise VaultRequestError(f"{method} {api_path} failed: {e}", path=api_path) from e

    @staticmethod
    def _json(response: requests.Response, api_path: str) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError as e:
            raise VaultRequestError(f"Invalid JSON from {api_path}: {e}", path=api_path,
                                    status_code=response.status_code) from e
        if not isinstance(body, dict):
            raise VaultRequestError(f"Unexpected response body from {api_path}", path=api_path,
                                    status_code=response.status_code)
        return body

    @staticmethod
    def _raise_for_status(response: requests.Response, api_path: str) -> None:
        if not 200 <= response.status_code < 300:
            raise VaultRequestError(
                f"Vault returned HTTP {response.status_code} for {api_path}",
                path=api_path,
                status_code=response.status_code
            )

    def authenticate(self) -> None:
        """Authenticate to Vault, preferring a static token over AppRole"""
        if self._configured_token:
            logger.info("Authenticating using VAULT_TOKEN")
            self.token = self._configured_token
            try:
                response = self._request("GET", "auth/token/lookup-self")
                self._raise_for_status(response, "auth/token/lookup-self")
            except VaultRequestError as e:
                self.token = None
                raise AuthenticationError(f"VAULT_TOKEN is invalid or expired: {e}") from e
            logger.info("VAULT_TOKEN is valid")
            return

        if self.role_id and self.secret_id:
            logger.info("VAULT_TOKEN not found. Authenticating using AppRole")
            payload = {
                "role_id": self.role_id,
                "secret_id": self.secret_id
            }
            try:
                response = self._request("POST", "auth/approle/login", json=payload)
                self._raise_for_status(response, "auth/approle/login")
                data = self._json(response, "auth/approle/login")
            except VaultRequestError as e:
                raise AuthenticationError(f"Failed to login with AppRole: {e}") from e

            token = (data.get('auth') or {}).get('client_token')
            if not token:
                raise AuthenticationError("No auth info was returned after AppRole login")
            self.token = token
            logger.info("AppRole authentication successful")
            return

        raise AuthenticationError(
            "No authentication method configured. "
            "Set VAULT_TOKEN or both VAULT_ROLE_ID and VAULT_SECRET_ID"
        )

    def list_keys(self, path: str = "") -> Optional[Any]:
        """List child keys under a metadata path; None when nothing is there"""
        api_path = join_path(self.mount_path, "metadata", path)
        response = self._request("LIST", api_path)
        if response.status_code == 404:
            logger.debug(f"No listing at {api_path}")
            return None
        self._raise_for_status(response, api_path)

        data = self._json(response, api_path).get('data')
        if not isinstance(data, dict):
            return None
        return data.get('keys')

    def read_metadata(self, path: str) -> Optional[Dict[str, Any]]:
        """Retrieve the KV v2 metadata document for a secret"""
        api_path = join_path(self.mount_path, "metadata", path)
        response = self._request("GET", api_path)
        self._raise_for_status(response, api_path)

        data = self._json(response, api_path).get('data')
        if not isinstance(data, dict):
            return None
        return data
