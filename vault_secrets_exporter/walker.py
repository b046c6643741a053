"""Recursive discovery of secret paths under a KV v2 mount."""

import logging
from typing import List

from .client import VaultClient, join_path
from .errors import MalformedListing

logger = logging.getLogger(__name__)


class PathWalker:
    """Enumerate every leaf secret path by following directory markers"""

    def __init__(self, client: VaultClient):
        self.client = client

    def list_all_secrets(self, base_path: str = "") -> List[str]:
        """
        Return all leaf secret paths below base_path, depth first.

        Keys ending in '/' are directories and are descended into. A missing
        listing yields an empty result. Listing failures at any depth
        propagate and abort the whole walk.
        """
        keys = self.client.list_keys(base_path)
        if keys is None:
            return []

        if not isinstance(keys, list) or not all(isinstance(k, str) for k in keys):
            raise MalformedListing(base_path)

        paths: List[str] = []
        for key in keys:
            child = join_path(base_path, key)
            if key.endswith('/'):
                paths.extend(self.list_all_secrets(child))
            elif child:
                paths.append(child)
        return paths
