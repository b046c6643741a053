"""
Unit tests for recursive secret path discovery.
"""

import pytest

from vault_secrets_exporter.errors import MalformedListing, VaultRequestError
from vault_secrets_exporter.walker import PathWalker

from tests.conftest import FakeVaultClient


class TestPathWalker:
    """Tests for PathWalker.list_all_secrets."""

    def test_nested_tree_under_base_path(self) -> None:
        """Test root -> {a/ -> {b}, c} yields exactly root/a/b and root/c."""
        client = FakeVaultClient(listings={
            "root": ["a/", "c"],
            "root/a": ["b"],
        })

        paths = PathWalker(client).list_all_secrets("root")

        assert sorted(paths) == ["root/a/b", "root/c"]

    def test_mount_root_has_no_leading_separator(self) -> None:
        """Test walking from the mount root produces relative paths."""
        client = FakeVaultClient(listings={
            "": ["app/", "top"],
            "app": ["db/", "api-key"],
            "app/db": ["password"],
        })

        paths = PathWalker(client).list_all_secrets()

        assert paths == ["app/db/password", "app/api-key", "top"]
        assert client.list_calls == ["", "app", "app/db"]

    def test_depth_first_order_follows_listing_order(self) -> None:
        """Test results follow listing order within each directory."""
        client = FakeVaultClient(listings={
            "": ["z", "m/", "a"],
            "m": ["y", "b"],
        })

        assert PathWalker(client).list_all_secrets() == ["z", "m/y", "m/b", "a"]

    def test_missing_listing_is_empty(self) -> None:
        """Test a listing Vault reports as absent yields no paths."""
        client = FakeVaultClient()

        assert PathWalker(client).list_all_secrets("nothing") == []

    def test_empty_subdirectory_contributes_nothing(self) -> None:
        """Test an empty directory does not fail the walk."""
        client = FakeVaultClient(listings={
            "": ["empty/", "gone/", "leaf"],
            "empty": [],
        })

        assert PathWalker(client).list_all_secrets() == ["leaf"]

    def test_directory_names_are_not_leaves(self) -> None:
        """Test intermediate directories never appear in the result."""
        client = FakeVaultClient(listings={
            "": ["a/"],
            "a": ["b/"],
            "b": ["wrong"],
            "a/b": ["c"],
        })

        assert PathWalker(client).list_all_secrets() == ["a/b/c"]

    def test_secret_and_directory_with_same_name(self) -> None:
        """Test a secret sharing its name with a directory is kept once."""
        client = FakeVaultClient(listings={
            "": ["svc", "svc/"],
            "svc": ["token"],
        })

        assert PathWalker(client).list_all_secrets() == ["svc", "svc/token"]

    @pytest.mark.parametrize("keys", [
        "a,b",
        {"a": 1},
        ["a", 3],
        [None],
    ])
    def test_malformed_listing_raises(self, keys) -> None:
        """Test a keys value that is not a list of strings is rejected."""
        client = FakeVaultClient(listings={"": ["dir/"], "dir": keys})

        with pytest.raises(MalformedListing) as exc_info:
            PathWalker(client).list_all_secrets()

        assert exc_info.value.path == "dir"

    def test_listing_failure_aborts_walk(self) -> None:
        """Test a failure deep in the tree propagates with no partial result."""
        client = FakeVaultClient(listings={
            "": ["ok", "a/"],
            "a": ["b/"],
            "a/b": VaultRequestError("permission denied", path="secret/metadata/a/b", status_code=403),
        })

        with pytest.raises(VaultRequestError):
            PathWalker(client).list_all_secrets()
