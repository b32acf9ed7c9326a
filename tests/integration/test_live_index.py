"""
Integration tests against the live ziglang.org release index.

Run with: pytest --integration
"""

import pytest

from zigupdate.core.config import AppConfig
from zigupdate.toolchain.index import fetch_release_index
from zigupdate.toolchain.resolver import list_platforms, list_versions, resolve_artifact_url


@pytest.mark.integration
class TestLiveIndex:
    """Tests that require network access."""

    def test_index_has_master(self):
        """Test the live index decodes and lists master last."""
        index = fetch_release_index(AppConfig())

        versions = list_versions(index)
        assert versions[-1] == "master"
        assert "x86_64-linux" in list_platforms(index.get("master"))

    def test_resolve_stable_release(self):
        """Test that a published release resolves to a supported archive."""
        index = fetch_release_index(AppConfig())

        url = resolve_artifact_url(index, "0.11.0", "x86_64-linux")
        assert url.endswith(".tar.xz")
