"""Test fixtures for zig-update tests.

This package provides reusable pytest fixtures and builders. Fixtures are
organized by type:

- archives: In-memory tar.gz, tar.xz and zip archives laid out like
  upstream releases (one top-level directory)
- releases: Release index documents

Import fixtures in your tests using:
    from tests.fixtures.archives import build_archive
    from tests.fixtures.releases import sample_index_data
"""

__all__ = [
    "archives",
    "releases",
]
