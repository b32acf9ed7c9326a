"""
Pytest configuration and shared fixtures for zig-update tests.
"""

import logging

import pytest

# Import test fixtures to make them available to all tests
# These imports register the fixtures with pytest's fixture discovery system
# ruff: noqa: F401
from tests.fixtures.archives import archive_format
from tests.fixtures.releases import sample_index_data


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (requires --integration)",
    )


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def parsed_index(sample_index_data):
    """Decoded ReleaseIndex built from sample_index_data."""
    from zigupdate.toolchain.index import parse_release_index

    return parse_release_index(sample_index_data)


@pytest.fixture
def debug_logging(caplog):
    """Capture DEBUG records from zig-update loggers."""
    caplog.set_level(logging.DEBUG, logger="zigupdate")
    return caplog
