"""
Toolchain management for zig-update.

This package provides:
- Release index decoding and download
- Version ordering and version/platform resolution
- The install workflow (download, replace destination, extract)
"""

from zigupdate.toolchain.index import (
    PlatformArtifact,
    ReleaseEntry,
    ReleaseIndex,
    RESERVED_KEYS,
    fetch_release_index,
    parse_release_index,
)
from zigupdate.toolchain.resolver import (
    get_entry,
    list_platforms,
    list_versions,
    resolve_artifact_url,
)
from zigupdate.toolchain.versioning import (
    InvalidVersionError,
    Version,
    sort_versions,
)
from zigupdate.toolchain.installer import (
    InstallResult,
    ToolchainInstaller,
    install_toolchain,
)

__all__ = [
    "PlatformArtifact",
    "ReleaseEntry",
    "ReleaseIndex",
    "RESERVED_KEYS",
    "fetch_release_index",
    "parse_release_index",
    "get_entry",
    "list_platforms",
    "list_versions",
    "resolve_artifact_url",
    "InvalidVersionError",
    "Version",
    "sort_versions",
    "InstallResult",
    "ToolchainInstaller",
    "install_toolchain",
]
