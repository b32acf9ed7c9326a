"""
Version and platform lookup against a release index.
"""

import logging
from typing import List

from zigupdate.core.exceptions import UnknownPlatform, UnknownVersion
from zigupdate.toolchain.index import ReleaseEntry, ReleaseIndex
from zigupdate.toolchain.versioning import sort_versions

logger = logging.getLogger(__name__)


def list_versions(index: ReleaseIndex) -> List[str]:
    """
    List release identifiers, oldest first and the nightly build last.

    Example:
        >>> list_versions(index)
        ['0.10.1', '0.11.0', 'master']
    """
    return sort_versions(index.entries)


def list_platforms(entry: ReleaseEntry) -> List[str]:
    """List platform identifiers of a release in lexical order."""
    return sorted(entry.platforms)


def get_entry(index: ReleaseIndex, version: str) -> ReleaseEntry:
    """
    Look up a release entry.

    Raises:
        UnknownVersion: If version is not in the index
    """
    entry = index.get(version)
    if entry is None:
        raise UnknownVersion(version)
    return entry


def resolve_artifact_url(index: ReleaseIndex, version: str, platform: str) -> str:
    """
    Resolve a (version, platform) pair to its archive download URL.

    Args:
        index: Release index
        version: Release identifier (e.g. "0.11.0" or "master")
        platform: Platform identifier (e.g. "x86_64-linux")

    Returns:
        Download URL of the archive

    Raises:
        UnknownVersion: If version is not in the index
        UnknownPlatform: If platform is not published for that release, or
            has no download URL

    Example:
        >>> resolve_artifact_url(index, "0.11.0", "x86_64-linux")
        'https://ziglang.org/download/0.11.0/zig-linux-x86_64-0.11.0.tar.xz'
    """
    entry = get_entry(index, version)

    artifact = entry.platforms.get(platform)
    if artifact is None or not artifact.tarball:
        if artifact is not None:
            logger.debug(f"Platform {platform} of {version} has no download URL")
        raise UnknownPlatform(platform, version)

    logger.debug(f"Resolved {version}/{platform} -> {artifact.tarball}")
    return artifact.tarball
