"""
Release index model and loader.

The Zig release index is a JSON document shaped like::

    {
      "master": {
        "version": "0.12.0-dev.1234+abcdef",
        "date": "2023-10-01",
        "docs": "...", "stdDocs": "...",
        "src": {"tarball": "...", "shasum": "...", "size": "..."},
        "x86_64-linux": {"tarball": "...", "shasum": "...", "size": "..."},
        ...
      },
      "0.11.0": {...}
    }

It is decoded once into frozen dataclasses. Shape problems are reported as a
single ParseError at load time instead of surfacing later during lookup.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

import requests

from zigupdate.core.config import AppConfig
from zigupdate.core.download import fetch_json
from zigupdate.core.exceptions import ParseError

logger = logging.getLogger(__name__)

# Entry keys that describe the release rather than a platform build
RESERVED_KEYS = frozenset({"version", "date", "docs", "stdDocs", "src"})


@dataclass(frozen=True)
class PlatformArtifact:
    """Download information for one (version, platform) pair."""

    tarball: Optional[str] = None
    """Archive download URL; its suffix selects the archive format"""

    shasum: Optional[str] = None
    """SHA256 of the archive (not verified by this tool)"""

    size: Optional[str] = None
    """Archive size in bytes, as published"""


@dataclass(frozen=True)
class ReleaseEntry:
    """One release: metadata plus per-platform artifacts."""

    version_id: str
    """Key of this entry in the index (e.g. "0.11.0" or "master")"""

    version: Optional[str] = None
    date: Optional[str] = None
    docs: Optional[str] = None
    std_docs: Optional[str] = None
    src: Optional[PlatformArtifact] = None

    platforms: Mapping[str, PlatformArtifact] = field(default_factory=dict)
    """Platform identifier (e.g. "x86_64-linux") -> artifact"""

    extras: Mapping[str, Any] = field(default_factory=dict)
    """Other non-artifact metadata, such as release notes links"""


@dataclass(frozen=True)
class ReleaseIndex:
    """All known releases keyed by version identifier."""

    entries: Mapping[str, ReleaseEntry]

    def __contains__(self, version_id: object) -> bool:
        return version_id in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, version_id: str) -> Optional[ReleaseEntry]:
        return self.entries.get(version_id)


# ============================================================================
# Decoding
# ============================================================================


def _optional_str(data: Dict[str, Any], key: str, where: str) -> Optional[str]:
    value = data.get(key)
    if value is None or isinstance(value, str):
        return value
    # Sizes are published as strings but some mirrors emit numbers
    if key == "size" and isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    raise ParseError(
        f"Expected string for '{key}' in {where}, got {type(value).__name__}"
    )


def _parse_artifact(data: Any, where: str) -> PlatformArtifact:
    if not isinstance(data, dict):
        raise ParseError(f"Expected object for {where}, got {type(data).__name__}")
    return PlatformArtifact(
        tarball=_optional_str(data, "tarball", where),
        shasum=_optional_str(data, "shasum", where),
        size=_optional_str(data, "size", where),
    )


def _parse_entry(version_id: str, data: Any) -> ReleaseEntry:
    where = f"release '{version_id}'"
    if not isinstance(data, dict):
        raise ParseError(f"Expected object for {where}, got {type(data).__name__}")

    src = data.get("src")
    platforms = {}
    extras = {}
    for key, value in data.items():
        if key in RESERVED_KEYS:
            continue
        if isinstance(value, dict):
            platforms[key] = _parse_artifact(value, f"{where} platform '{key}'")
        else:
            # Scalar keys such as "notes" are kept as metadata, not platforms
            logger.debug(f"Treating non-artifact key '{key}' in {where} as metadata")
            extras[key] = value

    return ReleaseEntry(
        version_id=version_id,
        version=_optional_str(data, "version", where),
        date=_optional_str(data, "date", where),
        docs=_optional_str(data, "docs", where),
        std_docs=_optional_str(data, "stdDocs", where),
        src=_parse_artifact(src, f"{where} src") if src is not None else None,
        platforms=MappingProxyType(platforms),
        extras=MappingProxyType(extras),
    )


def parse_release_index(data: Any) -> ReleaseIndex:
    """
    Validate and decode a parsed JSON release index.

    Args:
        data: Result of ``json.loads`` on the index document

    Returns:
        Immutable ReleaseIndex

    Raises:
        ParseError: If the document is not a mapping of release objects or a
            field has the wrong type

    Example:
        >>> index = parse_release_index({"0.11.0": {"x86_64-linux": {"tarball": "u"}}})
        >>> index.get("0.11.0").platforms["x86_64-linux"].tarball
        'u'
    """
    if not isinstance(data, dict):
        raise ParseError(
            f"Release index must be a JSON object, got {type(data).__name__}"
        )

    entries = {
        str(version_id): _parse_entry(str(version_id), entry)
        for version_id, entry in data.items()
    }
    return ReleaseIndex(entries=MappingProxyType(entries))


def fetch_release_index(
    config: AppConfig, session: Optional[requests.Session] = None
) -> ReleaseIndex:
    """
    Download and decode the release index.

    Args:
        config: Supplies the index URL and timeouts
        session: Optional HTTP session to reuse

    Returns:
        Decoded ReleaseIndex

    Raises:
        NetworkError: On transport failure or non-success status
        ParseError: If the body is not a valid release index
    """
    logger.info(f"Fetching release index: {config.index_url}")
    index = parse_release_index(fetch_json(config.index_url, config, session))
    logger.debug(f"Loaded release index with {len(index)} releases")
    return index
