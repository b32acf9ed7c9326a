"""
Semantic version ordering for release index keys.

Release identifiers are mostly semantic versions ("0.11.0",
"0.12.0-dev.1234+abcdef") plus the unstable "master" build, which is not a
version at all and is always treated as the newest release.
"""

import re
from functools import total_ordering
from typing import Iterable, List, Optional, Tuple

from zigupdate.core.config import NIGHTLY_VERSION

_SEMVER_RE = re.compile(
    r"^v?(?P<major>0|[1-9]\d*)"
    r"(?:\.(?P<minor>0|[1-9]\d*)"
    r"(?:\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r")?)?$"
)


class InvalidVersionError(ValueError):
    """String is not a semantic version."""

    pass


@total_ordering
class Version:
    """
    Semantic version parser and comparator.

    Follows semver 2.0 precedence: numeric core first, then pre-release
    identifiers, a release ranking above any of its pre-releases. Build
    metadata is kept but ignored for ordering. A leading ``v`` and the
    ``MAJOR`` / ``MAJOR.MINOR`` shorthands are accepted.

    Example:
        >>> Version("0.12.0-dev.100") < Version("0.12.0")
        True
        >>> Version("0.9.1") < Version("0.10.0")
        True
    """

    def __init__(self, version_string: str):
        match = _SEMVER_RE.match(version_string)
        if not match:
            raise InvalidVersionError(f"Invalid semantic version: {version_string}")

        self.original = version_string
        self.major = int(match.group("major"))
        self.minor = int(match.group("minor") or 0)
        self.patch = int(match.group("patch") or 0)
        prerelease = match.group("prerelease")
        self.prerelease: Tuple[str, ...] = (
            tuple(prerelease.split(".")) if prerelease else ()
        )
        self.build: Optional[str] = match.group("build")

        for ident in self.prerelease:
            if len(ident) > 1 and ident.isdigit() and ident.startswith("0"):
                raise InvalidVersionError(
                    f"Invalid semantic version: {version_string} "
                    f"(numeric identifier '{ident}' has a leading zero)"
                )

    def _prerelease_key(self) -> Tuple:
        # A release sorts after every pre-release of the same core version
        if not self.prerelease:
            return (1,)
        idents = []
        for ident in self.prerelease:
            if ident.isdigit():
                idents.append((0, int(ident), ""))
            else:
                idents.append((1, 0, ident))
        return (0, tuple(idents))

    def _key(self) -> Tuple:
        return (self.major, self.minor, self.patch, self._prerelease_key())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        return self.original

    def __repr__(self) -> str:
        return f"Version('{self.original}')"


def parse_version(version_string: str) -> Optional[Version]:
    """Parse a version, returning None when it is not a semantic version."""
    try:
        return Version(version_string)
    except InvalidVersionError:
        return None


def version_sort_key(identifier: str) -> Tuple:
    """
    Sort key placing release identifiers in ascending order.

    Non-version identifiers come first (lexically), then semantic versions
    by precedence, then the nightly identifier last. Ties between equal
    precedence versions (differing only in build metadata or a ``v``
    prefix) fall back to the raw string for a stable order.
    """
    if identifier == NIGHTLY_VERSION:
        return (2, None, identifier)
    version = parse_version(identifier)
    if version is None:
        return (0, None, identifier)
    return (1, version, identifier)


def sort_versions(identifiers: Iterable[str]) -> List[str]:
    """
    Sort release identifiers oldest first, nightly last.

    Example:
        >>> sort_versions(["master", "0.10.0", "0.9.1", "0.11.0"])
        ['0.9.1', '0.10.0', '0.11.0', 'master']
    """
    return sorted(set(identifiers), key=version_sort_key)
