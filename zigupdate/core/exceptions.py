"""
Centralized exception hierarchy for zig-update.

Every failure the tool can hit maps to one of these exceptions. None of them
are retried; the CLI reports the first one raised and exits non-zero.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class ZigUpdateError(Exception):
    """Base exception for all zig-update errors."""

    pass


class ConfigError(ZigUpdateError):
    """Configuration file or override is invalid."""

    pass


# ============================================================================
# Index Exceptions
# ============================================================================


class NetworkError(ZigUpdateError):
    """Request or transport failure, or a non-success HTTP status."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Request to {url} failed: {reason}")


class ParseError(ZigUpdateError):
    """Release index is not valid JSON or has an unexpected shape."""

    pass


# ============================================================================
# Resolution Exceptions
# ============================================================================


class ResolutionError(ZigUpdateError):
    """Base exception for version/platform lookup misses."""

    pass


class UnknownVersion(ResolutionError):
    """Requested version is not present in the release index."""

    def __init__(self, version: str):
        self.version = version
        super().__init__(f"Zig version not found in index: {version}")


class UnknownPlatform(ResolutionError):
    """Requested platform is not available for the resolved release."""

    def __init__(self, platform: str, version: str = ""):
        self.platform = platform
        self.version = version
        msg = f"Unsupported platform: {platform}"
        if version:
            msg += f" (version {version})"
        super().__init__(msg)


# ============================================================================
# Filesystem Exceptions
# ============================================================================


class FilesystemError(ZigUpdateError):
    """Base exception for filesystem create/write/chmod/remove failures."""

    pass


class ArchiveExtractionError(FilesystemError):
    """Failed to extract an archive."""

    pass


class UnsupportedArchiveFormat(ArchiveExtractionError):
    """Download URL suffix does not map to a known archive format."""

    pass


class IncompleteDownload(ArchiveExtractionError):
    """Buffered body size disagrees with the declared content length."""

    def __init__(self, expected: int, received: int):
        self.expected = expected
        self.received = received
        super().__init__(
            f"Size not matched: expected {expected} bytes, received {received}"
        )


class InsecureArchiveError(ArchiveExtractionError):
    """Archive member would be written outside the destination directory."""

    pass
