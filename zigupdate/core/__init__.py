"""
Core functionality for zig-update.

This package contains the foundational modules the toolchain layer builds on:
configuration, HTTP access, filesystem helpers and archive extraction.
"""

from .config import (
    AppConfig,
    BuildInfo,
    DEFAULT_INDEX_URL,
    NIGHTLY_VERSION,
    get_build_info,
    load_config,
)

from .archive import (
    ArchiveMember,
    ExtractionResult,
    MemberKind,
    MemberSource,
    TarMemberSource,
    ZipMemberSource,
    detect_format,
    extract_archive,
    extract_members,
)

from .filesystem import (
    prepare_destination,
    resolve_member_path,
    strip_top_level,
)

from .exceptions import (
    ZigUpdateError,
    ConfigError,
    NetworkError,
    ParseError,
    ResolutionError,
    UnknownVersion,
    UnknownPlatform,
    FilesystemError,
    ArchiveExtractionError,
    UnsupportedArchiveFormat,
    IncompleteDownload,
    InsecureArchiveError,
)

__all__ = [
    "AppConfig",
    "BuildInfo",
    "DEFAULT_INDEX_URL",
    "NIGHTLY_VERSION",
    "get_build_info",
    "load_config",
    "ArchiveMember",
    "ExtractionResult",
    "MemberKind",
    "MemberSource",
    "TarMemberSource",
    "ZipMemberSource",
    "detect_format",
    "extract_archive",
    "extract_members",
    "prepare_destination",
    "resolve_member_path",
    "strip_top_level",
    "ZigUpdateError",
    "ConfigError",
    "NetworkError",
    "ParseError",
    "ResolutionError",
    "UnknownVersion",
    "UnknownPlatform",
    "FilesystemError",
    "ArchiveExtractionError",
    "UnsupportedArchiveFormat",
    "IncompleteDownload",
    "InsecureArchiveError",
]
