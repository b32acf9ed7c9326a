"""
Toolchain install workflow.

This module ties the pieces together for one run:
1. Fetch the release index
2. Resolve the requested version/platform to a download URL
3. Open the archive download
4. Remove the existing destination
5. Extract the archive into the destination

Every step blocks on the previous one and any failure aborts the run.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import requests
from urllib3.exceptions import HTTPError as Urllib3HTTPError

from zigupdate.core.archive import detect_format, extract_archive
from zigupdate.core.config import AppConfig
from zigupdate.core.download import create_session, declared_length, open_stream
from zigupdate.core.exceptions import NetworkError
from zigupdate.core.filesystem import prepare_destination
from zigupdate.toolchain.index import ReleaseIndex, fetch_release_index
from zigupdate.toolchain.resolver import resolve_artifact_url

logger = logging.getLogger(__name__)


@dataclass
class InstallResult:
    """Result of a toolchain install."""

    version: str
    """Release identifier that was installed"""

    platform: str
    """Platform identifier that was installed"""

    url: str
    """Archive download URL"""

    destination: Path
    """Directory the toolchain was extracted into"""

    files: int
    directories: int
    skipped: int

    elapsed: float
    """Seconds spent downloading and extracting"""


class ToolchainInstaller:
    """
    Downloads a Zig release and extracts it over a destination directory.

    The release index is fetched at most once per installer instance.

    Example:
        >>> installer = ToolchainInstaller()
        >>> result = installer.install("x86_64-linux", Path("/opt/zig"))
        >>> print(f"Installed {result.version} into {result.destination}")
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize installer.

        Args:
            config: Runtime configuration. If None, uses defaults.
            session: Optional HTTP session. If None, creates one.
        """
        self.config = config or AppConfig()
        self.session = session or create_session(self.config)
        self._index: Optional[ReleaseIndex] = None

    @property
    def index(self) -> ReleaseIndex:
        """Release index, fetched on first access."""
        if self._index is None:
            self._index = fetch_release_index(self.config, self.session)
        return self._index

    def install(
        self,
        platform: str,
        destination: Union[str, Path],
        version: Optional[str] = None,
    ) -> InstallResult:
        """
        Install a release for a platform into destination.

        Anything already at destination is removed once the download has
        started successfully, and before the first member is extracted.

        Args:
            platform: Platform identifier (e.g. "x86_64-linux")
            destination: Install directory
            version: Release identifier; defaults to config.default_version

        Returns:
            InstallResult describing what was installed

        Raises:
            NetworkError: If the index or archive request fails
            ParseError: If the index is malformed
            UnknownVersion: If version is not in the index
            UnknownPlatform: If platform is not available for version
            UnsupportedArchiveFormat: If the download URL has an unknown suffix
            IncompleteDownload: If the body does not match its declared size
            ArchiveExtractionError: If the archive is truncated or corrupt
            FilesystemError: If the destination cannot be replaced or written
        """
        version = version or self.config.default_version
        url = resolve_artifact_url(self.index, version, platform)

        # Reject unknown formats before touching the destination
        archive_format = detect_format(url)

        start = time.time()
        try:
            # Zip bodies are buffered and size-checked by the extractor
            with open_stream(
                url,
                self.config,
                self.session,
                enforce_content_length=archive_format != "zip",
            ) as response:
                target = prepare_destination(destination)
                extraction = extract_archive(
                    url,
                    response.raw,
                    target,
                    content_length=declared_length(response),
                )
        except Urllib3HTTPError as e:
            raise NetworkError(url, str(e)) from e

        elapsed = time.time() - start
        logger.info(f"Installed Zig {version} ({platform}) in {elapsed:.2f}s")

        return InstallResult(
            version=version,
            platform=platform,
            url=url,
            destination=extraction.destination,
            files=extraction.files,
            directories=extraction.directories,
            skipped=extraction.skipped,
            elapsed=elapsed,
        )


# Convenience function for one-off installs
def install_toolchain(
    platform: str,
    destination: Union[str, Path],
    version: Optional[str] = None,
    config: Optional[AppConfig] = None,
) -> InstallResult:
    """
    Convenience function to install a toolchain in one call.

    Example:
        >>> from zigupdate.toolchain.installer import install_toolchain
        >>> result = install_toolchain("x86_64-linux", "/opt/zig", version="0.11.0")
    """
    return ToolchainInstaller(config).install(platform, destination, version)
