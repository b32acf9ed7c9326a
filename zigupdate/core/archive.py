"""
Archive extraction for downloaded toolchains.

Three container formats are supported, chosen from the download URL suffix:
- ``.tar.gz``: gzip-compressed tar, decoded straight from the response stream
- ``.xz``: xz-compressed tar, decoded straight from the response stream
- ``.zip``: buffered fully in memory first (the central directory sits at
  the end of the file)

Each format only supplies a MemberSource. The walk that rewrites paths,
creates directories, writes files and applies permission bits is shared.
"""

import gzip
import io
import logging
import lzma
import os
import shutil
import stat
import tarfile
import zipfile
import zlib
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from pathlib import Path
from typing import BinaryIO, Callable, Iterator, Optional, Union
from urllib.parse import urlparse

from zigupdate.core.exceptions import (
    ArchiveExtractionError,
    IncompleteDownload,
    InsecureArchiveError,
    UnsupportedArchiveFormat,
)
from zigupdate.core.filesystem import resolve_member_path

logger = logging.getLogger(__name__)

DIRECTORY_MODE = 0o755
DEFAULT_FILE_MODE = 0o644
READ_CHUNK_SIZE = 64 * 1024

# Suffix -> format name, checked in order
ARCHIVE_SUFFIXES = (
    (".tar.gz", "tar.gz"),
    (".zip", "zip"),
    (".xz", "tar.xz"),
)


class MemberKind(Enum):
    """What an archive member materializes as."""

    FILE = "file"
    DIRECTORY = "directory"
    OTHER = "other"  # symlinks, hard links, devices, FIFOs


@dataclass(frozen=True)
class ArchiveMember:
    """One entry of an archive, independent of the container format."""

    name: str
    """Path as stored in the archive, including the top-level directory"""

    mode: int
    """Permission bits recorded for the entry"""

    kind: MemberKind

    opener: Callable[[], BinaryIO] = field(repr=False, compare=False)
    """Returns the decompressed content stream (FILE members only)"""

    def open(self) -> BinaryIO:
        return self.opener()


@dataclass
class ExtractionResult:
    """Counts of what an extraction produced."""

    destination: Path
    files: int = 0
    directories: int = 0
    skipped: int = 0


# ============================================================================
# Member Sources
# ============================================================================


class MemberSource(ABC):
    """Yields the members of one archive in their stored order."""

    random_access = False
    """True when every member can be listed before any content is read"""

    @abstractmethod
    def members(self) -> Iterator[ArchiveMember]:
        """Iterate archive members in native order."""

    def finish(self) -> None:
        """Check that the archive was read to its end after the last member."""

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class _CountingReader:
    """Read-only stream wrapper counting the bytes handed out."""

    def __init__(self, stream: BinaryIO):
        self._stream = stream
        self.bytes_read = 0

    def read(self, size: int = -1) -> bytes:
        data = self._stream.read(size)
        self.bytes_read += len(data)
        return data


class TarMemberSource(MemberSource):
    """
    Streaming tar reader over a gzip or xz compressed byte stream.

    Decompression happens in ``gzip``/``lzma`` file readers rather than in
    tarfile itself: they raise EOFError when the compressed stream stops
    before its end marker, which tarfile's stream mode would otherwise take
    for a clean end of archive.
    """

    def __init__(
        self,
        stream: BinaryIO,
        compression: str,
        content_length: Optional[int] = None,
    ):
        if compression not in ("gz", "xz"):
            raise ValueError(f"Unsupported tar compression: {compression}")
        self._raw = _CountingReader(stream)
        self._content_length = content_length
        if compression == "gz":
            self._decoded = gzip.GzipFile(fileobj=self._raw, mode="rb")
        else:
            self._decoded = lzma.LZMAFile(self._raw)
        self._tar = tarfile.open(fileobj=self._decoded, mode="r|")

    def members(self) -> Iterator[ArchiveMember]:
        for info in self._tar:
            if info.isdir():
                kind = MemberKind.DIRECTORY
            elif info.isreg():
                kind = MemberKind.FILE
            else:
                kind = MemberKind.OTHER
            yield ArchiveMember(
                name=info.name,
                mode=stat.S_IMODE(info.mode),
                kind=kind,
                opener=partial(self._tar.extractfile, info),
            )

    def finish(self) -> None:
        """
        Drain the decompressor up to its end marker.

        Raises:
            EOFError: If the compressed stream ends early
            IncompleteDownload: If the bytes read differ from content_length
        """
        while self._decoded.read(READ_CHUNK_SIZE):
            pass
        received = self._raw.bytes_read
        if self._content_length is not None and received != self._content_length:
            raise IncompleteDownload(self._content_length, received)

    def close(self) -> None:
        self._tar.close()
        self._decoded.close()


class ZipMemberSource(MemberSource):
    """Zip reader over a fully buffered archive."""

    random_access = True

    def __init__(self, data: bytes):
        self._zip = zipfile.ZipFile(io.BytesIO(data))

    def members(self) -> Iterator[ArchiveMember]:
        for info in self._zip.infolist():
            unix_mode = info.external_attr >> 16
            file_type = stat.S_IFMT(unix_mode)

            if info.is_dir():
                kind = MemberKind.DIRECTORY
            elif file_type and not stat.S_ISREG(unix_mode):
                kind = MemberKind.OTHER
            else:
                kind = MemberKind.FILE

            # Archives created on Windows carry no Unix permission bits
            mode = stat.S_IMODE(unix_mode)
            if not mode:
                is_dir = kind is MemberKind.DIRECTORY
                mode = DIRECTORY_MODE if is_dir else DEFAULT_FILE_MODE

            yield ArchiveMember(
                name=info.filename,
                mode=mode,
                kind=kind,
                opener=partial(self._zip.open, info),
            )

    def close(self) -> None:
        self._zip.close()


# ============================================================================
# Shared Extraction Walk
# ============================================================================


def _write_file(member: ArchiveMember, target: Path) -> None:
    target.parent.mkdir(mode=DIRECTORY_MODE, parents=True, exist_ok=True)
    with member.open() as src, open(target, "wb") as dst:
        shutil.copyfileobj(src, dst)
    os.chmod(target, member.mode)


def extract_members(source: MemberSource, destination: Path) -> ExtractionResult:
    """
    Materialize every member of source under destination.

    The first path component of each member is dropped. Directories are
    created with standard permissions; files get the archive's recorded
    permission bits after their content is written. Symlinks, hard links and
    other special entries are skipped with a warning, as are files stored
    beside the top-level directory. Once the last member is written the
    source is checked for a complete read.

    Args:
        source: Archive member source
        destination: Extraction root (created if missing)

    Returns:
        ExtractionResult with member counts

    Raises:
        InsecureArchiveError: If a member path escapes destination. For
            random-access sources this is checked before anything is written.
        IncompleteDownload: If the source body disagrees with its declared size
        EOFError: If a compressed stream ends before its end marker
    """
    destination = Path(destination).absolute()
    result = ExtractionResult(destination=destination)

    members = source.members()
    if source.random_access:
        members = list(members)
        for member in members:
            resolve_member_path(destination, member.name)

    destination.mkdir(mode=DIRECTORY_MODE, parents=True, exist_ok=True)

    for member in members:
        target = resolve_member_path(destination, member.name)
        if target is None:
            # The wrapper directory itself maps onto destination
            if member.kind is not MemberKind.DIRECTORY:
                logger.warning(f"Skipping top-level archive member: {member.name}")
                result.skipped += 1
            continue

        if member.kind is MemberKind.DIRECTORY:
            logger.debug(f"{target}{os.sep}")
            target.mkdir(mode=DIRECTORY_MODE, parents=True, exist_ok=True)
            result.directories += 1
        elif member.kind is MemberKind.FILE:
            logger.debug(str(target))
            _write_file(member, target)
            result.files += 1
        else:
            logger.warning(f"Skipping unsupported archive member: {member.name}")
            result.skipped += 1

    source.finish()
    return result


# ============================================================================
# Format Dispatch
# ============================================================================


def detect_format(url: str) -> str:
    """
    Determine archive format from the download URL suffix.

    Args:
        url: Download URL (query string and fragment are ignored)

    Returns:
        One of ``"tar.gz"``, ``"zip"``, ``"tar.xz"``

    Raises:
        UnsupportedArchiveFormat: If no known suffix matches

    Example:
        >>> detect_format("https://ziglang.org/builds/zig-linux-x86_64-0.12.0.tar.xz")
        'tar.xz'
    """
    path = urlparse(url).path
    for suffix, archive_format in ARCHIVE_SUFFIXES:
        if path.endswith(suffix):
            return archive_format
    raise UnsupportedArchiveFormat(
        f"Unsupported archive: {url}. Supported: .tar.gz, .zip, .xz"
    )


def read_fully(stream: BinaryIO, content_length: Optional[int] = None) -> bytes:
    """
    Buffer a whole stream, checking it against the declared length.

    Raises:
        IncompleteDownload: If content_length is given and differs from the
            number of bytes read
    """
    buffer = io.BytesIO()
    shutil.copyfileobj(stream, buffer)
    data = buffer.getvalue()
    if content_length is not None and content_length != len(data):
        raise IncompleteDownload(content_length, len(data))
    return data


def open_member_source(
    archive_format: str, stream: BinaryIO, content_length: Optional[int] = None
) -> MemberSource:
    """Build the member source for an archive format."""
    if archive_format == "tar.gz":
        return TarMemberSource(stream, "gz", content_length)
    if archive_format == "tar.xz":
        return TarMemberSource(stream, "xz", content_length)
    if archive_format == "zip":
        return ZipMemberSource(read_fully(stream, content_length))
    raise UnsupportedArchiveFormat(f"Unsupported archive format: {archive_format}")


def extract_archive(
    url: str,
    stream: BinaryIO,
    destination: Union[str, Path],
    content_length: Optional[int] = None,
) -> ExtractionResult:
    """
    Extract an archive stream into destination.

    Args:
        url: Download URL; its suffix selects the decoder
        stream: Readable byte stream of the archive body
        destination: Directory to extract into
        content_length: Declared body size, verified once the body is read

    Returns:
        ExtractionResult with member counts

    Raises:
        UnsupportedArchiveFormat: If the URL suffix is not recognized
        IncompleteDownload: If the body is shorter or longer than declared
        InsecureArchiveError: If a member escapes destination
        ArchiveExtractionError: If decoding or writing fails

    Example:
        >>> with open("zig.tar.xz", "rb") as f:
        ...     extract_archive("file:///zig.tar.xz", f, "/opt/zig")
    """
    archive_format = detect_format(url)
    destination = Path(destination)
    logger.info(f"Extracting {archive_format} archive to: {destination}")

    try:
        with open_member_source(archive_format, stream, content_length) as source:
            result = extract_members(source, destination)
    except (InsecureArchiveError, IncompleteDownload, UnsupportedArchiveFormat):
        raise
    except (
        OSError,
        EOFError,
        tarfile.TarError,
        zipfile.BadZipFile,
        lzma.LZMAError,
        zlib.error,
        # zipfile: encrypted members, unknown compression methods
        RuntimeError,
    ) as e:
        raise ArchiveExtractionError(f"Failed to extract {url}: {e}") from e

    logger.info(
        f"Extracted {result.files} files and {result.directories} directories"
        + (f", skipped {result.skipped} unsupported members" if result.skipped else "")
    )
    return result
