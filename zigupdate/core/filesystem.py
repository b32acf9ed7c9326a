"""
File system helpers for zig-update.

This module provides:
- Path containment checks used to keep archive members inside the destination
- Member path rewriting (dropping the archive's top-level directory)
- The destination preparer, which wipes the install directory before extraction
"""

import logging
import os
import shutil
import stat
from pathlib import Path, PurePosixPath
from typing import Optional, Union

from zigupdate.core.exceptions import FilesystemError, InsecureArchiveError

logger = logging.getLogger(__name__)

IS_WINDOWS = os.name == "nt"


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to parent (i.e., path is under parent).

    Args:
        path: Path to check
        parent: Potential parent path

    Returns:
        True if path is under parent (or equal to it), False otherwise

    Example:
        >>> is_relative_to(Path('/a/b/c'), Path('/a'))
        True
        >>> is_relative_to(Path('/a/b'), Path('/c'))
        False
    """
    try:
        path.resolve().relative_to(parent.resolve())
        return True
    except ValueError:
        return False


def strip_top_level(member_name: str) -> Optional[PurePosixPath]:
    """
    Drop the leading path component of an archive member name.

    Upstream archives wrap everything in one directory named after the
    release, e.g. ``zig-linux-x86_64-0.11.0/lib/std/std.zig``.

    Args:
        member_name: Path as stored in the archive (``/`` separated)

    Returns:
        The remaining relative path, or None when nothing remains (the
        top-level directory entry itself)

    Example:
        >>> strip_top_level("zig-0.11.0/lib/std.zig")
        PurePosixPath('lib/std.zig')
        >>> strip_top_level("zig-0.11.0/") is None
        True
    """
    parts = [p for p in member_name.replace("\\", "/").split("/") if p]
    if len(parts) <= 1:
        return None
    return PurePosixPath(*parts[1:])


def resolve_member_path(destination: Path, member_name: str) -> Optional[Path]:
    """
    Map an archive member name to its location under destination.

    Args:
        destination: Extraction root
        member_name: Path as stored in the archive

    Returns:
        Absolute target path, or None for the archive's top-level entry

    Raises:
        InsecureArchiveError: If the member would land outside destination
    """
    relative = strip_top_level(member_name)
    if relative is None:
        return None

    drive = IS_WINDOWS and ":" in relative.parts[0]
    if ".." in relative.parts or drive:
        raise InsecureArchiveError(
            f"Archive member '{member_name}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )

    target = destination.joinpath(*relative.parts)
    if not is_relative_to(target, destination):
        raise InsecureArchiveError(
            f"Archive member '{member_name}' resolves outside {destination}. "
            "This is a security risk and extraction has been blocked."
        )
    return target


# ============================================================================
# Destination Preparer
# ============================================================================


def _handle_remove_readonly(func, path, exc_info):
    """Clear the read-only bit and retry; Windows refuses to unlink otherwise."""
    if not os.access(path, os.W_OK):
        os.chmod(path, stat.S_IWRITE)
        func(path)
    else:
        raise exc_info[1]


def prepare_destination(path: Union[str, Path]) -> Path:
    """
    Remove any existing content at the destination path.

    Runs to completion before the first archive member is written, so a
    destination never mixes files from two releases.

    Args:
        path: Install directory

    Returns:
        Absolute destination path (not yet created)

    Raises:
        FilesystemError: If the path is a filesystem root, a mount point, or
            contains the working directory, or if removal fails

    Example:
        >>> prepare_destination("/opt/zig")
        PosixPath('/opt/zig')
    """
    path = Path(path).absolute()

    if path.parent == path:
        raise FilesystemError(f"Refusing to remove filesystem root: {path}")

    if is_relative_to(Path.cwd(), path):
        raise FilesystemError(
            f"Refusing to remove '{path}': it contains the current directory"
        )

    if not os.path.lexists(path):
        logger.debug(f"Destination does not exist: {path}")
        return path

    if path.is_symlink() or not path.is_dir():
        logger.info(f"Removing existing file: {path}")
        try:
            path.unlink()
        except OSError as e:
            raise FilesystemError(f"Failed to remove '{path}': {e}") from e
        return path

    if os.path.ismount(path):
        raise FilesystemError(f"Refusing to remove mount point: {path}")

    logger.info(f"Removing existing directory: {path}")
    try:
        if IS_WINDOWS:
            shutil.rmtree(path, onerror=_handle_remove_readonly)
        else:
            shutil.rmtree(path)
    except OSError as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}") from e

    return path
