"""
Shared utilities for the zig-update CLI.

Output helpers that keep error and usage text consistent.
"""

import sys
from typing import List, Optional, TextIO


def format_usage(
    prog: str,
    platforms: List[str],
    versions: List[str],
    version: Optional[str] = None,
) -> str:
    """
    Format usage text listing available platforms and versions.

    Args:
        prog: Program name shown in the usage line
        platforms: Platform identifiers of the selected release
        versions: All release identifiers, oldest first
        version: Release the platform list belongs to

    Returns:
        Multi-line usage text

    Example:
        >>> print(format_usage("zig-update", ["x86_64-linux"], ["0.11.0", "master"]))
        usage: zig-update [options] PLATFORM DEST
        Arch:
          x86_64-linux
        Version:
          0.11.0
          master
    """
    lines = [f"usage: {prog} [options] PLATFORM DEST"]
    lines.append(f"Arch ({version}):" if version else "Arch:")
    lines.extend(f"  {p}" for p in platforms)
    lines.append("Version:")
    lines.extend(f"  {v}" for v in versions)
    return "\n".join(lines)


def print_error(message: str, details: Optional[str] = None):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details
    """
    print(f"ERROR: {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)


def print_warning(message: str, file: Optional[TextIO] = None):
    """Print warning message to stderr."""
    print(f"WARNING: {message}", file=file or sys.stderr)
