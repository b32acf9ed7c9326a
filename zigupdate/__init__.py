"""
zig-update: install Zig toolchain releases from the official release index.
"""

__version__ = "0.1.0"

# Source revision, stamped by release builds
REVISION = "HEAD"
