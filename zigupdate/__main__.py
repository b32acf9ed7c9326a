"""
Entry point for running zig-update as a module.

Usage: python -m zigupdate [options] PLATFORM DEST
"""

from zigupdate.cli.parser import main

if __name__ == "__main__":
    main()
