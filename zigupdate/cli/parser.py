"""
zig-update command-line interface.

Usage: zig-update [-v] [-d VERSION] [--verbose | -q] [--config PATH]
                  [--index-url URL] PLATFORM DEST
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from zigupdate.cli.utils import format_usage, print_error, print_warning
from zigupdate.core.config import (
    NIGHTLY_VERSION,
    PROGRAM_NAME,
    get_build_info,
    load_config,
)
from zigupdate.core.exceptions import ZigUpdateError
from zigupdate.toolchain.installer import ToolchainInstaller
from zigupdate.toolchain.resolver import list_platforms, list_versions

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130  # Standard exit code for SIGINT


class CLI:
    """zig-update command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog=PROGRAM_NAME,
            description="Download a Zig release and extract it into a directory",
            epilog="Run without PLATFORM and DEST to list available platforms",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        parser.add_argument(
            "-v",
            "--version",
            dest="show_version",
            action="store_true",
            help="Print the version and exit",
        )
        parser.add_argument(
            "-d",
            dest="download_version",
            metavar="VERSION",
            help=f"Zig version to download (default: {NIGHTLY_VERSION})",
        )
        parser.add_argument(
            "--verbose", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to a YAML configuration file",
        )
        parser.add_argument(
            "--index-url",
            metavar="URL",
            help="Override the release index URL",
        )
        parser.add_argument(
            "targets",
            nargs="*",
            metavar="PLATFORM DEST",
            help="Platform identifier (e.g. x86_64-linux) and install directory",
        )

        return parser

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Parse arguments and run.

        Args:
            args: Command-line arguments (default: sys.argv[1:])

        Returns:
            Exit code (0 for success)
        """
        parsed_args = self.parser.parse_args(args)

        if parsed_args.show_version:
            print(get_build_info().describe())
            return EXIT_OK

        self._configure_logging(parsed_args)

        try:
            return self._run_install(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return EXIT_INTERRUPTED
        except ZigUpdateError as e:
            print_error(str(e))
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return EXIT_ERROR

    def _run_install(self, args) -> int:
        config = load_config(args.config).with_overrides(
            index_url=args.index_url,
            default_version=args.download_version,
        )
        installer = ToolchainInstaller(config)

        if len(args.targets) != 2:
            self._print_usage(installer)
            return EXIT_USAGE

        platform, destination = args.targets
        result = installer.install(platform, destination)

        logger.info(
            f"Zig {result.version} for {result.platform} is ready in "
            f"{result.destination}"
        )
        return EXIT_OK

    def _print_usage(self, installer: ToolchainInstaller):
        """Print usage with the platforms and versions found in the index."""
        index = installer.index
        version = installer.config.default_version

        entry = index.get(version)
        if entry is None:
            print_warning(f"Zig version not found in index: {version}")
            version = NIGHTLY_VERSION
            entry = index.get(version)

        platforms = list_platforms(entry) if entry is not None else []
        print(
            format_usage(self.parser.prog, platforms, list_versions(index), version),
            file=sys.stderr,
        )


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
