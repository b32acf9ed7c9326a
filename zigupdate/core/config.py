"""
Runtime configuration for zig-update.

Configuration is assembled once at startup from built-in defaults, an
optional YAML file, and command-line overrides. The result is an immutable
value passed down to the fetcher and installer.
"""

import logging
import platform
from dataclasses import dataclass, fields, replace
from importlib.metadata import PackageNotFoundError, version as package_version
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from zigupdate.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

PROGRAM_NAME = "zig-update"
DEFAULT_INDEX_URL = "https://ziglang.org/download/index.json"
NIGHTLY_VERSION = "master"


@dataclass(frozen=True)
class BuildInfo:
    """Name, version and source revision of this build."""

    name: str
    version: str
    revision: str

    def describe(self) -> str:
        """
        Format build info for ``-v`` output.

        Example:
            >>> BuildInfo("zig-update", "0.1.0", "HEAD").describe()
            'zig-update 0.1.0 (rev: HEAD/python3.12.1)'
        """
        return (
            f"{self.name} {self.version} "
            f"(rev: {self.revision}/python{platform.python_version()})"
        )


def get_build_info() -> BuildInfo:
    """Assemble build info from installed package metadata."""
    from zigupdate import REVISION, __version__

    try:
        pkg_version = package_version(PROGRAM_NAME)
    except PackageNotFoundError:
        pkg_version = __version__

    return BuildInfo(name=PROGRAM_NAME, version=pkg_version, revision=REVISION)


@dataclass(frozen=True)
class AppConfig:
    """Settings for one zig-update run."""

    index_url: str = DEFAULT_INDEX_URL
    """URL of the JSON release index"""

    default_version: str = NIGHTLY_VERSION
    """Release installed when no ``-d`` flag is given"""

    connect_timeout: float = 10.0
    """Seconds to wait for a TCP connection"""

    read_timeout: float = 60.0
    """Seconds to wait between bytes of a response"""

    user_agent: str = PROGRAM_NAME

    @property
    def timeout(self) -> tuple:
        """Timeout tuple in the form ``requests`` expects."""
        return (self.connect_timeout, self.read_timeout)

    def with_overrides(self, **overrides: Any) -> "AppConfig":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self


_FIELD_TYPES = {
    "index_url": (str,),
    "default_version": (str,),
    "connect_timeout": (int, float),
    "read_timeout": (int, float),
    "user_agent": (str,),
}


def _parse_config_data(data: Dict[str, Any], source: Path) -> AppConfig:
    """Validate a parsed YAML mapping and build an AppConfig from it."""
    known = {f.name for f in fields(AppConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys in {source}: {', '.join(unknown)}"
        )

    values = {}
    for key, value in data.items():
        expected = _FIELD_TYPES[key]
        # bool is an int subclass but never a valid timeout
        if isinstance(value, bool) or not isinstance(value, expected):
            raise ConfigError(
                f"Invalid value for '{key}' in {source}: {value!r}"
            )
        if key.endswith("_timeout") and value <= 0:
            raise ConfigError(f"'{key}' must be positive in {source}")
        values[key] = float(value) if key.endswith("_timeout") else value

    return AppConfig(**values)


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """
    Load configuration, falling back to defaults when no file is given.

    Args:
        config_path: Optional path to a YAML file with AppConfig keys

    Returns:
        Parsed configuration

    Raises:
        ConfigError: If the file is missing, not valid YAML, or has bad keys

    Example:
        >>> config = load_config(Path("zig-update.yaml"))
        >>> config.index_url
        'https://ziglang.org/download/index.json'
    """
    if config_path is None:
        return AppConfig()

    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    logger.debug(f"Loading configuration from {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        return AppConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration in {config_path} must be a mapping")

    return _parse_config_data(data, config_path)
