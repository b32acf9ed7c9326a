"""
HTTP access for the release index and toolchain archives.

Both requests go through a single ``requests`` session carrying the
configured timeouts and user agent. Failures are not retried: any transport
error or non-success status surfaces as NetworkError.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import requests
from requests.exceptions import RequestException

from zigupdate.core.config import AppConfig
from zigupdate.core.exceptions import NetworkError, ParseError

logger = logging.getLogger(__name__)


def create_session(config: AppConfig) -> requests.Session:
    """Create an HTTP session identifying itself with the configured agent."""
    session = requests.Session()
    session.headers["User-Agent"] = config.user_agent
    return session


def _get(
    session: requests.Session, url: str, config: AppConfig, stream: bool
) -> requests.Response:
    try:
        response = session.get(
            url, stream=stream, timeout=config.timeout, allow_redirects=True
        )
    except RequestException as e:
        raise NetworkError(url, str(e)) from e

    if not response.ok:
        response.close()
        raise NetworkError(url, f"HTTP {response.status_code} {response.reason}")

    return response


def fetch_json(
    url: str, config: AppConfig, session: Optional[requests.Session] = None
) -> Any:
    """
    GET a JSON document.

    Args:
        url: Document URL
        config: Timeouts and user agent
        session: Optional session to reuse

    Returns:
        The decoded JSON value

    Raises:
        NetworkError: On transport failure or non-success status
        ParseError: If the body is not valid JSON
    """
    session = session or create_session(config)
    logger.debug(f"Fetching {url}")

    response = _get(session, url, config, stream=False)
    try:
        return response.json()
    except ValueError as e:
        raise ParseError(f"Invalid JSON from {url}: {e}") from e
    finally:
        response.close()


@contextmanager
def open_stream(
    url: str,
    config: AppConfig,
    session: Optional[requests.Session] = None,
    enforce_content_length: bool = True,
) -> Iterator[requests.Response]:
    """
    Open a streaming GET for an archive download.

    The response stays open for the lifetime of the context so decoders can
    read directly from ``response.raw``.

    Args:
        url: Archive URL
        config: Timeouts and user agent
        session: Optional session to reuse
        enforce_content_length: Let urllib3 fail a body shorter than its
            Content-Length. Callers that buffer and compare the size
            themselves pass False.

    Example:
        >>> with open_stream(url, AppConfig()) as response:
        ...     data = response.raw.read()
    """
    session = session or create_session(config)
    logger.info(f"Downloading from {url}")

    response = _get(session, url, config, stream=True)
    # Transfer encodings are undone by urllib3, the archive bytes are left as-is
    response.raw.decode_content = True
    response.raw.enforce_content_length = enforce_content_length
    try:
        yield response
    finally:
        response.close()


def declared_length(response: requests.Response) -> Optional[int]:
    """
    Return the declared Content-Length, or None when it is absent or unusable.

    A body sent with a Content-Encoding has a declared length that refers to
    the encoded bytes, so it cannot be compared to the decoded size.
    """
    if response.headers.get("content-encoding"):
        return None
    value = response.headers.get("content-length")
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Ignoring malformed Content-Length header: {value!r}")
        return None
