#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/utils/network.py
"""Network access for remote codecs.

Remote codecs never talk to the network directly. They receive a
``Fetcher`` (anything with a ``fetch(url, headers=None)`` method returning a
``FetchResponse``) and the default implementation, ``HttpFetcher``, wraps an
``httpx`` client with size, scheme and timeout limits.

Functions
---------
- is_network_disabled: Check the global ``DOCODEC_DISABLE_NETWORK`` switch
- validate_url: Scheme and hostname checks applied before every request
- get_fetcher: Resolve the fetcher for a set of decode options
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from email.message import Message
from typing import TYPE_CHECKING, Any, Optional, Protocol, runtime_checkable
from urllib.parse import urlparse

from docodec.constants import DEPS_NETWORK, ENV_DISABLE_NETWORK
from docodec.exceptions import NetworkSecurityError
from docodec.options.network import NetworkOptions
from docodec.utils.decorators import requires_dependencies

if TYPE_CHECKING:
    from docodec.options.base import BaseDecodeOptions

logger = logging.getLogger(__name__)


@dataclass
class FetchResponse:
    """The body and headers of a completed fetch.

    Parameters
    ----------
    url : str
        Final URL after redirects
    content : bytes
        Response body
    media_type : str
        Main media type of the response (parameters such as charset removed),
        or an empty string when the server did not send one

    """

    url: str
    content: bytes
    media_type: str = ""

    @property
    def text(self) -> str:
        """The body decoded as UTF-8."""
        return self.content.decode("utf-8", errors="replace")


@runtime_checkable
class Fetcher(Protocol):
    """Protocol for objects that retrieve remote resources."""

    def fetch(self, url: str, headers: Optional[dict[str, str]] = None) -> FetchResponse:
        """Fetch ``url`` and return its body."""
        ...


def parse_content_type(content_type: str) -> str:
    """Extract the main media type from a ``Content-Type`` header.

    Examples
    --------
    >>> parse_content_type("text/html; charset=UTF-8")
    'text/html'

    """
    if not content_type:
        return ""
    msg = Message()
    msg["content-type"] = content_type
    return msg.get_content_type().lower()


def is_network_disabled() -> bool:
    """Check if network access is globally disabled via environment variable.

    Returns
    -------
    bool
        True if ``DOCODEC_DISABLE_NETWORK`` is set to a truthy value

    """
    return os.getenv(ENV_DISABLE_NETWORK, "").lower() in ("true", "1", "yes", "on")


def validate_url(url: str, require_https: bool = False) -> None:
    """Validate a URL before requesting it.

    Raises
    ------
    NetworkSecurityError
        If the scheme is not HTTP(S), HTTPS is required but not used, or the
        URL has no hostname

    """
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise NetworkSecurityError(f"Unsupported URL scheme: {parsed.scheme or '(none)'}")
    if require_https and parsed.scheme != "https":
        raise NetworkSecurityError(f"HTTPS required but got: {parsed.scheme}")
    if not parsed.hostname:
        raise NetworkSecurityError(f"URL missing hostname: {url}")


class HttpFetcher:
    """Fetcher backed by an ``httpx.Client``.

    Parameters
    ----------
    options : NetworkOptions, optional
        Timeout, size and scheme limits

    """

    def __init__(self, options: Optional[NetworkOptions] = None):
        self.options = options or NetworkOptions()

    def _create_client(self) -> Any:
        import httpx

        return httpx.Client(
            timeout=self.options.timeout,
            follow_redirects=True,
            headers={"User-Agent": self.options.user_agent},
        )

    @requires_dependencies("network", DEPS_NETWORK)
    def fetch(self, url: str, headers: Optional[dict[str, str]] = None) -> FetchResponse:
        """Fetch a URL, streaming the body and enforcing the size limit.

        Parameters
        ----------
        url : str
            URL to fetch
        headers : dict, optional
            Extra request headers, e.g. ``Accept``

        Returns
        -------
        FetchResponse
            Final URL, body and media type

        Raises
        ------
        NetworkSecurityError
            If network access is disabled, the URL is rejected, the response
            is too large, or the request fails

        """
        from httpx import HTTPError

        if is_network_disabled():
            raise NetworkSecurityError(
                f"Network access is globally disabled via {ENV_DISABLE_NETWORK} environment variable"
            )
        validate_url(url, require_https=self.options.require_https)

        max_size = self.options.max_size_bytes
        try:
            with self._create_client() as client:
                with client.stream("GET", url, headers=headers or {}) as response:
                    response.raise_for_status()
                    validate_url(str(response.url), require_https=self.options.require_https)

                    declared = response.headers.get("content-length")
                    if declared and declared.isdigit() and int(declared) > max_size:
                        raise NetworkSecurityError(f"Content-Length too large: {declared} bytes (max: {max_size})")

                    chunks = []
                    total_size = 0
                    for chunk in response.iter_bytes(chunk_size=8192):
                        total_size += len(chunk)
                        if total_size > max_size:
                            raise NetworkSecurityError(
                                f"Response too large: exceeded {max_size} bytes during streaming"
                            )
                        chunks.append(chunk)

                    logger.debug(f"Fetched {total_size} bytes from {url}")
                    return FetchResponse(
                        url=str(response.url),
                        content=b"".join(chunks),
                        media_type=parse_content_type(response.headers.get("content-type", "")),
                    )
        except NetworkSecurityError:
            raise
        except HTTPError as e:
            raise NetworkSecurityError(f"HTTP request failed for {url}: {e}", original_error=e) from e


def get_fetcher(options: Optional["BaseDecodeOptions"] = None) -> Fetcher:
    """Return the fetcher configured on ``options``, or a default ``HttpFetcher``.

    Options without ``fetcher``/``network`` fields (plain decode options)
    get a default fetcher.
    """
    fetcher = getattr(options, "fetcher", None)
    if fetcher is not None:
        return fetcher
    return HttpFetcher(getattr(options, "network", None))
