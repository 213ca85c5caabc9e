#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/options/network.py
"""Network options for remote codecs (HTTP, DOI, PLoS)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from docodec.constants import DEFAULT_MAX_DOWNLOAD_BYTES, DEFAULT_NETWORK_TIMEOUT, DEFAULT_USER_AGENT
from docodec.options.base import BaseDecodeOptions, CloneFrozenMixin

if TYPE_CHECKING:
    from docodec.utils.network import Fetcher


@dataclass(frozen=True)
class NetworkOptions(CloneFrozenMixin):
    """Limits applied to every remote fetch.

    Parameters
    ----------
    timeout : float, default 10.0
        Request timeout in seconds
    max_size_bytes : int, default 50MB
        Responses larger than this are rejected
    require_https : bool, default False
        Reject plain ``http://`` URLs. Off by default because the PLoS
        manuscript service is served over HTTP.
    user_agent : str
        ``User-Agent`` header sent with every request

    """

    timeout: float = field(
        default=DEFAULT_NETWORK_TIMEOUT,
        metadata={"help": "Timeout in seconds for remote fetches", "type": float, "importance": "security"},
    )
    max_size_bytes: int = field(
        default=DEFAULT_MAX_DOWNLOAD_BYTES,
        metadata={"help": "Maximum size in bytes of a fetched response", "type": int, "importance": "security"},
    )
    require_https: bool = field(
        default=False,
        metadata={"help": "Require HTTPS for remote fetches", "importance": "security"},
    )
    user_agent: str = field(
        default=DEFAULT_USER_AGENT,
        metadata={"help": "User-Agent header for remote fetches", "importance": "advanced"},
    )

    def __post_init__(self) -> None:
        """Validate numeric limits.

        Raises
        ------
        ValueError
            If the timeout or size limit is not positive

        """
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.max_size_bytes <= 0:
            raise ValueError(f"max_size_bytes must be positive, got {self.max_size_bytes}")


@dataclass(frozen=True)
class RemoteDecodeOptions(BaseDecodeOptions):
    """Decode options for codecs that fetch their content.

    Parameters
    ----------
    network : NetworkOptions
        Limits for the default fetcher
    fetcher : Fetcher, optional
        Fetcher used for all requests. Defaults to an ``HttpFetcher``
        configured from ``network``; tests inject a fake.

    """

    network: NetworkOptions = field(
        default_factory=NetworkOptions,
        metadata={"help": "Network limits for remote fetches", "exclude_from_cli": True},
    )
    fetcher: Optional["Fetcher"] = field(
        default=None,
        metadata={"help": "Fetcher used for remote requests", "exclude_from_cli": True},
    )
