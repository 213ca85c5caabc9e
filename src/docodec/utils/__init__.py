#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/utils/__init__.py
"""Utility modules for the docodec package.

This package contains dependency checks and timing decorators, network
fetchers for the remote codecs, and helpers shared between codecs (math,
spreadsheets, CSL-JSON records).
"""

from docodec.utils.network import FetchResponse, Fetcher, HttpFetcher, get_fetcher

__all__ = [
    "FetchResponse",
    "Fetcher",
    "HttpFetcher",
    "get_fetcher",
]
