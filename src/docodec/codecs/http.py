#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/codecs/http.py
"""HTTP codec.

Decodes content at an ``http://`` or ``https://`` URL: the resource is
fetched and then decoded by the codec that matches the response, chosen from
the response's media type, falling back to the extension of the URL's path
and finally to sniffing the body.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional
from urllib.parse import urlparse

from docodec.codec_metadata import CodecMetadata
from docodec.codecs.base import BaseCodec
from docodec.exceptions import NoCodecMatchError
from docodec.options.network import RemoteDecodeOptions
from docodec.utils.decorators import debug_timer
from docodec.utils.network import FetchResponse, get_fetcher
from docodec.vfile import VFile, dump

logger = logging.getLogger(__name__)

# Media types too generic to choose a codec by
_GENERIC_MEDIA_TYPES = ("application/octet-stream", "text/plain", "")


def _match_response(response: FetchResponse) -> BaseCodec:
    """Choose the codec for a fetched response."""
    from docodec.codec_registry import match

    if response.media_type not in _GENERIC_MEDIA_TYPES:
        try:
            return match(format=response.media_type)
        except NoCodecMatchError:
            logger.debug(f"No codec for media type {response.media_type!r}")

    ext_name = os.path.splitext(urlparse(response.url).path)[1][1:].lower()
    if ext_name and ext_name != "http":
        try:
            return match(format=ext_name)
        except NoCodecMatchError:
            logger.debug(f"No codec for extension {ext_name!r}")

    if response.media_type == "text/plain":
        return match(format="txt")
    return match(content=response.text)


class HttpCodec(BaseCodec):
    """Codec that fetches a URL and decodes the response."""

    name = "http"
    decode_options_class = RemoteDecodeOptions

    def decode(self, file: VFile, options: Optional[RemoteDecodeOptions] = None) -> Any:
        """Fetch the URL held in ``file`` and decode the response.

        Raises
        ------
        NetworkSecurityError
            If the fetch fails or is not allowed
        NoCodecMatchError
            If no codec handles the response

        """
        options = self._decode_options(options)
        url = dump(file).strip()
        with debug_timer(logger, "HTTP fetch"):
            response = get_fetcher(options).fetch(url)

        codec = _match_response(response)
        logger.debug(f"Decoding {url} with codec {codec.name!r}")
        file = VFile(contents=response.content, media_type=response.media_type)
        return codec.decode(file, codec.coerce_decode_options(options))


CODEC_METADATA = CodecMetadata(
    name="http",
    ext_names=["http", "https"],
    codec_class=HttpCodec,
    can_encode=False,
    description="Content fetched from HTTP(S) URLs",
)
