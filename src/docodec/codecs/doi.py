#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/codecs/doi.py
"""DOI codec.

Decodes a Digital Object Identifier (``10.1234/abc``, ``doi: 10.1234/abc``
or ``https://doi.org/10.1234/abc``) to an Article by asking the DOI resolver
for the work's CSL-JSON record. See
https://www.crossref.org/blog/dois-and-matching-regular-expressions/ for
notes on DOI matching.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from docodec.codec_metadata import CodecMetadata
from docodec.codecs.base import BaseCodec
from docodec.constants import CSL_JSON_MEDIA_TYPE, DOI_RESOLVER_URL
from docodec.exceptions import MalformedInputError
from docodec.options.network import RemoteDecodeOptions
from docodec.utils.csl import csl_to_article
from docodec.utils.decorators import debug_timer
from docodec.utils.network import get_fetcher
from docodec.vfile import VFile, dump

logger = logging.getLogger(__name__)

DOI_PATTERN = re.compile(r"^\s*((DOI\s*:?\s*)|(https?://(dx\.)?doi\.org/))?(10\.\d{4,9}/\S+)\s*$", re.IGNORECASE)


def parse_doi(content: str) -> str:
    """Extract the bare DOI from a DOI string or URL.

    Raises
    ------
    MalformedInputError
        If ``content`` is not a DOI

    Examples
    --------
    >>> parse_doi("https://doi.org/10.1371/journal.pone.0012345")
    '10.1371/journal.pone.0012345'

    """
    match = DOI_PATTERN.match(content)
    if match is None:
        raise MalformedInputError(f"Unable to parse content as a DOI: {content.strip()[:100]!r}")
    return match.group(5)


class DoiCodec(BaseCodec):
    """Codec for DOIs, resolved to CSL-JSON records."""

    name = "doi"
    decode_options_class = RemoteDecodeOptions

    def sniff(self, content: str) -> bool:
        return DOI_PATTERN.match(content) is not None

    def decode(self, file: VFile, options: Optional[RemoteDecodeOptions] = None) -> Any:
        """Fetch the CSL-JSON record of a DOI and map it to an Article.

        Raises
        ------
        MalformedInputError
            If the content is not a DOI or the record cannot be read
        NetworkSecurityError
            If the fetch fails

        """
        options = self._decode_options(options)
        doi = parse_doi(dump(file))
        fetcher = get_fetcher(options)
        with debug_timer(logger, "DOI decode"):
            response = fetcher.fetch(f"{DOI_RESOLVER_URL}{doi}", headers={"Accept": CSL_JSON_MEDIA_TYPE})
            try:
                record = json.loads(response.text)
                return csl_to_article(record)
            except (json.JSONDecodeError, ValueError) as e:
                raise MalformedInputError(
                    f"Invalid CSL-JSON for DOI {doi}: {e}", snippet=response.text[:200], original_error=e
                ) from e


CODEC_METADATA = CodecMetadata(
    name="doi",
    ext_names=["doi"],
    media_types=["text/x-doi"],
    codec_class=DoiCodec,
    can_encode=False,
    description="Digital Object Identifiers (decoded via CSL-JSON)",
)
