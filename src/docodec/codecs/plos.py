#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/codecs/plos.py
"""PLoS codec.

Decodes a Public Library of Science article, given its DOI or article URL,
by fetching the article's manuscript JATS from the journal site and decoding
it with the JATS codec. Graphics that point at the article's own
``info:doi`` resources are rewritten to image URLs on the journal site:
equations use the thumbnail service, figures the medium size image.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from typing import Any, Optional

from docodec.codec_metadata import CodecMetadata
from docodec.codecs.base import BaseCodec
from docodec.codecs.jats import JatsDecoder
from docodec.constants import DEPS_JATS, JATS_DOCTYPE, PLOS_BASE_URL, PLOS_JOURNALS, XLINK_NAMESPACE
from docodec.exceptions import MalformedInputError, SecurityError
from docodec.options.network import RemoteDecodeOptions
from docodec.utils.decorators import debug_timer, requires_dependencies
from docodec.utils.network import get_fetcher
from docodec.vfile import VFile, dump

logger = logging.getLogger(__name__)

PLOS_PATTERN = re.compile(
    r"^\s*((doi\s*:?\s*)|(https?://(dx\.)?doi\.org/)|(https?://journals\.plos\.org/([a-z]+)/article\?id=))?"
    r"(10\.1371/journal\.([a-z]+)\.\d+)\s*$",
    re.IGNORECASE,
)

_XLINK_HREF = f"{{{XLINK_NAMESPACE}}}href"


def parse_identifier(identifier: str) -> tuple[str, str]:
    """Split a PLoS DOI or article URL into its journal slug and DOI.

    Raises
    ------
    MalformedInputError
        If the identifier is not a PLoS DOI, or names an unknown journal

    Examples
    --------
    >>> parse_identifier("10.1371/journal.pone.0012345")
    ('plosone', '10.1371/journal.pone.0012345')

    """
    match = PLOS_PATTERN.match(identifier)
    if match is None:
        raise MalformedInputError(f"Unable to parse identifier as PLoS DOI: {identifier.strip()[:100]!r}")
    doi, code = match.group(7), match.group(8).lower()
    journal = PLOS_JOURNALS.get(code)
    if journal is None:
        raise MalformedInputError(f"Unrecognised PLoS journal: {code!r}")
    return journal, doi


def manuscript_url(journal: str, doi: str) -> str:
    return f"{PLOS_BASE_URL}/{journal}/article/file?id={doi}&type=manuscript"


def image_url(journal: str, doi: str, resource_id: str) -> str:
    """URL of an article image; ids starting with ``e`` are equations."""
    base = f"https://journals.plos.org/{journal}/article/"
    if resource_id.startswith("e"):
        return f"{base}file?id=info:doi/{doi}.{resource_id}&type=thumbnail"
    return f"{base}figure/image?id={doi}.{resource_id}&size=medium"


def rewrite_graphics(root: ET.Element, journal: str, doi: str) -> int:
    """Point the article's ``info:doi`` graphics at journal image URLs.

    Returns
    -------
    int
        Number of graphics rewritten

    """
    count = 0
    prefix = f"info:doi/{doi}"
    for graphic in root.iter():
        if not isinstance(graphic.tag, str) or graphic.tag.rsplit("}", 1)[-1] not in ("graphic", "inline-graphic"):
            continue
        href = graphic.get(_XLINK_HREF)
        if href is None or not href.startswith(prefix):
            continue
        resource_id = href.split(".")[-1]
        graphic.set(_XLINK_HREF, image_url(journal, doi, resource_id))
        graphic.set("mimetype", "image")
        graphic.set("mime-subtype", "png")
        count += 1
    return count


class PlosCodec(BaseCodec):
    """Codec for PLoS articles identified by DOI or URL."""

    name = "plos"
    decode_options_class = RemoteDecodeOptions

    def sniff(self, content: str) -> bool:
        return PLOS_PATTERN.match(content) is not None

    @requires_dependencies("plos", DEPS_JATS)
    def decode(self, file: VFile, options: Optional[RemoteDecodeOptions] = None) -> Any:
        from defusedxml import DefusedXmlException
        from defusedxml import ElementTree as DefusedET

        options = self._decode_options(options)
        journal, doi = parse_identifier(dump(file))
        fetcher = get_fetcher(options)

        with debug_timer(logger, "PLoS decode"):
            response = fetcher.fetch(manuscript_url(journal, doi))
            try:
                root = DefusedET.fromstring(response.text)
            except ET.ParseError as e:
                raise MalformedInputError(
                    f"Invalid JATS XML for {doi}: {e}", snippet=response.text[:200], original_error=e
                ) from e
            except DefusedXmlException as e:
                raise SecurityError(f"Unsafe XML rejected for {doi}: {e}", original_error=e) from e

            rewritten = rewrite_graphics(root, journal, doi)
            logger.debug(f"Rewrote {rewritten} graphic hrefs for {doi}")
            jats = f"{JATS_DOCTYPE}\n{ET.tostring(root, encoding='unicode')}"
            return JatsDecoder().decode(jats)


CODEC_METADATA = CodecMetadata(
    name="plos",
    codec_class=PlosCodec,
    required_packages=DEPS_JATS,
    can_encode=False,
    description="PLoS articles by DOI or URL (decoded via JATS)",
)
