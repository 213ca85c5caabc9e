"""Test utilities for the docodec test suite.

This module provides a fake fetcher for the remote codecs, sample documents
shared by several test modules, and temporary directory helpers.
"""

import base64
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from docodec.exceptions import NetworkSecurityError
from docodec.utils.network import FetchResponse

# Base64 encoded 1x1 pixel PNG for testing
MINIMAL_PNG_B64 = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mP8/w8AAn8B9FpQHLwAAAAASUVORK5CYII="
MINIMAL_PNG_BYTES = base64.b64decode(MINIMAL_PNG_B64)


class FakeFetcher:
    """In-memory fetcher that serves canned responses and records requests.

    Parameters
    ----------
    responses : dict
        Map of URL to ``(content, media_type)``; content may be str or bytes

    """

    def __init__(self, responses: Optional[dict] = None):
        self.responses = responses or {}
        self.requests: list[tuple[str, dict]] = []

    def fetch(self, url: str, headers: Optional[dict] = None) -> FetchResponse:
        self.requests.append((url, headers or {}))
        if url not in self.responses:
            raise NetworkSecurityError(f"HTTP request failed for {url}: 404 Not Found")
        content, media_type = self.responses[url]
        if isinstance(content, str):
            content = content.encode("utf-8")
        return FetchResponse(url=url, content=content, media_type=media_type)


SAMPLE_JATS = """<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE article PUBLIC "-//NLM//DTD JATS (Z39.96) Journal Archiving and Interchange DTD v1.1 20151215//EN" "JATS-archivearticle1.dtd">
<article xmlns:xlink="http://www.w3.org/1999/xlink" xmlns:mml="http://www.w3.org/1998/Math/MathML" article-type="research-article">
  <front>
    <article-meta>
      <title-group>
        <article-title>A study of things</article-title>
      </title-group>
      <contrib-group>
        <contrib contrib-type="author">
          <name><surname>Smith</surname><given-names>Jane</given-names></name>
          <xref ref-type="aff" rid="aff1"/>
        </contrib>
        <contrib contrib-type="author">
          <name><surname>Jones</surname><given-names>Bob</given-names></name>
        </contrib>
      </contrib-group>
      <aff id="aff1">University of Somewhere</aff>
      <pub-date pub-type="epub"><day>07</day><month>03</month><year>2019</year></pub-date>
      <abstract><p>We studied things.</p></abstract>
      <kwd-group><kwd>things</kwd><kwd>stuff</kwd></kwd-group>
    </article-meta>
  </front>
  <body>
    <sec id="s1">
      <title>Introduction</title>
      <p>Things are <italic>interesting</italic> <xref ref-type="bibr" rid="bib1">Doe, 2000</xref>.</p>
      <sec id="s1-1">
        <title>Background</title>
        <p>Some <bold>background</bold>.</p>
      </sec>
    </sec>
  </body>
  <back>
    <ref-list>
      <ref id="bib1">
        <element-citation publication-type="journal">
          <person-group person-group-type="author">
            <name><surname>Doe</surname><given-names>John</given-names></name>
          </person-group>
          <article-title>Earlier work</article-title>
          <year>2000</year>
        </element-citation>
      </ref>
    </ref-list>
  </back>
</article>
"""


def create_test_temp_dir() -> Path:
    """Create a temporary directory for test files."""
    return Path(tempfile.mkdtemp())


def cleanup_test_dir(temp_dir: Path) -> None:
    """Clean up test directory and files."""
    if temp_dir.exists():
        shutil.rmtree(temp_dir)
