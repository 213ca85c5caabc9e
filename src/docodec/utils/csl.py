#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/utils/csl.py
"""CSL-JSON to Article mapping.

DOI resolvers return bibliographic records as CSL-JSON
(https://citeproc-js.readthedocs.io/en/latest/csl-json/markup.html) when
asked for ``application/vnd.citationstyles.csl+json``. This module maps one
such record to an ``Article``:

- ``title``, ``abstract`` and ``subject`` give the title, description and
  keywords
- ``author`` and ``editor`` name lists give ``Person`` nodes
- ``issued`` (or the print/online publication dates) gives ``date_published``
- ``container-title``, ``volume``, ``issue``, ``page``, ``ISSN`` and
  ``publisher`` give the ``is_part_of`` chain
- ``DOI`` gives an identifier and ``license`` the licenses
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional, Union

from docodec.ast.nodes import (
    Article,
    CreativeWork,
    Organization,
    Periodical,
    Person,
    PropertyValue,
    PublicationIssue,
    PublicationVolume,
)
from docodec.constants import IDENTIFIERS_REGISTRY_URL

logger = logging.getLogger(__name__)

_TAG_PATTERN = re.compile(r"<[^>]+>")
_PAGE_RANGE_PATTERN = re.compile(r"^\s*([^-–\s]+)\s*[-–]+\s*([^-–\s]+)\s*$")


def _first(value: Any) -> Optional[str]:
    """CSL fields such as ``title`` may be a string or a list of strings."""
    if isinstance(value, list):
        value = value[0] if value else None
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def csl_date(value: Any) -> Optional[str]:
    """ISO 8601 date of a CSL date object.

    Examples
    --------
    >>> csl_date({"date-parts": [[2019, 3, 7]]})
    '2019-03-07'
    >>> csl_date({"date-parts": [[2019]]})
    '2019'

    """
    if not isinstance(value, dict):
        return None
    parts = value.get("date-parts")
    if isinstance(parts, list) and parts and isinstance(parts[0], list) and parts[0] and parts[0][0] is not None:
        year, *rest = parts[0]
        date = str(year).zfill(4)
        for part in rest[:2]:
            if part is None:
                break
            date += f"-{str(part).zfill(2)}"
        return date
    raw = value.get("raw") or value.get("literal")
    return str(raw) if raw else None


def csl_person(name: dict[str, Any]) -> Person:
    """Map a CSL name object (``given``/``family`` or ``literal``) to a Person."""
    given = name.get("given")
    family = name.get("family")
    if given or family:
        return Person(
            given_names=str(given).split() if given else None,
            family_names=str(family).split() if family else None,
            honorific_suffix=name.get("suffix"),
        )
    return Person(name=name.get("literal") or name.get("name"))


def _pages(page: Any) -> tuple[Optional[str], Optional[str]]:
    text = _first(page)
    if text is None:
        return None, None
    match = _PAGE_RANGE_PATTERN.match(text)
    if match:
        return match.group(1), match.group(2)
    return text, None


def _is_part_of(record: dict[str, Any]) -> Optional[Union[PublicationIssue, PublicationVolume, Periodical]]:
    title = _first(record.get("container-title"))
    volume_number = _first(record.get("volume"))
    issue_number = _first(record.get("issue"))
    if not (title or volume_number or issue_number):
        return None

    issns = record.get("ISSN")
    if isinstance(issns, str):
        issns = [issns]
    publisher = _first(record.get("publisher"))
    periodical = Periodical(
        title=title,
        issns=[str(issn) for issn in issns] if issns else None,
        publisher=Organization(name=publisher) if publisher else None,
    )

    page_start, page_end = _pages(record.get("page"))
    part: Union[PublicationIssue, PublicationVolume, Periodical] = periodical
    if volume_number:
        part = PublicationVolume(volume_number=volume_number, is_part_of=part)
    if issue_number:
        return PublicationIssue(issue_number=issue_number, page_start=page_start, page_end=page_end, is_part_of=part)
    if isinstance(part, PublicationVolume):
        part.page_start, part.page_end = page_start, page_end
    return part


def csl_to_article(record: Any) -> Article:
    """Map a CSL-JSON record to an ``Article``.

    Parameters
    ----------
    record : dict or list
        A CSL-JSON item, or a list whose first item is used

    Raises
    ------
    ValueError
        If the record is not a CSL-JSON object

    """
    if isinstance(record, list):
        if not record:
            raise ValueError("Empty CSL-JSON list")
        record = record[0]
    if not isinstance(record, dict):
        raise ValueError(f"CSL-JSON record must be an object, got {type(record).__name__}")

    article = Article(title=_first(record.get("title")) or "Untitled")

    authors = [csl_person(name) for name in record.get("author") or [] if isinstance(name, dict)]
    article.authors = authors or None
    editors = [csl_person(name) for name in record.get("editor") or [] if isinstance(name, dict)]
    article.editors = editors or None

    for key in ("issued", "published-print", "published-online", "created"):
        date = csl_date(record.get(key))
        if date:
            article.date_published = date
            break

    abstract = _first(record.get("abstract"))
    if abstract:
        # Crossref abstracts carry JATS markup
        article.description = " ".join(_TAG_PATTERN.sub(" ", abstract).split())

    subjects = record.get("subject") or record.get("keyword")
    if isinstance(subjects, str):
        subjects = [subject.strip() for subject in subjects.split(",")]
    if subjects:
        article.keywords = [str(subject) for subject in subjects if subject]

    article.is_part_of = _is_part_of(record)

    doi = _first(record.get("DOI"))
    if doi:
        article.identifiers = [PropertyValue(value=doi, name="doi", property_id=f"{IDENTIFIERS_REGISTRY_URL}doi")]

    licenses = [CreativeWork(url=item.get("URL")) for item in record.get("license") or [] if isinstance(item, dict)]
    article.licenses = licenses or None

    logger.debug(f"Mapped CSL-JSON record of type {record.get('type')!r}")
    return article
