#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Constants and default values for the docodec library.

Constants are organized by category:
1. Type Definitions - Literal types
2. Dependency Specifications - tuples for ``@requires_dependencies``
3. Media Types - extension to media type table used by the matcher
4. Format-Specific Constants - JATS, PLoS, DOI, PDF and CSV defaults
5. Network Constants - fetcher defaults and environment switches
"""

from __future__ import annotations

from typing import Literal

# =============================================================================
# Type Definitions
# =============================================================================

PageSize = Literal["a4", "letter", "legal"]
ListOrder = Literal["ascending", "descending", "unordered"]

# =============================================================================
# Dependency Specifications for @requires_dependencies decorator
# =============================================================================
# Each spec is a list of tuples: (pip_package, import_name, version_constraint)

DEPS_MARKDOWN = [("mistune", "mistune", ">=3.0.0"), ("pyyaml", "yaml", ">=6.0")]
DEPS_HTML = [("beautifulsoup4", "bs4", ">=4.12.0"), ("lxml", "lxml", "")]
DEPS_JATS = [("defusedxml", "defusedxml", ">=0.7.1")]
DEPS_XLSX = [("openpyxl", "openpyxl", "")]
DEPS_YAML = [("pyyaml", "yaml", ">=6.0")]
DEPS_PDF_RENDER = [("reportlab", "reportlab", ">=4.0.0")]
DEPS_NETWORK = [("httpx", "httpx", ">=0.28.1")]

# =============================================================================
# Media Types
# =============================================================================
# Additions to the ``mimetypes`` table; keys are lower-case extension names
# without the leading dot.

MEDIA_TYPES: dict[str, str] = {
    "md": "text/markdown",
    "markdown": "text/markdown",
    "xmd": "text/x-xmarkdown",
    "rmd": "text/x-rmarkdown",
    "jats": "application/jats+xml",
    "ipynb": "application/x-ipynb+json",
    "yaml": "text/yaml",
    "yml": "text/yaml",
    "json": "application/json",
    "csv": "text/csv",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "doi": "text/x-doi",
    "html": "text/html",
    "htm": "text/html",
    "pdf": "application/pdf",
    "txt": "text/plain",
    "text": "text/plain",
}

# =============================================================================
# Format-Specific Constants
# =============================================================================

# JATS
JATS_DOCTYPE_NAME = "article"
JATS_DOCTYPE_PUBLIC_ID = "-//NLM//DTD JATS (Z39.96) Journal Archiving and Interchange DTD v1.1 20151215//EN"
JATS_DOCTYPE_SYSTEM_ID = "JATS-archivearticle1.dtd"
JATS_DOCTYPE = f'<!DOCTYPE {JATS_DOCTYPE_NAME} PUBLIC "{JATS_DOCTYPE_PUBLIC_ID}" "{JATS_DOCTYPE_SYSTEM_ID}">'
XLINK_NAMESPACE = "http://www.w3.org/1999/xlink"
MATHML_NAMESPACE = "http://www.w3.org/1998/Math/MathML"
IDENTIFIERS_REGISTRY_URL = "https://registry.identifiers.org/registry/"

# Elements that may carry the content of a <fig>, in priority order
JATS_FIG_CONTENT_ELEMENTS = (
    "disp-formula",
    "disp-formula-group",
    "chem-struct-wrap",
    "disp-quote",
    "speech",
    "statement",
    "verse-group",
    "table-wrap",
    "p",
    "def-list",
    "list",
    "array",
    "code",
    "graphic",
    "media",
    "preformat",
)

# PLoS journal codes to journal URL slugs
PLOS_JOURNALS: dict[str, str] = {
    "pbio": "plosbiology",
    "pcbi": "ploscompbiol",
    "pgen": "plosgenetics",
    "pmed": "plosmedicine",
    "pntd": "plosntds",
    "pone": "plosone",
    "ppat": "plospathogens",
}
PLOS_BASE_URL = "http://journals.plos.org"

# DOI
DOI_RESOLVER_URL = "https://doi.org/"
CSL_JSON_MEDIA_TYPE = "application/vnd.citationstyles.csl+json"

# PDF rendering
DEFAULT_PDF_PAGE_SIZE: PageSize = "a4"
DEFAULT_PDF_MARGIN_CM = 2.54
DEFAULT_PDF_FONT_NAME = "Helvetica"
DEFAULT_PDF_FONT_SIZE = 11

# CSV / spreadsheets
DEFAULT_CSV_DELIMITER = ","
DEFAULT_SHEET_NAME = "Sheet1"

# Markdown
DEFAULT_CODE_CHUNK_LANGUAGE = "text"

# =============================================================================
# Network Constants
# =============================================================================

DEFAULT_USER_AGENT = "docodec-fetcher/1.0"
DEFAULT_NETWORK_TIMEOUT = 10.0
DEFAULT_MAX_DOWNLOAD_BYTES = 50 * 1024 * 1024  # 50MB
ENV_PREFIX = "DOCODEC_"
ENV_DISABLE_NETWORK = "DOCODEC_DISABLE_NETWORK"
ENV_CONFIG_PATH = "DOCODEC_CONFIG"
