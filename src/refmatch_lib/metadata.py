"""Resolve bibliographic metadata for a PDF or a DOI.

A DOI found on the first page is resolved through doi.org content
negotiation, which returns CSL JSON. Without a DOI the PDF's own ``/Title``
entry is the only thing we can offer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests
from pypdf.errors import PdfReadError

from .models import Creator
from .pdf_utils import first_page_text, pdf_info_title
from .text_utils import clean_title, find_doi

logger = logging.getLogger(__name__)

DOI_RESOLVER = "https://doi.org/"
CSL_JSON = "application/vnd.citationstyles.csl+json"


@dataclass
class MetadataResult:
    title: Optional[str] = None
    creators: List[Creator] = field(default_factory=list)
    date: Optional[str] = None
    publication_title: Optional[str] = None
    doi: Optional[str] = None
    abstract: Optional[str] = None
    type: Optional[str] = None


def _first(value: Any) -> Any:
    # CSL processors disagree on whether some string fields are lists.
    if isinstance(value, list):
        return value[0] if value else None
    return value


def _issued_date(issued: Any) -> Optional[str]:
    if not isinstance(issued, dict):
        return None
    parts = issued.get("date-parts") or []
    if parts and parts[0]:
        return "-".join(str(p) for p in parts[0])
    raw = issued.get("raw")
    return str(raw) if raw else None


def csl_to_metadata(csl: Any) -> Optional[MetadataResult]:
    item = _first(csl)
    if not isinstance(item, dict):
        return None

    creators = [
        Creator(
            last_name=a.get("family") or a.get("literal") or "",
            first_name=a.get("given") or "",
        )
        for a in item.get("author") or []
        if isinstance(a, dict)
    ]
    title = _first(item.get("title")) or _first(item.get("title-short"))
    publication = _first(item.get("container-title")) or item.get("publisher")

    return MetadataResult(
        title=clean_title(title) if title else None,
        creators=creators,
        date=_issued_date(item.get("issued")),
        publication_title=clean_title(publication) if publication else None,
        doi=item.get("DOI"),
        abstract=item.get("abstract"),
        # every CSL type is filed as a journal article for now
        type="journalArticle",
    )


def fetch_metadata_by_doi(
    doi: str,
    session: Optional[requests.Session] = None,
    timeout: float = 20,
) -> Optional[MetadataResult]:
    """Look a DOI up via content negotiation; ``None`` on any failure."""
    http = session or requests
    url = DOI_RESOLVER + quote(doi, safe="")
    try:
        resp = http.get(url, headers={"Accept": CSL_JSON}, timeout=timeout)
    except requests.RequestException as exc:
        logger.error("DOI lookup for %s failed: %s", doi, exc)
        return None
    if resp.status_code != 200:
        logger.error("DOI fetch failed: %s (%s)", resp.status_code, doi)
        return None
    try:
        payload: Dict[str, Any] = resp.json()
    except ValueError as exc:
        logger.error("DOI %s returned non-JSON payload: %s", doi, exc)
        return None
    return csl_to_metadata(payload)


def extract_metadata_from_pdf(
    pdf_path: str, session: Optional[requests.Session] = None
) -> Optional[MetadataResult]:
    try:
        doi = find_doi(first_page_text(pdf_path))
        if doi:
            return fetch_metadata_by_doi(doi, session=session)
        title = pdf_info_title(pdf_path)
    except (OSError, PdfReadError) as exc:
        logger.error("Error extracting metadata from %s: %s", pdf_path, exc)
        return None
    if title:
        return MetadataResult(title=clean_title(title))
    return None
