"""Reference extraction: locate the bibliography, then segment it into records."""

from __future__ import annotations

import logging
from typing import Iterable, List

from pypdf.errors import PdfReadError

from ..models import ParsedReference
from ..pdf_utils import extract_page_texts, join_pages
from .locator import locate_references_section, references_region
from .segmenter import parse_references

logger = logging.getLogger(__name__)

INCOMPLETE_THRESHOLD = 5


def extract_references(page_texts: Iterable[str]) -> List[ParsedReference]:
    """Extract bibliography records from a document's per-page text.

    Pages are whitespace-normalized and joined before the reference section
    is located. Empty or unrecognizable input yields an empty list.
    """
    full_text = join_pages(page_texts)
    if not full_text:
        return []
    return parse_references(references_region(full_text))


def extract_references_from_pdf(pdf_path: str) -> List[ParsedReference]:
    try:
        pages = extract_page_texts(pdf_path)
    except (OSError, PdfReadError) as exc:
        logger.error("Could not read %s: %s", pdf_path, exc)
        return []
    refs = extract_references(pages)
    logger.info("Extracted %d references from %s", len(refs), pdf_path)
    return refs


def are_references_incomplete(
    references: List[ParsedReference], threshold: int = INCOMPLETE_THRESHOLD
) -> bool:
    """Fewer than ``threshold`` references suggests part of the list was missed."""
    return len(references) < threshold


__all__ = [
    "INCOMPLETE_THRESHOLD",
    "are_references_incomplete",
    "extract_references",
    "extract_references_from_pdf",
    "locate_references_section",
    "parse_references",
    "references_region",
]
