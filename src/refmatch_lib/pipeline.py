"""Source, match and summarize the references of one library item.

References come from the item's LLM analysis when it carries a usable json
block, otherwise from the extraction engine run over the PDF's page text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from pypdf.errors import PdfReadError

from .analysis_state import AnalysisContext
from .config import MatchSettings
from .llm import LLMClient, analysis_updates, analyze_paper, parse_llm_references
from .matching import (
    IN_LIBRARY_THRESHOLD,
    best_match,
    is_in_library,
    match_references_to_library,
)
from .models import LibraryItem, MatchResult, ParsedReference
from .pdf_utils import extract_page_texts, join_pages
from .refs import are_references_incomplete, extract_references

logger = logging.getLogger(__name__)

SOURCE_LLM = "llm"
SOURCE_PDF = "pdf"


@dataclass
class ReferenceReport:
    item_id: str
    source: str
    references: List[ParsedReference]
    matches: Dict[int, List[MatchResult]] = field(default_factory=dict)
    incomplete: bool = False
    in_library_threshold: float = IN_LIBRARY_THRESHOLD

    def best_match(self, index: int) -> Optional[MatchResult]:
        return best_match(self.matches.get(index))

    def in_library(self, index: int) -> bool:
        return is_in_library(self.matches.get(index), self.in_library_threshold)


def collect_references(
    item: LibraryItem, page_texts: Iterable[str]
) -> Tuple[str, List[ParsedReference]]:
    """Return ``(source, references)`` preferring the LLM's list over PDF extraction."""
    if item.ai_analysis:
        refs = parse_llm_references(item.ai_analysis)
        if refs:
            logger.info("Using %d references from the analysis of %s", len(refs), item.id)
            return SOURCE_LLM, refs
    refs = extract_references(page_texts)
    logger.info("Extracted %d references from the PDF of %s", len(refs), item.id)
    return SOURCE_PDF, refs


def build_reference_report(
    item: LibraryItem,
    page_texts: Iterable[str],
    library: Sequence[LibraryItem],
    settings: Optional[MatchSettings] = None,
) -> ReferenceReport:
    settings = settings or MatchSettings()
    source, refs = collect_references(item, page_texts)
    candidates = [i for i in library if i.id != item.id]
    matches = match_references_to_library(refs, candidates, settings.threshold) if refs else {}
    report = ReferenceReport(
        item_id=item.id,
        source=source,
        references=refs,
        matches=matches,
        incomplete=are_references_incomplete(refs, settings.incomplete_threshold),
        in_library_threshold=settings.in_library_threshold,
    )
    logger.info(
        "%s: %d references (%s), %d matched in library%s",
        item.id,
        len(refs),
        source,
        len(matches),
        ", likely incomplete" if report.incomplete else "",
    )
    return report


def report_for_pdf(
    item: LibraryItem,
    pdf_path: Union[str, Path],
    library: Sequence[LibraryItem],
    settings: Optional[MatchSettings] = None,
) -> Optional[ReferenceReport]:
    """Build the report for ``item`` from the PDF at ``pdf_path``.

    Returns ``None`` when the PDF is missing or unreadable and the item's
    analysis lists no references. Nothing was extracted then, so callers
    should keep the references already stored on the item.
    """
    pdf_path = Path(pdf_path)
    pages: List[str] = []
    if pdf_path.exists():
        try:
            pages = extract_page_texts(str(pdf_path))
        except (OSError, PdfReadError) as exc:
            logger.error("Could not read %s: %s", pdf_path, exc)
    else:
        logger.warning("No PDF for %s at %s", item.id, pdf_path)

    if not pages and not parse_llm_references(item.ai_analysis or ""):
        logger.warning("%s: nothing to extract references from; keeping stored list", item.id)
        return None
    return build_reference_report(item, pages, library, settings)


def analyze_item(
    item: LibraryItem,
    page_texts: Iterable[str],
    client: LLMClient,
    context: AnalysisContext,
    sync_metadata: bool = True,
    max_chars: Optional[int] = None,
) -> Dict[str, Any]:
    """Run the LLM analysis for ``item`` and return the item updates it implies.

    The run is tracked in ``context`` so callers can show progress. Failed
    runs leave the active set without touching the duration statistics.
    """
    text = join_pages(page_texts)
    context.start(item.id)
    try:
        if max_chars is None:
            analysis = analyze_paper(client, text)
        else:
            analysis = analyze_paper(client, text, max_chars)
    except Exception:
        context.finish(item.id, record=False)
        raise
    duration = context.finish(item.id)
    logger.info("Analysis of %s finished in %.1fs", item.id, duration or 0.0)
    return analysis_updates(analysis, item.tags, sync_metadata=sync_metadata)
