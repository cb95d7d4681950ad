"""Score extracted references against library items and rank the candidates.

Each signal only takes part when both the reference and the item carry the
data it needs; the final score is the weighted contributions divided by the
weights that applied, so missing fields shrink the denominator instead of
dragging the score down.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence

from .models import LibraryItem, MatchResult, ParsedReference
from .text_utils import fuzzy_match, normalize_string, year_from_date

logger = logging.getLogger(__name__)

DOI_WEIGHT = 10.0
YEAR_WEIGHT = 2.0
TITLE_WEIGHT = 5.0
FIRST_AUTHOR_WEIGHT = 1.5
AUTHOR_FUZZY_WEIGHT = 1.5

MATCH_THRESHOLD = 0.5
IN_LIBRARY_THRESHOLD = 0.7


def _creators_string(item: LibraryItem) -> str:
    return normalize_string(" ".join(f"{c.last_name} {c.first_name}" for c in item.creators))


def calculate_similarity(reference: ParsedReference, item: LibraryItem) -> float:
    """Weighted similarity in ``[0, 1]`` between one reference and one library item.

    Returns ``0.0`` when no signal is comparable.
    """
    score = 0.0
    total_weight = 0.0

    if reference.doi and item.doi:
        total_weight += DOI_WEIGHT
        if reference.doi.lower() == item.doi.lower():
            score += DOI_WEIGHT

    item_year = year_from_date(item.date)
    if reference.year and item_year:
        total_weight += YEAR_WEIGHT
        if reference.year == item_year:
            score += YEAR_WEIGHT

    if reference.title and item.title:
        total_weight += TITLE_WEIGHT
        score += TITLE_WEIGHT * fuzzy_match(
            normalize_string(reference.title), normalize_string(item.title)
        )

    if reference.authors and item.creators:
        ref_authors = normalize_string(reference.authors)

        total_weight += FIRST_AUTHOR_WEIGHT
        first_last = normalize_string(item.creators[0].last_name)
        if first_last and first_last in ref_authors:
            score += FIRST_AUTHOR_WEIGHT

        total_weight += AUTHOR_FUZZY_WEIGHT
        score += AUTHOR_FUZZY_WEIGHT * fuzzy_match(ref_authors, _creators_string(item))

    if total_weight == 0:
        return 0.0
    return score / total_weight


def find_matching_items(
    reference: ParsedReference,
    library_items: Iterable[LibraryItem],
    threshold: float = MATCH_THRESHOLD,
) -> List[MatchResult]:
    """Library items scoring at least ``threshold`` against ``reference``, best first.

    Equal scores keep the order in which the candidates were supplied.
    """
    matches: List[MatchResult] = []
    for item in library_items:
        similarity = calculate_similarity(reference, item)
        if similarity > 0 and similarity >= threshold:
            matches.append(MatchResult(item_id=item.id, similarity=similarity, item=item))
    # sorted() is stable, so ties stay in input order
    return sorted(matches, key=lambda m: m.similarity, reverse=True)


def match_references_to_library(
    references: Iterable[ParsedReference],
    library_items: Sequence[LibraryItem],
    threshold: float = MATCH_THRESHOLD,
) -> Dict[int, List[MatchResult]]:
    """Map each reference index to its ranked matches.

    References without a qualifying match are left out. When two references
    share an index the later one wins.
    """
    match_map: Dict[int, List[MatchResult]] = {}
    for reference in references:
        matches = find_matching_items(reference, library_items, threshold)
        if matches:
            if reference.index in match_map:
                logger.debug("reference index %d seen twice; keeping the later one", reference.index)
            match_map[reference.index] = matches
    return match_map


def best_match(matches: Optional[Sequence[MatchResult]]) -> Optional[MatchResult]:
    return matches[0] if matches else None


def is_in_library(
    matches: Optional[Sequence[MatchResult]], threshold: float = IN_LIBRARY_THRESHOLD
) -> bool:
    """Whether the best match is close enough to call the reference "in library"."""
    top = best_match(matches)
    return top is not None and top.similarity >= threshold
