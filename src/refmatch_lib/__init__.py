"""Reference extraction and citation matching for a local paper library."""

from .matching import calculate_similarity, find_matching_items, match_references_to_library
from .models import Creator, LibraryItem, MatchResult, ParsedReference
from .refs import are_references_incomplete, extract_references, extract_references_from_pdf

__all__ = [
    "Creator",
    "LibraryItem",
    "MatchResult",
    "ParsedReference",
    "are_references_incomplete",
    "calculate_similarity",
    "extract_references",
    "extract_references_from_pdf",
    "find_matching_items",
    "match_references_to_library",
]
