from typing import Any, Dict, Iterable, List

from .matching import IN_LIBRARY_THRESHOLD, is_in_library
from .models import MatchResult, ParsedReference

REFERENCE_FIELDS = ["item_id", "source", "index", "year", "authors", "title", "doi", "text"]
MATCH_FIELDS = [
    "item_id", "ref_index", "rank", "match_item_id", "match_title", "similarity", "in_library",
]


def reference_rows(
    item_id: str, references: Iterable[ParsedReference], source: str = ""
) -> List[Dict[str, Any]]:
    """Flatten references into CSV rows keyed by :data:`REFERENCE_FIELDS`."""
    rows = []
    for ref in references:
        rows.append({
            "item_id": item_id,
            "source": source,
            "index": ref.index,
            "year": ref.year or "",
            "authors": ref.authors or "",
            "title": ref.title or "",
            "doi": ref.doi or "",
            "text": ref.text,
        })
    return rows


def match_rows(
    item_id: str,
    matches: Dict[int, List[MatchResult]],
    in_library_threshold: float = IN_LIBRARY_THRESHOLD,
) -> List[Dict[str, Any]]:
    """One row per (reference, candidate); ``in_library`` is set on the best row only."""
    rows = []
    for ref_index in sorted(matches):
        ranked = matches[ref_index]
        top_in_library = is_in_library(ranked, in_library_threshold)
        for rank, m in enumerate(ranked, start=1):
            rows.append({
                "item_id": item_id,
                "ref_index": ref_index,
                "rank": rank,
                "match_item_id": m.item_id,
                "match_title": m.item.title,
                "similarity": round(m.similarity, 4),
                "in_library": top_in_library and rank == 1,
            })
    return rows
