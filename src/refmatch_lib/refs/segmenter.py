"""Split a bibliography region into individual reference records."""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Tuple

from ..models import ParsedReference
from ..strategies import first_success
from ..text_utils import find_doi

logger = logging.getLogger(__name__)

NUMBERED_SPLIT_RE = re.compile(r"(?=\[\d+\]|(?:^|\n)\d{1,3}\.|(?:^|\n)\(\d{1,3}\))")
AUTHOR_PAREN_YEAR_SPLIT_RE = re.compile(
    r"(?=(?:^|\s)[A-Z][a-z]+,\s+[A-Z]\.[^.]{0,100}?\(\d{4}\))"
)
AUTHOR_COMMA_YEAR_SPLIT_RE = re.compile(
    r"(?=(?:^|\s)[A-Z][a-z]{2,},\s+[A-Z]\.[^.]{0,100}?,\s+\d{4}\.)"
)
AUTHOR_LOOSE_SPLIT_RE = re.compile(r"(?=\s[A-Z][a-z]{2,},\s+[A-Z]\.)")

MARKER_PATTERNS = [
    re.compile(r"^\[(\d+)\]\s*"),
    re.compile(r"^(\d{1,3})\.\s+"),
    re.compile(r"^\((\d{1,3})\)\s*"),
]

YEAR_TOKEN_RE = re.compile(r"\b\d{4}\b")
YEAR_PAREN_RE = re.compile(r"\((\d{4})\)")
YEAR_COMMA_PERIOD_RE = re.compile(r",\s+(\d{4})\.")
YEAR_ANY_RE = re.compile(r"\b(\d{4})\b")
LEADING_CONJ_RE = re.compile(r"^(?:and\s+|from\s+)")

MIN_SEGMENT_CHARS = 20
MAX_SEGMENT_CHARS = 1000
MIN_SEGMENTS = 3
MAX_TEXT_CHARS = 500
MAX_TITLE_CHARS = 200
MAX_AUTHORS_CHARS = 250
MIN_AUTHORS_CHARS = 3


def _split(pattern: re.Pattern, text: str) -> List[str]:
    return [part for part in pattern.split(text) if part.strip()]


def split_numbered(text: str) -> List[str]:
    return _split(NUMBERED_SPLIT_RE, text)


def split_author_paren_year(text: str) -> List[str]:
    return _split(AUTHOR_PAREN_YEAR_SPLIT_RE, text)


def split_author_comma_year(text: str) -> List[str]:
    return _split(AUTHOR_COMMA_YEAR_SPLIT_RE, text)


def split_author_loose(text: str) -> List[str]:
    return _split(AUTHOR_LOOSE_SPLIT_RE, text)


SPLIT_STRATEGIES = [
    ("numbered", split_numbered),
    ("author_paren_year", split_author_paren_year),
    ("author_comma_year", split_author_comma_year),
    ("author_loose", split_author_loose),
]


def _enough_segments(segments: List[str]) -> bool:
    return len(segments) >= MIN_SEGMENTS


def split_segments(text: str) -> List[str]:
    """Candidate reference segments from the first split strategy yielding three or more.

    When no strategy reaches that bar the loosest split is used as is.
    """
    found = first_success(SPLIT_STRATEGIES, text, accept=_enough_segments)
    if found is None:
        return split_author_loose(text)
    return found[1]


def strip_marker(segment: str) -> Tuple[Optional[int], str]:
    for pattern in MARKER_PATTERNS:
        m = pattern.match(segment)
        if m:
            return int(m.group(1)), segment[m.end():].strip()
    return None, segment


def extract_year(text: str) -> Optional[str]:
    for pattern in (YEAR_PAREN_RE, YEAR_COMMA_PERIOD_RE, YEAR_ANY_RE):
        m = pattern.search(text)
        if m:
            return m.group(1)
    return None


def extract_title(text: str, year: str) -> Optional[str]:
    pattern = re.escape(year) + r"[).]*\s+[\"']?([^.\"]{10,150})[\"']?(?:\.|In:)"
    m = re.search(pattern, text)
    if not m:
        return None
    title = m.group(1).strip()[:MAX_TITLE_CHARS]
    return title or None


def extract_authors(text: str, year: str) -> Optional[str]:
    y = re.escape(year)
    m = re.search(rf"(.+?)(?:\({y}\)|,?\s+{y}[.)])", text)
    if not m:
        return None
    authors = LEADING_CONJ_RE.sub("", m.group(1))
    authors = re.sub(r"\s+", " ", authors).strip()[:MAX_AUTHORS_CHARS]
    if len(authors) < MIN_AUTHORS_CHARS or authors[0].isdigit():
        return None
    return authors


def parse_segment(segment: str, fallback_index: int) -> Optional[ParsedReference]:
    """Turn one candidate segment into a record, or ``None`` when it is not a citation."""
    trimmed = re.sub(r"\s+", " ", segment).strip()
    if len(trimmed) < MIN_SEGMENT_CHARS or len(trimmed) > MAX_SEGMENT_CHARS:
        return None
    if not YEAR_TOKEN_RE.search(trimmed):
        return None

    marker, text = strip_marker(trimmed)
    year = extract_year(text)
    if not year:
        return None

    return ParsedReference(
        index=marker if marker is not None and marker > 0 else fallback_index,
        text=text[:MAX_TEXT_CHARS],
        doi=find_doi(text),
        authors=extract_authors(text, year),
        title=extract_title(text, year),
        year=year,
    )


def parse_references(references_text: str) -> List[ParsedReference]:
    """Segment a bibliography region into :class:`ParsedReference` records.

    Records keep their order of appearance. Segments that are too short, too
    long, or carry no year are dropped.
    """
    references: List[ParsedReference] = []
    segments = split_segments(references_text or "")
    for segment in segments:
        ref = parse_segment(segment, len(references) + 1)
        if ref is not None:
            references.append(ref)
    dropped = len(segments) - len(references)
    if dropped:
        logger.debug("dropped %d of %d candidate segments", dropped, len(segments))
    return references
