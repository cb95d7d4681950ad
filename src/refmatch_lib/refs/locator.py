"""Locate where the bibliography starts in a document's text."""

from __future__ import annotations

import logging
import re
from typing import Optional, Tuple

from ..strategies import first_success

logger = logging.getLogger(__name__)

HEADER_PATTERNS = [
    re.compile(r"^references?\s*$", re.I),
    re.compile(r"^bibliography\s*$", re.I),
    re.compile(r"^works?\s+cited\s*$", re.I),
    re.compile(r"^literature\s+cited\s*$", re.I),
    re.compile(r"^citations?\s*$", re.I),
    re.compile(r"^参考文献\s*$"),
    re.compile(r"^引用文献\s*$"),
]

# Segments are the runs between '.' and line breaks.
SEGMENT_RE = re.compile(r"[^.\n]+")

NUMBERED_OPENER_RE = re.compile(r"(?:\[1\]|^1\.|^\(1\))\s+[A-Z]", re.M)
DENSE_AUTHOR_YEAR_RE = re.compile(r"[A-Z][a-z]+,\s+[A-Z]\.[A-Z]\.(?:[A-Z]\.)?.*?\d{4}\.")

TAIL_START = 0.85
LAST_RESORT_START = 0.9
MIN_DENSE_MATCHES = 5
MAX_DENSE_GAP = 300


def _tail(text: str) -> Tuple[int, str]:
    start = int(len(text) * TAIL_START)
    return start, text[start:]


def find_header_offset(text: str) -> Optional[int]:
    """Offset just past the first line-like segment that is a bibliography header."""
    for m in SEGMENT_RE.finditer(text):
        segment = m.group(0)
        stripped = segment.strip()
        if not stripped:
            continue
        if any(p.match(stripped) for p in HEADER_PATTERNS):
            lead = len(segment) - len(segment.lstrip())
            return m.start() + lead + len(stripped)
    return None


def find_numbered_opener(text: str) -> Optional[int]:
    """Offset of a ``[1]``/``1.``/``(1)`` opener in the document tail."""
    start, tail = _tail(text)
    m = NUMBERED_OPENER_RE.search(tail)
    if m:
        return start + m.start()
    return None


def find_dense_author_year(text: str) -> Optional[int]:
    """Start of the line where a dense run of ``Lastname, I.I. ... YYYY.`` begins."""
    start, tail = _tail(text)
    matches = list(DENSE_AUTHOR_YEAR_RE.finditer(tail))
    if len(matches) < MIN_DENSE_MATCHES:
        return None
    for current, nxt in zip(matches, matches[1:]):
        if nxt.start() - current.end() < MAX_DENSE_GAP:
            line_start = tail.rfind("\n", 0, current.start())
            if line_start >= 0:
                return start + line_start + 1
            return start + current.start()
    return None


LOCATOR_STRATEGIES = [
    ("header", find_header_offset),
    ("numbered_opener", find_numbered_opener),
    ("dense_author_year", find_dense_author_year),
]


def locate_references_section(text: str) -> Optional[int]:
    """Return the offset where references start, or ``None`` for "use the last 10%"."""
    found = first_success(LOCATOR_STRATEGIES, text or "")
    if found is None:
        logger.debug("no reference section signal; falling back to document tail")
        return None
    name, offset = found
    logger.debug("reference section located by %s at offset %d", name, offset)
    return offset


def references_region(text: str) -> str:
    """Text of the bibliography region, degrading to the final 10% of ``text``."""
    text = text or ""
    offset = locate_references_section(text)
    if offset is None:
        offset = int(len(text) * LAST_RESORT_START)
    return text[offset:]
