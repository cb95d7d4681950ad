import re
from typing import Optional

DOI_RE = re.compile(r"10\.\d{4,9}/[-._;()/:A-Z0-9]+", re.I)

_HSPACE = re.compile(r"[ \t\f\v\r\u00a0]+")
_BLANK_LINES = re.compile(r"\s*\n\s*")
_NON_WORD = re.compile(r"[^\w\s]")
_WS = re.compile(r"\s+")
_YEAR_IN_DATE = re.compile(r"(?<!\d)(\d{4})(?!\d)")
_TAG = re.compile(r"<[^>]*>")

_SUBSCRIPTS = str.maketrans({
    "0": "₀", "1": "₁", "2": "₂", "3": "₃", "4": "₄",
    "5": "₅", "6": "₆", "7": "₇", "8": "₈", "9": "₉",
    "a": "ₐ", "e": "ₑ", "o": "ₒ", "x": "ₓ", "h": "ₕ",
    "k": "ₖ", "l": "ₗ", "m": "ₘ", "n": "ₙ", "p": "ₚ",
    "s": "ₛ", "t": "ₜ",
})
_SUPERSCRIPTS = str.maketrans({
    "0": "⁰", "1": "¹", "2": "²", "3": "³", "4": "⁴",
    "5": "⁵", "6": "⁶", "7": "⁷", "8": "⁸", "9": "⁹",
    "+": "⁺", "-": "⁻", "=": "⁼", "(": "⁽", ")": "⁾",
    "n": "ⁿ", "i": "ⁱ",
})


def normalize_whitespace(text: str) -> str:
    """Collapse runs of horizontal whitespace and blank lines.

    Parameters
    ----------
    text: str
        Raw page text as returned by the PDF extractor.

    Returns
    -------
    str
        Text with single spaces between words and at most one line break
        between lines. Leading and trailing whitespace is removed.
    """

    if not text:
        return ""
    text = _HSPACE.sub(" ", text)
    text = _BLANK_LINES.sub("\n", text)
    return text.strip()


def normalize_string(s: str) -> str:
    """Lowercase ``s``, replace punctuation with spaces and collapse whitespace."""

    s = _NON_WORD.sub(" ", (s or "").lower())
    return _WS.sub(" ", s).strip()


def fuzzy_match(a: str, b: str) -> float:
    """Jaccard similarity of the word sets of two normalized strings.

    Only words longer than two characters take part. Two empty sets are
    considered identical (``1.0``); one empty set against a non-empty one
    scores ``0.0``.
    """

    words_a = {w for w in a.split(" ") if len(w) > 2}
    words_b = {w for w in b.split(" ") if len(w) > 2}
    if not words_a and not words_b:
        return 1.0
    if not words_a or not words_b:
        return 0.0
    return len(words_a & words_b) / len(words_a | words_b)


def find_doi(text: str) -> Optional[str]:
    """Return the first DOI token in ``text`` without trailing punctuation."""

    m = DOI_RE.search(text or "")
    if not m:
        return None
    doi = m.group(0).rstrip(".,;")
    return doi or None


def year_from_date(date: Optional[str]) -> Optional[str]:
    """Pull a four digit year out of a free-form date such as ``2013-05-01``."""

    if not date:
        return None
    m = _YEAR_IN_DATE.search(str(date))
    return m.group(1) if m else None


def clean_title(title) -> str:
    """Normalize a title coming from CSL metadata or an LLM.

    HTML ``<sub>``/``<sup>`` runs become Unicode sub/superscripts, any other
    tag is removed, and whitespace is collapsed.
    """

    if not title:
        return ""
    cleaned = str(title)
    cleaned = re.sub(
        r"<sub>(.*?)</sub>", lambda m: m.group(1).translate(_SUBSCRIPTS), cleaned, flags=re.I
    )
    cleaned = re.sub(
        r"<sup>(.*?)</sup>", lambda m: m.group(1).translate(_SUPERSCRIPTS), cleaned, flags=re.I
    )
    cleaned = _TAG.sub("", cleaned)
    return _WS.sub(" ", cleaned).strip()
