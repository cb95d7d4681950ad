"""Bibliography export and standardized attachment filenames."""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Iterable, List, Optional

from bibtexparser.bibdatabase import BibDatabase
from bibtexparser.bwriter import BibTexWriter

from .models import Creator, LibraryItem
from .text_utils import year_from_date

CSL_TYPES = {
    "journalArticle": "article-journal",
    "book": "book",
    "webpage": "webpage",
    "report": "report",
    "thesis": "thesis",
}

BIBTEX_TYPES = {
    "article-journal": "article",
    "book": "book",
    "webpage": "misc",
    "report": "techreport",
    "thesis": "phdthesis",
}

FORMATS = ("bibtex", "json", "text")

# Joins two first-author surnames in exported filenames.
PAIR_JOINER = "和"
MAX_FILENAME_TITLE = 80


def item_to_csl(item: LibraryItem) -> Dict[str, Any]:
    year = year_from_date(item.date)
    csl: Dict[str, Any] = {
        "id": item.id,
        "type": CSL_TYPES.get(item.type, "article"),
        "title": item.title,
        "author": [{"family": c.last_name, "given": c.first_name} for c in item.creators],
        "container-title": item.publication_title,
        "DOI": item.doi,
        "URL": item.url,
        "issued": {"date-parts": [[int(year)]]} if year else None,
        "abstract": item.abstract,
    }
    return {k: v for k, v in csl.items() if v not in (None, "", [])}


def _csl_year(csl: Dict[str, Any]) -> Optional[str]:
    parts = (csl.get("issued") or {}).get("date-parts") or [[]]
    return str(parts[0][0]) if parts[0] else None


def _bibtex_key(csl: Dict[str, Any], seen: Dict[str, int]) -> str:
    authors = csl.get("author") or []
    base = authors[0].get("family", "") if authors else ""
    base = re.sub(r"[^A-Za-z0-9]", "", base) or "item"
    base += _csl_year(csl) or ""
    n = seen.get(base, 0)
    seen[base] = n + 1
    return base if n == 0 else f"{base}{chr(ord('a') + n - 1)}"


def _bibtex_entry(csl: Dict[str, Any], key: str) -> Dict[str, str]:
    entry = {"ENTRYTYPE": BIBTEX_TYPES.get(csl["type"], "article"), "ID": key}
    if csl.get("title"):
        entry["title"] = csl["title"]
    if csl.get("author"):
        entry["author"] = " and ".join(
            f"{a['family']}, {a['given']}" if a.get("given") else a["family"]
            for a in csl["author"]
        )
    year = _csl_year(csl)
    if year:
        entry["year"] = year
    if csl.get("container-title"):
        field = "journal" if entry["ENTRYTYPE"] == "article" else "publisher"
        entry[field] = csl["container-title"]
    if csl.get("DOI"):
        entry["doi"] = csl["DOI"]
    if csl.get("URL"):
        entry["url"] = csl["URL"]
    if csl.get("abstract"):
        entry["abstract"] = csl["abstract"]
    return entry


def _apa_author(author: Dict[str, str]) -> str:
    given = author.get("given") or ""
    initials = " ".join(f"{p[0]}." for p in given.replace(".", " ").split() if p)
    return f"{author['family']}, {initials}" if initials else author["family"]


def format_apa(csl: Dict[str, Any]) -> str:
    authors = [_apa_author(a) for a in csl.get("author") or []]
    if len(authors) > 1:
        names = ", ".join(authors[:-1]) + ", & " + authors[-1]
    else:
        names = "".join(authors)
    parts = []
    if names:
        parts.append(names)
    parts.append(f"({_csl_year(csl) or 'n.d.'}).")
    if csl.get("title"):
        parts.append(f"{csl['title'].rstrip('.')}.")
    if csl.get("container-title"):
        parts.append(f"{csl['container-title']}.")
    if csl.get("DOI"):
        parts.append(f"https://doi.org/{csl['DOI']}")
    elif csl.get("URL"):
        parts.append(csl["URL"])
    return " ".join(parts)


def generate_bibliography(items: Iterable[LibraryItem], fmt: str) -> str:
    """Render ``items`` as ``bibtex``, CSL ``json`` or APA-like ``text``."""
    if fmt not in FORMATS:
        raise ValueError(f"Unsupported bibliography format: {fmt!r}")
    csl_items = [item_to_csl(i) for i in items]

    if fmt == "json":
        return json.dumps(csl_items, ensure_ascii=False, indent=2)
    if fmt == "text":
        return "\n".join(format_apa(c) for c in csl_items)

    seen: Dict[str, int] = {}
    db = BibDatabase()
    db.entries = [_bibtex_entry(c, _bibtex_key(c, seen)) for c in csl_items]
    writer = BibTexWriter()
    writer.indent = "  "
    writer.order_entries_by = None
    return writer.write(db)


def sanitize_filename(s: str) -> str:
    s = re.sub(r'[<>:"/\\|?*\x00-\x1f]', "", s)
    s = re.sub(r"\s+", "_", s)
    s = re.sub(r"_{2,}", "_", s)
    return s.strip("_")


def _authors_part(creators: List[Creator]) -> Optional[str]:
    if not creators:
        return None
    if len(creators) == 1:
        return sanitize_filename(creators[0].last_name)
    if len(creators) == 2:
        return (
            sanitize_filename(creators[0].last_name)
            + PAIR_JOINER
            + sanitize_filename(creators[1].last_name)
        )
    return sanitize_filename(creators[0].last_name) + " et al"


def generate_pdf_filename(item: LibraryItem) -> str:
    """``Author - Year - Title.pdf``; falls back to ``Untitled_<id>.pdf``."""
    parts = []
    authors = _authors_part(item.creators)
    if authors:
        parts.append(authors)
    year = year_from_date(item.date)
    if year:
        parts.append(year)
    if item.title:
        parts.append(sanitize_filename(item.title.strip()[:MAX_FILENAME_TITLE].strip()))
    if not parts:
        return f"Untitled_{item.id[:8]}.pdf"
    return " - ".join(parts) + ".pdf"
