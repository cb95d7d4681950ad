from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


def _pick(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present key, so both snake_case and camelCase records load."""
    for k in keys:
        if k in data and data[k] is not None:
            return data[k]
    return default


@dataclass(frozen=True)
class ParsedReference:
    """One bibliography entry extracted from a document."""
    index: int
    text: str
    doi: Optional[str] = None
    authors: Optional[str] = None
    title: Optional[str] = None
    year: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParsedReference":
        year = data.get("year")
        return cls(
            index=int(data["index"]),
            text=str(data.get("text") or ""),
            doi=data.get("doi") or None,
            authors=data.get("authors") or None,
            title=data.get("title") or None,
            year=str(year) if year not in (None, "") else None,
        )


@dataclass(frozen=True)
class Creator:
    last_name: str
    first_name: str = ""
    creator_type: str = "author"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Creator":
        return cls(
            last_name=str(_pick(data, "last_name", "lastName", default="")),
            first_name=str(_pick(data, "first_name", "firstName", default="")),
            creator_type=str(_pick(data, "creator_type", "creatorType", default="author")),
        )


@dataclass(frozen=True)
class LibraryItem:
    """A library record as seen by the matcher, graph and export code."""
    id: str
    title: str = ""
    date: Optional[str] = None
    doi: Optional[str] = None
    creators: List[Creator] = field(default_factory=list)
    type: str = "journalArticle"
    publication_title: Optional[str] = None
    url: Optional[str] = None
    abstract: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    ai_analysis: Optional[str] = None
    references: List[ParsedReference] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LibraryItem":
        date = _pick(data, "date")
        return cls(
            id=str(data["id"]),
            title=str(_pick(data, "title", default="")),
            date=str(date) if date is not None else None,
            doi=_pick(data, "doi", "DOI"),
            creators=[Creator.from_dict(c) for c in _pick(data, "creators", default=[])],
            type=str(_pick(data, "type", default="journalArticle")),
            publication_title=_pick(data, "publication_title", "publicationTitle"),
            url=_pick(data, "url"),
            abstract=_pick(data, "abstract"),
            tags=list(_pick(data, "tags", default=[])),
            ai_analysis=_pick(data, "ai_analysis", "aiAnalysis"),
            references=[
                ParsedReference.from_dict(r) for r in _pick(data, "references", default=[])
            ],
        )

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["references"] = [r.to_dict() for r in self.references]
        return out


@dataclass(frozen=True)
class MatchResult:
    item_id: str
    similarity: float
    item: LibraryItem
