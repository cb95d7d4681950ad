# src/refmatch_lib/library.py
from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from rapidfuzz import fuzz, process

from .models import LibraryItem, ParsedReference

logger = logging.getLogger(__name__)


class LibraryError(Exception):
    """Raised when the library file is missing or malformed."""


class JsonLibrary:
    """Library items kept in a single JSON file (a list of item objects).

    Only the get/set operations the reference pipeline needs are provided.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._items: Dict[str, LibraryItem] = {}
        if self.path.exists():
            self._items = {i.id: i for i in _read_items(self.path)}

    def items(self) -> List[LibraryItem]:
        return list(self._items.values())

    def get(self, item_id: str) -> Optional[LibraryItem]:
        return self._items.get(item_id)

    def put(self, item: LibraryItem) -> None:
        self._items[item.id] = item

    def update(self, item_id: str, **changes: Any) -> LibraryItem:
        item = self._items.get(item_id)
        if item is None:
            raise LibraryError(f"Unknown library item: {item_id}")
        updated = replace(item, **changes)
        self._items[item_id] = updated
        return updated

    def set_references(self, item_id: str, references: List[ParsedReference]) -> LibraryItem:
        """Replace the stored reference list of ``item_id`` as a whole."""
        return self.update(item_id, references=list(references))

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [i.to_dict() for i in self._items.values()]
        self.path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        logger.info("Saved %d library items to %s", len(payload), self.path)


def _read_items(path: Path) -> List[LibraryItem]:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise LibraryError(f"Library file {path} is not valid JSON: {exc}") from exc
    if not isinstance(raw, list):
        raise LibraryError(f"Library file {path} must contain a JSON list of items")
    try:
        return [LibraryItem.from_dict(d) for d in raw]
    except (KeyError, TypeError, ValueError) as exc:
        raise LibraryError(f"Malformed library item in {path}: {exc}") from exc


def load_library(path: str | Path) -> List[LibraryItem]:
    """Load every item from a library JSON file.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    LibraryError
        If the file is not a JSON list of item objects.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Missing library file: {p}")
    return _read_items(p)


def search_items(query: str, items: List[LibraryItem], k: int = 5) -> List[Dict[str, Any]]:
    """Return the ``k`` items whose titles best match ``query``.

    Parameters
    ----------
    query: str
        Free text, typically a title or a raw citation string.
    items: List[LibraryItem]
        Candidate items.
    k: int, optional
        Number of results to return. Must be positive.

    Returns
    -------
    List[Dict[str, Any]]
        ``item`` and integer ``score`` (0-100) per hit, best first.

    Raises
    ------
    ValueError
        If ``k`` is non-positive.
    """
    if k <= 0:
        raise ValueError("k must be positive")

    corpus = [i.title or "" for i in items]
    ranked = process.extract(query, corpus, scorer=fuzz.token_set_ratio, limit=k)
    return [{"item": items[idx], "score": int(score)} for (_, score, idx) in ranked]
