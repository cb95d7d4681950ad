#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
10_resolve_metadata.py  -  Make sure every PDF has a library item.

Inputs:
  - <paths.pdf_dir>/*.pdf
  - <paths.library_path>                  (created when missing)

Output:
  - <paths.library_path>                  (one item per PDF, id = file stem)

Notes:
  * Existing items keep their metadata; only PDFs without an item are resolved.
  * A DOI on the first page is looked up on doi.org; otherwise the PDF title is used.
  * New items whose title closely matches an existing item are logged as possible duplicates.
"""

from __future__ import annotations
import logging
from pathlib import Path

from refmatch_lib.config import load_config
from refmatch_lib.library import JsonLibrary, search_items
from refmatch_lib.logging_utils import setup_logging
from refmatch_lib.metadata import extract_metadata_from_pdf
from refmatch_lib.models import LibraryItem

logger = logging.getLogger(__name__)

DUPLICATE_TITLE_SCORE = 95


def main() -> None:
    setup_logging()
    cfg = load_config()
    pdf_dir = Path(cfg["paths"]["pdf_dir"])
    library = JsonLibrary(cfg["paths"]["library_path"])

    added = 0
    for pdf in sorted(pdf_dir.glob("*.pdf")):
        if library.get(pdf.stem) is not None:
            continue
        meta = extract_metadata_from_pdf(str(pdf))
        if meta is None:
            item = LibraryItem(id=pdf.stem, title=pdf.stem)
        else:
            item = LibraryItem(
                id=pdf.stem,
                title=meta.title or pdf.stem,
                date=meta.date,
                doi=meta.doi,
                creators=meta.creators,
                type=meta.type or "journalArticle",
                publication_title=meta.publication_title,
                abstract=meta.abstract,
            )
        hits = search_items(item.title, library.items(), k=1)
        if hits and hits[0]["score"] >= DUPLICATE_TITLE_SCORE:
            logger.warning(
                "%s may duplicate %s (title score %d)", pdf.name, hits[0]["item"].id, hits[0]["score"]
            )
        library.put(item)
        added += 1
        logger.info("[OK] %s -> %s", pdf.name, item.title)

    library.save()
    logger.info("Added %d new items", added)


if __name__ == "__main__":
    main()
