#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
30_extract_and_match.py  -  Reference lists and library matches per item.

Inputs:
  - <paths.pdf_dir>/*.pdf, <paths.library_path>

Outputs:
  - outputs/references.csv                (one row per reference)
  - outputs/matches.csv                   (one row per reference x candidate)
  - <paths.library_path>                  (references stored on each item)

Notes:
  * References from an item's LLM analysis win over PDF extraction.
  * Items without a readable PDF or analysis references keep their stored list.
  * Items with fewer references than extraction.incomplete_threshold are listed
    as likely incomplete at the end of the run.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import List

import pandas as pd

from refmatch_lib.config import load_config, matching_settings
from refmatch_lib.csv_utils import MATCH_FIELDS, REFERENCE_FIELDS, match_rows, reference_rows
from refmatch_lib.library import JsonLibrary
from refmatch_lib.logging_utils import setup_logging
from refmatch_lib.pipeline import report_for_pdf

logger = logging.getLogger(__name__)


def main() -> None:
    setup_logging()
    cfg = load_config()
    settings = matching_settings(cfg)
    pdf_dir = Path(cfg["paths"]["pdf_dir"])
    out_dir = Path(cfg["paths"]["outputs_dir"])
    out_dir.mkdir(parents=True, exist_ok=True)

    library = JsonLibrary(cfg["paths"]["library_path"])
    all_items = library.items()

    ref_rows: List[dict] = []
    m_rows: List[dict] = []
    incomplete: List[str] = []
    for item in all_items:
        report = report_for_pdf(item, pdf_dir / f"{item.id}.pdf", all_items, settings)
        if report is None:
            continue
        library.set_references(item.id, report.references)
        ref_rows.extend(reference_rows(item.id, report.references, report.source))
        m_rows.extend(match_rows(item.id, report.matches, settings.in_library_threshold))
        if report.incomplete:
            incomplete.append(item.id)

    pd.DataFrame(ref_rows, columns=REFERENCE_FIELDS).to_csv(out_dir / "references.csv", index=False)
    pd.DataFrame(m_rows, columns=MATCH_FIELDS).to_csv(out_dir / "matches.csv", index=False)
    library.save()

    logger.info("[OK] wrote %s and %s", out_dir / "references.csv", out_dir / "matches.csv")
    if incomplete:
        logger.warning("Likely incomplete reference lists: %s", ", ".join(incomplete))


if __name__ == "__main__":
    main()
