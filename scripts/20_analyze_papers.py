#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
20_analyze_papers.py  -  LLM summaries (and reference lists) for library PDFs.

Inputs:
  - <paths.pdf_dir>/*.pdf, <paths.library_path>

Outputs:
  - outputs/analyses/<item_id>.md
  - <paths.library_path>                  (ai_analysis, tags and metadata synced)

Notes:
  * Items that already carry an analysis are skipped unless --force is given.
  * Needs OPENAI_API_KEY; provider/model come from the llm section of the config.
"""

from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path

from openai import OpenAIError
from pypdf.errors import PdfReadError

from refmatch_lib.analysis_state import AnalysisContext
from refmatch_lib.config import CONFIG_PATH, load_config
from refmatch_lib.library import JsonLibrary
from refmatch_lib.llm import LLMClient, LLMClientError
from refmatch_lib.logging_utils import setup_logging
from refmatch_lib.pdf_utils import extract_page_texts
from refmatch_lib.pipeline import analyze_item

logger = logging.getLogger(__name__)


def main() -> int:
    ap = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    ap.add_argument("--force", action="store_true", help="re-analyze items that already have an analysis")
    args = ap.parse_args()

    setup_logging()
    cfg = load_config()
    pdf_dir = Path(cfg["paths"]["pdf_dir"])
    out_dir = Path(cfg["paths"]["outputs_dir"]) / "analyses"
    out_dir.mkdir(parents=True, exist_ok=True)
    max_chars = int((cfg.get("extraction") or {}).get("max_prompt_chars", 60000))

    library = JsonLibrary(cfg["paths"]["library_path"])
    try:
        client = LLMClient(config_path=CONFIG_PATH)
    except (LLMClientError, OpenAIError) as exc:
        logger.error("Cannot create LLM client: %s", exc)
        return 1

    with AnalysisContext() as context:
        for item in library.items():
            if item.ai_analysis and not args.force:
                continue
            pdf = pdf_dir / f"{item.id}.pdf"
            if not pdf.exists():
                logger.warning("No PDF for %s; skipping", item.id)
                continue
            try:
                pages = extract_page_texts(str(pdf))
                updates = analyze_item(item, pages, client, context, max_chars=max_chars)
            except (OSError, PdfReadError, LLMClientError) as exc:
                logger.error("[ERR] %s: %s", item.id, exc)
                continue
            (out_dir / f"{item.id}.md").write_text(updates["ai_analysis"], encoding="utf-8")
            library.update(item.id, **updates)
            logger.info(
                "[OK] %s (next estimate %.0fs)", item.id, context.estimated_duration()
            )

    library.save()
    return 0


if __name__ == "__main__":
    sys.exit(main())
