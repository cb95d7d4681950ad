#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
40_export.py  -  Bibliographies and the knowledge graph for the whole library.

Outputs:
  - outputs/library.bib, outputs/library.csl.json, outputs/library.txt
  - outputs/graph.json                    (nodes/links for a force-graph view)
  - outputs/filenames.csv                 (suggested PDF filename per item)
"""

from __future__ import annotations
import json
import logging
from dataclasses import asdict
from pathlib import Path

import pandas as pd

from refmatch_lib.config import load_config
from refmatch_lib.export import generate_bibliography, generate_pdf_filename
from refmatch_lib.graph import build_graph_data
from refmatch_lib.library import load_library
from refmatch_lib.logging_utils import setup_logging

logger = logging.getLogger(__name__)

OUTPUTS = {"bibtex": "library.bib", "json": "library.csl.json", "text": "library.txt"}


def main() -> None:
    setup_logging()
    cfg = load_config()
    out_dir = Path(cfg["paths"]["outputs_dir"])
    out_dir.mkdir(parents=True, exist_ok=True)
    items = load_library(cfg["paths"]["library_path"])

    for fmt, name in OUTPUTS.items():
        (out_dir / name).write_text(generate_bibliography(items, fmt), encoding="utf-8")

    graph = build_graph_data(items)
    (out_dir / "graph.json").write_text(
        json.dumps(asdict(graph), ensure_ascii=False, indent=2), encoding="utf-8"
    )

    pd.DataFrame(
        [{"item_id": i.id, "filename": generate_pdf_filename(i)} for i in items]
    ).to_csv(out_dir / "filenames.csv", index=False)
    logger.info("[OK] exported %d items to %s", len(items), out_dir)


if __name__ == "__main__":
    main()
