# scripts/00_run_all.py
# Orchestrates the pipeline end-to-end: metadata -> LLM analysis -> references -> export.
# Python 3.10+. Requires the refmatch package to be installed (pip install -e .).

from __future__ import annotations
import os
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SCRIPTS = ROOT / "scripts"


def run_script(name: str, *args: str) -> None:
    """Run a numbered step like '30_extract_and_match.py'."""
    cmd = [sys.executable, str(SCRIPTS / name)]
    if args:
        cmd += list(args)
    subprocess.check_call(cmd, cwd=ROOT)


def main():
    # 1) One library item per PDF
    run_script("10_resolve_metadata.py")

    # 2) (Optional) LLM analyses; their reference lists are preferred in step 3
    if os.getenv("OPENAI_API_KEY"):
        try:
            run_script("20_analyze_papers.py")
        except subprocess.CalledProcessError as e:
            print("[WARN] analysis step failed, continuing with PDF extraction:", e)
    else:
        print("[WARN] OPENAI_API_KEY not set; skipping LLM analysis")

    # 3) References + library matches
    run_script("30_extract_and_match.py")

    # 4) Bibliographies and graph
    run_script("40_export.py")

    print("\n[OK] Pipeline complete. See outputs/ for artifacts.")


if __name__ == "__main__":
    main()
