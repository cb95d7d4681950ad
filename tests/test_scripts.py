import json
import runpy
from pathlib import Path

import pytest

from refmatch_lib import config, logging_utils

SCRIPTS = Path(__file__).resolve().parents[1] / "scripts"


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    cfg = {
        "paths": {
            "outputs_dir": str(tmp_path / "outputs"),
            "pdf_dir": str(tmp_path / "pdfs"),
            "library_path": str(tmp_path / "library.json"),
        },
        "matching": {"threshold": 0.5, "in_library_threshold": 0.7},
    }
    (tmp_path / "pdfs").mkdir()
    monkeypatch.setattr(config, "load_config", lambda: cfg)
    monkeypatch.setattr(logging_utils, "setup_logging", lambda *a, **kw: None)
    return tmp_path


def test_extract_and_match_keeps_references_when_pdf_is_missing(workspace):
    stored = {"index": 1, "text": "Smith, J. (2020). A Study of Widgets.", "year": "2020"}
    library_path = workspace / "library.json"
    library_path.write_text(
        json.dumps([{"id": "p1", "title": "Widgets", "references": [stored]}]), encoding="utf-8"
    )

    runpy.run_path(str(SCRIPTS / "30_extract_and_match.py"), run_name="__main__")

    items = json.loads(library_path.read_text(encoding="utf-8"))
    assert items[0]["references"] == [stored]
    assert (workspace / "outputs" / "references.csv").exists()
