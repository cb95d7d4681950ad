from types import SimpleNamespace

import pytest

from refmatch_lib.analysis_state import AnalysisContext
from refmatch_lib.config import MatchSettings
from refmatch_lib.llm import LLMClient, LLMResponseError
from refmatch_lib.models import LibraryItem
from refmatch_lib.pipeline import (
    SOURCE_LLM,
    SOURCE_PDF,
    analyze_item,
    build_reference_report,
    collect_references,
    report_for_pdf,
)

PAGES = [
    "Body text.\nReferences\n"
    "[1] Smith, J. (2020). A Study of Widgets. J. W. 1-2. doi:10.1234/abcd\n"
    "[2] Doe, A. (2019). Gadgets in practice today. G. 3-4.\n"
    "[3] Roe, B. (2018). Third paper on matching. M. 5-6."
]

ANALYSIS = (
    "---\ntitle: Self\ntags:\n  - new\n---\n## References\n```json\n"
    '[{"index": 1, "text": "Smith 2020", "doi": "10.1234/abcd"}]\n```\n'
)

SELF = LibraryItem(id="self", title="Self", doi="10.1234/abcd", tags=["old"])
OTHER = LibraryItem(id="other", title="A Study of Widgets", date="2020", doi="10.1234/ABCD")


def _client(content=None, error=None):
    def create(**kwargs):
        if error:
            raise error
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])

    sdk = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
    return LLMClient(provider="openai", model="m", config_path=None, client=sdk, max_retries=1)


def test_collect_references_prefers_analysis():
    source, refs = collect_references(LibraryItem(id="x", ai_analysis=ANALYSIS), PAGES)
    assert source == SOURCE_LLM
    assert [r.text for r in refs] == ["Smith 2020"]

    source, refs = collect_references(LibraryItem(id="x", ai_analysis="no block"), PAGES)
    assert source == SOURCE_PDF
    assert [r.index for r in refs] == [1, 2, 3]


def test_report_excludes_item_itself():
    report = build_reference_report(SELF, PAGES, [SELF, OTHER])
    assert report.source == SOURCE_PDF
    assert [m.item_id for m in report.matches[1]] == ["other"]
    assert report.best_match(1).item_id == "other"
    assert report.in_library(1)
    assert not report.in_library(2)
    assert report.incomplete


def test_report_uses_settings():
    settings = MatchSettings(threshold=0.5, in_library_threshold=0.99, incomplete_threshold=3)
    report = build_reference_report(SELF, PAGES, [OTHER], settings)
    assert not report.incomplete
    assert report.in_library(1)  # DOI, title and year all agree: similarity 1.0


def test_analyze_item_tracks_context_and_returns_updates():
    clock = iter([0.0, 5.0]).__next__
    ctx = AnalysisContext(clock=clock)
    updates = analyze_item(SELF, PAGES, _client(ANALYSIS), ctx)
    assert updates["tags"] == ["old", "new"]
    assert updates["ai_analysis"] == ANALYSIS
    assert ctx.durations == [5.0]
    assert not ctx.is_active("self")


def test_analyze_item_failure_is_propagated():
    ctx = AnalysisContext(clock=iter([0.0, 50.0]).__next__)
    with pytest.raises(LLMResponseError):
        analyze_item(SELF, PAGES, _client(error=RuntimeError("boom")), ctx)
    assert not ctx.is_active("self")
    assert ctx.durations == []


def test_report_for_pdf_skips_items_without_a_source(tmp_path):
    stored = LibraryItem(id="p1", title="Stored")
    assert report_for_pdf(stored, tmp_path / "p1.pdf", [OTHER]) is None

    bogus = tmp_path / "bogus.pdf"
    bogus.write_bytes(b"not a pdf")
    assert report_for_pdf(stored, bogus, [OTHER]) is None


def test_report_for_pdf_uses_analysis_when_pdf_is_missing(tmp_path):
    item = LibraryItem(id="p1", ai_analysis=ANALYSIS)
    report = report_for_pdf(item, tmp_path / "p1.pdf", [OTHER])
    assert report.source == SOURCE_LLM
    assert report.best_match(1).item_id == "other"
