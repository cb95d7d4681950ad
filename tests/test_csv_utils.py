
from refmatch_lib.csv_utils import match_rows, reference_rows
from refmatch_lib.models import LibraryItem, MatchResult, ParsedReference


def test_reference_rows_blank_missing_fields():
    rows = reference_rows("p1", [ParsedReference(index=1, text="raw", year="2020")], source="pdf")
    assert rows == [{
        "item_id": "p1", "source": "pdf", "index": 1, "year": "2020",
        "authors": "", "title": "", "doi": "", "text": "raw",
    }]


def test_match_rows_flag_only_best_candidate():
    a = LibraryItem(id="a", title="A")
    b = LibraryItem(id="b", title="B")
    matches = {2: [MatchResult("b", 0.6, b)], 1: [MatchResult("a", 0.9, a), MatchResult("b", 0.8, b)]}
    rows = match_rows("p1", matches)
    assert [(r["ref_index"], r["rank"], r["in_library"]) for r in rows] == [
        (1, 1, True), (1, 2, False), (2, 1, False),
    ]
    assert rows[0]["match_item_id"] == "a"
    assert rows[0]["match_title"] == "A"
