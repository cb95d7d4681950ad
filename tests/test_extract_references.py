from refmatch_lib.refs import are_references_incomplete, extract_references
from refmatch_lib.models import ParsedReference

SCENARIO = (
    "... References\n[1] Smith, J. (2020). A Study of Widgets. Journal of Widgets, "
    "12(3), 1-10. https://doi.org/10.1234/abcd ..."
)


def test_scenario_single_numbered_reference():
    refs = extract_references([SCENARIO])
    assert len(refs) == 1
    ref = refs[0]
    assert ref.index == 1
    assert ref.year == "2020"
    assert ref.doi == "10.1234/abcd"
    assert ref.title and "Widgets" in ref.title
    assert ref.authors and "Smith" in ref.authors


def test_pages_are_normalized_and_joined():
    pages = [
        "Intro   text\n\n\nwith   gaps.",
        "Conclusion\nReferences\n"
        "[1] Smith, J. (2020). A Study of Widgets. J. 1-2.\n"
        "[2] Doe, A. (2019). Gadgets in practice today. G. 3-4.\n"
        "[3] Roe, B. (2018). Third paper on matching. M. 5-6.",
    ]
    refs = extract_references(pages)
    assert [r.index for r in refs] == [1, 2, 3]
    assert [r.year for r in refs] == ["2020", "2019", "2018"]


def test_empty_input_is_not_an_error():
    assert extract_references([]) == []
    assert extract_references(["", "   "]) == []


def test_incomplete_threshold():
    refs = [ParsedReference(index=i, text=f"ref {i}", year="2020") for i in range(1, 5)]
    assert are_references_incomplete(refs)
    refs.append(ParsedReference(index=5, text="ref 5", year="2020"))
    assert not are_references_incomplete(refs)
    assert are_references_incomplete(refs, threshold=10)
