from refmatch_lib.refs.locator import (
    find_dense_author_year,
    find_header_offset,
    find_numbered_opener,
    locate_references_section,
    references_region,
)

SURNAMES = ["Smith", "Jones", "Brown", "Taylor", "Wilson", "Davies", "Evans", "Thomas"]


def test_header_offset_points_past_the_heading_line():
    text = "Intro text here. More words\nReferences\n[1] Smith, J. (2020). Foo bar baz qux. J. 1-2."
    offset = find_header_offset(text)
    assert offset is not None
    assert text[offset:].startswith("\n[1] Smith")


def test_header_uses_the_heading_not_an_earlier_mention():
    text = (
        "References are listed at the end of this paper. Body text follows\n"
        "Bibliography\n[1] Smith, J. (2020). Foo bar baz qux."
    )
    offset = find_header_offset(text)
    assert text[offset:].startswith("\n[1]")


def test_header_patterns_cover_variants_and_chinese():
    for heading in ("REFERENCES", "Works Cited", "Literature cited", "Citations", "参考文献"):
        text = f"Body. Closing words\n{heading}\n1. Entry text 2020."
        offset = find_header_offset(text)
        assert offset is not None, heading
        assert text[offset:].startswith("\n1. Entry")


def test_prose_mentioning_references_is_not_a_header():
    assert find_header_offset("We cite many references. Nothing else here") is None


def test_numbered_opener_found_in_document_tail():
    text = "x" * 1000 + " [1] Smith, J. Something about widgets 2020."
    offset = find_numbered_opener(text)
    assert offset is not None
    assert text[offset:].startswith("[1] Smith")


def test_numbered_opener_ignored_outside_tail():
    text = "[1] Smith early on. " + "x" * 1000
    assert find_numbered_opener(text) is None


def _dense_document(n_entries: int) -> str:
    body = "word " * 300
    entries = "".join(
        f"{SURNAMES[i]}, A.B., {2010 + i}. A study of topic {i}.\n" for i in range(n_entries)
    )
    return body + "\n" + entries


def test_dense_author_year_backs_up_to_line_start():
    text = _dense_document(8)
    offset = find_dense_author_year(text)
    assert offset is not None
    assert text[offset - 1] == "\n"
    assert text[offset:].split(",")[0] in SURNAMES


def test_dense_author_year_needs_five_matches():
    text = "word " * 20 + "\nSmith, A.B., 2010. One.\nJones, A.B., 2011. Two.\n"
    assert find_dense_author_year(text) is None


def test_locator_returns_none_without_any_signal():
    assert locate_references_section("plain words " * 100) is None
    assert locate_references_section("") is None


def test_region_falls_back_to_last_ten_percent():
    text = "plain words " * 100
    assert references_region(text) == text[int(len(text) * 0.9):]


def test_region_starts_after_header():
    text = "Body text. Conclusion\nReferences\n[1] Smith, J. (2020). Widgets."
    assert references_region(text) == "\n[1] Smith, J. (2020). Widgets."


def test_numbered_opener_accepts_parenthesized_marker():
    text = "x" * 1000 + "\n(1) Smith, J. Something about widgets 2020."
    offset = find_numbered_opener(text)
    assert offset is not None
    assert text[offset:].startswith("(1) Smith")


def _spaced_entries(filler_words: int) -> str:
    body = "word " * 4000
    entries = "".join(
        f"{SURNAMES[i]}, A.B., {2010 + i}. A study of topic {i}.\n" + "filler " * filler_words + "\n"
        for i in range(5)
    )
    return body + "\n" + entries


def test_dense_author_year_requires_close_neighbours():
    # about 420 characters between consecutive entries
    assert find_dense_author_year(_spaced_entries(60)) is None

    text = _spaced_entries(10)
    offset = find_dense_author_year(text)
    assert offset is not None
    assert text[offset:].startswith("Smith, A.B., 2010.")
