from refmatch_lib.text_utils import (
    clean_title,
    find_doi,
    fuzzy_match,
    normalize_string,
    normalize_whitespace,
    year_from_date,
)


def test_normalize_string_strips_punctuation_and_case():
    assert normalize_string("Hello, World!  Foo-bar") == "hello world foo bar"
    assert normalize_string("") == ""


def test_fuzzy_match_jaccard_rules():
    assert fuzzy_match("", "") == 1.0
    assert fuzzy_match("an ox", "of it") == 1.0  # only short words on both sides
    assert fuzzy_match("widgets", "") == 0.0
    assert fuzzy_match("study widgets", "study gadgets") == 1 / 3


def test_normalize_whitespace_keeps_single_line_breaks():
    assert normalize_whitespace("a  b\n\n\nc\t d ") == "a b\nc d"
    assert normalize_whitespace("") == ""


def test_find_doi_drops_trailing_punctuation():
    assert find_doi("see https://doi.org/10.1000/xyz123. Next") == "10.1000/xyz123"
    assert find_doi("no identifier here") is None


def test_year_from_date():
    assert year_from_date("2013-05-01") == "2013"
    assert year_from_date("May 2001") == "2001"
    assert year_from_date("n.d.") is None
    assert year_from_date(None) is None


def test_clean_title_converts_sub_and_superscripts():
    assert clean_title("H<sub>2</sub>O and CO<sub>2</sub> <i>in situ</i>") == "H₂O and CO₂ in situ"
    assert clean_title("x<sup>2</sup>  +\n y") == "x² + y"
    assert clean_title(None) == ""
