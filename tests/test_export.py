import json

import pytest

from refmatch_lib.export import (
    generate_bibliography,
    generate_pdf_filename,
    item_to_csl,
    sanitize_filename,
)
from refmatch_lib.models import Creator, LibraryItem

ITEM = LibraryItem(
    id="abcdef123456",
    title="A Study of Widgets",
    date="2020-05-01",
    doi="10.1234/abcd",
    creators=[Creator("Smith", "John"), Creator("Doe", "Alice")],
    publication_title="Journal of Widgets",
)


def test_item_to_csl_drops_empty_fields():
    csl = item_to_csl(ITEM)
    assert csl["type"] == "article-journal"
    assert csl["issued"] == {"date-parts": [[2020]]}
    assert csl["author"][0] == {"family": "Smith", "given": "John"}
    assert "URL" not in csl
    assert "abstract" not in csl


def test_json_bibliography():
    data = json.loads(generate_bibliography([ITEM], "json"))
    assert data[0]["DOI"] == "10.1234/abcd"
    assert data[0]["container-title"] == "Journal of Widgets"


def test_text_bibliography_is_apa_like():
    out = generate_bibliography([ITEM, LibraryItem(id="x", title="Undated")], "text")
    lines = out.split("\n")
    assert lines[0] == (
        "Smith, J., & Doe, A. (2020). A Study of Widgets. Journal of Widgets. "
        "https://doi.org/10.1234/abcd"
    )
    assert lines[1] == "(n.d.). Undated."


def test_bibtex_bibliography_keys_are_unique():
    twin = LibraryItem(id="t", title="Another", date="2020", creators=[Creator("Smith", "Jo")])
    out = generate_bibliography([ITEM, twin], "bibtex")
    assert "@article{Smith2020," in out
    assert "@article{Smith2020a," in out
    assert "author = {Smith, John and Doe, Alice}" in out
    assert "journal = {Journal of Widgets}" in out


def test_unknown_format_is_rejected():
    with pytest.raises(ValueError):
        generate_bibliography([ITEM], "ris")


def test_sanitize_filename():
    assert sanitize_filename('a<b>: "c"/d\\e|f?*  g') == "ab_cdef_g"


def test_generate_pdf_filename_variants():
    assert generate_pdf_filename(ITEM) == "Smith和Doe - 2020 - A_Study_of_Widgets.pdf"
    one = LibraryItem(id="1", title="Only: one?", date="1999", creators=[Creator("Li", "Wei")])
    assert generate_pdf_filename(one) == "Li - 1999 - Only_one.pdf"
    many = LibraryItem(id="2", creators=[Creator("A"), Creator("B"), Creator("C")])
    assert generate_pdf_filename(many) == "A et al.pdf"
    assert generate_pdf_filename(LibraryItem(id="abcdef123456")) == "Untitled_abcdef12.pdf"


def test_generate_pdf_filename_truncates_long_titles():
    item = LibraryItem(id="3", title="x" * 200)
    assert generate_pdf_filename(item) == "x" * 80 + ".pdf"
