from pypdf import PdfWriter

from refmatch_lib.pdf_utils import extract_page_texts, first_page_text, join_pages
from refmatch_lib.refs import extract_references_from_pdf


def test_extract_page_texts_blank_pages(tmp_path):
    pdf_path = tmp_path / "sample.pdf"
    writer = PdfWriter()
    writer.add_blank_page(width=72, height=72)
    writer.add_blank_page(width=72, height=72)
    with pdf_path.open("wb") as f:
        writer.write(f)

    assert extract_page_texts(str(pdf_path)) == ["", ""]
    assert first_page_text(str(pdf_path)) == ""
    assert extract_references_from_pdf(str(pdf_path)) == []


def test_join_pages_skips_empty_pages():
    assert join_pages(["first  page\n\n", "", "  second\tpage"]) == "first page second page"


def test_unreadable_pdf_yields_no_references(tmp_path):
    bogus = tmp_path / "bogus.pdf"
    bogus.write_bytes(b"not a pdf")
    assert extract_references_from_pdf(str(bogus)) == []
    assert extract_references_from_pdf(str(tmp_path / "missing.pdf")) == []
