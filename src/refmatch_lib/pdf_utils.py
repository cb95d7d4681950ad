from typing import Iterable, List, Optional

from pypdf import PdfReader

from .text_utils import normalize_whitespace


def extract_page_texts(pdf_path: str) -> List[str]:
    """Extract the text of every page of a PDF.

    Parameters
    ----------
    pdf_path: str
        Path to the PDF file to read.

    Returns
    -------
    list[str]
        One string per page, in reading order. Pages without a text layer
        yield an empty string.

    Raises
    ------
    FileNotFoundError
        If ``pdf_path`` does not exist.
    PdfReadError
        Propagated from :class:`pypdf.PdfReader` when the file cannot be read.
    """

    reader = PdfReader(pdf_path)
    return [page.extract_text() or "" for page in reader.pages]


def join_pages(page_texts: Iterable[str]) -> str:
    """Normalize each page and join them with single spaces.

    Parameters
    ----------
    page_texts: Iterable[str]
        Raw per-page text.

    Returns
    -------
    str
        The whole document as one string. Empty pages are skipped.
    """

    pages = (normalize_whitespace(t) for t in page_texts)
    return " ".join(p for p in pages if p)


def first_page_text(pdf_path: str) -> str:
    """Return the text of the first page, or ``""`` for an empty document."""

    reader = PdfReader(pdf_path)
    if not reader.pages:
        return ""
    return reader.pages[0].extract_text() or ""


def pdf_info_title(pdf_path: str) -> Optional[str]:
    """Return the ``/Title`` entry of the document information dictionary."""

    meta = PdfReader(pdf_path).metadata
    if meta is None:
        return None
    title = meta.title
    return str(title) if title else None
