import pytest

from pdf_grep.content_extractor import PyMuPDFExtractor


@pytest.fixture
def extractor():
    pytest.importorskip("pymupdf")
    return PyMuPDFExtractor()


def test_reads_text_page_by_page(extractor, make_pdf, tmp_path):
    path = make_pdf(tmp_path / "doc.pdf", ["first page", "", "third Foo page"])

    handle = extractor.open(path)
    try:
        assert handle is not None
        assert extractor.page_count(handle) == 3
        assert "first page" in extractor.page_text(handle, 0)
        assert extractor.page_text(handle, 1).strip() == ""
        assert "third Foo page" in extractor.page_text(handle, 2)
    finally:
        extractor.close(handle)


def test_unreadable_file_is_reported_as_no_document(extractor, tmp_path):
    path = tmp_path / "broken.pdf"
    path.write_bytes(b"this is not a pdf")

    assert extractor.open(path) is None


def test_missing_file_is_reported_as_no_document(extractor, tmp_path):
    assert extractor.open(tmp_path / "missing.pdf") is None


def test_page_errors_return_empty_text(extractor, make_pdf, tmp_path):
    path = make_pdf(tmp_path / "doc.pdf", ["only page"])
    handle = extractor.open(path)
    try:
        assert extractor.page_text(handle, 5) == ""
    finally:
        extractor.close(handle)
