"""Unit tests for DocumentLoader."""
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import fitz  # PyMuPDF
import pytest
from services.document_loader import DocumentLoader, PdfParseError


def make_pdf(*page_texts, **save_options) -> bytes:
    """Build an in-memory PDF with one page per text."""
    pdf = fitz.open()
    for text in page_texts:
        page = pdf.new_page()
        page.insert_text((72, 72), text)
    data = pdf.tobytes(**save_options)
    pdf.close()
    return data


@pytest.fixture
def loader():
    return DocumentLoader()


class TestDocumentLoader:
    """Test suite for DocumentLoader class."""

    def test_load_bytes_pages(self, loader):
        document = loader.load_bytes(make_pdf("First page text", "Second page text"), "paper.pdf")

        assert document.filename == "paper.pdf"
        assert document.total_pages == 2
        assert [page.page_number for page in document.pages] == [1, 2]
        assert "First page text" in document.pages[0].text
        assert "Second page text" in document.pages[1].text
        assert document.pages[0].word_count == 3

    def test_text_joins_pages_with_paragraph_breaks(self, loader):
        document = loader.load_bytes(make_pdf("Alpha", "Beta"), "paper.pdf")

        assert document.text == document.pages[0].text + "\n\n" + document.pages[1].text + "\n\n"
        assert document.text.index("Alpha") < document.text.index("Beta")

    def test_extract_text(self, loader):
        text = loader.extract_text(make_pdf("Hello world"))
        assert "Hello world" in text
        assert text.endswith("\n\n")

    def test_empty_bytes(self, loader):
        with pytest.raises(PdfParseError, match="empty"):
            loader.load_bytes(b"", "empty.pdf")

    def test_malformed_bytes(self, loader):
        with pytest.raises(PdfParseError):
            loader.load_bytes(b"this is not a pdf at all", "broken.pdf")

    def test_encrypted_pdf(self, loader):
        data = make_pdf(
            "Secret",
            encryption=fitz.PDF_ENCRYPT_AES_256,
            owner_pw="owner",
            user_pw="user"
        )
        with pytest.raises(PdfParseError, match="password"):
            loader.load_bytes(data, "locked.pdf")

    def test_load_file(self, loader, tmp_path):
        path = tmp_path / "notes.pdf"
        path.write_bytes(make_pdf("From disk"))

        document = loader.load_file(str(path))

        assert document.filename == "notes.pdf"
        assert "From disk" in document.text

    def test_load_missing_file(self, loader, tmp_path):
        with pytest.raises(PdfParseError):
            loader.load_file(str(tmp_path / "missing.pdf"))
