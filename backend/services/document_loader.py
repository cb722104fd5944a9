"""Document loading service for PDF processing."""
import logging
import os
from typing import List
import fitz  # PyMuPDF

from models.document import Document, Page

logger = logging.getLogger(__name__)


class PdfParseError(Exception):
    """Raised when a PDF cannot be opened or its text cannot be extracted."""


class DocumentLoader:
    """Loads and extracts text from PDF files."""

    def load_file(self, filepath: str) -> Document:
        """
        Load a PDF from disk.

        Args:
            filepath: Path to the PDF file

        Returns:
            Document object with extracted text

        Raises:
            PdfParseError: If the file is missing, unreadable or not a valid PDF
        """
        try:
            with open(filepath, "rb") as f:
                data = f.read()
        except OSError as e:
            raise PdfParseError(f"Could not read {filepath}: {e}") from e

        return self.load_bytes(data, os.path.basename(filepath))

    def load_bytes(self, data: bytes, filename: str) -> Document:
        """
        Extract text page-by-page from raw PDF bytes.

        Args:
            data: Raw file contents
            filename: Name of the uploaded file

        Returns:
            Document object with one Page per PDF page

        Raises:
            PdfParseError: If the bytes are empty, malformed or encrypted
        """
        if not data:
            raise PdfParseError(f"{filename} is empty")

        try:
            pdf_document = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            logger.error(f"Failed to open PDF {filename}: {str(e)}")
            raise PdfParseError(f"{filename} is not a readable PDF: {e}") from e

        try:
            if pdf_document.needs_pass:
                raise PdfParseError(f"{filename} is password protected")
            if len(pdf_document) == 0:
                raise PdfParseError(f"{filename} has no pages")

            pages: List[Page] = []
            for page_num in range(len(pdf_document)):
                text = pdf_document[page_num].get_text()
                pages.append(Page(
                    page_number=page_num + 1,  # 1-indexed
                    text=text,
                    word_count=len(text.split())
                ))
        except PdfParseError:
            raise
        except Exception as e:
            logger.error(f"Failed to extract text from {filename}: {str(e)}")
            raise PdfParseError(f"Could not extract text from {filename}: {e}") from e
        finally:
            pdf_document.close()

        logger.info(f"Loaded {filename}: {len(pages)} pages")
        return Document(filename=filename, pages=pages, total_pages=len(pages))

    def extract_text(self, data: bytes, filename: str = "document.pdf") -> str:
        """Full text of a PDF, pages in order, separated by paragraph breaks."""
        return self.load_bytes(data, filename).text
