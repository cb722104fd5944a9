"""Document data models."""
from dataclasses import dataclass
from typing import List

PAGE_SEPARATOR = "\n\n"


@dataclass
class Page:
    """Represents a single page from a document."""
    page_number: int
    text: str
    word_count: int


@dataclass
class Document:
    """Represents a loaded PDF document."""
    filename: str
    pages: List[Page]
    total_pages: int

    @property
    def text(self) -> str:
        """Full document text in page order, each page closed by a paragraph break."""
        return "".join(page.text + PAGE_SEPARATOR for page in self.pages)
