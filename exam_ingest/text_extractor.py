"""
Text Extractor
==============
Recovers plain text and document metadata from PDF bytes using PyMuPDF (fitz).
This is the only I/O boundary in front of the parsing pipeline; OCR is not
attempted, so image-only scans come back with empty text.
"""

from __future__ import annotations

import logging
from typing import Optional

import fitz  # PyMuPDF

from .models import DocumentInfo, ExtractedDocument

logger = logging.getLogger(__name__)


class TextExtractor:
    """
    Handles PDF ingestion and plain-text extraction.

    Extracts:
        - Page text in reading order, pages joined by newlines
        - Title / Author from the document metadata

    page_range is 1-indexed and inclusive; it is clamped to the document.
    """

    def __init__(self, page_range: Optional[tuple[int, int]] = None):
        self.page_range = page_range

    def __call__(self, buffer: bytes) -> ExtractedDocument:
        return self.extract(buffer)

    def extract(self, buffer: bytes) -> ExtractedDocument:
        """
        Extract text from an in-memory PDF.

        Args:
            buffer: Raw PDF bytes.

        Returns:
            ExtractedDocument with the joined page text and metadata.

        Raises:
            RuntimeError: If the buffer cannot be opened as a PDF.
        """
        try:
            doc = fitz.open(stream=buffer, filetype="pdf")
        except Exception as e:
            raise RuntimeError(f"Cannot open PDF: {e}") from e

        with doc:
            total_pages = doc.page_count
            start_page = 1
            end_page = total_pages
            if self.page_range:
                start_page = max(1, self.page_range[0])
                end_page = min(total_pages, self.page_range[1])

            logger.info(
                f"Extracting text (pages {start_page} to {end_page} "
                f"of {total_pages})"
            )

            pages = []
            for page_idx in range(start_page - 1, end_page):
                pages.append(doc[page_idx].get_text("text"))

            metadata = doc.metadata or {}
            info = DocumentInfo(
                title=metadata.get("title") or None,
                author=metadata.get("author") or None,
            )

        text = "\n".join(pages)
        logger.info(f"Extracted {len(text)} characters from {len(pages)} pages")
        return ExtractedDocument(text=text, info=info, page_count=total_pages)
