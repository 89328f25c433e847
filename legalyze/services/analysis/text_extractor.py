"""PDF text extraction using pdfplumber.

Extraction never raises for malformed input. A file that cannot be opened as
a PDF yields a fixed sentinel text with ``is_corrupted=True``; that flag is
the only thing deciding whether AI analysis is attempted at all.
"""

import asyncio
from dataclasses import dataclass
from io import BytesIO

import pdfplumber

from legalyze.utils.logging import get_logger

LOGGER = get_logger(__name__)

CORRUPTED_PDF_TEXT = "Failed to load PDF file."
EMPTY_PAGE_TEXT = "[Page {page_number}: no readable text]"


@dataclass(frozen=True)
class ExtractionResult:
    """Text extracted from a document plus its corruption signal.

    Attributes:
        text: Best-effort plain text, one block per page
        is_corrupted: True when the bytes could not be parsed as a PDF
        page_count: Number of pages parsed (0 when corrupted)
    """

    text: str
    is_corrupted: bool
    page_count: int = 0


class PDFTextExtractor:
    """Turns raw PDF bytes into text and a corruption flag."""

    def extract(self, pdf_bytes: bytes) -> ExtractionResult:
        """Extract text from PDF bytes.

        Args:
            pdf_bytes: Raw file content

        Returns:
            ExtractionResult; corrupted when parsing fails
        """
        try:
            with pdfplumber.open(BytesIO(pdf_bytes)) as pdf:
                page_texts = [
                    self._page_text(page, page_number)
                    for page_number, page in enumerate(pdf.pages, start=1)
                ]
        except Exception as e:
            LOGGER.warning(
                f"PDF could not be parsed: {e}",
                extra={"size_bytes": len(pdf_bytes), "error_type": type(e).__name__}
            )
            return ExtractionResult(text=CORRUPTED_PDF_TEXT, is_corrupted=True)

        LOGGER.info(
            f"Extracted text from {len(page_texts)} pages",
            extra={"page_count": len(page_texts)}
        )
        return ExtractionResult(
            text="\n".join(page_texts),
            is_corrupted=False,
            page_count=len(page_texts),
        )

    async def extract_async(self, pdf_bytes: bytes) -> ExtractionResult:
        """Run ``extract`` in a worker thread to keep the event loop free."""
        return await asyncio.to_thread(self.extract, pdf_bytes)

    def _page_text(self, page, page_number: int) -> str:
        """Text of one page, or a placeholder when the page has no text layer.

        Args:
            page: pdfplumber page object
            page_number: 1-indexed page number
        """
        try:
            text = page.extract_text() or ""
        except Exception as e:
            LOGGER.debug(f"Text extraction failed on page {page_number}: {e}")
            text = ""

        text = text.strip()
        if not text:
            return EMPTY_PAGE_TEXT.format(page_number=page_number)
        return text
