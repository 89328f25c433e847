"""Tests for PDF text extraction."""

import pytest

from legalyze.services.analysis.text_extractor import (
    CORRUPTED_PDF_TEXT,
    PDFTextExtractor,
)


@pytest.fixture
def extractor() -> PDFTextExtractor:
    return PDFTextExtractor()


def test_extracts_text_from_valid_pdf(extractor, sample_pdf_bytes):
    result = extractor.extract(sample_pdf_bytes)

    assert result.is_corrupted is False
    assert result.page_count == 1
    assert "hello world foo" in result.text


def test_unparseable_bytes_are_corrupted(extractor, corrupted_pdf_bytes):
    result = extractor.extract(corrupted_pdf_bytes)

    assert result.is_corrupted is True
    assert result.text == CORRUPTED_PDF_TEXT
    assert result.page_count == 0


def test_empty_bytes_are_corrupted(extractor):
    result = extractor.extract(b"")

    assert result.is_corrupted is True
    assert result.text == CORRUPTED_PDF_TEXT


def test_page_without_text_gets_placeholder(extractor, pdf_builder):
    result = extractor.extract(pdf_builder(["first page", None]))

    assert result.is_corrupted is False
    assert result.page_count == 2
    lines = result.text.split("\n")
    assert lines[0] == "first page"
    assert lines[-1] == "[Page 2: no readable text]"


@pytest.mark.asyncio
async def test_extract_async_matches_sync(extractor, sample_pdf_bytes):
    result = await extractor.extract_async(sample_pdf_bytes)

    assert result == extractor.extract(sample_pdf_bytes)
