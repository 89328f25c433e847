"""Rule-based analysis used when AI analysis is unavailable.

Two regimes:
- unreadable: the text itself says the file could not be read, so the
  analysis explains that nothing could be analyzed.
- degraded: text was extracted but the AI step failed, so the analysis
  reports the word count and asks for manual review.
"""

import re

from legalyze.schemas.analysis import Analysis, Risk

UNREADABLE_PATTERN = re.compile(
    r"failed to load pdf|no readable text|unreadable|corrupt|corrupted|encrypted|obfuscat",
    re.IGNORECASE,
)

UNREADABLE_SUMMARY = (
    "This document appears to be a highly obfuscated or encrypted PDF file. "
    "It contains a lot of unreadable characters and symbols, making it impossible "
    "to extract any meaningful information. Without the ability to decrypt or "
    "properly render the content, a comprehensive analysis of its legal implications "
    "is not possible. Therefore, I am unable to provide a summary, key points, or "
    "risk flags based on the provided input. It is crucial to have a clear and "
    "readable document for accurate legal analysis."
)

UNREADABLE_KEY_POINTS = [
    "The document is unreadable and likely encrypted or corrupted.",
    "No meaningful text or content can be extracted for analysis.",
    "Legal analysis requires a clear and decipherable document.",
    "Summary, key points, and risk flags cannot be generated from the current input.",
]

DEGRADED_KEY_POINTS = [
    "Text extraction successful",
    "AI analysis incomplete",
    "Human review suggested",
]

DEGRADED_QUESTIONS = [
    "What is the main purpose of this document?",
    "Are there any deadlines or important dates?",
]


def is_unreadable(text: str) -> bool:
    """Whether the text matches the unreadable-document signature."""
    return bool(UNREADABLE_PATTERN.search(text or ""))


def count_words(text: str) -> int:
    """Number of whitespace-delimited tokens, 0 for blank text."""
    return len(text.split()) if text and text.strip() else 0


def build_unreadable_analysis() -> Analysis:
    """Fixed analysis for a document that could not be read."""
    return Analysis(
        summary=UNREADABLE_SUMMARY,
        key_points=list(UNREADABLE_KEY_POINTS),
        risks=[],
        questions=[],
    )


def build_fallback_analysis(text: str) -> Analysis:
    """Deterministic analysis of extracted text. Pure and never fails.

    Args:
        text: Extracted document text

    Returns:
        Analysis for the unreadable or the degraded regime
    """
    if is_unreadable(text):
        return build_unreadable_analysis()

    word_count = count_words(text)
    return Analysis(
        summary=(
            f"Document contains {word_count} words of text. "
            "Manual review recommended for detailed analysis."
        ),
        key_points=list(DEGRADED_KEY_POINTS),
        risks=[
            Risk(
                category="Processing",
                severity="low",
                description="Automatic analysis was incomplete",
                excerpt="Analysis required manual review",
            )
        ],
        questions=list(DEGRADED_QUESTIONS),
    )
