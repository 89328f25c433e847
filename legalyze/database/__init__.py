"""Database module for SQLAlchemy models."""

from legalyze.database.models import (
    Document,
    DocumentQuestion,
    ProcessingStatus,
    RiskFlag,
    Summary,
)

__all__ = [
    "Document",
    "DocumentQuestion",
    "ProcessingStatus",
    "RiskFlag",
    "Summary",
]
