"""Pydantic schemas for document analysis.

``Analysis`` is the transient result produced either by the AI analyzer or
by the fallback analyzer. It is never stored as-is; the result store projects
it into summary, risk flag and question rows.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from legalyze.utils.logging import get_logger

LOGGER = get_logger(__name__)


class RiskSeverity(str, Enum):
    """Allowed severities of a risk flag."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


SEVERITY_RANK = {
    RiskSeverity.CRITICAL.value: 0,
    RiskSeverity.HIGH.value: 1,
    RiskSeverity.MEDIUM.value: 2,
    RiskSeverity.LOW.value: 3,
}


class Risk(BaseModel):
    """A risk as reported by an analyzer; absent fields stay ``None``."""

    model_config = ConfigDict(extra="ignore")

    category: Optional[str] = None
    severity: Optional[str] = None
    description: Optional[str] = None
    excerpt: Optional[str] = None

    @field_validator("severity", mode="before")
    @classmethod
    def normalize_severity(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValueError("severity must be a string")
        normalized = value.strip().lower()
        if normalized not in SEVERITY_RANK:
            LOGGER.warning(f"Dropping unknown risk severity '{value}'")
            return None
        return normalized


class Analysis(BaseModel):
    """Structured legal analysis of one document."""

    model_config = ConfigDict(extra="ignore")

    summary: Optional[str] = None
    key_points: List[str] = Field(default_factory=list)
    risks: List[Risk] = Field(default_factory=list)
    questions: List[str] = Field(default_factory=list)

    @field_validator("key_points", "risks", "questions", mode="before")
    @classmethod
    def none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class AnalysisSource(str, Enum):
    """Where the analysis of a run came from."""
    AI = "ai"
    FALLBACK = "fallback"
    CORRUPTED = "corrupted"


class AIResult(BaseModel):
    """Analysis produced by the generative-text backend."""
    source: Literal[AnalysisSource.AI] = AnalysisSource.AI
    analysis: Analysis


class FallbackResult(BaseModel):
    """Rule-based analysis substituted after an AI failure."""
    source: Literal[AnalysisSource.FALLBACK] = AnalysisSource.FALLBACK
    analysis: Analysis
    reason: str


class CorruptedResult(BaseModel):
    """Fixed unreadable analysis for files that failed to parse."""
    source: Literal[AnalysisSource.CORRUPTED] = AnalysisSource.CORRUPTED
    analysis: Analysis


AnalysisOutcome = Union[AIResult, FallbackResult, CorruptedResult]


class StoredSummary(BaseModel):
    """Summary row as written by the result store."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    document_id: UUID
    plain_summary: str
    key_points: List[str]
    confidence: float
    created_at: Optional[datetime] = None


class AnalysisRunResult(BaseModel):
    """Outcome of one pipeline invocation.

    Exactly one of three shapes is produced:
    success, corrupted (``success=False`` with ``message``) or fatal
    (``success=False`` with ``error`` and a 500 status code).
    """

    success: bool
    summary: Optional[StoredSummary] = None
    analysis: Optional[Analysis] = None
    message: Optional[str] = None
    extracted_text: Optional[str] = None
    error: Optional[str] = None
    status_code: int = 200

    def to_response(self) -> Dict[str, Any]:
        """Serialize to the JSON envelope returned to callers."""
        if self.error is not None:
            return {"success": False, "error": self.error}
        if not self.success:
            return {
                "success": False,
                "message": self.message,
                "extracted_text": self.extracted_text,
            }
        return {
            "success": True,
            "summary": self.summary.model_dump(mode="json") if self.summary else None,
            "analysis": self.analysis.model_dump(mode="json") if self.analysis else None,
        }
