"""Persistence of an analysis as summary, risk flag and question records.

The four writes are independent: a failed write is logged, rolled back and
skipped so that the remaining writes still run. A degraded persisted record
is preferred over none.
"""

from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from legalyze.database.models import ProcessingStatus
from legalyze.repositories.analysis_repository import (
    DocumentQuestionRepository,
    RiskFlagRepository,
    SummaryRepository,
)
from legalyze.repositories.document_repository import DocumentRepository
from legalyze.schemas.analysis import Analysis, Risk, RiskSeverity, StoredSummary
from legalyze.utils.logging import get_logger

LOGGER = get_logger(__name__)

HIGH_CONFIDENCE = 0.9
LOW_CONFIDENCE = 0.3
CORRUPTED_CONFIDENCE = 0.1

DEFAULT_SUMMARY_TEXT = "No summary"
DEFAULT_RISK_CATEGORY = "general"
DEFAULT_RISK_SEVERITY = RiskSeverity.MEDIUM.value

HIGH_PRIORITY_QUESTIONS = 3


def has_summary(analysis: Analysis) -> bool:
    return bool(analysis.summary and analysis.summary.strip())


def summary_confidence(analysis: Analysis) -> float:
    """0.9 when the analysis carries a summary, 0.3 otherwise."""
    return HIGH_CONFIDENCE if has_summary(analysis) else LOW_CONFIDENCE


def question_priority(position: int) -> str:
    """Priority derived from list position: the first three are high."""
    return "high" if position < HIGH_PRIORITY_QUESTIONS else "medium"


def risk_row(document_id: UUID, risk: Risk) -> Dict[str, Any]:
    return {
        "document_id": document_id,
        "category": risk.category or DEFAULT_RISK_CATEGORY,
        "severity": risk.severity or DEFAULT_RISK_SEVERITY,
        "description": risk.description or "",
        "excerpt": risk.excerpt or None,
    }


def question_rows(document_id: UUID, questions: List[str]) -> List[Dict[str, Any]]:
    return [
        {
            "document_id": document_id,
            "question_text": question,
            "priority": question_priority(position),
        }
        for position, question in enumerate(questions)
    ]


class AnalysisResultStore:
    """Writes one analysis run to the database."""

    def __init__(
        self,
        session: AsyncSession,
        document_repository: Optional[DocumentRepository] = None,
        summary_repository: Optional[SummaryRepository] = None,
        risk_flag_repository: Optional[RiskFlagRepository] = None,
        question_repository: Optional[DocumentQuestionRepository] = None,
    ):
        self.session = session
        self.documents = document_repository or DocumentRepository(session)
        self.summaries = summary_repository or SummaryRepository(session)
        self.risk_flags = risk_flag_repository or RiskFlagRepository(session)
        self.questions = question_repository or DocumentQuestionRepository(session)

    async def persist(
        self,
        document_id: UUID,
        analysis: Analysis,
        *,
        confidence: Optional[float] = None,
        document_updates: Optional[Dict[str, Any]] = None,
    ) -> Optional[StoredSummary]:
        """Persist an analysis for a document.

        Args:
            document_id: Document the analysis belongs to
            analysis: Analysis from any source
            confidence: Overrides the summary-derived confidence
            document_updates: Overrides the final document update; defaults to
                marking the document processed and analyzed

        Returns:
            The inserted summary, or None if that insert failed
        """
        stored_summary = await self._insert_summary(
            document_id,
            analysis,
            confidence if confidence is not None else summary_confidence(analysis),
        )

        if analysis.risks:
            await self._insert_risks(document_id, analysis.risks)

        if analysis.questions:
            await self._insert_questions(document_id, analysis.questions)

        updates = document_updates if document_updates is not None else {
            "processed": True,
            "processing_status": ProcessingStatus.ANALYZED,
            "error_message": None,
        }
        await self._update_document(document_id, updates)

        LOGGER.info(
            f"Persisted analysis for document {document_id}",
            extra={
                "summary_stored": stored_summary is not None,
                "risk_count": len(analysis.risks),
                "question_count": len(analysis.questions),
                "processing_status": updates.get("processing_status"),
            }
        )
        return stored_summary

    async def _insert_summary(
        self, document_id: UUID, analysis: Analysis, confidence: float
    ) -> Optional[StoredSummary]:
        try:
            summary = await self.summaries.create_summary(
                document_id=document_id,
                plain_summary=analysis.summary if has_summary(analysis) else DEFAULT_SUMMARY_TEXT,
                key_points=analysis.key_points,
                confidence=confidence,
            )
            return StoredSummary.model_validate(summary)
        except SQLAlchemyError:
            LOGGER.error(f"Failed to insert summary for document {document_id}", exc_info=True)
            await self._rollback()
            return None

    async def _insert_risks(self, document_id: UUID, risks: List[Risk]) -> None:
        try:
            await self.risk_flags.create_flags([risk_row(document_id, risk) for risk in risks])
        except SQLAlchemyError:
            LOGGER.error(
                f"Failed to insert {len(risks)} risk flags for document {document_id}",
                exc_info=True
            )
            await self._rollback()

    async def _insert_questions(self, document_id: UUID, questions: List[str]) -> None:
        try:
            await self.questions.create_questions(question_rows(document_id, questions))
        except SQLAlchemyError:
            LOGGER.error(
                f"Failed to insert {len(questions)} questions for document {document_id}",
                exc_info=True
            )
            await self._rollback()

    async def _update_document(self, document_id: UUID, updates: Dict[str, Any]) -> None:
        try:
            if not await self.documents.update_processing(document_id, **updates):
                LOGGER.warning(f"Document {document_id} disappeared before its status update")
        except SQLAlchemyError:
            LOGGER.error(f"Failed to update status of document {document_id}", exc_info=True)
            await self._rollback()

    async def _rollback(self) -> None:
        try:
            await self.session.rollback()
        except SQLAlchemyError:
            LOGGER.error("Session rollback failed", exc_info=True)
