"""Repositories for the records derived from an analysis run.

Rows are append-only: re-analysis inserts new rows next to the old ones.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from legalyze.database.models import DocumentQuestion, RiskFlag, Summary
from legalyze.repositories.base_repository import BaseRepository
from legalyze.utils.logging import get_logger

LOGGER = get_logger(__name__)


class SummaryRepository(BaseRepository[Summary]):
    """Repository for Summary records."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Summary)

    async def create_summary(
        self,
        document_id: UUID,
        plain_summary: str,
        key_points: List[str],
        confidence: float,
    ) -> Summary:
        return await self.create(
            document_id=document_id,
            plain_summary=plain_summary,
            key_points=list(key_points),
            confidence=confidence,
        )

    async def get_latest_for_document(self, document_id: UUID) -> Optional[Summary]:
        """Most recent summary of a document, if any run produced one."""
        result = await self.session.execute(
            select(Summary)
            .where(Summary.document_id == document_id)
            .order_by(Summary.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()


class RiskFlagRepository(BaseRepository[RiskFlag]):
    """Repository for RiskFlag records."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, RiskFlag)

    async def create_flags(self, rows: Sequence[Dict[str, Any]]) -> List[RiskFlag]:
        return await self.create_many(rows)

    async def list_for_document(
        self, document_id: UUID, since: Optional[datetime] = None
    ) -> List[RiskFlag]:
        """Risk flags of a document, optionally only those created at or after ``since``."""
        query = select(RiskFlag).where(RiskFlag.document_id == document_id)
        if since is not None:
            query = query.where(RiskFlag.created_at >= since)
        result = await self.session.execute(query.order_by(RiskFlag.created_at))
        return list(result.scalars().all())


class DocumentQuestionRepository(BaseRepository[DocumentQuestion]):
    """Repository for DocumentQuestion records."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, DocumentQuestion)

    async def create_questions(self, rows: Sequence[Dict[str, Any]]) -> List[DocumentQuestion]:
        return await self.create_many(rows)

    async def list_for_document(
        self, document_id: UUID, since: Optional[datetime] = None
    ) -> List[DocumentQuestion]:
        query = select(DocumentQuestion).where(DocumentQuestion.document_id == document_id)
        if since is not None:
            query = query.where(DocumentQuestion.created_at >= since)
        result = await self.session.execute(query.order_by(DocumentQuestion.created_at))
        return list(result.scalars().all())
