"""Document service for upload and read-back operations."""

import time
from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from legalyze.core.config import settings
from legalyze.core.exceptions import AppError, ValidationError
from legalyze.repositories.analysis_repository import (
    DocumentQuestionRepository,
    RiskFlagRepository,
    SummaryRepository,
)
from legalyze.repositories.document_repository import DocumentRepository
from legalyze.schemas.analysis import SEVERITY_RANK
from legalyze.schemas.documents import (
    DocumentDetailResponse,
    DocumentListResponse,
    DocumentResponse,
    QuestionResponse,
    RiskFlagResponse,
    SummaryResponse,
)
from legalyze.services.base_service import BaseService
from legalyze.services.storage_service import StorageService
from legalyze.utils.logging import get_logger

LOGGER = get_logger(__name__)

PDF_MIME_TYPE = "application/pdf"
PRIORITY_RANK = {"high": 0, "medium": 1}


def build_storage_path(filename: str, owner_id: Optional[UUID] = None) -> str:
    """Object path for a new upload: ``{owner}/{epoch_ms}_{filename}``."""
    owner = str(owner_id) if owner_id else "anonymous"
    return f"{owner}/{int(time.time() * 1000)}_{filename}"


class DocumentService(BaseService):
    """Service for document management operations.

    Handles uploads, listing and the detail view that combines a document
    with its analysis records.
    """

    def __init__(
        self,
        session: AsyncSession,
        storage_service: Optional[StorageService] = None,
        max_upload_bytes: Optional[int] = None,
    ):
        self.doc_repo = DocumentRepository(session)
        super().__init__(self.doc_repo)
        self.session = session
        self.summary_repo = SummaryRepository(session)
        self.risk_repo = RiskFlagRepository(session)
        self.question_repo = DocumentQuestionRepository(session)
        self.storage_service = storage_service or StorageService()
        self.max_upload_bytes = max_upload_bytes or settings.pipeline.max_upload_bytes

    def validate(self, *args, **kwargs):
        if kwargs.get("action") != "upload_document":
            return

        filename = kwargs.get("filename")
        content = kwargs.get("content") or b""
        content_type = kwargs.get("content_type")

        if not filename:
            raise ValidationError("File has no filename")
        if content_type != PDF_MIME_TYPE:
            raise ValidationError(f"Only PDF files are supported (got {content_type or 'unknown'})")
        if not content:
            raise ValidationError("File is empty")
        if len(content) > self.max_upload_bytes:
            raise ValidationError(
                f"File exceeds the {self.max_upload_bytes // (1024 * 1024)}MB upload limit"
            )

    async def run(self, *args, **kwargs) -> Any:
        """Route to the handler for ``action``."""
        action = kwargs.get("action")

        if action == "upload_document":
            return await self._upload_document_logic(
                kwargs["content"],
                kwargs["filename"],
                kwargs.get("owner_id"),
            )
        raise AppError(f"Unknown action: {action}")

    async def upload_document(
        self,
        content: bytes,
        filename: str,
        content_type: Optional[str],
        owner_id: Optional[UUID] = None,
    ) -> DocumentResponse:
        """Store a PDF and create its document record.

        Raises:
            ValidationError: If the file is not an acceptable PDF
            StorageError: If the upload to storage fails
            ConfigurationError: If storage is not configured
        """
        return await self.execute(
            action="upload_document",
            content=content,
            filename=filename,
            content_type=content_type,
            owner_id=owner_id,
        )

    async def _upload_document_logic(
        self,
        content: bytes,
        filename: str,
        owner_id: Optional[UUID],
    ) -> DocumentResponse:
        storage_path = build_storage_path(filename, owner_id)

        await self.storage_service.upload_file(content, storage_path, content_type=PDF_MIME_TYPE)
        LOGGER.info(
            f"File uploaded to storage: filename={filename}, path={storage_path}"
        )

        try:
            document = await self.doc_repo.create_document(
                filename=filename,
                storage_path=storage_path,
                owner_id=owner_id,
                mime_type=PDF_MIME_TYPE,
                size_bytes=len(content),
            )
        except Exception:
            await self.session.rollback()
            raise

        LOGGER.info(
            f"Document created: document_id={document.id}, filename={filename}",
            extra={"document_id": str(document.id), "size_bytes": len(content)}
        )
        return DocumentResponse.model_validate(document)

    async def list_documents(
        self,
        owner_id: Optional[UUID] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> DocumentListResponse:
        documents = await self.doc_repo.list_documents(owner_id=owner_id, limit=limit, offset=offset)
        total = await self.doc_repo.count(filters={"owner_id": owner_id} if owner_id else None)
        return DocumentListResponse(
            documents=[DocumentResponse.model_validate(doc) for doc in documents],
            total=total,
            limit=limit,
            offset=offset,
        )

    async def get_document_detail(self, document_id: UUID) -> Optional[DocumentDetailResponse]:
        """Document with its latest summary and the risk flags and questions of that run.

        Rows created before the latest summary belong to earlier runs and are
        left out. Risk flags are ordered critical to low and questions high
        before medium, each keeping insertion order within a rank.

        Returns:
            The detail view, or None if the document does not exist
        """
        document = await self.doc_repo.get_by_id(document_id)
        if document is None:
            return None

        summary = await self.summary_repo.get_latest_for_document(document_id)
        since = summary.created_at if summary else None
        risk_flags = await self.risk_repo.list_for_document(document_id, since=since)
        questions = await self.question_repo.list_for_document(document_id, since=since)

        return DocumentDetailResponse(
            document=DocumentResponse.model_validate(document),
            summary=SummaryResponse.model_validate(summary) if summary else None,
            risk_flags=[
                RiskFlagResponse.model_validate(flag)
                for flag in sort_risk_flags(risk_flags)
            ],
            questions=[
                QuestionResponse.model_validate(question)
                for question in sort_questions(questions)
            ],
        )


def sort_risk_flags(flags: List[Any]) -> List[Any]:
    return sorted(flags, key=lambda flag: SEVERITY_RANK.get(flag.severity, len(SEVERITY_RANK)))


def sort_questions(questions: List[Any]) -> List[Any]:
    return sorted(questions, key=lambda q: PRIORITY_RANK.get(q.priority, len(PRIORITY_RANK)))
