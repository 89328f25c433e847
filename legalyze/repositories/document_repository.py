from typing import List, Optional
from uuid import UUID
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from legalyze.database.models import Document, ProcessingStatus
from legalyze.repositories.base_repository import BaseRepository
from legalyze.utils.logging import get_logger

LOGGER = get_logger(__name__)


class DocumentRepository(BaseRepository[Document]):
    """Repository for managing Document records.

    The analysis pipeline only reads a document at the start of a run and
    writes the four processing fields: ``extracted_text``, ``processed``,
    ``processing_status`` and ``error_message``.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(session, Document)

    async def create_document(
        self,
        filename: str,
        storage_path: str,
        owner_id: Optional[UUID] = None,
        mime_type: str = "application/pdf",
        size_bytes: Optional[int] = None,
    ) -> Document:
        """Create a new, not yet analyzed, document record.

        Args:
            filename: Original file name
            storage_path: Object path inside the storage bucket
            owner_id: ID of the owning user, if known
            mime_type: MIME type of the document
            size_bytes: File size in bytes

        Returns:
            Created Document record
        """
        return await self.create(
            owner_id=owner_id,
            filename=filename,
            storage_path=storage_path,
            mime_type=mime_type,
            size_bytes=size_bytes,
            processed=False,
            processing_status=ProcessingStatus.PENDING,
            uploaded_at=datetime.now(timezone.utc),
            updated_at=datetime.now(timezone.utc),
        )

    async def list_documents(
        self,
        owner_id: Optional[UUID] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Document]:
        """List documents, newest upload first."""
        filters = {"owner_id": owner_id} if owner_id else None
        return await self.get_all(
            skip=offset,
            limit=limit,
            filters=filters,
            order_by=[Document.uploaded_at.desc()],
        )

    async def record_extraction(
        self,
        document_id: UUID,
        extracted_text: str,
        is_corrupted: bool,
    ) -> Optional[Document]:
        """Persist extraction output as soon as it is known.

        Args:
            document_id: Document ID
            extracted_text: Text produced by the extractor
            is_corrupted: Whether the extractor flagged the file as unreadable

        Returns:
            The updated document, or None if it no longer exists
        """
        status = ProcessingStatus.CORRUPTED if is_corrupted else ProcessingStatus.EXTRACTED
        LOGGER.info(
            f"Recording extraction for document {document_id}",
            extra={"processing_status": status, "text_length": len(extracted_text)}
        )
        return await self.update(
            document_id,
            extracted_text=extracted_text,
            processing_status=status,
        )

    async def update_processing(self, document_id: UUID, **fields) -> bool:
        """Update processing fields of a document.

        Returns:
            True if updated, False if not found
        """
        return await self.update(document_id, **fields) is not None
