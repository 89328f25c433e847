"""Document analysis pipeline.

One run moves a document through
``Start -> Loaded -> Extracted -> {Corrupted | AI-Invoked}`` and ends in one
of three terminal states: analyzed by AI, analyzed by fallback, or corrupted.
Fatal errors (missing document, storage failure, missing configuration,
database failure while loading or recording extraction) abort the run and
are reported as a failure envelope instead of being raised.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional, Union
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from legalyze.core.config import settings
from legalyze.core.exceptions import (
    APIClientError,
    AppError,
    DatabaseError,
    DocumentNotFoundError,
    ResponseSchemaError,
)
from legalyze.database.models import ProcessingStatus
from legalyze.repositories.document_repository import DocumentRepository
from legalyze.schemas.analysis import (
    AIResult,
    AnalysisOutcome,
    AnalysisRunResult,
    CorruptedResult,
    FallbackResult,
    StoredSummary,
)
from legalyze.services.analysis.ai_analyzer import DocumentAIAnalyzer, create_document_analyzer
from legalyze.services.analysis.fallback_analyzer import (
    build_fallback_analysis,
    build_unreadable_analysis,
)
from legalyze.services.analysis.locks import DocumentLockRegistry, document_locks
from legalyze.services.analysis.result_store import (
    CORRUPTED_CONFIDENCE,
    LOW_CONFIDENCE,
    AnalysisResultStore,
)
from legalyze.services.analysis.text_extractor import ExtractionResult, PDFTextExtractor
from legalyze.services.base_service import BaseService
from legalyze.services.storage_service import StorageService
from legalyze.utils.logging import get_logger

LOGGER = get_logger(__name__)

CORRUPTED_MESSAGE = "Corrupted PDF"
FATAL_STATUS_CODE = 500


class DocumentAnalysisOrchestrator(BaseService):
    """Runs the analysis pipeline for one document at a time."""

    def __init__(
        self,
        session: AsyncSession,
        document_repository: Optional[DocumentRepository] = None,
        storage_service: Optional[StorageService] = None,
        extractor: Optional[PDFTextExtractor] = None,
        analyzer_factory: Optional[Callable[[], DocumentAIAnalyzer]] = None,
        result_store: Optional[AnalysisResultStore] = None,
        lock_registry: Optional[DocumentLockRegistry] = None,
        serialize_runs: Optional[bool] = None,
    ):
        """Initialize the orchestrator.

        Args:
            session: Database session shared by every step of a run
            document_repository: Document reads and extraction updates
            storage_service: Blob store holding the uploaded files
            extractor: PDF text extractor
            analyzer_factory: Builds the AI analyzer; called only when a run
                reaches the AI step, so missing credentials surface there
            result_store: Persists the final analysis
            lock_registry: Registry used to serialize runs per document
            serialize_runs: Overrides SERIALIZE_DOCUMENT_RUNS
        """
        document_repository = document_repository or DocumentRepository(session)
        super().__init__(document_repository)
        self.session = session
        self.storage = storage_service or StorageService()
        self.extractor = extractor or PDFTextExtractor()
        self.analyzer_factory = analyzer_factory or create_document_analyzer
        self.result_store = result_store or AnalysisResultStore(
            session, document_repository=document_repository
        )

        if serialize_runs is None:
            serialize_runs = settings.pipeline.serialize_document_runs
        if lock_registry is None:
            lock_registry = document_locks
        self.lock_registry = lock_registry if serialize_runs else None

    async def analyze(self, document_id: Union[str, UUID, None]) -> AnalysisRunResult:
        """Analyze a document and report the outcome.

        Never raises for pipeline failures; task cancellation still propagates.

        Args:
            document_id: ID of the document to analyze

        Returns:
            AnalysisRunResult in its success, corrupted or fatal shape
        """
        try:
            if self.lock_registry is None:
                return await self.execute(document_id)
            async with self.lock_registry.hold(str(document_id)):
                return await self.execute(document_id)

        except AppError as e:
            LOGGER.error(
                f"Analysis failed for document {document_id}: {e.message}",
                extra={"document_id": str(document_id), "error_type": type(e).__name__}
            )
            return AnalysisRunResult(
                success=False, error=e.message, status_code=FATAL_STATUS_CODE
            )

    def validate(self, document_id: Any) -> None:
        if not document_id:
            raise DocumentNotFoundError("Document ID is required")
        try:
            UUID(str(document_id))
        except ValueError as e:
            raise DocumentNotFoundError(
                f"Document not found: {document_id}", original_error=e
            ) from e

    async def run(self, document_id: Any) -> AnalysisRunResult:
        document_id = UUID(str(document_id))

        storage_path = await self._load(document_id)
        extraction = await self._extract(document_id, storage_path)

        outcome = await self._obtain_analysis(document_id, extraction)

        if isinstance(outcome, CorruptedResult):
            persist = self.result_store.persist(
                document_id,
                outcome.analysis,
                confidence=CORRUPTED_CONFIDENCE,
                document_updates={
                    "processed": True,
                    "processing_status": ProcessingStatus.CORRUPTED,
                    "error_message": CORRUPTED_MESSAGE,
                },
            )
        elif isinstance(outcome, FallbackResult):
            persist = self.result_store.persist(
                document_id, outcome.analysis, confidence=LOW_CONFIDENCE
            )
        else:
            persist = self.result_store.persist(document_id, outcome.analysis)

        stored_summary = await self._persist_to_completion(document_id, persist)

        if isinstance(outcome, CorruptedResult):
            LOGGER.info(f"Document {document_id} finished as corrupted")
            return AnalysisRunResult(
                success=False,
                message=CORRUPTED_MESSAGE,
                extracted_text=extraction.text,
            )

        LOGGER.info(
            f"Document {document_id} analyzed",
            extra={"source": outcome.source.value}
        )
        return AnalysisRunResult(
            success=True,
            summary=stored_summary,
            analysis=outcome.analysis,
        )

    async def _persist_to_completion(
        self, document_id: UUID, persist: Awaitable[Optional[StoredSummary]]
    ) -> Optional[StoredSummary]:
        """Run persistence so that cancelling the run cannot interrupt it.

        A cancelled run waits for the writes to finish before the
        cancellation propagates, so the document lock and the session stay
        held until the last write is done.
        """
        persist_task = asyncio.ensure_future(persist)
        try:
            return await asyncio.shield(persist_task)
        except asyncio.CancelledError:
            LOGGER.warning(
                f"Run for document {document_id} cancelled during persistence, finishing writes"
            )
            await persist_task
            raise

    async def _load(self, document_id: UUID) -> str:
        """Fetch the document and return its storage path."""
        try:
            document = await self.repository.get_by_id(document_id)
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to load document {document_id}", original_error=e) from e

        if document is None:
            raise DocumentNotFoundError(f"Document not found: {document_id}")

        storage_path = document.storage_path
        LOGGER.info(
            f"Loaded document {document_id}",
            extra={"storage_path": storage_path, "processed": document.processed}
        )
        return storage_path

    async def _extract(self, document_id: UUID, storage_path: str) -> ExtractionResult:
        """Download and extract the file, then record extraction progress."""
        pdf_bytes = await self.storage.download(storage_path)
        extraction = await self.extractor.extract_async(pdf_bytes)

        try:
            updated = await self.repository.record_extraction(
                document_id, extraction.text, extraction.is_corrupted
            )
        except SQLAlchemyError as e:
            raise DatabaseError(
                f"Failed to record extraction for document {document_id}", original_error=e
            ) from e

        if updated is None:
            raise DocumentNotFoundError(f"Document not found: {document_id}")

        LOGGER.info(
            f"Extracted document {document_id}",
            extra={
                "is_corrupted": extraction.is_corrupted,
                "page_count": extraction.page_count,
                "text_length": len(extraction.text),
            }
        )
        return extraction

    async def _obtain_analysis(
        self, document_id: UUID, extraction: ExtractionResult
    ) -> AnalysisOutcome:
        """Pick the analysis source for a run.

        Raises:
            ConfigurationError: If the AI analyzer cannot be configured
        """
        if extraction.is_corrupted:
            return CorruptedResult(analysis=build_unreadable_analysis())

        analyzer = self.analyzer_factory()
        LOGGER.info(f"Requesting AI analysis for document {document_id}")

        try:
            analysis = await analyzer.analyze(extraction.text)
        except (APIClientError, ResponseSchemaError) as e:
            LOGGER.warning(
                f"AI analysis failed for document {document_id}, using fallback analysis: {e.message}",
                extra={"error_type": type(e).__name__}
            )
            return FallbackResult(
                analysis=build_fallback_analysis(extraction.text),
                reason=e.message,
            )

        return AIResult(analysis=analysis)
