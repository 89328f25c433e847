"""Document analysis invocation endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from legalyze.core.database import get_async_session as get_session
from legalyze.schemas.documents import AnalyzeDocumentRequest
from legalyze.services.analysis import DocumentAnalysisOrchestrator
from legalyze.utils.logging import get_logger

LOGGER = get_logger(__name__)

router = APIRouter()


async def get_orchestrator(
    db_session: Annotated[AsyncSession, Depends(get_session)]
) -> DocumentAnalysisOrchestrator:
    return DocumentAnalysisOrchestrator(db_session)


@router.post(
    "/analyze-document",
    summary="Analyze an uploaded document",
    description=(
        "Extracts the document's text, analyzes it and stores the summary, "
        "risk flags and questions. Returns 200 for analyzed and corrupted "
        "documents and 500 when the run could not proceed."
    ),
    operation_id="analyze_document",
)
async def analyze_document(
    body: AnalyzeDocumentRequest,
    orchestrator: Annotated[DocumentAnalysisOrchestrator, Depends(get_orchestrator)],
) -> JSONResponse:
    LOGGER.info(f"Analysis requested for document {body.document_id}")
    result = await orchestrator.analyze(body.document_id)
    return JSONResponse(status_code=result.status_code, content=result.to_response())
