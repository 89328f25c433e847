from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from legalyze.core.database import get_async_session as get_session
from legalyze.core.exceptions import AppError, ValidationError
from legalyze.schemas.common import ApiResponse
from legalyze.services.document_service import DocumentService
from legalyze.utils.logging import get_logger
from legalyze.utils.responses import create_api_response, create_error_detail

LOGGER = get_logger(__name__)

router = APIRouter()


async def get_document_service(
    db_session: Annotated[AsyncSession, Depends(get_session)]
) -> DocumentService:
    return DocumentService(db_session)


@router.post(
    "/upload",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a PDF document",
    operation_id="upload_document",
)
async def upload_document(
    request: Request,
    file: UploadFile = File(..., description="PDF document to upload"),
    owner_id: Optional[UUID] = Form(None),
    document_service: Annotated[DocumentService, Depends(get_document_service)] = None,
) -> ApiResponse:
    """Upload a PDF and create its document record."""
    content = await file.read()

    try:
        document = await document_service.upload_document(
            content=content,
            filename=file.filename,
            content_type=file.content_type,
            owner_id=owner_id,
        )
    except ValidationError as e:
        error_detail = create_error_detail(
            title="Invalid Upload",
            status=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
            request=request
        )
        raise HTTPException(status_code=400, detail=error_detail.model_dump(mode="json"))
    except AppError as e:
        LOGGER.error(f"Document upload failed: {e.message}", extra={"filename": file.filename})
        error_detail = create_error_detail(
            title="Upload Failed",
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=e.message,
            request=request
        )
        raise HTTPException(status_code=500, detail=error_detail.model_dump(mode="json"))

    return create_api_response(
        data=document,
        message="Document uploaded successfully",
        request=request
    )


@router.get(
    "/",
    response_model=ApiResponse,
    summary="List documents",
    operation_id="list_documents",
)
async def list_documents(
    request: Request,
    owner_id: Optional[UUID] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    document_service: Annotated[DocumentService, Depends(get_document_service)] = None,
) -> ApiResponse:
    """List documents, newest upload first."""
    documents = await document_service.list_documents(owner_id=owner_id, limit=limit, offset=offset)

    return create_api_response(
        data=documents,
        message="Documents retrieved successfully",
        request=request
    )


@router.get(
    "/{document_id}",
    response_model=ApiResponse,
    summary="Get a document with its analysis",
    operation_id="get_document",
)
async def get_document(
    request: Request,
    document_id: UUID,
    document_service: Annotated[DocumentService, Depends(get_document_service)] = None,
) -> ApiResponse:
    """Retrieve a document with its latest summary, risk flags and questions."""
    detail = await document_service.get_document_detail(document_id)
    if detail is None:
        error_detail = create_error_detail(
            title="Document Not Found",
            status=status.HTTP_404_NOT_FOUND,
            detail=f"Document with ID {document_id} not found",
            request=request
        )
        raise HTTPException(status_code=404, detail=error_detail.model_dump(mode="json"))

    return create_api_response(
        data=detail,
        message="Document details retrieved successfully",
        request=request
    )
