"""API schemas for documents and analysis invocation."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class AnalyzeDocumentRequest(BaseModel):
    """Body of the analyze-document invocation."""

    model_config = ConfigDict(populate_by_name=True)

    document_id: Optional[str] = Field(default=None, alias="documentId")


class DocumentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    owner_id: Optional[UUID] = None
    filename: str
    storage_path: str
    mime_type: Optional[str] = None
    size_bytes: Optional[int] = None
    processed: bool
    processing_status: str
    error_message: Optional[str] = None
    uploaded_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DocumentListResponse(BaseModel):
    documents: List[DocumentResponse]
    total: int
    limit: int
    offset: int


class RiskFlagResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    category: str
    severity: str
    description: str
    excerpt: Optional[str] = None
    created_at: Optional[datetime] = None


class QuestionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    question_text: str
    priority: str
    created_at: Optional[datetime] = None


class SummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    plain_summary: str
    key_points: List[str]
    confidence: float
    created_at: Optional[datetime] = None


class DocumentDetailResponse(BaseModel):
    """A document together with what its analysis runs produced."""

    document: DocumentResponse
    summary: Optional[SummaryResponse] = None
    risk_flags: List[RiskFlagResponse] = Field(default_factory=list)
    questions: List[QuestionResponse] = Field(default_factory=list)
