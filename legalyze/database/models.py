"""SQLAlchemy models for documents and their derived analysis records."""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    JSON,
    TIMESTAMP,
    BigInteger,
    Boolean,
    ForeignKey,
    Numeric,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from legalyze.core.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProcessingStatus:
    """Values of ``Document.processing_status``."""

    PENDING = "pending"
    EXTRACTED = "extracted"
    CORRUPTED = "corrupted"
    ANALYZED = "analyzed"


class Document(Base):
    """Uploaded document and its processing state."""

    __tablename__ = "documents"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    owner_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True, index=True)
    filename: Mapped[str] = mapped_column(String, nullable=False)
    storage_path: Mapped[str] = mapped_column(String, nullable=False)
    mime_type: Mapped[str | None] = mapped_column(String, nullable=True)
    size_bytes: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    extracted_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    processed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    processing_status: Mapped[str] = mapped_column(
        String, nullable=False, default=ProcessingStatus.PENDING
    )  # pending | extracted | corrupted | analyzed
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    uploaded_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=_utcnow, server_default="NOW()", nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=_utcnow, server_default="NOW()", onupdate=_utcnow
    )

    # Relationships
    summaries: Mapped[list["Summary"]] = relationship(
        "Summary", back_populates="document", cascade="all, delete-orphan"
    )
    risk_flags: Mapped[list["RiskFlag"]] = relationship(
        "RiskFlag", back_populates="document", cascade="all, delete-orphan"
    )
    questions: Mapped[list["DocumentQuestion"]] = relationship(
        "DocumentQuestion", back_populates="document", cascade="all, delete-orphan"
    )


class Summary(Base):
    """Plain-language summary produced by one analysis run."""

    __tablename__ = "summaries"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    document_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True
    )
    plain_summary: Mapped[str] = mapped_column(Text, nullable=False)
    key_points: Mapped[list] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=list
    )
    confidence: Mapped[Decimal] = mapped_column(Numeric(4, 3), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=_utcnow, server_default="NOW()", nullable=False
    )

    document: Mapped["Document"] = relationship("Document", back_populates="summaries")


class RiskFlag(Base):
    """One categorized, severity-rated issue found in a document."""

    __tablename__ = "risk_flags"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    document_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category: Mapped[str] = mapped_column(String, nullable=False, default="general")
    severity: Mapped[str] = mapped_column(String, nullable=False, default="medium")  # low | medium | high | critical
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    excerpt: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=_utcnow, server_default="NOW()", nullable=False
    )

    document: Mapped["Document"] = relationship("Document", back_populates="risk_flags")


class DocumentQuestion(Base):
    """Follow-up question suggested for a document."""

    __tablename__ = "document_questions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    document_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True
    )
    question_text: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[str] = mapped_column(String, nullable=False, default="medium")  # high | medium
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), default=_utcnow, server_default="NOW()", nullable=False
    )

    document: Mapped["Document"] = relationship("Document", back_populates="questions")
