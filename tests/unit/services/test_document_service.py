"""Tests for document upload and read-back."""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from legalyze.core.exceptions import StorageError, ValidationError
from legalyze.services.document_service import (
    DocumentService,
    build_storage_path,
    sort_questions,
    sort_risk_flags,
)


def make_document(**fields):
    now = datetime.now(timezone.utc)
    values = dict(
        id=uuid4(),
        owner_id=None,
        filename="lease.pdf",
        storage_path="anonymous/1_lease.pdf",
        mime_type="application/pdf",
        size_bytes=4,
        processed=False,
        processing_status="pending",
        error_message=None,
        uploaded_at=now,
        updated_at=now,
    )
    values.update(fields)
    return SimpleNamespace(**values)


@pytest.fixture
def service(mock_session) -> DocumentService:
    service = DocumentService(mock_session, storage_service=AsyncMock(), max_upload_bytes=1024)
    service.doc_repo = AsyncMock()
    service.summary_repo = AsyncMock()
    service.risk_repo = AsyncMock()
    service.question_repo = AsyncMock()
    return service


class TestUpload:

    @pytest.mark.asyncio
    async def test_upload_stores_file_and_creates_record(self, service):
        owner_id = uuid4()
        service.doc_repo.create_document.side_effect = lambda **kwargs: make_document(**kwargs)

        document = await service.upload_document(b"%PDF", "lease.pdf", "application/pdf", owner_id)

        path = service.storage_service.upload_file.call_args.args[1]
        assert path.startswith(f"{owner_id}/")
        assert path.endswith("_lease.pdf")
        assert document.storage_path == path
        assert document.size_bytes == 4
        assert document.owner_id == owner_id

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "content, filename, content_type",
        [
            (b"%PDF", "notes.txt", "text/plain"),
            (b"", "empty.pdf", "application/pdf"),
            (b"x" * 2048, "big.pdf", "application/pdf"),
            (b"%PDF", "", "application/pdf"),
        ],
    )
    async def test_invalid_uploads_are_rejected(self, service, content, filename, content_type):
        with pytest.raises(ValidationError):
            await service.upload_document(content, filename, content_type)

        service.storage_service.upload_file.assert_not_called()
        service.doc_repo.create_document.assert_not_called()

    @pytest.mark.asyncio
    async def test_storage_failure_skips_record_creation(self, service):
        service.storage_service.upload_file.side_effect = StorageError("Upload failed (HTTP 500)")

        with pytest.raises(StorageError):
            await service.upload_document(b"%PDF", "lease.pdf", "application/pdf")

        service.doc_repo.create_document.assert_not_called()


def test_storage_path_without_owner_is_anonymous():
    path = build_storage_path("a.pdf")

    owner, name = path.split("/")
    assert owner == "anonymous"
    timestamp, filename = name.split("_", 1)
    assert timestamp.isdigit() and len(timestamp) >= 13
    assert filename == "a.pdf"


def test_risk_flags_sorted_by_severity_keeping_order_within_rank():
    flags = [
        SimpleNamespace(severity="low", description="1"),
        SimpleNamespace(severity="critical", description="2"),
        SimpleNamespace(severity="medium", description="3"),
        SimpleNamespace(severity="critical", description="4"),
        SimpleNamespace(severity="high", description="5"),
    ]

    assert [f.description for f in sort_risk_flags(flags)] == ["2", "4", "5", "3", "1"]


def test_questions_high_before_medium():
    questions = [
        SimpleNamespace(priority="medium", question_text="m1"),
        SimpleNamespace(priority="high", question_text="h1"),
        SimpleNamespace(priority="high", question_text="h2"),
    ]

    assert [q.question_text for q in sort_questions(questions)] == ["h1", "h2", "m1"]


@pytest.mark.asyncio
async def test_detail_combines_latest_summary_risks_and_questions(service):
    document = make_document(processed=True, processing_status="analyzed")
    now = datetime.now(timezone.utc)
    service.doc_repo.get_by_id.return_value = document
    service.summary_repo.get_latest_for_document.return_value = SimpleNamespace(
        id=uuid4(), plain_summary="S", key_points=["a"], confidence=0.9, created_at=now
    )
    service.risk_repo.list_for_document.return_value = [
        SimpleNamespace(id=uuid4(), category="c", severity="low", description="d", excerpt=None, created_at=now),
        SimpleNamespace(id=uuid4(), category="c", severity="high", description="d", excerpt="x",
                        created_at=now + timedelta(seconds=1)),
    ]
    service.question_repo.list_for_document.return_value = [
        SimpleNamespace(id=uuid4(), question_text="q", priority="high", created_at=now),
    ]

    detail = await service.get_document_detail(document.id)

    assert detail.document.id == document.id
    assert detail.summary.plain_summary == "S"
    assert [flag.severity for flag in detail.risk_flags] == ["high", "low"]
    assert detail.questions[0].question_text == "q"


@pytest.mark.asyncio
async def test_detail_of_missing_document_is_none(service):
    service.doc_repo.get_by_id.return_value = None

    assert await service.get_document_detail(uuid4()) is None


@pytest.mark.asyncio
async def test_detail_only_lists_rows_of_latest_run(service):
    document = make_document(processed=True, processing_status="analyzed")
    summary_time = datetime.now(timezone.utc)
    service.doc_repo.get_by_id.return_value = document
    service.summary_repo.get_latest_for_document.return_value = SimpleNamespace(
        id=uuid4(), plain_summary="second run", key_points=[], confidence=0.9, created_at=summary_time
    )
    service.risk_repo.list_for_document.return_value = []
    service.question_repo.list_for_document.return_value = []

    await service.get_document_detail(document.id)

    service.risk_repo.list_for_document.assert_awaited_once_with(document.id, since=summary_time)
    service.question_repo.list_for_document.assert_awaited_once_with(document.id, since=summary_time)


@pytest.mark.asyncio
async def test_detail_without_summary_lists_every_row(service):
    document = make_document()
    service.doc_repo.get_by_id.return_value = document
    service.summary_repo.get_latest_for_document.return_value = None
    service.risk_repo.list_for_document.return_value = []
    service.question_repo.list_for_document.return_value = []

    detail = await service.get_document_detail(document.id)

    assert detail.summary is None
    service.risk_repo.list_for_document.assert_awaited_once_with(document.id, since=None)
