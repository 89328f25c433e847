"""Tests for API endpoints."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch
from uuid import uuid4

from fastapi.testclient import TestClient

from legalyze.api.v1.endpoints.analysis import get_orchestrator
from legalyze.api.v1.endpoints.documents import get_document_service
from legalyze.core.exceptions import ValidationError
from legalyze.core.config import settings
from legalyze.main import app
from legalyze.schemas.analysis import Analysis, AnalysisRunResult, StoredSummary
from legalyze.schemas.documents import (
    DocumentDetailResponse,
    DocumentListResponse,
    DocumentResponse,
)


def make_document_response(**fields) -> DocumentResponse:
    values = dict(
        id=uuid4(),
        filename="lease.pdf",
        storage_path="anonymous/1_lease.pdf",
        mime_type="application/pdf",
        size_bytes=10,
        processed=False,
        processing_status="pending",
        uploaded_at=datetime.now(timezone.utc),
    )
    values.update(fields)
    return DocumentResponse(**values)


class TestAnalyzeDocumentEndpoint:

    def override(self, result: AnalysisRunResult) -> AsyncMock:
        orchestrator = AsyncMock()
        orchestrator.analyze.return_value = result
        app.dependency_overrides[get_orchestrator] = lambda: orchestrator
        return orchestrator

    def test_success_envelope(self, test_client: TestClient) -> None:
        document_id = uuid4()
        summary = StoredSummary(
            id=uuid4(), document_id=document_id, plain_summary="S", key_points=[], confidence=0.9
        )
        orchestrator = self.override(
            AnalysisRunResult(success=True, summary=summary, analysis=Analysis(summary="S"))
        )

        response = test_client.post("/api/v1/analyze-document", json={"documentId": str(document_id)})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["summary"]["plain_summary"] == "S"
        assert body["analysis"]["summary"] == "S"
        orchestrator.analyze.assert_awaited_once_with(str(document_id))

    def test_corrupted_envelope_is_200(self, test_client: TestClient) -> None:
        self.override(AnalysisRunResult(
            success=False, message="Corrupted PDF", extracted_text="Failed to load PDF file."
        ))

        response = test_client.post("/api/v1/analyze-document", json={"documentId": str(uuid4())})

        assert response.status_code == 200
        assert response.json() == {
            "success": False,
            "message": "Corrupted PDF",
            "extracted_text": "Failed to load PDF file.",
        }

    def test_fatal_envelope_is_500(self, test_client: TestClient) -> None:
        self.override(AnalysisRunResult(success=False, error="Document not found: x", status_code=500))

        response = test_client.post("/api/v1/analyze-document", json={"documentId": "x"})

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Document not found: x"}

    def test_missing_document_id_is_passed_through(self, test_client: TestClient) -> None:
        orchestrator = self.override(AnalysisRunResult(success=False, error="Document ID is required", status_code=500))

        response = test_client.post("/api/v1/analyze-document", json={})

        assert response.status_code == 500
        orchestrator.analyze.assert_awaited_once_with(None)

    def test_correlation_id_is_echoed(self, test_client: TestClient) -> None:
        self.override(AnalysisRunResult(success=False, error="e", status_code=500))

        response = test_client.post(
            "/api/v1/analyze-document",
            json={"documentId": "x"},
            headers={"X-Correlation-ID": "abc-123"},
        )

        assert response.headers["X-Correlation-ID"] == "abc-123"


class TestDocumentEndpoints:

    def override(self) -> AsyncMock:
        service = AsyncMock()
        app.dependency_overrides[get_document_service] = lambda: service
        return service

    def test_upload_pdf(self, test_client: TestClient) -> None:
        service = self.override()
        service.upload_document.return_value = make_document_response()

        response = test_client.post(
            "/api/v1/documents/upload",
            files={"file": ("lease.pdf", b"%PDF-1.4", "application/pdf")},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["status"] is True
        assert body["data"]["filename"] == "lease.pdf"
        kwargs = service.upload_document.call_args.kwargs
        assert kwargs["content"] == b"%PDF-1.4"
        assert kwargs["content_type"] == "application/pdf"
        assert kwargs["owner_id"] is None

    def test_upload_validation_error_is_400(self, test_client: TestClient) -> None:
        service = self.override()
        service.upload_document.side_effect = ValidationError("Only PDF files are supported (got text/plain)")

        response = test_client.post(
            "/api/v1/documents/upload",
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )

        assert response.status_code == 400
        assert "Only PDF files" in response.json()["detail"]["detail"]

    def test_list_documents(self, test_client: TestClient) -> None:
        service = self.override()
        service.list_documents.return_value = DocumentListResponse(
            documents=[make_document_response()], total=1, limit=50, offset=0
        )

        response = test_client.get("/api/v1/documents/")

        assert response.status_code == 200
        assert response.json()["data"]["total"] == 1

    def test_get_document_detail(self, test_client: TestClient) -> None:
        service = self.override()
        document = make_document_response(processed=True, processing_status="analyzed")
        service.get_document_detail.return_value = DocumentDetailResponse(document=document)

        response = test_client.get(f"/api/v1/documents/{document.id}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["document"]["processing_status"] == "analyzed"
        assert data["summary"] is None

    def test_get_missing_document_is_404(self, test_client: TestClient) -> None:
        service = self.override()
        service.get_document_detail.return_value = None

        response = test_client.get(f"/api/v1/documents/{uuid4()}")

        assert response.status_code == 404


class TestHealthEndpoint:

    def test_health_reports_database_status(self, test_client: TestClient) -> None:
        with patch(
            "legalyze.api.v1.endpoints.health.db_client.health_check",
            new_callable=AsyncMock,
            return_value={"status": "unhealthy", "connected": False},
        ):
            response = test_client.get("/health/")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "degraded"
        assert body["database"] == "unhealthy"

    def test_health_reports_pipeline_readiness(self, test_client: TestClient) -> None:
        with patch(
            "legalyze.api.v1.endpoints.health.db_client.health_check",
            new_callable=AsyncMock,
            return_value={"status": "healthy", "connected": True},
        ):
            response = test_client.get("/health/")

        body = response.json()
        assert body["status"] == "healthy"
        assert body["storage"] == "configured"
        assert body["storage_bucket"] == settings.storage_bucket
        assert body["llm_provider"] == "gemini"
        assert body["llm"] == "configured"

    def test_health_degraded_without_storage_credentials(self, test_client: TestClient) -> None:
        with patch(
            "legalyze.api.v1.endpoints.health.db_client.health_check",
            new_callable=AsyncMock,
            return_value={"status": "healthy", "connected": True},
        ), patch.object(settings.supabase, "service_role_key", ""):
            response = test_client.get("/health/")

        body = response.json()
        assert body["status"] == "degraded"
        assert body["database"] == "healthy"
        assert body["storage"] == "not_configured"
