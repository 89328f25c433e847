"""Tests for the Supabase storage service."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from legalyze.core.exceptions import ConfigurationError, StorageError
from legalyze.services.storage_service import StorageService, sanitize_path


@pytest.fixture
def storage() -> StorageService:
    return StorageService(
        url="https://test-project.supabase.co/",
        service_role_key="service-key",
        bucket="documents",
        timeout=5,
    )


class TestSanitizePath:

    @pytest.mark.parametrize(
        "path, expected",
        [
            ("user-1/file.pdf", "user-1/file.pdf"),
            ("user 1/my lease (final).pdf", "user%201/my%20lease%20(final).pdf"),
            ("abc/123_contrat d'été.pdf", "abc/123_contrat%20d'%C3%A9t%C3%A9.pdf"),
            ("a/b#c?d.pdf", "a/b%23c%3Fd.pdf"),
        ],
    )
    def test_segments_are_percent_encoded(self, path, expected):
        assert sanitize_path(path) == expected

    def test_directory_structure_is_preserved(self):
        assert sanitize_path("a b/c d/e f").count("/") == 2

    @pytest.mark.parametrize(
        "path",
        ["user 1/my lease.pdf", "x/100%.pdf", "x/already%20encoded.pdf", "../etc/passwd", "ü/ß?.pdf"],
    )
    def test_idempotent(self, path):
        once = sanitize_path(path)
        assert sanitize_path(once) == once


@pytest.mark.asyncio
async def test_download_returns_bytes(storage):
    response = httpx.Response(200, content=b"%PDF-1.4 data")

    with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=response) as mock_get:
        content = await storage.download("user 1/lease.pdf")

    assert content == b"%PDF-1.4 data"
    url = mock_get.call_args.args[0]
    assert url == "https://test-project.supabase.co/storage/v1/object/documents/user%201/lease.pdf"
    headers = mock_get.call_args.kwargs["headers"]
    assert headers["Authorization"] == "Bearer service-key"
    assert headers["apikey"] == "service-key"


@pytest.mark.asyncio
async def test_download_non_200_raises_storage_error(storage):
    response = httpx.Response(404, text='{"error":"not_found"}')

    with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=response):
        with pytest.raises(StorageError, match="404"):
            await storage.download("missing.pdf")


@pytest.mark.asyncio
async def test_download_transport_error_raises_storage_error(storage):
    with patch("httpx.AsyncClient.get", new_callable=AsyncMock, side_effect=httpx.ConnectError("refused")):
        with pytest.raises(StorageError):
            await storage.download("file.pdf")


@pytest.mark.asyncio
async def test_download_without_credentials_raises_configuration_error():
    storage = StorageService(url="", service_role_key="")

    with pytest.raises(ConfigurationError):
        await storage.download("file.pdf")


@pytest.mark.asyncio
async def test_upload_posts_content(storage):
    response = httpx.Response(200, json={"Key": "documents/u/1_a.pdf"})

    with patch("httpx.AsyncClient.post", new_callable=AsyncMock, return_value=response) as mock_post:
        result = await storage.upload_file(b"%PDF", "u/1_a.pdf")

    assert result == {"Key": "documents/u/1_a.pdf"}
    assert mock_post.call_args.kwargs["content"] == b"%PDF"
    assert mock_post.call_args.kwargs["headers"]["Content-Type"] == "application/pdf"


@pytest.mark.asyncio
async def test_upload_failure_raises_storage_error(storage):
    response = httpx.Response(400, text="Duplicate")

    with patch("httpx.AsyncClient.post", new_callable=AsyncMock, return_value=response):
        with pytest.raises(StorageError):
            await storage.upload_file(b"%PDF", "u/1_a.pdf")
