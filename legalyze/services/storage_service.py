"""Storage service for Supabase storage operations."""

from typing import Any, Dict, Optional
from urllib.parse import quote, unquote

import httpx

from legalyze.core.config import settings
from legalyze.core.exceptions import ConfigurationError, StorageError
from legalyze.utils.logging import get_logger

LOGGER = get_logger(__name__)

# Characters left as-is besides letters, digits and "-_.~"
_SEGMENT_SAFE = "!'()*"


def sanitize_path(path: str) -> str:
    """Percent-encode each ``/``-separated segment of an object path.

    Existing ``%XX`` escapes are decoded first, so applying the function
    twice gives the same result as applying it once.
    """
    return "/".join(
        quote(unquote(segment), safe=_SEGMENT_SAFE) for segment in path.split("/")
    )


class StorageService:
    """Service for managing files in Supabase storage."""

    def __init__(
        self,
        url: Optional[str] = None,
        service_role_key: Optional[str] = None,
        bucket: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.url = (url if url is not None else settings.supabase_url).rstrip("/")
        self.service_role_key = (
            service_role_key if service_role_key is not None else settings.supabase_service_role_key
        )
        self.bucket = bucket or settings.storage_bucket
        self.timeout = timeout or settings.http_timeout

    @property
    def base_api_url(self) -> str:
        return f"{self.url}/storage/v1"

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.service_role_key}",
            "apikey": self.service_role_key,
        }

    def _require_config(self) -> None:
        if not self.url or not self.service_role_key:
            raise ConfigurationError(
                "Storage is not configured. Please set SUPABASE_URL and "
                "SUPABASE_SERVICE_ROLE_KEY environment variables."
            )

    def object_url(self, path: str, bucket: Optional[str] = None) -> str:
        return f"{self.base_api_url}/object/{bucket or self.bucket}/{sanitize_path(path)}"

    async def download(self, path: str, bucket: Optional[str] = None) -> bytes:
        """Download an object's bytes.

        Args:
            path: Object path inside the bucket (unsanitized)
            bucket: Bucket name; defaults to the configured bucket

        Returns:
            Raw object content

        Raises:
            ConfigurationError: If storage credentials are missing
            StorageError: If the object cannot be downloaded
        """
        self._require_config()
        download_url = self.object_url(path, bucket)

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(download_url, headers=self.headers)
        except httpx.HTTPError as e:
            LOGGER.error(f"Error downloading file from Supabase: {str(e)}", exc_info=True)
            raise StorageError(f"Failed to download file: {str(e)}", original_error=e) from e

        if response.status_code != 200:
            LOGGER.error(
                f"Failed to download file from Supabase: {response.text[:500]}",
                extra={"bucket": bucket or self.bucket, "path": path, "status_code": response.status_code}
            )
            raise StorageError(f"Failed to download file (HTTP {response.status_code})")

        LOGGER.info(
            f"Downloaded {len(response.content)} bytes from storage",
            extra={"path": path}
        )
        return response.content

    async def upload_file(
        self,
        content: bytes,
        path: str,
        content_type: str = "application/pdf",
        bucket: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Upload bytes to Supabase storage.

        Args:
            content: File content
            path: Target path within the bucket (unsanitized)
            content_type: MIME type sent with the object
            bucket: Bucket name; defaults to the configured bucket

        Returns:
            Dict containing the upload result

        Raises:
            ConfigurationError: If storage credentials are missing
            StorageError: If the upload fails
        """
        self._require_config()
        upload_url = self.object_url(path, bucket)

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    upload_url,
                    headers={**self.headers, "Content-Type": content_type},
                    content=content,
                )
        except httpx.HTTPError as e:
            LOGGER.error(f"Error uploading file to Supabase: {str(e)}", exc_info=True)
            raise StorageError(f"Storage upload error: {str(e)}", original_error=e) from e

        if response.status_code != 200:
            LOGGER.error(
                f"Failed to upload file to Supabase: {response.text[:500]}",
                extra={"bucket": bucket or self.bucket, "path": path, "status_code": response.status_code}
            )
            raise StorageError(f"Upload failed (HTTP {response.status_code})")

        return response.json()
