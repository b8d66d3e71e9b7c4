"""Storage service for uploaded loan documents in Supabase storage."""

import asyncio
import base64
import time
from typing import List, Optional
from urllib.parse import quote

import httpx

from app.core.config import StorageSettings
from app.core.exceptions import APIClientError, ConfigurationError
from app.models.title_deed_models import BatchUploadResult, ImageFile, StorageReference, UploadedImage
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)

TEMP_KEY_PREFIX = "temp_"


def base_file_name(file_name: str) -> str:
    """Last path segment of a client supplied file name."""
    name = file_name.replace("\\", "/").rsplit("/", 1)[-1].strip()
    return "" if name in (".", "..") else name


def _now_ms() -> int:
    return int(time.time() * 1000)


def inline_reference(data: bytes, mime_type: str, filename: str) -> StorageReference:
    """Self-contained stand-in for an upload that did not happen."""
    encoded = base64.b64encode(data).decode("ascii")
    name = filename.rsplit("/", 1)[-1]
    return StorageReference(
        url=f"data:{mime_type or 'application/octet-stream'};base64,{encoded}",
        key=f"{TEMP_KEY_PREFIX}{_now_ms()}_{name}",
        degraded=True,
    )


class StorageService:
    """Service for managing files in Supabase storage.

    Uploads never fail from the caller's point of view: when the bucket is
    unreachable or not configured, the image comes back as a base64 data URI
    under a ``temp_`` key.
    """

    def __init__(self, settings: StorageSettings, http_client: Optional[httpx.AsyncClient] = None):
        self.url = settings.url.rstrip("/")
        self.service_role_key = settings.service_role_key
        self.bucket = settings.bucket
        self.public_base_url = (settings.public_base_url or settings.url).rstrip("/")
        self.timeout = settings.timeout
        self.base_api_url = f"{self.url}/storage/v1"
        self.headers = {
            "Authorization": f"Bearer {self.service_role_key}",
            "apikey": self.service_role_key,
        }
        self._http_client = http_client

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.service_role_key)

    def public_url(self, key: str) -> str:
        """Public URL built from configuration, never from the upload response."""
        return f"{self.public_base_url}/storage/v1/object/public/{self.bucket}/{quote(key, safe='/')}"

    def _object_url(self, key: str) -> str:
        return f"{self.base_api_url}/object/{self.bucket}/{quote(key, safe='/')}"

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        if self._http_client is not None:
            return await self._http_client.request(method, url, timeout=self.timeout, **kwargs)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.request(method, url, **kwargs)

    async def store(
        self,
        data: bytes,
        mime_type: str,
        folder: str = "uploads",
        filename: Optional[str] = None,
    ) -> StorageReference:
        """Upload bytes to the bucket under ``{folder}/{filename}``.

        Args:
            data: File content
            mime_type: Content type sent to the bucket
            folder: Logical folder, e.g. ``title-deeds``
            filename: Object name; generated when omitted

        Returns:
            StorageReference: Public URL and key, or a degraded data URI
            reference if the upload failed.
        """
        filename = base_file_name(filename or "") or f"file_{_now_ms()}"
        key = f"{folder}/{filename}"

        if not self.is_configured:
            LOGGER.warning("Storage is not configured, returning inline image", extra={"key": key})
            return inline_reference(data, mime_type, filename)

        upload_url = self._object_url(key)
        try:
            response = await self._send(
                "POST",
                upload_url,
                headers={**self.headers, "Content-Type": mime_type, "x-upsert": "true"},
                content=data,
            )
            if response.status_code != 200:
                LOGGER.error(
                    f"Failed to upload file to Supabase: {response.text[:500]}",
                    extra={"bucket": self.bucket, "key": key, "status_code": response.status_code},
                )
                return inline_reference(data, mime_type, filename)
        except Exception as e:
            LOGGER.error(
                f"Error uploading file to Supabase: {str(e)}",
                exc_info=True,
                extra={"bucket": self.bucket, "key": key},
            )
            return inline_reference(data, mime_type, filename)

        LOGGER.info("File uploaded", extra={"bucket": self.bucket, "key": key, "size": len(data)})
        return StorageReference(url=self.public_url(key), key=key)

    async def upload_image(self, image: ImageFile, folder: str, prefix: str) -> StorageReference:
        """Store an uploaded image as ``{prefix}_{epoch_ms}_{original name}``."""
        return await self.store(
            image.data,
            image.mime_type,
            folder=folder,
            filename=f"{prefix}_{_now_ms()}_{base_file_name(image.file_name)}",
        )

    async def upload_images(self, images: List[ImageFile], folder: str, prefix: str) -> BatchUploadResult:
        """Upload a batch concurrently and report what made it.

        Each image gets the prefix ``{prefix}_{index}``. A failed file is
        left out of ``images`` without failing the batch.
        """
        results = await asyncio.gather(
            *(
                self.upload_image(image, folder, f"{prefix}_{index}")
                for index, image in enumerate(images)
            ),
            return_exceptions=True,
        )

        uploaded: List[UploadedImage] = []
        for image, result in zip(images, results):
            if isinstance(result, BaseException):
                LOGGER.error(
                    "Batch upload item failed",
                    exc_info=result,
                    extra={"file_name": image.file_name},
                )
                continue
            uploaded.append(UploadedImage(image_url=result.url, image_key=result.key, file_name=image.file_name))

        LOGGER.info("Batch upload finished", extra={"uploaded": len(uploaded), "total": len(images)})
        return BatchUploadResult(uploaded_count=len(uploaded), total_count=len(images), images=uploaded)

    async def delete(self, key: str) -> None:
        """Remove an uploaded object.

        ``temp_`` keys refer to inline data URIs and are ignored.

        Raises:
            ConfigurationError: If storage is not configured
            APIClientError: If the provider rejects the delete
        """
        if key.startswith(TEMP_KEY_PREFIX):
            LOGGER.debug("Skipping delete of inline image", extra={"key": key})
            return
        if not self.is_configured:
            raise ConfigurationError("Supabase storage is not configured")

        delete_url = self._object_url(key)
        try:
            response = await self._send("DELETE", delete_url, headers=self.headers)
        except httpx.HTTPError as e:
            LOGGER.error(f"Error deleting file from Supabase: {str(e)}", exc_info=True, extra={"key": key})
            raise APIClientError(f"Storage delete error: {str(e)}", original_error=e)

        if response.status_code != 200:
            LOGGER.error(
                f"Failed to delete file from Supabase: {response.text[:500]}",
                extra={"bucket": self.bucket, "key": key, "status_code": response.status_code},
            )
            raise APIClientError(f"Delete failed: {response.text[:200]}")

        LOGGER.info("File deleted", extra={"bucket": self.bucket, "key": key})
