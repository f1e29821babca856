from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from app.schemas import DeleteResponse, DownloadUrlResponse, HeadResponse, UploadUrlResponse
from app.services.keys import generate_upload_key
from app.services.media import allowed_content_types, is_allowed_content_type
from app.services.storage import PRESIGN_TTL_SECONDS, StorageService, StoredObject

logger = logging.getLogger(__name__)


class MissingParameterError(ValueError):
    """Raised when a required request parameter is absent or empty."""


class UnsupportedMediaTypeError(ValueError):
    """Raised when an upload declares a content type outside the allowlist."""


def _require(value: str | None, name: str) -> str:
    if not value:
        raise MissingParameterError(f"{name} is required")
    return value


def _expiry() -> datetime:
    return datetime.now(timezone.utc) + timedelta(seconds=PRESIGN_TTL_SECONDS)


class ObjectService:
    """Validates requests and turns them into single object-store calls.

    Storage failures propagate as ``StorageError``; validation failures are
    raised before any key is derived or any storage call is made.
    """

    def __init__(self, storage: StorageService, allow_svg: bool = False) -> None:
        self.storage = storage
        self.allowed_types = allowed_content_types(allow_svg)

    def create_upload_url(self, content_type: str | None, ext: str | None = None) -> UploadUrlResponse:
        content_type = _require(content_type, "contentType")
        if not is_allowed_content_type(content_type, self.allowed_types):
            raise UnsupportedMediaTypeError(f"Content type {content_type!r} is not allowed")

        key = generate_upload_key(ext)
        signed_url = self.storage.create_presigned_put(key, content_type)
        logger.info("Issued upload URL for %s (%s)", key, content_type)
        return UploadUrlResponse(
            signed_url=signed_url,
            key=key,
            expires_at=_expiry(),
            object_url=self.storage.public_object_url(key),
        )

    def create_download_url(self, key: str | None) -> DownloadUrlResponse:
        key = _require(key, "key")
        signed_url = self.storage.create_presigned_get(key)
        return DownloadUrlResponse(signed_url=signed_url, expires_at=_expiry())

    async def describe(self, key: str | None) -> HeadResponse:
        key = _require(key, "key")
        metadata = await self.storage.head_object(key)
        return HeadResponse(
            exists=True,
            content_type=metadata.content_type,
            content_length=metadata.content_length,
            last_modified=metadata.last_modified,
        )

    async def delete(self, key: str | None) -> DeleteResponse:
        key = _require(key, "key")
        await self.storage.delete_object(key)
        logger.info("Deleted object %s", key)
        return DeleteResponse(ok=True, key=key)

    async def open(self, key: str | None) -> StoredObject:
        key = _require(key, "key")
        return await self.storage.open_object(key)
