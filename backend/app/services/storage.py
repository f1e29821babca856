import asyncio
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Final

import boto3
from botocore.client import BaseClient, Config
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import Settings

logger = logging.getLogger(__name__)

PRESIGN_TTL_SECONDS: Final[int] = 300
STREAM_CHUNK_SIZE: Final[int] = 64 * 1024

_NOT_FOUND_CODES: Final[frozenset[str]] = frozenset({"404", "NoSuchKey", "NotFound"})


class StorageError(Exception):
    """Raised when the object store rejects or fails a request."""


class ObjectNotFoundError(StorageError):
    """Raised when the object store reports that a key does not exist."""


@dataclass(frozen=True)
class ObjectMetadata:
    content_type: str | None
    content_length: int | None
    last_modified: datetime | None


@dataclass
class StoredObject:
    metadata: ObjectMetadata
    body: Any

    def iter_bytes(self, chunk_size: int = STREAM_CHUNK_SIZE) -> Iterator[bytes]:
        try:
            yield from self.body.iter_chunks(chunk_size)
        finally:
            self.close()

    def close(self) -> None:
        # Releases the pooled connection even when iteration never started.
        self.body.close()


def _is_not_found(exc: ClientError) -> bool:
    status_code = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    code = str(exc.response.get("Error", {}).get("Code", ""))
    return status_code == 404 or code in _NOT_FOUND_CODES


def _translate(exc: Exception, key: str) -> StorageError:
    if isinstance(exc, ClientError) and _is_not_found(exc):
        return ObjectNotFoundError(key)
    return StorageError(f"Storage request failed for {key!r}")


def _metadata_from(response: dict[str, Any]) -> ObjectMetadata:
    return ObjectMetadata(
        content_type=response.get("ContentType"),
        content_length=response.get("ContentLength"),
        last_modified=response.get("LastModified"),
    )


def create_s3_client(settings: Settings) -> BaseClient:
    session = boto3.session.Session()
    return session.client(
        "s3",
        endpoint_url=str(settings.s3_endpoint) if settings.s3_endpoint else None,
        aws_access_key_id=settings.aws_access_key_id,
        aws_secret_access_key=settings.aws_secret_access_key,
        region_name=settings.aws_region,
        config=Config(signature_version="s3v4"),
    )


class StorageService:
    """S3-compatible object store bound to a single bucket.

    The boto3 client is created once and shared across requests; it holds no
    per-request state. Every method performs exactly one call against the store.
    """

    def __init__(self, settings: Settings, client: BaseClient | None = None) -> None:
        self.settings = settings
        self.client = client or create_s3_client(settings)
        self.bucket = settings.s3_bucket

    def public_object_url(self, key: str) -> str | None:
        if not self.settings.public_base_url:
            return None
        return f"{self.settings.public_base_url.rstrip('/')}/{key}"

    def create_presigned_put(
        self,
        key: str,
        content_type: str,
        expires_in: int = PRESIGN_TTL_SECONDS,
    ) -> str:
        try:
            return self.client.generate_presigned_url(
                "put_object",
                Params={
                    "Bucket": self.bucket,
                    "Key": key,
                    "ContentType": content_type,
                },
                ExpiresIn=expires_in,
                HttpMethod="PUT",
            )
        except (BotoCoreError, ClientError) as exc:
            raise _translate(exc, key) from exc

    def create_presigned_get(self, key: str, expires_in: int = PRESIGN_TTL_SECONDS) -> str:
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=expires_in,
                HttpMethod="GET",
            )
        except (BotoCoreError, ClientError) as exc:
            raise _translate(exc, key) from exc

    async def head_object(self, key: str) -> ObjectMetadata:
        def _head() -> dict[str, Any]:
            return self.client.head_object(Bucket=self.bucket, Key=key)

        try:
            response = await asyncio.to_thread(_head)
        except (BotoCoreError, ClientError) as exc:
            raise _translate(exc, key) from exc
        return _metadata_from(response)

    async def delete_object(self, key: str) -> None:
        def _delete() -> None:
            self.client.delete_object(Bucket=self.bucket, Key=key)

        try:
            await asyncio.to_thread(_delete)
        except (BotoCoreError, ClientError) as exc:
            raise _translate(exc, key) from exc

    async def open_object(self, key: str) -> StoredObject:
        def _get() -> dict[str, Any]:
            return self.client.get_object(Bucket=self.bucket, Key=key)

        try:
            response = await asyncio.to_thread(_get)
        except (BotoCoreError, ClientError) as exc:
            raise _translate(exc, key) from exc
        return StoredObject(metadata=_metadata_from(response), body=response["Body"])
