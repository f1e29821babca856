import logging

from fastapi import APIRouter, Body, Depends, HTTPException, status
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.types import Receive, Scope, Send

from app.api.deps import get_object_service
from app.schemas import (
    DeleteResponse,
    DownloadUrlResponse,
    HeadResponse,
    UploadUrlRequest,
    UploadUrlResponse,
)
from app.services.objects import (
    MissingParameterError,
    ObjectService,
    UnsupportedMediaTypeError,
)
from app.services.storage import ObjectNotFoundError, StorageError, StoredObject

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["objects"])


class ObjectStreamResponse(StreamingResponse):
    """Streams a stored object and closes its upstream body however the response ends."""

    def __init__(self, stored: StoredObject, **kwargs) -> None:
        super().__init__(stored.iter_bytes(), **kwargs)
        self.stored = stored

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            self.stored.close()


def _bad_request(exc: MissingParameterError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.post(
    "/upload-url",
    response_model=UploadUrlResponse,
    response_model_exclude_none=True,
)
def create_upload_url(
    payload: UploadUrlRequest | None = Body(default=None),
    objects: ObjectService = Depends(get_object_service),
) -> UploadUrlResponse:
    payload = payload or UploadUrlRequest()
    try:
        return objects.create_upload_url(payload.content_type, payload.ext)
    except MissingParameterError as exc:
        raise _bad_request(exc) from exc
    except UnsupportedMediaTypeError as exc:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail="Content type not allowed",
        ) from exc
    except StorageError as exc:
        logger.exception("Failed to presign upload")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not create upload URL",
        ) from exc


@router.get("/download-url", response_model=DownloadUrlResponse)
def create_download_url(
    key: str | None = None,
    objects: ObjectService = Depends(get_object_service),
) -> DownloadUrlResponse:
    try:
        return objects.create_download_url(key)
    except MissingParameterError as exc:
        raise _bad_request(exc) from exc
    except StorageError as exc:
        logger.exception("Failed to presign download for %s", key)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not create download URL",
        ) from exc


@router.get(
    "/head",
    response_model=HeadResponse,
    responses={status.HTTP_404_NOT_FOUND: {"model": HeadResponse}},
)
async def head_object(
    key: str | None = None,
    objects: ObjectService = Depends(get_object_service),
):
    try:
        return await objects.describe(key)
    except MissingParameterError as exc:
        raise _bad_request(exc) from exc
    except ObjectNotFoundError:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"exists": False})
    except StorageError as exc:
        logger.exception("Failed to read metadata for %s", key)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not read object metadata",
        ) from exc


@router.delete("/object", response_model=DeleteResponse)
async def delete_object(
    key: str | None = None,
    objects: ObjectService = Depends(get_object_service),
) -> DeleteResponse:
    try:
        return await objects.delete(key)
    except MissingParameterError as exc:
        raise _bad_request(exc) from exc
    except StorageError as exc:
        logger.exception("Failed to delete %s", key)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not delete object",
        ) from exc


@router.get("/object", response_class=StreamingResponse)
async def stream_object(
    key: str | None = None,
    objects: ObjectService = Depends(get_object_service),
) -> ObjectStreamResponse:
    try:
        stored = await objects.open(key)
    except MissingParameterError as exc:
        raise _bad_request(exc) from exc
    except StorageError as exc:
        # Every storage failure on this path answers 404.
        if not isinstance(exc, ObjectNotFoundError):
            logger.exception("Failed to fetch %s", key)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Object not found") from exc

    metadata = stored.metadata
    headers = {}
    if metadata.content_length is not None:
        headers["Content-Length"] = str(metadata.content_length)
    return ObjectStreamResponse(
        stored,
        media_type=metadata.content_type or "application/octet-stream",
        headers=headers,
    )
