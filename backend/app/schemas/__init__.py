from app.schemas.storage import (
    DeleteResponse,
    DownloadUrlResponse,
    HeadResponse,
    UploadUrlRequest,
    UploadUrlResponse,
)

__all__ = [
    "UploadUrlRequest",
    "UploadUrlResponse",
    "DownloadUrlResponse",
    "HeadResponse",
    "DeleteResponse",
]
