from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UploadUrlRequest(CamelModel):
    content_type: str | None = None
    ext: str | None = None


class UploadUrlResponse(CamelModel):
    signed_url: str
    key: str
    expires_at: datetime
    object_url: str | None = None


class DownloadUrlResponse(CamelModel):
    signed_url: str
    expires_at: datetime


class HeadResponse(CamelModel):
    exists: bool
    content_type: str | None = None
    content_length: int | None = None
    last_modified: datetime | None = None


class DeleteResponse(CamelModel):
    ok: bool
    key: str
