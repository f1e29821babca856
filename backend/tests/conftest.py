import io
import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest
import pytest_asyncio
from botocore.exceptions import ClientError
from botocore.response import StreamingBody
from httpx import AsyncClient, ASGITransport

# Ensure project root is on sys.path
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("ENV", "test")
os.environ.setdefault("S3_BUCKET", "test-bucket")
os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "test")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "test")

from app.core.config import Settings, get_settings
from app.services.storage import StorageService


def _client_error(operation: str, code: str, status_code: int) -> ClientError:
    return ClientError(
        {
            "Error": {"Code": code, "Message": code},
            "ResponseMetadata": {"HTTPStatusCode": status_code},
        },
        operation,
    )


class InMemoryS3Client:
    """Stands in for a boto3 S3 client; objects live in a dict keyed by (bucket, key)."""

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], dict] = {}
        self.calls: list[str] = []
        self.fail_with: ClientError | None = None

    def _check_failure(self, operation: str) -> None:
        self.calls.append(operation)
        if self.fail_with is not None:
            raise self.fail_with

    def generate_presigned_url(self, client_method, Params, ExpiresIn, HttpMethod=None):
        self._check_failure("generate_presigned_url")
        return (
            f"https://{Params['Bucket']}.s3.test/{Params['Key']}"
            f"?method={HttpMethod}&expires={ExpiresIn}"
        )

    def put_object(self, Bucket, Key, Body, ContentType="binary/octet-stream"):
        self._check_failure("put_object")
        self.objects[(Bucket, Key)] = {
            "Body": bytes(Body),
            "ContentType": ContentType,
            "LastModified": datetime.now(timezone.utc),
        }
        return {}

    def head_object(self, Bucket, Key):
        self._check_failure("head_object")
        stored = self.objects.get((Bucket, Key))
        if stored is None:
            raise _client_error("HeadObject", "404", 404)
        return {
            "ContentType": stored["ContentType"],
            "ContentLength": len(stored["Body"]),
            "LastModified": stored["LastModified"],
        }

    def get_object(self, Bucket, Key):
        self._check_failure("get_object")
        stored = self.objects.get((Bucket, Key))
        if stored is None:
            raise _client_error("GetObject", "NoSuchKey", 404)
        data = stored["Body"]
        return {
            "Body": StreamingBody(io.BytesIO(data), len(data)),
            "ContentType": stored["ContentType"],
            "ContentLength": len(data),
            "LastModified": stored["LastModified"],
        }

    def delete_object(self, Bucket, Key):
        self._check_failure("delete_object")
        self.objects.pop((Bucket, Key), None)
        return {}


@pytest.fixture
def error_factory():
    return _client_error


@pytest.fixture
def settings() -> Settings:
    get_settings.cache_clear()
    return Settings(
        _env_file=None,
        ENV="test",
        S3_BUCKET="test-bucket",
        AWS_REGION="us-east-1",
        AWS_ACCESS_KEY_ID="test",
        AWS_SECRET_ACCESS_KEY="test",
        CORS_ORIGIN="https://app.example.com, https://admin.example.com",
    )


@pytest.fixture
def s3_client() -> InMemoryS3Client:
    return InMemoryS3Client()


@pytest.fixture
def storage(settings, s3_client) -> StorageService:
    return StorageService(settings, client=s3_client)


@pytest.fixture
def app_instance(settings, storage):
    from app.main import create_app

    return create_app(settings=settings, storage=storage)


@pytest_asyncio.fixture
async def client(app_instance):
    transport = ASGITransport(app=app_instance)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
