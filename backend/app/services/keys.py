import re
import secrets
from datetime import datetime, timezone
from typing import Final

UPLOAD_PREFIX: Final[str] = "uploads"
KEY_RANDOM_BYTES: Final[int] = 16


def _sanitize_extension(ext: str | None) -> str:
    if not ext:
        return ""
    return re.sub(r"[^A-Za-z0-9]+", "", ext.strip().lstrip("."))


def generate_upload_key(ext: str | None = None, now: datetime | None = None) -> str:
    """Build a new object key of the form ``uploads/YYYY-MM-DD/<32 hex>[.ext]``.

    Uniqueness is probabilistic: 128 bits from the OS CSPRNG, with no lookup
    against the bucket.
    """
    issued_at = now or datetime.now(timezone.utc)
    day = issued_at.astimezone(timezone.utc).strftime("%Y-%m-%d")
    token = secrets.token_hex(KEY_RANDOM_BYTES)
    suffix = _sanitize_extension(ext)
    key = f"{UPLOAD_PREFIX}/{day}/{token}"
    return f"{key}.{suffix}" if suffix else key
