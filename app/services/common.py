from datetime import datetime, timezone
from typing import Any, Iterable
from urllib.parse import quote

from bson import ObjectId

from app.core import validators
from app.core.errors import ValidationError


def new_id() -> str:
    return str(ObjectId())


def utcnow() -> datetime:
    now = datetime.now(timezone.utc)
    # Mongo keeps milliseconds only
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def require_id(value: Any, message: str = "Invalid id format") -> str:
    checked = validators.identifier(value)
    if checked is None:
        raise ValidationError(message)
    return checked


def check_upload(data: bytes, content_type: str, allowed: Iterable[str], max_bytes: int) -> None:
    """Reject a payload before anything gets written."""
    allowed = list(allowed)
    if content_type not in allowed:
        raise ValidationError(f"File type {content_type or 'unknown'} is not allowed")
    if not data:
        raise ValidationError("Uploaded file is empty")
    if len(data) > max_bytes:
        raise ValidationError(f"File exceeds the {max_bytes // (1024 * 1024)} MB limit")


def attachment_headers(filename: str) -> dict:
    ascii_name = filename.encode("ascii", "ignore").decode().replace('"', "") or "download"
    return {
        "Content-Disposition": f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"
    }
