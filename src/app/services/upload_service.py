"""Service layer – validate and persist uploaded images."""

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath
from typing import Protocol

from src.app.config import settings
from src.app.services.storage_service import enforce_storage_limit

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class AsyncByteStream(Protocol):
    async def read(self, size: int = -1) -> bytes: ...


class FailureKind(str, Enum):
    INVALID_FILE_FORMAT = "InvalidFileFormat"
    STORAGE_ERROR = "StorageError"


@dataclass(frozen=True)
class UploadImageInput:
    file_name: str
    content_type: str
    content_stream: AsyncByteStream


@dataclass(frozen=True)
class UploadSuccess:
    url: str


@dataclass(frozen=True)
class UploadFailure:
    kind: FailureKind
    message: str


UploadResult = UploadSuccess | UploadFailure


def build_storage_key(file_name: str) -> str:
    """Return a unique, filesystem-safe key: ``<uuid4>-<basename>``."""
    base_name = PurePath(file_name.replace("\\", "/")).name
    safe_name = _UNSAFE_CHARS.sub("_", base_name) or "upload"
    return f"{uuid.uuid4()}-{safe_name}"


async def upload_image(data: UploadImageInput) -> UploadResult:
    """
    Store an uploaded image and return its public URL.

    Only the declared content type is checked; anything outside
    ``settings.allowed_content_types`` is rejected before storage is touched.
    """
    if data.content_type.lower() not in settings.allowed_content_types_set:
        logger.info("Rejected %r: content type %r not allowed", data.file_name, data.content_type)
        return UploadFailure(kind=FailureKind.INVALID_FILE_FORMAT, message="Invalid file format.")

    key = build_storage_key(data.file_name)
    file_path = settings.upload_dir / key
    size = 0

    try:
        with open(file_path, "wb") as f:
            while True:
                chunk = await data.content_stream.read(CHUNK_SIZE)
                if not chunk:
                    break
                f.write(chunk)
                size += len(chunk)
    except OSError as exc:
        logger.error("Failed to store %s: %s", key, exc)
        file_path.unlink(missing_ok=True)
        return UploadFailure(kind=FailureKind.STORAGE_ERROR, message="Unable to store uploaded file.")

    logger.info("Stored %s (%d bytes)", key, size)
    enforce_storage_limit(settings.upload_dir)

    return UploadSuccess(url=f"{settings.public_url.rstrip('/')}/{key}")
