"""Router – image upload."""

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from src.app.config import settings
from src.app.schemas.upload import ErrorResponse, UploadResponse
from src.app.services.multipart import MultipartError, read_first_file_part
from src.app.services.upload_service import (
    FailureKind,
    UploadFailure,
    UploadImageInput,
    UploadSuccess,
    upload_image,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["uploads"])

MULTIPART_BODY = {
    "requestBody": {
        "required": True,
        "content": {
            "multipart/form-data": {
                "schema": {
                    "type": "object",
                    "properties": {"file": {"type": "string", "format": "binary"}},
                    "required": ["file"],
                },
            },
        },
    },
}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


@router.post(
    "/uploads",
    summary="Upload an image",
    status_code=status.HTTP_201_CREATED,
    response_model=UploadResponse,
    responses={
        201: {"description": "Image uploaded"},
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    openapi_extra=MULTIPART_BODY,
)
async def upload_image_route(request: Request) -> UploadResponse | JSONResponse:
    """
    Upload an image and return its public URL.

    The first file part of the multipart body is used, capped at
    ``settings.max_upload_size`` bytes while the body is read. The upload is
    still attempted on the capped data; the size check only happens once it
    returns.
    """
    try:
        part = await read_first_file_part(
            request.headers, request.stream(), limit=settings.max_upload_size
        )
    except MultipartError as exc:
        return _error(status.HTTP_400_BAD_REQUEST, exc.message)

    if part is None:
        return _error(status.HTTP_400_BAD_REQUEST, "File is required")

    file_name = part.file.filename or ""
    try:
        result = await upload_image(
            UploadImageInput(
                file_name=file_name,
                content_type=part.file.content_type or "",
                content_stream=part.file,
            )
        )
    finally:
        await part.file.close()

    # ── size check runs after the upload call ──
    if part.truncated:
        # whatever the upload service stored from the capped data is left in place
        logger.info(
            "Upload %r exceeded %d bytes; rejected after upload, stored copy kept",
            file_name,
            settings.max_upload_size,
        )
        return _error(status.HTTP_400_BAD_REQUEST, "File size limit reached.")

    if isinstance(result, UploadSuccess):
        return UploadResponse(url=result.url)

    if isinstance(result, UploadFailure) and result.kind == FailureKind.INVALID_FILE_FORMAT:
        return _error(status.HTTP_400_BAD_REQUEST, result.message)

    logger.error("Unhandled upload result for %r: %r", file_name, result)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal error")
