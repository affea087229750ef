"""Router – health check."""

import os

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from src.app.config import settings

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> JSONResponse:
    """Liveness / readiness probe: the upload directory must be writable."""
    if settings.upload_dir.is_dir() and os.access(settings.upload_dir, os.W_OK):
        return JSONResponse({"status": "ok"})
    return JSONResponse({"status": "unavailable"}, status_code=503)
