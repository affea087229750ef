"""Service layer – housekeeping for the upload directory."""

from __future__ import annotations

import logging
from pathlib import Path

from src.app.config import settings

logger = logging.getLogger(__name__)


def enforce_storage_limit(directory: Path) -> None:
    """
    Keep at most ``settings.max_storage_files`` stored files in *directory*.

    When the limit is exceeded the **oldest** files (by modification time)
    are deleted until the count is back within the limit.
    """
    files = sorted(
        (f for f in directory.iterdir() if f.is_file()),
        key=lambda f: f.stat().st_mtime,
    )

    max_files = settings.max_storage_files
    if len(files) <= max_files:
        return

    for file in files[: len(files) - max_files]:
        try:
            file.unlink()
            logger.info("Deleted old upload: %s", file.name)
        except OSError as exc:
            logger.warning("Failed to delete %s: %s", file.name, exc)
