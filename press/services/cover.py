"""
Cover image ingestion.

Ingestion is the only path by which an uploaded file becomes a post
cover: the declared media type is checked against the allow-list, the
upload is staged to disk, optionally verified with Pillow, and finally
moved into the cover store under a fresh random name.

`CoverIngestor.ingest` never raises. It returns the stored name, or None
when the cover was rejected; callers decide whether that is fatal.
"""

from pathlib import Path
from typing import Protocol
from uuid import uuid4

import aiofiles
from fastapi.concurrency import run_in_threadpool
from PIL import Image

from press.configs import settings
from press.monitoring import get_logger
from press.services.storage import FileStorage, get_storage_service

logger = get_logger(__name__)

COVER_EXTENSION = ".jpg"


class UploadLike(Protocol):
    """The part of an uploaded file the ingestor relies on."""

    filename: str | None
    content_type: str | None

    async def read(self, size: int = -1) -> bytes: ...


def is_image(path: Path) -> bool:
    """Check that a file on disk is a readable image."""
    try:
        with Image.open(path) as img:
            img.verify()
    except Exception:  # noqa: BLE001
        return False
    return True


class CoverIngestor:
    """Validate uploaded covers and move them into durable storage."""

    def __init__(
        self,
        storage: FileStorage | None = None,
        allowed_types: list[str] | None = None,
        *,
        verify_content: bool | None = None,
        max_size_mb: int | None = None,
    ) -> None:
        """
        Initialize the ingestor.

        Args:
            storage: Storage backend. Defaults to the configured one.
            allowed_types: Accepted declared media types
            verify_content: Open the staged file with Pillow before accepting it
            max_size_mb: Largest accepted upload
        """
        self.storage = storage or get_storage_service()
        self.allowed_types = allowed_types or list(settings.COVER_ALLOWED_TYPES)
        self.verify_content = (
            settings.COVER_VERIFY_CONTENT if verify_content is None else verify_content
        )
        self.max_size_bytes = (max_size_mb or settings.COVER_MAX_SIZE_MB) * 1024 * 1024
        self.chunk_size = settings.UPLOAD_CHUNK_SIZE

    async def ingest(self, upload: UploadLike) -> str | None:
        """
        Ingest an uploaded cover.

        Args:
            upload: Uploaded file

        Returns:
            str | None: Stored file name, or None if the cover was rejected
        """
        content_type = upload.content_type
        if not content_type or content_type not in self.allowed_types:
            logger.info(
                "cover_rejected",
                reason="media_type",
                content_type=content_type,
                filename=upload.filename,
            )
            return None

        staged: Path | None = None
        try:
            staged = self.storage.staging_path()
            if not await self._stage(upload, staged):
                logger.info("cover_rejected", reason="too_large", filename=upload.filename)
                return None

            if self.verify_content and not await run_in_threadpool(is_image, staged):
                logger.info("cover_rejected", reason="not_an_image", filename=upload.filename)
                return None

            stored_name = f"{uuid4()}{COVER_EXTENSION}"
            if not await self.storage.relocate(staged, stored_name):
                logger.warning("cover_rejected", reason="relocate_failed", filename=upload.filename)
                return None
            staged = None
        except Exception:
            logger.exception("cover_ingestion_failed", filename=upload.filename)
            return None
        finally:
            if staged is not None:
                await self.storage.discard(staged)

        logger.info("cover_ingested", stored_name=stored_name)
        return stored_name

    async def _stage(self, upload: UploadLike, target: Path) -> bool:
        """
        Stream the upload to `target` in chunks.

        Returns:
            bool: False if the upload exceeded the size limit
        """
        written = 0
        async with aiofiles.open(target, "wb") as f:
            while chunk := await upload.read(self.chunk_size):
                written += len(chunk)
                if written > self.max_size_bytes:
                    return False
                await f.write(chunk)
        return True
