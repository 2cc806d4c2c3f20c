"""
MedZeal Backend: Thumbnail Storage Service
===========================================

What:  Validates and stores blog thumbnail images; resolves stored files for serving.
Who:   BlogService on create/delete; the /api/files route.

Checks, cheapest first:
    1. extension   .png .jpg .jpeg .webp
    2. size        MAX_FILE_SIZE (Content-Length first, then the actual bytes)
    3. content     libmagic must agree that the bytes are one of the image types

Layout:
    STORAGE_ROOT/YYYY/MM/DD/<uuid>.<ext>

    The relative path is what the blog node references, as /api/files/<relative>.
    No part of the stored name comes from the client.
"""

import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

import aiofiles
import magic

from medzeal.config import settings
from medzeal.exceptions import FileStorageError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/webp": ".webp",
}

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp"}

PUBLIC_PREFIX = "/api/files/"


class FileService:
    """Thumbnail files under one storage root."""

    def __init__(self, storage_root: Optional[str] = None):
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)

    def validate_extension(self, filename: str) -> str:
        ext = Path(filename or "").suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"Thumbnail type '{ext or 'none'}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="thumbnail",
                context={"extension": ext},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Raises:
            ValidationError: empty file, or larger than MAX_FILE_SIZE
        """
        max_mb = settings.max_file_size / (1024 * 1024)
        if (content_length and content_length > settings.max_file_size) or actual_size > settings.max_file_size:
            raise ValidationError(
                message=f"Thumbnail exceeds the maximum size of {max_mb:.0f}MB.",
                field="thumbnail",
                context={"max_size": settings.max_file_size, "actual_size": actual_size},
            )
        if actual_size == 0:
            raise ValidationError(message="Thumbnail is required!", field="thumbnail")

    def validate_mime_type(self, content: bytes) -> str:
        """Detected MIME type from the file's magic bytes."""
        try:
            mime_type = magic.from_buffer(content, mime=True)
        except Exception as e:
            logger.error("MIME detection failed: %s", e)
            raise FileStorageError(
                message="Could not verify the thumbnail type. Please try again.",
                context={"error": type(e).__name__},
            )

        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message="Thumbnail must be a PNG, JPEG or WebP image.",
                field="thumbnail",
                context={"detected_mime": mime_type},
            )
        return mime_type

    def _generate_storage_path(self, extension: str) -> Tuple[Path, str]:
        relative_path = f"{datetime.now(timezone.utc):%Y/%m/%d}/{uuid.uuid4()}{extension}"
        return self.storage_root / relative_path, relative_path

    async def store_file(self, content: bytes, extension: str) -> str:
        """Write the bytes; returns the path relative to the storage root."""
        absolute_path, relative_path = self._generate_storage_path(extension)
        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Writing %s failed: %s", absolute_path, e)
            raise FileStorageError(
                message="Failed to save the thumbnail. Please try again.",
                context={"path": relative_path, "os_error": str(e)},
            )

        logger.info("Thumbnail stored: %s (%d bytes)", relative_path, len(content))
        return relative_path

    async def validate_and_store(
        self,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> str:
        ext = self.validate_extension(filename)
        self.validate_size(content_length, len(content))
        self.validate_mime_type(content)
        return await self.store_file(content, ext)

    def public_url(self, relative_path: str) -> str:
        return f"{PUBLIC_PREFIX}{relative_path}"

    def relative_from_url(self, url: str) -> Optional[str]:
        """Stored path behind one of our URLs; None for external URLs."""
        if url and url.startswith(PUBLIC_PREFIX):
            return url[len(PUBLIC_PREFIX):]
        return None

    def resolve(self, relative_path: str) -> Path:
        """
        Absolute path of a stored file.

        Raises:
            NotFoundError: outside the storage root, or no such file
        """
        candidate = (self.storage_root / relative_path).resolve()
        if not candidate.is_relative_to(self.storage_root) or not candidate.is_file():
            raise NotFoundError(resource="File", resource_id=relative_path)
        return candidate

    async def cleanup_file(self, relative_path: str) -> None:
        """Best-effort delete; a missing file is not an error."""
        try:
            path = self.resolve(relative_path)
        except NotFoundError:
            logger.debug("Cleanup: %s already gone", relative_path)
            return
        try:
            os.remove(path)
            logger.info("Removed thumbnail %s", relative_path)
        except OSError as e:
            logger.warning("Failed to remove %s: %s", relative_path, e)


file_service = FileService()
