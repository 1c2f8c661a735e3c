"""
Memory Journal Backend — File Storage Service
===============================================

What:  Validates uploaded images and writes them under STORAGE_ROOT.
Why:   Keeps every file system operation (and its safety checks) in one place.
How:   Extension check, size check, content sniffing with Pillow, then an
       async write to a uuid-named file.
Who:   Called by ImageService during POST /api/image; resolve_path backs the
       GET /uploads/{filename} route.

Security Model:
    1. Extension check:  fast rejection of obviously wrong files
    2. Size check:       Content-Length first, then the real byte count
    3. Content sniffing: Pillow identifies the format from the header bytes
                         and verify() rejects truncated or corrupt images
    4. UUID filename:    no client input reaches the file system
    5. resolve_path:     served names must stay inside STORAGE_ROOT
"""

import io
import logging
import os
import uuid
from pathlib import Path
from typing import Optional, Tuple

import aiofiles
from PIL import Image as PILImage
from PIL import UnidentifiedImageError

from journal.config import settings
from journal.exceptions import FileStorageError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

MSG_UNSUPPORTED_IMAGE = "지원하지 않는 이미지 형식입니다"

# Pillow format name → (MIME type, stored extension)
ALLOWED_FORMATS = {
    "PNG": ("image/png", ".png"),
    "JPEG": ("image/jpeg", ".jpg"),
    "GIF": ("image/gif", ".gif"),
    "WEBP": ("image/webp", ".webp"),
}

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}


class FileService:
    """
    Upload lifecycle:
        1. validate_extension()  (no bytes read)
        2. validate_size()
        3. detect_image_type()   (Pillow)
        4. store_file()          → <uuid>.<ext> directly under STORAGE_ROOT
        5. cleanup_file() if a later step (the DB insert) fails

    Files sit flat in one directory because they are served back as
    /uploads/<name>; the uuid keeps names unique.
    """

    def __init__(self, storage_root: Optional[str] = None):
        """
        Args:
            storage_root: Override the configured directory (used in tests).
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    def validate_extension(self, filename: str) -> str:
        """Returns the lowercase extension; raises ValidationError if not allowed."""
        ext = Path(filename or "").suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=MSG_UNSUPPORTED_IMAGE,
                field="image",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Reject files over MAX_FILE_SIZE.

        The Content-Length header is checked first; the real byte count is
        checked as well since clients can under-report.
        """
        max_mb = settings.max_file_size / (1024 * 1024)
        message = f"이미지 크기는 {max_mb:.0f}MB를 넘을 수 없습니다"

        if content_length and content_length > settings.max_file_size:
            raise ValidationError(
                message=message,
                field="image",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )
        if actual_size > settings.max_file_size:
            raise ValidationError(
                message=message,
                field="image",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )
        if actual_size == 0:
            raise ValidationError(message=MSG_UNSUPPORTED_IMAGE, field="image", context={"actual_size": 0})

    def detect_image_type(self, content: bytes) -> Tuple[str, str]:
        """
        Identify the image format from its bytes.

        Returns:
            (mime_type, extension) for the detected format; the extension
            comes from the content, not from the client's filename.

        Raises:
            ValidationError if Pillow cannot read the bytes as an allowed format
        """
        try:
            with PILImage.open(io.BytesIO(content)) as img:
                fmt = img.format
                img.verify()
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise ValidationError(
                message=MSG_UNSUPPORTED_IMAGE,
                field="image",
                context={"error": str(e)},
            )

        if fmt not in ALLOWED_FORMATS:
            raise ValidationError(
                message=MSG_UNSUPPORTED_IMAGE,
                field="image",
                context={"detected_format": fmt, "allowed": sorted(ALLOWED_FORMATS)},
            )
        return ALLOWED_FORMATS[fmt]

    async def store_file(self, content: bytes, extension: str) -> Tuple[str, str]:
        """
        Write validated bytes to STORAGE_ROOT/<uuid><ext>.

        Returns:
            (absolute_path, filename)

        Raises:
            FileStorageError on OS-level failures (disk full, permissions)
        """
        filename = f"{uuid.uuid4()}{extension}"
        absolute_path = self.storage_root / filename

        try:
            self.storage_root.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(context={"path": str(absolute_path), "os_error": str(e)})

        logger.info("File stored: %s (%d bytes)", filename, len(content))
        return str(absolute_path), filename

    async def cleanup_file(self, file_path: str) -> None:
        """Best-effort removal of a stored file; failures are logged only."""
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", file_path, str(e))

    async def validate_and_store(
        self,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> Tuple[str, str, str]:
        """
        Full validation and storage pipeline, cheapest checks first.

        Returns:
            (absolute_path, stored_filename, mime_type)
        """
        self.validate_extension(filename)
        self.validate_size(content_length, len(content))
        mime_type, ext = self.detect_image_type(content)
        absolute_path, stored_name = await self.store_file(content, ext)
        return absolute_path, stored_name, mime_type

    def resolve_path(self, filename: str) -> Path:
        """
        Map a requested /uploads name to a file inside STORAGE_ROOT.

        Raises:
            NotFoundError if the name escapes STORAGE_ROOT or no such file exists
        """
        candidate = (self.storage_root / filename).resolve()
        if self.storage_root not in candidate.parents or not candidate.is_file():
            raise NotFoundError(resource="upload", resource_id=filename)
        return candidate


file_service = FileService()
