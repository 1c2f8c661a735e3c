"""
Memory Journal Backend — Image Upload Service
===============================================

What:  Orchestrates POST /api/image: store the file, record it, build its URL.
Who:   Called by journal/routes/images.py.

Workflow:
    1. FileService validates and writes the bytes
    2. An Image row records the stored name, type and URL
    3. If the insert fails, the stored file is removed before re-raising
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from journal.exceptions import DatabaseError
from journal.models.image import Image
from journal.schemas.image import ImageUploadResponse
from journal.services.file_service import FileService, file_service as default_file_service

logger = logging.getLogger(__name__)


class ImageService:

    def __init__(self, files: Optional[FileService] = None):
        self.files = files or default_file_service

    async def upload_image(
        self,
        db: AsyncSession,
        filename: str,
        content: bytes,
        base_url: str,
        content_length: Optional[int] = None,
    ) -> ImageUploadResponse:
        """
        Args:
            base_url: request base URL ending in "/", e.g. "http://host:3000/"

        Returns:
            ImageUploadResponse with imageUrl = {base_url}uploads/{stored name}
        """
        absolute_path, stored_name, mime_type = await self.files.validate_and_store(
            filename=filename,
            content=content,
            content_length=content_length,
        )
        url = f"{base_url}uploads/{stored_name}"

        try:
            db.add(Image(filename=stored_name, content_type=mime_type, url=url))
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to record image %s: %s", stored_name, str(e), exc_info=True)
            await self.files.cleanup_file(absolute_path)
            raise DatabaseError(context={"filename": stored_name, "error_type": type(e).__name__})

        logger.info("Image uploaded: %s (%s, %d bytes)", stored_name, mime_type, len(content))
        return ImageUploadResponse(image_url=url)


image_service = ImageService()
