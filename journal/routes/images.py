"""
Memory Journal Backend — Image Upload & Serving Routes
========================================================

What:  POST /api/image stores an uploaded image and returns its public URL;
       GET /uploads/{filename} serves stored images back.
Who:   The web client uploads first, then copies imageUrl into a group or
       memory body.

Request Flow (upload):
    1. Client sends multipart/form-data with an `image` field
    2. Missing field → 400 {"message": "이미지 파일이 필요합니다"}
    3. ImageService validates (extension, size, Pillow sniff), stores, records
    4. 200 {"imageUrl": "<base>/uploads/<uuid>.<ext>"}
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from journal.database import get_db_session
from journal.exceptions import ValidationError
from journal.schemas.common import ErrorResponse
from journal.schemas.image import ImageUploadResponse
from journal.services.file_service import file_service
from journal.services.image_service import image_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Images"])

MSG_IMAGE_REQUIRED = "이미지 파일이 필요합니다"


@router.post(
    "/api/image",
    response_model=ImageUploadResponse,
    responses={400: {"description": "Missing or unsupported image", "model": ErrorResponse}},
    summary="Upload an image",
    description="Accepts PNG, JPEG, GIF or WebP in the multipart field `image`.",
)
async def upload_image(
    request: Request,
    image: Optional[UploadFile] = File(default=None, description="Image file"),
    db: AsyncSession = Depends(get_db_session),
) -> ImageUploadResponse:
    if image is None:
        raise ValidationError(message=MSG_IMAGE_REQUIRED, field="image")

    try:
        content = await image.read()
        logger.info(
            "Received image upload: filename=%s, size=%d bytes",
            image.filename or "unknown",
            len(content),
        )
        return await image_service.upload_image(
            db,
            filename=image.filename or "",
            content=content,
            base_url=str(request.base_url),
            content_length=image.size,
        )
    finally:
        await image.close()


@router.get(
    "/uploads/{filename:path}",
    summary="Serve an uploaded image",
    responses={200: {"description": "Image file"}, 404: {"description": "File not found"}},
)
async def serve_upload(filename: str) -> FileResponse:
    path = file_service.resolve_path(filename)
    return FileResponse(
        path=str(path),
        headers={"Cache-Control": "public, max-age=86400"},
    )
