"""
Memory Journal Backend — Image Upload Schemas
===============================================
"""

from pydantic import Field

from journal.schemas.common import CamelModel


class ImageUploadResponse(CamelModel):
    """
    Returned by POST /api/image. The client copies imageUrl into a group or
    post body; nothing links the image record to those entities.
    """
    image_url: str = Field(description="Public URL of the stored file")
