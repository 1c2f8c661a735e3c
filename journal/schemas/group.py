"""
Memory Journal Backend — Group Request/Response Schemas
=========================================================

What:  API contract for /api/groups endpoints.
Why:   Keeps the stored secret out of every response and validates bodies
       before any service code runs.
"""

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from journal.models.group import Group
from journal.schemas.common import CamelModel

# "lastest" is accepted because the existing web client sends that spelling
GroupSort = Literal["latest", "lastest", "mostPosted", "mostLiked", "mostBadge"]


class GroupCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=255)
    image_url: str = Field(description="URL returned by POST /api/image")
    is_public: bool
    introduction: str


class GroupUpdate(CamelModel):
    """
    PATCH body. `password` authorizes the change; every other field is
    optional and only fields present in the body are written.
    """
    password: str = Field(min_length=1)
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    image_url: Optional[str] = None
    is_public: Optional[bool] = None
    introduction: Optional[str] = None


class GroupResponse(CamelModel):
    """Full group representation (create, detail, update)."""
    id: uuid.UUID
    name: str
    image_url: str
    is_public: bool
    like_count: int
    badge_count: int
    badges: List[str]
    post_count: int
    created_at: datetime
    introduction: str

    @classmethod
    def from_model(cls, group: Group) -> "GroupResponse":
        return cls(
            id=group.id,
            name=group.name,
            image_url=group.image_url,
            is_public=group.is_public,
            like_count=group.like_count,
            badge_count=group.badge_count,
            badges=list(group.badges or []),
            post_count=group.post_count,
            created_at=group.created_at,
            introduction=group.introduction,
        )


class GroupListItem(CamelModel):
    """Group card in GET /api/groups; badge labels are left to the detail view."""
    id: uuid.UUID
    name: str
    image_url: str
    is_public: bool
    like_count: int
    badge_count: int
    post_count: int
    created_at: datetime
    introduction: str

    @classmethod
    def from_model(cls, group: Group) -> "GroupListItem":
        return cls(
            id=group.id,
            name=group.name,
            image_url=group.image_url,
            is_public=group.is_public,
            like_count=group.like_count,
            badge_count=group.badge_count,
            post_count=group.post_count,
            created_at=group.created_at,
            introduction=group.introduction,
        )
