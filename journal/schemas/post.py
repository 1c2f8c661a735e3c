"""
Memory Journal Backend — Post Request/Response Schemas
========================================================

What:  API contract for memory (post) endpoints.

Secret naming:
    Create/update/delete bodies carry the secret as `postPassword`, while
    POST /api/posts/{id}/verify-password takes `password`
    (journal.schemas.common.PasswordRequest). Both spellings are what the
    existing client sends.
"""

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import AliasChoices, Field

from journal.models.post import Post
from journal.schemas.common import CamelModel

PostSort = Literal["latest", "lastest", "mostCommented", "mostLiked"]


class PostCreate(CamelModel):
    nickname: str = Field(min_length=1, max_length=255)
    title: str = Field(min_length=1, max_length=255)
    content: str
    post_password: str = Field(min_length=1, max_length=255)
    image_url: str
    tags: List[str] = Field(default_factory=list)
    location: str
    moment: str
    is_public: bool


class PostUpdate(CamelModel):
    """
    PATCH body; only fields present in the body are written.

    The moment may arrive as `date`, which is what the edit form sends.
    """
    post_password: str = Field(min_length=1)
    nickname: Optional[str] = Field(default=None, min_length=1, max_length=255)
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    content: Optional[str] = None
    image_url: Optional[str] = None
    tags: Optional[List[str]] = None
    location: Optional[str] = None
    moment: Optional[str] = Field(default=None, validation_alias=AliasChoices("moment", "date"))
    is_public: Optional[bool] = None


class PostDeleteRequest(CamelModel):
    post_password: str = Field(min_length=1)


class PostResponse(CamelModel):
    id: uuid.UUID
    group_id: uuid.UUID
    nickname: str
    title: str
    content: str
    image_url: str
    tags: List[str]
    location: str
    moment: str
    is_public: bool
    like_count: int
    comment_count: int
    created_at: datetime

    @classmethod
    def from_model(cls, post: Post) -> "PostResponse":
        return cls(
            id=post.id,
            group_id=post.group_id,
            nickname=post.nickname,
            title=post.title,
            content=post.content,
            image_url=post.image_url,
            tags=list(post.tags or []),
            location=post.location,
            moment=post.moment,
            is_public=post.is_public,
            like_count=post.like_count,
            comment_count=post.comment_count,
            created_at=post.created_at,
        )


class PostListItem(CamelModel):
    """Memory card in a group's feed; the body text is left to the detail view."""
    id: uuid.UUID
    nickname: str
    title: str
    image_url: str
    tags: List[str]
    location: str
    moment: str
    is_public: bool
    like_count: int
    comment_count: int
    created_at: datetime

    @classmethod
    def from_model(cls, post: Post) -> "PostListItem":
        return cls(
            id=post.id,
            nickname=post.nickname,
            title=post.title,
            image_url=post.image_url,
            tags=list(post.tags or []),
            location=post.location,
            moment=post.moment,
            is_public=post.is_public,
            like_count=post.like_count,
            comment_count=post.comment_count,
            created_at=post.created_at,
        )
