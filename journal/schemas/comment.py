"""
Memory Journal Backend — Comment Request/Response Schemas
===========================================================
"""

import uuid
from datetime import datetime

from pydantic import Field

from journal.models.comment import Comment
from journal.schemas.common import CamelModel


class CommentCreate(CamelModel):
    """Body for POST (create) and PUT (full replace); all three fields are required."""
    nickname: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    password: str = Field(min_length=1, max_length=255)


class CommentResponse(CamelModel):
    id: uuid.UUID
    nickname: str
    content: str
    created_at: datetime

    @classmethod
    def from_model(cls, comment: Comment) -> "CommentResponse":
        return cls(
            id=comment.id,
            nickname=comment.nickname,
            content=comment.content,
            created_at=comment.created_at,
        )


class CommentListItem(CommentResponse):
    """List item; carries the parent post's title for the comment drawer header."""
    post_title: str

    @classmethod
    def from_model_with_title(cls, comment: Comment, post_title: str) -> "CommentListItem":
        return cls(
            id=comment.id,
            post_title=post_title,
            nickname=comment.nickname,
            content=comment.content,
            created_at=comment.created_at,
        )
