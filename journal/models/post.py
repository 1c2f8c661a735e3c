"""
Memory Journal Backend — Post ("memory") SQLAlchemy Model
===========================================================

What:  ORM model representing the `posts` table.
Why:   A post is a journal entry owned by exactly one group.

Relationship to groups:
    group_id is a plain indexed column, not a foreign key. Groups can be
    deleted while their posts remain, and a post can outlive its group; the
    services report a missing parent group as its own 404 cause.
"""

import uuid
from datetime import datetime, timezone
from typing import List

from sqlalchemy import JSON, Boolean, DateTime, Index, Integer, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from journal.database import Base


class Post(Base):
    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    group_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    nickname: Mapped[str] = mapped_column(String(255), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    post_password: Mapped[str] = mapped_column(String(255), nullable=False)
    image_url: Mapped[str] = mapped_column(Text, nullable=False)
    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    # Free-form date string supplied by the client ("2024-02-22", "봄 소풍 날" ...)
    moment: Mapped[str] = mapped_column(String(255), nullable=False)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False)

    like_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )
    comment_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_posts_group_id_created_at", "group_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Post(id={self.id}, group_id={self.group_id}, title='{self.title}', "
            f"likes={self.like_count}, comments={self.comment_count})>"
        )
