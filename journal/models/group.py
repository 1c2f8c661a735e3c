"""
Memory Journal Backend — Group SQLAlchemy Model
=================================================

What:  ORM model representing the `groups` table.
Why:   A group is the top-level community: it owns posts and accrues its own
       likes and badges.
Who:   Used by GroupService for CRUD, by the engagement engine for counters
       and badges, and by Alembic for schema management.

Column notes:
    - like_count / post_count / badge_count: engagement counters. Only the
      engagement engine writes them, and only via atomic UPDATEs or under a
      row lock.
    - badges: JSON array of labels, append-only, in award order.
      badge_count mirrors len(badges); both change together.
    - password: the group's shared secret, compared verbatim on mutations.
    - created_at: UTC; the anniversary sweep queries it by day window.
"""

import uuid
from datetime import datetime, timezone
from typing import List

from sqlalchemy import JSON, Boolean, DateTime, Index, Integer, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from journal.database import Base


class Group(Base):
    """
    A community that owns posts and collects likes and milestone badges.

    Query Patterns:
        - List groups sorted by created_at / post_count / like_count / badge_count
        - Anniversary sweep: WHERE created_at >= :day_start AND created_at < :day_end
    """

    __tablename__ = "groups"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    image_url: Mapped[str] = mapped_column(Text, nullable=False)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False)
    introduction: Mapped[str] = mapped_column(Text, nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)

    # ── Engagement counters ───────────────────────────────────────────────
    like_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )
    post_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )
    badge_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )

    # ── Badges ────────────────────────────────────────────────────────────
    # Reassigned (never mutated in place) so the ORM sees the change
    badges: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_groups_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Group(id={self.id}, name='{self.name}', likes={self.like_count}, "
            f"posts={self.post_count}, badges={self.badge_count})>"
        )
