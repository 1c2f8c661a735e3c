"""Create journal tables

Revision ID: 001
Revises: None
Create Date: 2025-01-01 00:00:00.000000+00:00

What:  Creates groups, posts, comments and images with their listing indexes.
How:   Portable column types (sa.Uuid, sa.JSON, timezone-aware timestamps);
       on PostgreSQL these become UUID, JSON and TIMESTAMPTZ.

Posts and comments reference their parent by id without a foreign key:
deleting a group leaves its posts, deleting a post leaves its comments.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def _counter(name: str) -> sa.Column:
    return sa.Column(name, sa.Integer(), nullable=False, server_default=sa.text("0"))


def upgrade() -> None:
    op.create_table(
        "groups",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("image_url", sa.Text(), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        sa.Column("introduction", sa.Text(), nullable=False),
        sa.Column("password", sa.String(255), nullable=False),
        _counter("like_count"),
        _counter("post_count"),
        # Always equal to the length of badges
        _counter("badge_count"),
        sa.Column("badges", sa.JSON(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    # Anniversary sweep scans a one-day created_at range
    op.create_index("idx_groups_created_at", "groups", ["created_at"])

    op.create_table(
        "posts",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("group_id", sa.Uuid(), nullable=False),
        sa.Column("nickname", sa.String(255), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("post_password", sa.String(255), nullable=False),
        sa.Column("image_url", sa.Text(), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("location", sa.String(255), nullable=False),
        sa.Column("moment", sa.String(255), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        _counter("like_count"),
        _counter("comment_count"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_posts_group_id_created_at", "posts", ["group_id", "created_at"])

    op.create_table(
        "comments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("post_id", sa.Uuid(), nullable=False),
        sa.Column("nickname", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("password", sa.String(255), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_comments_post_id_created_at", "comments", ["post_id", "created_at"])

    op.create_table(
        "images",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("filename", sa.String(255), nullable=False),
        sa.Column("content_type", sa.String(100), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("filename"),
    )


def downgrade() -> None:
    """Drops every journal table; all data is lost."""
    op.drop_table("images")
    op.drop_index("idx_comments_post_id_created_at", table_name="comments")
    op.drop_table("comments")
    op.drop_index("idx_posts_group_id_created_at", table_name="posts")
    op.drop_table("posts")
    op.drop_index("idx_groups_created_at", table_name="groups")
    op.drop_table("groups")
