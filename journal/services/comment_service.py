"""
Memory Journal Backend — Comment Service
==========================================

What:  Create, list, replace and delete comments on a memory.
Who:   Called by journal/routes/comments.py.

Notes:
    Comments are listed oldest first, each carrying the parent post's title.
    Deleting a post leaves its comments behind; they stay editable and
    deletable by id.
"""

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from journal.exceptions import NotFoundError
from journal.models.comment import Comment
from journal.schemas.comment import CommentCreate, CommentListItem, CommentResponse
from journal.schemas.common import MessageResponse, Page
from journal.services.access import require_secret
from journal.services.engagement_service import engagement_service
from journal.services.post_service import post_service

logger = logging.getLogger(__name__)

MSG_POST_NOT_FOUND = "존재하지 않는 게시물입니다."


class CommentService:

    async def _load_comment(self, db: AsyncSession, comment_id: UUID) -> Comment:
        comment = await db.get(Comment, comment_id)
        if comment is None:
            raise NotFoundError(resource="comment", resource_id=str(comment_id))
        return comment

    async def create_comment(self, db: AsyncSession, post_id: UUID, data: CommentCreate) -> CommentResponse:
        await post_service.load_post(db, post_id, message=MSG_POST_NOT_FOUND)

        comment = Comment(
            post_id=post_id,
            nickname=data.nickname,
            content=data.content,
            password=data.password,
        )
        db.add(comment)
        await db.flush()
        await engagement_service.on_comment_created(db, post_id)
        logger.info("Comment created: %s on post %s", comment.id, post_id)
        return CommentResponse.from_model(comment)

    async def list_comments(
        self,
        db: AsyncSession,
        post_id: UUID,
        page: int = 1,
        page_size: int = 10,
    ) -> Page[CommentListItem]:
        post = await post_service.load_post(db, post_id, message=MSG_POST_NOT_FOUND)

        query = (
            select(Comment)
            .where(Comment.post_id == post_id)
            .order_by(Comment.created_at, Comment.id)
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        comments = (await db.execute(query)).scalars().all()
        total = (
            await db.execute(select(func.count(Comment.id)).where(Comment.post_id == post_id))
        ).scalar() or 0

        return Page[CommentListItem].build(
            items=[CommentListItem.from_model_with_title(c, post.title) for c in comments],
            page=page,
            page_size=page_size,
            total=total,
        )

    async def update_comment(self, db: AsyncSession, comment_id: UUID, data: CommentCreate) -> CommentResponse:
        """Replace nickname and content; `password` authorizes and is not changed."""
        comment = await self._load_comment(db, comment_id)
        require_secret(comment.password, data.password, "comment", str(comment_id))

        comment.nickname = data.nickname
        comment.content = data.content
        await db.flush()
        logger.info("Comment updated: %s", comment_id)
        return CommentResponse.from_model(comment)

    async def delete_comment(self, db: AsyncSession, comment_id: UUID, password: str) -> MessageResponse:
        comment = await self._load_comment(db, comment_id)
        require_secret(comment.password, password, "comment", str(comment_id))

        post_id = comment.post_id
        await db.delete(comment)
        await db.flush()
        await engagement_service.on_comment_deleted(db, post_id)
        logger.info("Comment deleted: %s from post %s", comment_id, post_id)
        return MessageResponse(message="답글 삭제 성공")


comment_service = CommentService()
