"""
Memory Journal Backend — Post (Memory) Service
================================================

What:  Business logic for memories: create under a group, list a group's
       feed, detail, update, delete, password verification, likes and
       visibility.
Who:   Called by journal/routes/posts.py.

Counters:
    Creating or deleting a post moves the owning group's post_count in the
    same transaction as the insert/delete. A like that reaches the badge
    threshold commits first, then awards the group badge separately (see
    EngagementService.apply_effects).
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import desc, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from journal.exceptions import DatabaseError, NotFoundError
from journal.models.post import Post
from journal.schemas.common import MessageResponse, Page, VisibilityResponse
from journal.schemas.post import (
    PostCreate,
    PostListItem,
    PostResponse,
    PostSort,
    PostUpdate,
)
from journal.services.access import require_secret, verify_secret
from journal.services.engagement_service import engagement_service
from journal.services.group_service import group_service

logger = logging.getLogger(__name__)

MSG_GROUP_NOT_FOUND = "존재하지 않는 그룹입니다"
MSG_PARENT_GROUP_NOT_FOUND = "상위 그룹이 존재하지 않습니다"
MSG_MEMORY_NOT_FOUND = "추억을 찾을 수 없습니다"

POST_SORT_COLUMNS = {
    "latest": Post.created_at,
    "lastest": Post.created_at,
    "mostCommented": Post.comment_count,
    "mostLiked": Post.like_count,
}


class PostService:

    async def load_post(self, db: AsyncSession, post_id: UUID, message: Optional[str] = None) -> Post:
        post = await db.get(Post, post_id)
        if post is None:
            if message:
                raise NotFoundError(resource="post", resource_id=str(post_id), message=message)
            raise NotFoundError(resource="post", resource_id=str(post_id))
        return post

    async def create_post(self, db: AsyncSession, group_id: UUID, data: PostCreate) -> PostResponse:
        """
        Insert a memory under `group_id` and count it against the group.

        Raises:
            NotFoundError: "존재하지 않는 그룹입니다" when the group is missing
        """
        await group_service.load_group(db, group_id, message=MSG_GROUP_NOT_FOUND)

        post = Post(
            group_id=group_id,
            nickname=data.nickname,
            title=data.title,
            content=data.content,
            post_password=data.post_password,
            image_url=data.image_url,
            tags=list(data.tags),
            location=data.location,
            moment=data.moment,
            is_public=data.is_public,
            like_count=0,
            comment_count=0,
        )
        db.add(post)
        await db.flush()

        await engagement_service.on_post_created(db, group_id)
        logger.info("Post created: %s in group %s", post.id, group_id)
        return PostResponse.from_model(post)

    async def list_posts(
        self,
        db: AsyncSession,
        group_id: UUID,
        page: int = 1,
        page_size: int = 10,
        sort_by: PostSort = "latest",
        keyword: Optional[str] = None,
        is_public: Optional[bool] = None,
    ) -> Page[PostListItem]:
        """Paginated feed of one group; keyword matches the title."""
        await group_service.load_group(db, group_id, message=MSG_GROUP_NOT_FOUND)

        try:
            filters = [Post.group_id == group_id]
            if keyword:
                filters.append(Post.title.icontains(keyword, autoescape=True))
            if is_public is not None:
                filters.append(Post.is_public.is_(is_public))

            sort_column = POST_SORT_COLUMNS.get(sort_by, Post.created_at)
            query = (
                select(Post)
                .where(*filters)
                .order_by(desc(sort_column), desc(Post.created_at), Post.id)
                .offset((page - 1) * page_size)
                .limit(page_size)
            )
            posts = (await db.execute(query)).scalars().all()
            total = (await db.execute(select(func.count(Post.id)).where(*filters))).scalar() or 0

            return Page[PostListItem].build(
                items=[PostListItem.from_model(p) for p in posts],
                page=page,
                page_size=page_size,
                total=total,
            )
        except SQLAlchemyError as e:
            logger.error("Database error listing posts of group %s: %s", group_id, str(e), exc_info=True)
            raise DatabaseError(context={"group_id": str(group_id), "error_type": type(e).__name__})

    async def get_post(self, db: AsyncSession, post_id: UUID) -> PostResponse:
        post = await self.load_post(db, post_id, message=MSG_MEMORY_NOT_FOUND)
        return PostResponse.from_model(post)

    async def update_post(self, db: AsyncSession, post_id: UUID, data: PostUpdate) -> PostResponse:
        post = await self.load_post(db, post_id)
        require_secret(post.post_password, data.post_password, "post", str(post_id))

        changes = data.model_dump(exclude_unset=True, exclude={"post_password"})
        for field_name, value in changes.items():
            if value is not None:
                setattr(post, field_name, list(value) if field_name == "tags" else value)
        await db.flush()
        logger.info("Post %s updated: %s", post_id, sorted(changes))
        return PostResponse.from_model(post)

    async def delete_post(self, db: AsyncSession, post_id: UUID, password: str) -> MessageResponse:
        """
        Delete a memory and uncount it from its group.

        Check order: post exists (404), group exists (404 with its own
        message), secret matches (403). Comments are left in place.
        """
        post = await self.load_post(db, post_id)
        await group_service.load_group(db, post.group_id, message=MSG_PARENT_GROUP_NOT_FOUND)
        require_secret(post.post_password, password, "post", str(post_id))

        group_id = post.group_id
        await db.delete(post)
        await db.flush()
        await engagement_service.on_post_deleted(db, group_id)
        logger.info("Post deleted: %s from group %s", post_id, group_id)
        return MessageResponse(message="게시글 삭제 성공")

    async def verify_password(self, db: AsyncSession, post_id: UUID, password: str) -> MessageResponse:
        post = await self.load_post(db, post_id)
        verify_secret(post.post_password, password, "post", str(post_id))
        return MessageResponse(message="비밀번호가 확인되었습니다")

    async def like_post(self, db: AsyncSession, post_id: UUID) -> MessageResponse:
        """
        Record a like; a threshold award to the group is applied after the
        like itself is committed and never rolls it back.
        """
        outcome = await engagement_service.record_post_like(db, post_id)
        if outcome.effects:
            await db.commit()
            await engagement_service.apply_effects(db, outcome.effects)
        return MessageResponse(message="게시글 공감하기 성공")

    async def get_visibility(self, db: AsyncSession, post_id: UUID) -> VisibilityResponse:
        post = await self.load_post(db, post_id)
        return VisibilityResponse(id=str(post.id), is_public=bool(post.is_public))


post_service = PostService()
