"""
Memory Journal Backend — Group Service
========================================

What:  Business logic for /api/groups: create, list, detail, update, delete,
       password verification, likes and visibility.
Why:   Keeps route handlers thin; the counter rules live in the engagement
       engine, which this service calls for likes.
Who:   Called by journal/routes/groups.py.

Error Handling Strategy:
    Missing groups raise NotFoundError (404), wrong secrets raise
    ForbiddenError (403) or PasswordMismatchError (401). Unexpected database
    failures in list queries are wrapped in DatabaseError (500).
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import desc, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from journal.exceptions import DatabaseError, NotFoundError
from journal.models.group import Group
from journal.schemas.common import MessageResponse, Page, VisibilityResponse
from journal.schemas.group import (
    GroupCreate,
    GroupListItem,
    GroupResponse,
    GroupSort,
    GroupUpdate,
)
from journal.services.access import require_secret, verify_secret
from journal.services.engagement_service import engagement_service

logger = logging.getLogger(__name__)

# What: ORDER BY column for each sortBy value; newest first breaks ties
GROUP_SORT_COLUMNS = {
    "latest": Group.created_at,
    "lastest": Group.created_at,
    "mostPosted": Group.post_count,
    "mostLiked": Group.like_count,
    "mostBadge": Group.badge_count,
}


class GroupService:
    """Stateless; the session is passed into every call."""

    async def load_group(self, db: AsyncSession, group_id: UUID, message: Optional[str] = None) -> Group:
        """
        Fetch a group or raise NotFoundError.

        Args:
            message: client-facing message when the default "존재하지 않습니다"
                     does not say enough (e.g. a post's parent group)
        """
        group = await db.get(Group, group_id)
        if group is None:
            if message:
                raise NotFoundError(resource="group", resource_id=str(group_id), message=message)
            raise NotFoundError(resource="group", resource_id=str(group_id))
        return group

    async def create_group(self, db: AsyncSession, data: GroupCreate) -> GroupResponse:
        group = Group(
            name=data.name,
            password=data.password,
            image_url=data.image_url,
            is_public=data.is_public,
            introduction=data.introduction,
            like_count=0,
            post_count=0,
            badge_count=0,
            badges=[],
        )
        db.add(group)
        await db.flush()
        logger.info("Group created: %s ('%s', public=%s)", group.id, group.name, group.is_public)
        return GroupResponse.from_model(group)

    async def list_groups(
        self,
        db: AsyncSession,
        page: int = 1,
        page_size: int = 10,
        sort_by: GroupSort = "latest",
        keyword: Optional[str] = None,
        is_public: Optional[bool] = None,
    ) -> Page[GroupListItem]:
        """
        Paginated group listing.

        Filters:
            keyword:   case-insensitive substring of the name
            is_public: exact match when given
        """
        try:
            filters = []
            if keyword:
                filters.append(Group.name.icontains(keyword, autoescape=True))
            if is_public is not None:
                filters.append(Group.is_public.is_(is_public))

            sort_column = GROUP_SORT_COLUMNS.get(sort_by, Group.created_at)
            query = (
                select(Group)
                .where(*filters)
                .order_by(desc(sort_column), desc(Group.created_at), Group.id)
                .offset((page - 1) * page_size)
                .limit(page_size)
            )
            groups = (await db.execute(query)).scalars().all()

            total = (await db.execute(select(func.count(Group.id)).where(*filters))).scalar() or 0

            return Page[GroupListItem].build(
                items=[GroupListItem.from_model(g) for g in groups],
                page=page,
                page_size=page_size,
                total=total,
            )
        except SQLAlchemyError as e:
            logger.error("Database error listing groups: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

    async def get_group(self, db: AsyncSession, group_id: UUID) -> GroupResponse:
        group = await self.load_group(db, group_id)
        return GroupResponse.from_model(group)

    async def update_group(self, db: AsyncSession, group_id: UUID, data: GroupUpdate) -> GroupResponse:
        """
        Apply the fields present in the PATCH body.

        Only fields the client actually sent are written, so `isPublic: false`
        is honoured and omitted fields keep their value.
        """
        group = await self.load_group(db, group_id)
        require_secret(group.password, data.password, "group", str(group_id))

        changes = data.model_dump(exclude_unset=True, exclude={"password"})
        for field_name, value in changes.items():
            if value is not None:
                setattr(group, field_name, value)
        await db.flush()
        logger.info("Group %s updated: %s", group_id, sorted(changes))
        return GroupResponse.from_model(group)

    async def delete_group(self, db: AsyncSession, group_id: UUID, password: str) -> MessageResponse:
        """Delete a group. Its posts are left in place."""
        group = await self.load_group(db, group_id)
        require_secret(group.password, password, "group", str(group_id))
        await db.delete(group)
        await db.flush()
        logger.info("Group deleted: %s", group_id)
        return MessageResponse(message="그룹 삭제 성공")

    async def verify_password(self, db: AsyncSession, group_id: UUID, password: str) -> MessageResponse:
        group = await self.load_group(db, group_id)
        verify_secret(group.password, password, "group", str(group_id))
        return MessageResponse(message="비밀번호가 확인되었습니다")

    async def like_group(self, db: AsyncSession, group_id: UUID) -> MessageResponse:
        await engagement_service.record_group_like(db, group_id)
        return MessageResponse(message="그룹 공감하기 성공")

    async def get_visibility(self, db: AsyncSession, group_id: UUID) -> VisibilityResponse:
        group = await self.load_group(db, group_id)
        return VisibilityResponse(id=str(group.id), is_public=bool(group.is_public))


group_service = GroupService()
