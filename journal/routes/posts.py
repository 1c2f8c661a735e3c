"""
Memory Journal Backend — Post (Memory) Route Handlers
=======================================================

What:  Memories are created and listed under a group
       (/api/groups/{groupId}/posts) and addressed directly by id afterwards
       (/api/posts/{postId}).
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from journal.database import get_db_session
from journal.schemas.common import (
    ErrorResponse,
    MessageResponse,
    Page,
    PasswordRequest,
    VisibilityResponse,
)
from journal.schemas.post import (
    PostCreate,
    PostDeleteRequest,
    PostListItem,
    PostResponse,
    PostSort,
    PostUpdate,
)
from journal.services.post_service import post_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Posts"])

NOT_FOUND = {404: {"description": "Post or group not found", "model": ErrorResponse}}
FORBIDDEN = {403: {"description": "Wrong password", "model": ErrorResponse}}


@router.post(
    "/groups/{group_id}/posts",
    response_model=PostResponse,
    responses={**NOT_FOUND},
    summary="Create a memory in a group",
)
async def create_post(
    group_id: UUID,
    data: PostCreate,
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    return await post_service.create_post(db, group_id, data)


@router.get(
    "/groups/{group_id}/posts",
    response_model=Page[PostListItem],
    responses={**NOT_FOUND},
    summary="List a group's memories",
    description="`keyword` filters by title; `sortBy` is latest, mostCommented or mostLiked.",
)
async def list_posts(
    group_id: UUID,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=10, ge=1, le=100, alias="pageSize"),
    sort_by: PostSort = Query(default="latest", alias="sortBy"),
    keyword: Optional[str] = Query(default=None),
    is_public: Optional[bool] = Query(default=None, alias="isPublic"),
    db: AsyncSession = Depends(get_db_session),
) -> Page[PostListItem]:
    return await post_service.list_posts(
        db,
        group_id,
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        keyword=keyword,
        is_public=is_public,
    )


@router.get(
    "/posts/{post_id}",
    response_model=PostResponse,
    responses={**NOT_FOUND},
    summary="Get memory detail",
)
async def get_post(post_id: UUID, db: AsyncSession = Depends(get_db_session)) -> PostResponse:
    return await post_service.get_post(db, post_id)


@router.patch(
    "/posts/{post_id}",
    response_model=PostResponse,
    responses={**FORBIDDEN, **NOT_FOUND},
    summary="Update a memory",
)
async def update_post(
    post_id: UUID,
    data: PostUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    return await post_service.update_post(db, post_id, data)


@router.delete(
    "/posts/{post_id}",
    response_model=MessageResponse,
    responses={**FORBIDDEN, **NOT_FOUND},
    summary="Delete a memory",
)
async def delete_post(
    post_id: UUID,
    data: PostDeleteRequest,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await post_service.delete_post(db, post_id, data.post_password)


@router.post(
    "/posts/{post_id}/verify-password",
    response_model=MessageResponse,
    responses={401: {"description": "Wrong password", "model": ErrorResponse}, **NOT_FOUND},
    summary="Check a memory password",
)
async def verify_post_password(
    post_id: UUID,
    data: PasswordRequest,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await post_service.verify_password(db, post_id, data.password)


@router.post(
    "/posts/{post_id}/like",
    response_model=MessageResponse,
    responses={**NOT_FOUND},
    summary="Like a memory",
)
async def like_post(post_id: UUID, db: AsyncSession = Depends(get_db_session)) -> MessageResponse:
    return await post_service.like_post(db, post_id)


@router.get(
    "/posts/{post_id}/is-public",
    response_model=VisibilityResponse,
    responses={**NOT_FOUND},
    summary="Get memory visibility",
)
async def get_post_visibility(
    post_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> VisibilityResponse:
    return await post_service.get_visibility(db, post_id)
