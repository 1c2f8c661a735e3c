"""
Memory Journal Backend — Group Route Handlers
===============================================

What:  /api/groups endpoints: create, list, detail, update, delete,
       verify-password, like, is-public.
How:   Parse the request, delegate to GroupService, return its schema.
       Errors raised by the service are mapped to {"message": ...} bodies
       by the handlers in main.py.
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
from journal.schemas.group import (
    GroupCreate,
    GroupListItem,
    GroupResponse,
    GroupSort,
    GroupUpdate,
)
from journal.services.group_service import group_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/groups", tags=["Groups"])

NOT_FOUND = {404: {"description": "Group not found", "model": ErrorResponse}}
BAD_REQUEST = {400: {"description": "Invalid request", "model": ErrorResponse}}


@router.post(
    "",
    status_code=201,
    response_model=GroupResponse,
    responses={**BAD_REQUEST},
    summary="Create a group",
)
async def create_group(
    data: GroupCreate,
    db: AsyncSession = Depends(get_db_session),
) -> GroupResponse:
    return await group_service.create_group(db, data)


@router.get(
    "",
    response_model=Page[GroupListItem],
    summary="List groups",
    description=(
        "Paginated group list. `keyword` filters by name (case-insensitive), "
        "`isPublic` filters by visibility, `sortBy` picks the order."
    ),
)
async def list_groups(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=10, ge=1, le=100, alias="pageSize"),
    sort_by: GroupSort = Query(default="latest", alias="sortBy"),
    keyword: Optional[str] = Query(default=None),
    is_public: Optional[bool] = Query(default=None, alias="isPublic"),
    db: AsyncSession = Depends(get_db_session),
) -> Page[GroupListItem]:
    return await group_service.list_groups(
        db,
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        keyword=keyword,
        is_public=is_public,
    )


@router.get(
    "/{group_id}",
    response_model=GroupResponse,
    responses={**NOT_FOUND},
    summary="Get group detail",
)
async def get_group(group_id: UUID, db: AsyncSession = Depends(get_db_session)) -> GroupResponse:
    return await group_service.get_group(db, group_id)


@router.patch(
    "/{group_id}",
    response_model=GroupResponse,
    responses={**BAD_REQUEST, 403: {"description": "Wrong password", "model": ErrorResponse}, **NOT_FOUND},
    summary="Update a group",
)
async def update_group(
    group_id: UUID,
    data: GroupUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> GroupResponse:
    return await group_service.update_group(db, group_id, data)


@router.delete(
    "/{group_id}",
    response_model=MessageResponse,
    responses={403: {"description": "Wrong password", "model": ErrorResponse}, **NOT_FOUND},
    summary="Delete a group",
)
async def delete_group(
    group_id: UUID,
    data: PasswordRequest,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await group_service.delete_group(db, group_id, data.password)


@router.post(
    "/{group_id}/verify-password",
    response_model=MessageResponse,
    responses={401: {"description": "Wrong password", "model": ErrorResponse}, **NOT_FOUND},
    summary="Check a group password",
)
async def verify_group_password(
    group_id: UUID,
    data: PasswordRequest,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await group_service.verify_password(db, group_id, data.password)


@router.post(
    "/{group_id}/like",
    response_model=MessageResponse,
    responses={**NOT_FOUND},
    summary="Like a group",
)
async def like_group(group_id: UUID, db: AsyncSession = Depends(get_db_session)) -> MessageResponse:
    return await group_service.like_group(db, group_id)


@router.get(
    "/{group_id}/is-public",
    response_model=VisibilityResponse,
    responses={**NOT_FOUND},
    summary="Get group visibility",
)
async def get_group_visibility(
    group_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> VisibilityResponse:
    return await group_service.get_visibility(db, group_id)
