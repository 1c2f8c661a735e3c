"""
Memory Journal Backend — Comment Route Handlers
=================================================
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from journal.database import get_db_session
from journal.schemas.comment import CommentCreate, CommentListItem, CommentResponse
from journal.schemas.common import ErrorResponse, MessageResponse, Page, PasswordRequest
from journal.services.comment_service import comment_service

router = APIRouter(prefix="/api", tags=["Comments"])

NOT_FOUND = {404: {"description": "Post or comment not found", "model": ErrorResponse}}
FORBIDDEN = {403: {"description": "Wrong password", "model": ErrorResponse}}


@router.post(
    "/posts/{post_id}/comments",
    response_model=CommentResponse,
    responses={**NOT_FOUND},
    summary="Comment on a memory",
)
async def create_comment(
    post_id: UUID,
    data: CommentCreate,
    db: AsyncSession = Depends(get_db_session),
) -> CommentResponse:
    return await comment_service.create_comment(db, post_id, data)


@router.get(
    "/posts/{post_id}/comments",
    response_model=Page[CommentListItem],
    responses={**NOT_FOUND},
    summary="List a memory's comments (oldest first)",
)
async def list_comments(
    post_id: UUID,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=10, ge=1, le=100, alias="pageSize"),
    db: AsyncSession = Depends(get_db_session),
) -> Page[CommentListItem]:
    return await comment_service.list_comments(db, post_id, page=page, page_size=page_size)


@router.put(
    "/comments/{comment_id}",
    response_model=CommentResponse,
    responses={**FORBIDDEN, **NOT_FOUND},
    summary="Edit a comment",
)
async def update_comment(
    comment_id: UUID,
    data: CommentCreate,
    db: AsyncSession = Depends(get_db_session),
) -> CommentResponse:
    return await comment_service.update_comment(db, comment_id, data)


@router.delete(
    "/comments/{comment_id}",
    response_model=MessageResponse,
    responses={**FORBIDDEN, **NOT_FOUND},
    summary="Delete a comment",
)
async def delete_comment(
    comment_id: UUID,
    data: PasswordRequest,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await comment_service.delete_comment(db, comment_id, data.password)
