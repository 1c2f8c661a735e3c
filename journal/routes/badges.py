"""
Memory Journal Backend — Badge Maintenance Route
==================================================

What:  POST /api/createOneYearBadge runs the anniversary sweep immediately.
Why:   Operators can award the one-year badge without waiting for midnight
       (e.g. after downtime that spanned the scheduled run). The sweep is
       idempotent, so an extra run never double-awards.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from journal.database import get_db_session
from journal.schemas.common import BadgeSweepResponse
from journal.services.engagement_service import engagement_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Badges"])


@router.post(
    "/createOneYearBadge",
    response_model=BadgeSweepResponse,
    summary="Run the anniversary badge sweep now",
)
async def create_one_year_badge(db: AsyncSession = Depends(get_db_session)) -> BadgeSweepResponse:
    awarded = await engagement_service.evaluate_anniversary_badges(db)
    logger.info("Manual anniversary sweep awarded %d group(s)", len(awarded))
    return BadgeSweepResponse(message="배지 부여 작업 완료", awarded=len(awarded))
