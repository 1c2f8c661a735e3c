"""
Memory Journal Backend — Anniversary Sweep Scheduler
======================================================

What:  Runs the one-year badge sweep every day at local midnight.
How:   APScheduler AsyncIOScheduler with a CronTrigger in BADGE_TIMEZONE. The
       job opens its own session, runs the sweep, and commits.
When:  Started and stopped by the FastAPI lifespan in main.py when
       SCHEDULER_ENABLED is true.

Job options:
    coalesce=True and max_instances=1: a process that was asleep over several
    midnights runs the sweep once, and two sweeps never overlap.
"""

import logging
from datetime import date, datetime
from typing import Optional, Union

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from journal.config import settings
from journal.database import async_session_factory
from journal.services.engagement_service import engagement_service

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "anniversary-badges"


class AnniversaryScheduler:
    """
    Owns the AsyncIOScheduler and the daily sweep job.

    The AsyncIOScheduler binds to the event loop current at construction, so
    it is built in start(), inside the running loop, not at import.
    """

    def __init__(self, session_factory: Optional[async_sessionmaker[AsyncSession]] = None):
        self.session_factory = session_factory or async_session_factory
        self.zone = settings.badge_zone
        self.scheduler: Optional[AsyncIOScheduler] = None
        self._started = False

    @property
    def running(self) -> bool:
        return self._started

    def start(self) -> None:
        """Register the midnight job and start the scheduler (idempotent)."""
        if self._started:
            return
        self.scheduler = AsyncIOScheduler(timezone=self.zone)
        self.scheduler.add_job(
            self.run_sweep,
            trigger=CronTrigger(hour=0, minute=0, timezone=self.zone),
            id=SWEEP_JOB_ID,
            name="Anniversary badge sweep",
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        self.scheduler.start()
        self._started = True
        logger.info("Anniversary scheduler started (zone=%s, next run %s)", self.zone, self.next_run_time())

    def shutdown(self) -> None:
        if not self._started:
            return
        try:
            self.scheduler.shutdown(wait=False)
            logger.info("Anniversary scheduler shut down")
        finally:
            self._started = False

    def next_run_time(self) -> Optional[datetime]:
        if self.scheduler is None:
            return None
        job = self.scheduler.get_job(SWEEP_JOB_ID)
        return job.next_run_time if job else None

    async def run_sweep(self, current: Union[date, datetime, None] = None) -> int:
        """
        Run one sweep in its own transaction.

        A failing sweep is rolled back and logged; the scheduler keeps the job
        for the next midnight.

        Returns:
            Number of groups awarded (0 on failure).
        """
        async with self.session_factory() as session:
            try:
                awarded = await engagement_service.evaluate_anniversary_badges(
                    session, current=current, zone=self.zone
                )
                await session.commit()
                return len(awarded)
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error("Anniversary sweep failed: %s", str(e), exc_info=True)
                return 0


anniversary_scheduler = AnniversaryScheduler()
