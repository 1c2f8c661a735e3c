"""
Memory Journal Backend — Anniversary Scheduler Tests
======================================================
"""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from journal.models.group import Group
from journal.services.engagement_service import ANNIVERSARY_BADGE
from journal.services.scheduler import SWEEP_JOB_ID, AnniversaryScheduler

SEOUL = ZoneInfo("Asia/Seoul")


async def seed_group(session_factory, created_local: datetime) -> Group:
    async with session_factory() as session:
        group = Group(
            name="Anniversary Club", image_url="u", is_public=True, introduction="i",
            password="pw", created_at=created_local.astimezone(timezone.utc),
        )
        session.add(group)
        await session.commit()
        return group


class TestRunSweep:

    @pytest.mark.asyncio
    async def test_sweep_commits_awards(self, session_factory):
        group = await seed_group(session_factory, datetime(2024, 6, 15, 8, 0, tzinfo=SEOUL))
        scheduler = AnniversaryScheduler(session_factory=session_factory)

        awarded = await scheduler.run_sweep(current=date(2025, 6, 15))

        assert awarded == 1
        async with session_factory() as session:
            stored = await session.get(Group, group.id)
            assert stored.badges == [ANNIVERSARY_BADGE]
            assert stored.badge_count == 1

    @pytest.mark.asyncio
    async def test_second_sweep_same_day_awards_nothing(self, session_factory):
        await seed_group(session_factory, datetime(2024, 6, 15, 8, 0, tzinfo=SEOUL))
        scheduler = AnniversaryScheduler(session_factory=session_factory)

        assert await scheduler.run_sweep(current=date(2025, 6, 15)) == 1
        assert await scheduler.run_sweep(current=date(2025, 6, 15)) == 0

    @pytest.mark.asyncio
    async def test_sweep_on_other_day_awards_nothing(self, session_factory):
        await seed_group(session_factory, datetime(2024, 6, 15, 8, 0, tzinfo=SEOUL))
        scheduler = AnniversaryScheduler(session_factory=session_factory)

        assert await scheduler.run_sweep(current=date(2025, 6, 16)) == 0


class TestLifecycle:

    @pytest.mark.asyncio
    async def test_start_registers_midnight_job(self, session_factory):
        scheduler = AnniversaryScheduler(session_factory=session_factory)
        assert scheduler.next_run_time() is None

        scheduler.start()
        try:
            assert scheduler.running
            job = scheduler.scheduler.get_job(SWEEP_JOB_ID)
            assert job is not None
            next_run = scheduler.next_run_time().astimezone(SEOUL)
            assert (next_run.hour, next_run.minute) == (0, 0)
        finally:
            scheduler.shutdown()

        assert not scheduler.running

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, session_factory):
        scheduler = AnniversaryScheduler(session_factory=session_factory)
        scheduler.start()
        first = scheduler.scheduler
        scheduler.start()
        try:
            assert scheduler.scheduler is first
            assert len(first.get_jobs()) == 1
        finally:
            scheduler.shutdown()
