"""
Memory Journal Backend — Engagement Engine Tests
==================================================

What we test:
    ✅ Group like badge fires exactly at 10000, once
    ✅ A counter stepping over 10000 never awards
    ✅ Post like at 10000 awards the owning group, not the post
    ✅ Award for a deleted group is skipped, the like stays
    ✅ A failing award is rolled back, the committed like stays
    ✅ Concurrent likes from separate sessions count every like, award once
    ✅ postCount / commentCount round trips
    ✅ Anniversary window in Asia/Seoul, leap day, idempotent re-run
"""

import asyncio
from datetime import date, datetime, timedelta, timezone
from uuid import uuid4
from zoneinfo import ZoneInfo

import pytest
import pytest_asyncio
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from journal.database import Base
from journal.exceptions import NotFoundError
from journal.models.group import Group
from journal.models.post import Post
from journal.services.engagement_service import (
    ANNIVERSARY_BADGE,
    GROUP_LIKE_BADGE,
    POST_LIKE_BADGE,
    BadgeAward,
    EngagementService,
    anniversary_window,
)


SEOUL = ZoneInfo("Asia/Seoul")


def utc(local: datetime) -> datetime:
    return local.astimezone(timezone.utc)


async def make_group(db, **overrides) -> Group:
    fields = dict(
        name="Hiking Club",
        image_url="http://test/uploads/cover.png",
        is_public=True,
        introduction="Weekend hikes",
        password="pw",
        like_count=0,
        post_count=0,
        badge_count=0,
        badges=[],
    )
    fields.update(overrides)
    group = Group(**fields)
    db.add(group)
    await db.commit()
    return group


async def make_post(db, group_id, **overrides) -> Post:
    fields = dict(
        group_id=group_id,
        nickname="mina",
        title="Sunrise",
        content="Summit at dawn",
        post_password="pw",
        image_url="http://test/uploads/summit.png",
        tags=["hiking"],
        location="Bukhansan",
        moment="2024-05-01",
        is_public=True,
        like_count=0,
        comment_count=0,
    )
    fields.update(overrides)
    post = Post(**fields)
    db.add(post)
    await db.commit()
    return post


class TestGroupLikes:

    def setup_method(self):
        self.service = EngagementService()

    @pytest.mark.asyncio
    async def test_like_increments_count(self, db_session):
        group = await make_group(db_session)
        updated = await self.service.record_group_like(db_session, group.id)
        assert updated.like_count == 1
        assert updated.badges == []

    @pytest.mark.asyncio
    async def test_badge_awarded_exactly_at_threshold(self, db_session):
        group = await make_group(db_session, like_count=9_999)

        updated = await self.service.record_group_like(db_session, group.id)

        assert updated.like_count == 10_000
        assert updated.badges == [GROUP_LIKE_BADGE]
        assert updated.badge_count == 1

    @pytest.mark.asyncio
    async def test_badge_not_repeated_after_threshold(self, db_session):
        group = await make_group(db_session, like_count=9_999)
        await self.service.record_group_like(db_session, group.id)
        updated = await self.service.record_group_like(db_session, group.id)

        assert updated.like_count == 10_001
        assert updated.badges == [GROUP_LIKE_BADGE]
        assert updated.badge_count == 1

    @pytest.mark.asyncio
    async def test_stepping_over_threshold_never_awards(self, db_session):
        group = await make_group(db_session, like_count=10_000)
        updated = await self.service.record_group_like(db_session, group.id)

        assert updated.like_count == 10_001
        assert updated.badges == []
        assert updated.badge_count == 0

    @pytest.mark.asyncio
    async def test_like_missing_group_raises(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.record_group_like(db_session, uuid4())


class TestPostLikes:

    def setup_method(self):
        self.service = EngagementService()

    @pytest.mark.asyncio
    async def test_post_like_below_threshold_has_no_effects(self, db_session):
        group = await make_group(db_session)
        post = await make_post(db_session, group.id)

        outcome = await self.service.record_post_like(db_session, post.id)

        assert outcome.post.like_count == 1
        assert outcome.effects == []

    @pytest.mark.asyncio
    async def test_post_threshold_awards_owning_group(self, db_session):
        group = await make_group(db_session)
        post = await make_post(db_session, group.id, like_count=9_999)

        outcome = await self.service.record_post_like(db_session, post.id)
        assert outcome.effects == [BadgeAward(group_id=group.id, label=POST_LIKE_BADGE)]

        await db_session.commit()
        applied = await self.service.apply_effects(db_session, outcome.effects)
        assert len(applied) == 1

        refreshed = await db_session.get(Group, group.id, populate_existing=True)
        assert refreshed.badges == [POST_LIKE_BADGE]
        assert refreshed.badge_count == 1
        assert refreshed.like_count == 0

    @pytest.mark.asyncio
    async def test_award_skipped_when_group_missing(self, db_session):
        orphan = await make_post(db_session, uuid4(), like_count=9_999)

        outcome = await self.service.record_post_like(db_session, orphan.id)
        await db_session.commit()
        applied = await self.service.apply_effects(db_session, outcome.effects)

        assert applied == []
        post = await db_session.get(Post, orphan.id, populate_existing=True)
        assert post.like_count == 10_000

    @pytest.mark.asyncio
    async def test_like_missing_post_raises(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.record_post_like(db_session, uuid4())


class TestCounts:

    def setup_method(self):
        self.service = EngagementService()

    @pytest.mark.asyncio
    async def test_post_count_round_trip(self, db_session):
        group = await make_group(db_session)

        assert await self.service.on_post_created(db_session, group.id) == 1
        assert await self.service.on_post_created(db_session, group.id) == 2
        assert await self.service.on_post_deleted(db_session, group.id) == 1

    @pytest.mark.asyncio
    async def test_post_count_missing_group_raises(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.on_post_created(db_session, uuid4())

    @pytest.mark.asyncio
    async def test_comment_count_round_trip(self, db_session):
        group = await make_group(db_session)
        post = await make_post(db_session, group.id)

        assert await self.service.on_comment_created(db_session, post.id) == 1
        assert await self.service.on_comment_deleted(db_session, post.id) == 0

    @pytest.mark.asyncio
    async def test_comment_deleted_under_missing_post_is_noop(self, db_session):
        assert await self.service.on_comment_deleted(db_session, uuid4()) is None


class TestAnniversaryWindow:

    def test_window_is_local_midnight_one_year_back(self):
        start, end = anniversary_window(date(2025, 6, 15), SEOUL)

        assert start == datetime(2024, 6, 15, tzinfo=SEOUL).astimezone(timezone.utc)
        assert start == datetime(2024, 6, 14, 15, 0, tzinfo=timezone.utc)
        assert end - start == timedelta(hours=24)

    def test_window_from_aware_datetime_uses_local_date(self):
        # 16:00 UTC on June 14 is already June 15 in Seoul
        start, _ = anniversary_window(datetime(2025, 6, 14, 16, 0, tzinfo=timezone.utc), SEOUL)
        assert start == datetime(2024, 6, 15, tzinfo=SEOUL).astimezone(timezone.utc)

    def test_leap_day_handled_on_feb_28(self):
        start, _ = anniversary_window(date(2025, 2, 28), SEOUL)
        assert start.astimezone(SEOUL).date() == date(2024, 2, 28)


class TestAnniversarySweep:

    def setup_method(self):
        self.service = EngagementService()

    @pytest.mark.asyncio
    async def test_awards_only_groups_created_that_day(self, db_session):
        inside = await make_group(
            db_session, name="inside", created_at=utc(datetime(2024, 6, 15, 10, 0, tzinfo=SEOUL))
        )
        await make_group(
            db_session, name="day after", created_at=utc(datetime(2024, 6, 16, 0, 30, tzinfo=SEOUL))
        )
        await make_group(
            db_session, name="day before", created_at=utc(datetime(2024, 6, 14, 23, 59, tzinfo=SEOUL))
        )

        awarded = await self.service.evaluate_anniversary_badges(db_session, date(2025, 6, 15), SEOUL)
        await db_session.commit()

        assert [g.id for g in awarded] == [inside.id]
        refreshed = await db_session.get(Group, inside.id, populate_existing=True)
        assert refreshed.badges == [ANNIVERSARY_BADGE]
        assert refreshed.badge_count == 1

    @pytest.mark.asyncio
    async def test_rerun_does_not_duplicate(self, db_session):
        group = await make_group(
            db_session, created_at=utc(datetime(2024, 6, 15, 9, 0, tzinfo=SEOUL))
        )

        first = await self.service.evaluate_anniversary_badges(db_session, date(2025, 6, 15), SEOUL)
        await db_session.commit()
        second = await self.service.evaluate_anniversary_badges(db_session, date(2025, 6, 15), SEOUL)
        await db_session.commit()

        assert len(first) == 1
        assert second == []
        refreshed = await db_session.get(Group, group.id, populate_existing=True)
        assert refreshed.badges == [ANNIVERSARY_BADGE]
        assert refreshed.badge_count == 1

    @pytest.mark.asyncio
    async def test_keeps_existing_badges(self, db_session):
        group = await make_group(
            db_session,
            badges=[GROUP_LIKE_BADGE],
            badge_count=1,
            created_at=utc(datetime(2024, 6, 15, 12, 0, tzinfo=SEOUL)),
        )

        await self.service.evaluate_anniversary_badges(db_session, date(2025, 6, 15), SEOUL)
        await db_session.commit()

        refreshed = await db_session.get(Group, group.id, populate_existing=True)
        assert refreshed.badges == [GROUP_LIKE_BADGE, ANNIVERSARY_BADGE]
        assert refreshed.badge_count == 2


@pytest_asyncio.fixture
async def pooled_session_factory(tmp_path):
    """File-backed database so each session holds its own connection."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'likes.db'}",
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


class TestConcurrentLikes:

    def setup_method(self):
        self.service = EngagementService()

    async def _like_in_own_session(self, session_factory, group_id):
        async with session_factory() as session:
            group = await self.service.record_group_like(session, group_id)
            await session.commit()
            return group

    @pytest.mark.asyncio
    async def test_simultaneous_likes_award_once(self, pooled_session_factory):
        async with pooled_session_factory() as session:
            group = await make_group(session, like_count=9_997)

        await asyncio.gather(
            *(self._like_in_own_session(pooled_session_factory, group.id) for _ in range(5))
        )

        async with pooled_session_factory() as session:
            stored = await session.get(Group, group.id)
            assert stored.like_count == 10_002
            assert stored.badges == [GROUP_LIKE_BADGE]
            assert stored.badge_count == 1


class TestEffectFailures:

    def setup_method(self):
        self.service = EngagementService()

    @pytest.mark.asyncio
    async def test_failed_award_keeps_committed_like(self, db_session):
        group = await make_group(db_session)
        post = await make_post(db_session, group.id, like_count=9_999)

        outcome = await self.service.record_post_like(db_session, post.id)
        await db_session.commit()

        async def broken_award(db, group_id, label):
            raise SQLAlchemyError("disk full")

        self.service.award_badge = broken_award
        applied = await self.service.apply_effects(db_session, outcome.effects)

        assert applied == []
        stored_post = await db_session.get(Post, post.id, populate_existing=True)
        assert stored_post.like_count == 10_000
        stored_group = await db_session.get(Group, group.id, populate_existing=True)
        assert stored_group.badges == []
        assert stored_group.badge_count == 0
