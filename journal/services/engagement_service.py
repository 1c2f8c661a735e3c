"""
Memory Journal Backend — Engagement Engine (Counters & Badges)
================================================================

What:  The only code that changes engagement counters (likeCount, postCount,
       commentCount, badgeCount) or appends badges.
Why:   Counters on groups and posts must stay consistent with each other and
       badge awards must fire exactly once per threshold. Keeping every rule
       in one module makes those invariants checkable in one place.
Who:   Called by GroupService, PostService, CommentService and the daily
       anniversary scheduler.

Rules:
    ┌────────────────────┬─────────────────────────────┬──────────────────────────────┐
    │ Event              │ Counter change              │ Badge                        │
    ├────────────────────┼─────────────────────────────┼──────────────────────────────┤
    │ group liked        │ group.like_count += 1       │ == 10000 → group like badge  │
    │ post liked         │ post.like_count += 1        │ == 10000 → memory like badge │
    │                    │                             │   on the OWNING GROUP        │
    │ post created       │ group.post_count += 1       │                              │
    │ post deleted       │ group.post_count -= 1       │                              │
    │ comment created    │ post.comment_count += 1     │                              │
    │ comment deleted    │ post.comment_count -= 1     │                              │
    │ daily sweep        │                             │ created exactly 1 year ago   │
    │                    │                             │   → anniversary badge        │
    └────────────────────┴─────────────────────────────┴──────────────────────────────┘

    Thresholds compare with ==, not >=. A counter that steps over 10000
    without landing on it never awards. Every award appends one label and
    bumps badge_count by one, keeping badge_count == len(badges).

Concurrency:
    Counters change through single-statement atomic UPDATE ... RETURNING, so
    two simultaneous likes yield two distinct values and exactly one request
    observes 10000. Badge appends read-modify-write the JSON list, so they
    take a row lock (SELECT ... FOR UPDATE) first.

Cross-entity effects:
    A post like never writes the group itself. record_post_like returns the
    award as a BadgeAward effect; the caller commits the like, then passes the
    effects to apply_effects. A failed or impossible award (group deleted) is
    logged and skipped; the committed like stays.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional, Sequence, Tuple, Type, Union
from zoneinfo import ZoneInfo

from dateutil.relativedelta import relativedelta
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from journal.config import settings
from journal.database import Base
from journal.exceptions import NotFoundError
from journal.models.group import Group
from journal.models.post import Post

logger = logging.getLogger(__name__)

# ── Thresholds & labels ───────────────────────────────────────────────────
LIKE_BADGE_THRESHOLD = 10_000

GROUP_LIKE_BADGE = "그룹 공감 1만 개 이상 받기"
POST_LIKE_BADGE = "추억 공감 1만 개 이상 받기"
ANNIVERSARY_BADGE = "그룹 생성 후 1년 달성"


@dataclass(frozen=True)
class BadgeAward:
    """Deferred effect: append `label` to the badges of group `group_id`."""
    group_id: uuid.UUID
    label: str


@dataclass
class LikeOutcome:
    """Result of a post like: the refreshed post plus effects for the caller to apply."""
    post: Post
    effects: List[BadgeAward] = field(default_factory=list)


def anniversary_window(
    current: Union[date, datetime, None] = None,
    zone: Optional[ZoneInfo] = None,
) -> Tuple[datetime, datetime]:
    """
    Compute the created_at window for the anniversary sweep.

    The window is the 24 hours starting at local midnight of the same calendar
    date one year before `current`. relativedelta handles leap years: a sweep
    on 2025-02-28 looks at 2024-02-28, and a group created on 2024-02-29 is
    picked up by the 2025-02-28 run.

    Returns:
        (start, end) as UTC datetimes; start inclusive, end exclusive.
    """
    zone = zone or settings.badge_zone
    if current is None:
        current = datetime.now(zone)

    if isinstance(current, datetime):
        local = current.astimezone(zone) if current.tzinfo else current.replace(tzinfo=zone)
        today = local.date()
    else:
        today = current

    target_day = today - relativedelta(years=1)
    start = datetime.combine(target_day, time.min, tzinfo=zone).astimezone(timezone.utc)
    return start, start + timedelta(hours=24)


class EngagementService:
    """
    Counter and badge rules for groups and posts.

    Stateless: every method receives the session it works in. Methods flush
    but never commit, except apply_effects, which commits each award on its
    own so one failure cannot undo another.
    """

    # ══════════════════════════════════════════════════════════════════════
    # Primitives
    # ══════════════════════════════════════════════════════════════════════

    async def _increment(
        self,
        db: AsyncSession,
        model: Type[Base],
        entity_id: uuid.UUID,
        column: str,
        delta: int,
    ) -> Optional[int]:
        """
        Atomically add `delta` to `column` and return the new value.

        Returns None when no row has that id. Identity-map copies are not
        synchronized here; callers reload with populate_existing.
        """
        counter = getattr(model, column)
        stmt = (
            update(model)
            .where(model.id == entity_id)
            .values({column: counter + delta})
            .returning(counter)
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    def _append_badge(group: Group, label: str) -> None:
        # New list object so the JSON column is marked dirty
        group.badges = [*(group.badges or []), label]
        group.badge_count = (group.badge_count or 0) + 1

    async def award_badge(
        self, db: AsyncSession, group_id: uuid.UUID, label: str
    ) -> Optional[Group]:
        """
        Append `label` to a group's badges under a row lock.

        Returns the updated group, or None if the group does not exist.
        """
        group = await db.get(Group, group_id, with_for_update=True, populate_existing=True)
        if group is None:
            return None
        self._append_badge(group, label)
        await db.flush()
        logger.info(
            "Badge awarded: group=%s label=%s badge_count=%d",
            group_id, label, group.badge_count,
        )
        return group

    # ══════════════════════════════════════════════════════════════════════
    # Likes
    # ══════════════════════════════════════════════════════════════════════

    async def record_group_like(self, db: AsyncSession, group_id: uuid.UUID) -> Group:
        """
        Add one like to a group; award the group-like badge at exactly 10000.

        Raises:
            NotFoundError: group_id does not resolve
        """
        like_count = await self._increment(db, Group, group_id, "like_count", 1)
        if like_count is None:
            raise NotFoundError(resource="group", resource_id=str(group_id))

        if like_count == LIKE_BADGE_THRESHOLD:
            await self.award_badge(db, group_id, GROUP_LIKE_BADGE)

        group = await db.get(Group, group_id, populate_existing=True)
        logger.debug("Group %s liked (like_count=%d)", group_id, like_count)
        return group

    async def record_post_like(self, db: AsyncSession, post_id: uuid.UUID) -> LikeOutcome:
        """
        Add one like to a post.

        Reaching exactly 10000 does not touch the group here; the outcome
        carries a BadgeAward for the owning group instead.

        Raises:
            NotFoundError: post_id does not resolve
        """
        like_count = await self._increment(db, Post, post_id, "like_count", 1)
        if like_count is None:
            raise NotFoundError(resource="post", resource_id=str(post_id))

        post = await db.get(Post, post_id, populate_existing=True)
        outcome = LikeOutcome(post=post)
        if like_count == LIKE_BADGE_THRESHOLD:
            outcome.effects.append(BadgeAward(group_id=post.group_id, label=POST_LIKE_BADGE))
        logger.debug("Post %s liked (like_count=%d)", post_id, like_count)
        return outcome

    async def apply_effects(
        self, db: AsyncSession, effects: Sequence[BadgeAward]
    ) -> List[BadgeAward]:
        """
        Apply deferred badge awards, each in its own commit.

        Call only after the primary write has been committed: a rollback
        here must not reach it.

        Returns:
            The effects that were actually applied.
        """
        applied: List[BadgeAward] = []
        for effect in effects:
            try:
                group = await self.award_badge(db, effect.group_id, effect.label)
                if group is None:
                    logger.warning(
                        "Skipping badge '%s': group %s no longer exists",
                        effect.label, effect.group_id,
                    )
                    continue
                await db.commit()
                applied.append(effect)
            except SQLAlchemyError as e:
                await db.rollback()
                logger.error(
                    "Failed to award badge '%s' to group %s: %s",
                    effect.label, effect.group_id, str(e),
                )
        return applied

    # ══════════════════════════════════════════════════════════════════════
    # Post / comment counts
    # ══════════════════════════════════════════════════════════════════════

    async def on_post_created(self, db: AsyncSession, group_id: uuid.UUID) -> int:
        """
        Count a new post against its group.

        Raises:
            NotFoundError: group_id does not resolve
        """
        post_count = await self._increment(db, Group, group_id, "post_count", 1)
        if post_count is None:
            raise NotFoundError(resource="group", resource_id=str(group_id))
        return post_count

    async def on_post_deleted(self, db: AsyncSession, group_id: uuid.UUID) -> int:
        """
        Uncount a deleted post. Not clamped at zero: create/delete are always
        paired by PostService.

        Raises:
            NotFoundError: group_id does not resolve
        """
        post_count = await self._increment(db, Group, group_id, "post_count", -1)
        if post_count is None:
            raise NotFoundError(resource="group", resource_id=str(group_id))
        return post_count

    async def on_comment_created(self, db: AsyncSession, post_id: uuid.UUID) -> Optional[int]:
        return await self._increment(db, Post, post_id, "comment_count", 1)

    async def on_comment_deleted(self, db: AsyncSession, post_id: uuid.UUID) -> Optional[int]:
        """Comments survive their post; deleting one under a removed post counts nothing."""
        comment_count = await self._increment(db, Post, post_id, "comment_count", -1)
        if comment_count is None:
            logger.debug("Comment deleted under missing post %s; no counter to update", post_id)
        return comment_count

    # ══════════════════════════════════════════════════════════════════════
    # Anniversary sweep
    # ══════════════════════════════════════════════════════════════════════

    async def evaluate_anniversary_badges(
        self,
        db: AsyncSession,
        current: Union[date, datetime, None] = None,
        zone: Optional[ZoneInfo] = None,
    ) -> List[Group]:
        """
        Award the one-year badge to every group created exactly one year ago.

        Groups that already hold the badge are skipped, so re-running the
        sweep on the same day (or after a clock adjustment) awards nothing new.

        Returns:
            Groups that received the badge in this run.
        """
        start, end = anniversary_window(current, zone)
        result = await db.execute(
            select(Group)
            .where(Group.created_at >= start, Group.created_at < end)
            .with_for_update()
        )
        candidates = result.scalars().all()

        awarded: List[Group] = []
        for group in candidates:
            if ANNIVERSARY_BADGE in (group.badges or []):
                logger.debug("Group %s already holds the anniversary badge", group.id)
                continue
            self._append_badge(group, ANNIVERSARY_BADGE)
            awarded.append(group)
            logger.info("Anniversary badge awarded to group '%s' (%s)", group.name, group.id)

        await db.flush()
        logger.info(
            "Anniversary sweep for window %s to %s: %d candidate(s), %d awarded",
            start.isoformat(), end.isoformat(), len(candidates), len(awarded),
        )
        return awarded


engagement_service = EngagementService()
