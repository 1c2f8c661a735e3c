"""
Memory Journal Backend — Comment Service Tests
================================================
"""

from uuid import uuid4

import pytest

from journal.exceptions import ForbiddenError, NotFoundError
from journal.models.post import Post
from journal.schemas.comment import CommentCreate
from journal.services.comment_service import CommentService


async def make_post(db, title="Sunrise") -> Post:
    post = Post(
        group_id=uuid4(), nickname="mina", title=title, content="c", post_password="p",
        image_url="u", tags=[], location="l", moment="m", is_public=True,
    )
    db.add(post)
    await db.commit()
    return post


def comment(nickname="jun", content="Beautiful!", password="c-pw") -> CommentCreate:
    return CommentCreate(nickname=nickname, content=content, password=password)


class TestCommentService:

    def setup_method(self):
        self.service = CommentService()

    @pytest.mark.asyncio
    async def test_create_counts_on_post(self, db_session):
        post = await make_post(db_session)

        created = await self.service.create_comment(db_session, post.id, comment())
        await db_session.commit()

        assert created.nickname == "jun"
        refreshed = await db_session.get(Post, post.id, populate_existing=True)
        assert refreshed.comment_count == 1

    @pytest.mark.asyncio
    async def test_create_on_missing_post(self, db_session):
        with pytest.raises(NotFoundError) as exc_info:
            await self.service.create_comment(db_session, uuid4(), comment())
        assert exc_info.value.message == "존재하지 않는 게시물입니다."

    @pytest.mark.asyncio
    async def test_list_oldest_first_with_post_title(self, db_session):
        post = await make_post(db_session, title="Bukhansan")
        for text in ("first", "second", "third"):
            await self.service.create_comment(db_session, post.id, comment(content=text))
            await db_session.commit()

        page = await self.service.list_comments(db_session, post.id, page=1, page_size=2)

        assert [c.content for c in page.data] == ["first", "second"]
        assert all(c.post_title == "Bukhansan" for c in page.data)
        assert page.total_item_count == 3
        assert page.total_pages == 2

    @pytest.mark.asyncio
    async def test_update_replaces_text(self, db_session):
        post = await make_post(db_session)
        created = await self.service.create_comment(db_session, post.id, comment())
        await db_session.commit()

        updated = await self.service.update_comment(
            db_session, created.id, comment(nickname="jun2", content="Edited")
        )

        assert updated.nickname == "jun2"
        assert updated.content == "Edited"

    @pytest.mark.asyncio
    async def test_update_wrong_password(self, db_session):
        post = await make_post(db_session)
        created = await self.service.create_comment(db_session, post.id, comment())
        await db_session.commit()

        with pytest.raises(ForbiddenError):
            await self.service.update_comment(db_session, created.id, comment(password="nope"))

    @pytest.mark.asyncio
    async def test_delete_uncounts(self, db_session):
        post = await make_post(db_session)
        created = await self.service.create_comment(db_session, post.id, comment())
        await db_session.commit()

        result = await self.service.delete_comment(db_session, created.id, "c-pw")
        await db_session.commit()

        assert result.message == "답글 삭제 성공"
        refreshed = await db_session.get(Post, post.id, populate_existing=True)
        assert refreshed.comment_count == 0

    @pytest.mark.asyncio
    async def test_delete_missing_comment(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.delete_comment(db_session, uuid4(), "c-pw")
