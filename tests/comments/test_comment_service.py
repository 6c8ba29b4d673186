"""Tests for comments and replies."""

from datetime import timedelta
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from pydantic import ValidationError

from gulfquotes.auth.permissions import UserRole
from gulfquotes.comments.schemas import CommentSortBy, ContentRequest
from gulfquotes.comments.service import CommentService
from gulfquotes.core.errors import ForbiddenError, NotFoundError
from gulfquotes.engagement import MembershipKind, ToggleResult
from gulfquotes.utils.dates import utc_now
from tests.fakes import comment_row, make_user, reply_row, row, rows


@pytest.fixture
def memberships() -> AsyncMock:
    memberships = AsyncMock()
    memberships.counts.side_effect = lambda kind, ids: {i: 0 for i in ids}
    memberships.active_for_user.return_value = set()
    memberships.status.return_value = ToggleResult(active=False, count=0)
    return memberships


@pytest.fixture
def service(session, memberships) -> CommentService:
    return CommentService(session, "ks", memberships)


def stored_comment(session, **overrides):
    comment = comment_row(**overrides)
    session.on(
        "FROM ks.comments_by_id",
        rows(row(quote_id=comment.quote_id, created_at=comment.created_at)),
    )
    session.on("WHERE quote_id = ? AND created_at = ? AND comment_id = ?", rows(comment))
    return comment


def stored_reply(session, **overrides):
    reply = reply_row(**overrides)
    session.on(
        "FROM ks.replies_by_id",
        rows(row(comment_id=reply.comment_id, created_at=reply.created_at)),
    )
    session.on("WHERE comment_id = ? AND created_at = ? AND reply_id = ?", rows(reply))
    return reply


class TestContentRequest:
    def test_strips_content(self) -> None:
        assert ContentRequest(content="  hello  ").content == "hello"

    def test_blank_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ContentRequest(content="   ")


class TestListComments:
    @pytest.mark.asyncio
    async def test_recent_is_newest_first(self, session, service) -> None:
        quote_id = uuid4()
        now = utc_now()
        old = comment_row(quote_id=quote_id, created_at=now - timedelta(hours=1))
        new = comment_row(quote_id=quote_id, created_at=now)
        session.on("SELECT * FROM ks.comments WHERE quote_id = ?", rows(old, new))

        page = await service.list_comments(quote_id)

        assert [c.id for c in page.items] == [new.comment_id, old.comment_id]
        assert page.total == 2

    @pytest.mark.asyncio
    async def test_popular_orders_by_likes_then_recency(
        self, session, service, memberships
    ) -> None:
        quote_id = uuid4()
        now = utc_now()
        a = comment_row(quote_id=quote_id, created_at=now - timedelta(hours=3))
        b = comment_row(quote_id=quote_id, created_at=now - timedelta(hours=2))
        c = comment_row(quote_id=quote_id, created_at=now)
        session.on("SELECT * FROM ks.comments WHERE quote_id = ?", rows(a, b, c))
        likes = {a.comment_id: 5, b.comment_id: 1, c.comment_id: 1}
        memberships.counts.side_effect = lambda kind, ids: {i: likes[i] for i in ids}

        page = await service.list_comments(quote_id, sort_by=CommentSortBy.POPULAR)

        assert [x.id for x in page.items] == [a.comment_id, c.comment_id, b.comment_id]
        assert page.items[0].likes == 5

    @pytest.mark.asyncio
    async def test_pagination_and_viewer_likes(self, session, service, memberships) -> None:
        quote_id = uuid4()
        now = utc_now()
        comments = [
            comment_row(quote_id=quote_id, created_at=now - timedelta(minutes=i))
            for i in range(3)
        ]
        session.on("SELECT * FROM ks.comments WHERE quote_id = ?", rows(*comments))
        memberships.active_for_user.return_value = {comments[2].comment_id}

        page = await service.list_comments(quote_id, page=2, limit=2, viewer_id=uuid4())

        assert [c.id for c in page.items] == [comments[2].comment_id]
        assert page.items[0].is_liked is True
        assert page.has_more is False

    @pytest.mark.asyncio
    async def test_reply_count_in_response(self, session, service) -> None:
        quote_id = uuid4()
        session.on("SELECT * FROM ks.comments WHERE quote_id = ?", rows(comment_row(quote_id=quote_id)))
        session.on("SELECT COUNT(*) FROM ks.comment_replies", rows(row(count=4)))

        page = await service.list_comments(quote_id)

        assert page.items[0].dump()["_count"] == {"replies": 4}


class TestCommentMutations:
    @pytest.mark.asyncio
    async def test_create_denormalizes_user(self, session, service) -> None:
        user = make_user()
        quote_id = uuid4()

        comment = await service.create_comment(quote_id, user, "Beautiful")

        assert comment.user.name == "Reader"
        assert comment.reply_count.replies == 0
        [insert] = session.calls("INSERT INTO ks.comments (")
        assert insert[0] == quote_id
        assert insert[3] == user.id
        assert session.calls("INSERT INTO ks.comments_by_id")

    @pytest.mark.asyncio
    async def test_owner_updates(self, session, service) -> None:
        user = make_user()
        comment = stored_comment(session, user_id=user.id)

        updated = await service.update_comment(comment.comment_id, user, "Edited")

        assert updated.content == "Edited"
        assert updated.is_edited is True
        assert updated.edited_at is not None
        assert session.calls("UPDATE ks.comments")

    @pytest.mark.asyncio
    async def test_stranger_cannot_update(self, session, service) -> None:
        comment = stored_comment(session)
        with pytest.raises(ForbiddenError, match="update this comment"):
            await service.update_comment(comment.comment_id, make_user(), "Edited")
        assert not session.calls("UPDATE ks.comments")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("role", [UserRole.AUTHOR, UserRole.ADMIN])
    async def test_moderators_can_delete(self, session, service, role) -> None:
        comment = stored_comment(session)
        reply = reply_row(comment_id=comment.comment_id)
        session.on("SELECT * FROM ks.comment_replies WHERE comment_id = ?", rows(reply))

        await service.delete_comment(comment.comment_id, make_user(role))

        assert session.calls("DELETE FROM ks.replies_by_id") == [[reply.reply_id]]
        assert session.calls("DELETE FROM ks.comment_replies WHERE comment_id = ?") == [
            [comment.comment_id]
        ]
        assert session.calls("DELETE FROM ks.comments_by_id") == [[comment.comment_id]]

    @pytest.mark.asyncio
    async def test_stranger_cannot_delete(self, session, service, memberships) -> None:
        comment = stored_comment(session)

        with pytest.raises(ForbiddenError, match="delete this comment"):
            await service.delete_comment(comment.comment_id, make_user(UserRole.USER))

        assert not session.calls("DELETE FROM ks.comments")
        assert not session.calls("DELETE FROM ks.comment_replies")
        memberships.clear.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_owner_deletes(self, session, service) -> None:
        user = make_user(UserRole.USER)
        comment = stored_comment(session, user_id=user.id)

        deleted = await service.delete_comment(comment.comment_id, user)

        assert deleted.id == comment.comment_id
        assert session.calls("DELETE FROM ks.comments_by_id") == [[comment.comment_id]]

    @pytest.mark.asyncio
    async def test_missing_comment(self, service) -> None:
        with pytest.raises(NotFoundError, match="Comment not found"):
            await service.delete_comment(uuid4(), make_user(UserRole.ADMIN))

    @pytest.mark.asyncio
    async def test_toggle_like(self, session, service, memberships) -> None:
        comment = stored_comment(session)
        memberships.toggle.return_value = ToggleResult(active=True, count=1)
        user_id = uuid4()

        result = await service.toggle_comment_like(comment.comment_id, user_id)

        assert result.active is True
        memberships.toggle.assert_awaited_once_with(
            MembershipKind.COMMENT_LIKE, comment.comment_id, user_id
        )


class TestReplies:
    @pytest.mark.asyncio
    async def test_list_oldest_first(self, session, service) -> None:
        comment = stored_comment(session)
        now = utc_now()
        late = reply_row(comment_id=comment.comment_id, created_at=now)
        early = reply_row(comment_id=comment.comment_id, created_at=now - timedelta(hours=1))
        session.on("SELECT * FROM ks.comment_replies WHERE comment_id = ?", rows(late, early))

        page = await service.list_replies(comment.quote_id, comment.comment_id)

        assert [r.id for r in page.items] == [early.reply_id, late.reply_id]
        assert page.limit == 50

    @pytest.mark.asyncio
    async def test_comment_of_other_quote_is_not_found(self, session, service) -> None:
        comment = stored_comment(session)
        with pytest.raises(NotFoundError):
            await service.create_reply(uuid4(), comment.comment_id, make_user(), "Hi")
        assert not session.calls("INSERT INTO ks.comment_replies")

    @pytest.mark.asyncio
    async def test_create_reply_returns_parent(self, session, service) -> None:
        comment = stored_comment(session)
        user = make_user()

        reply, parent = await service.create_reply(
            comment.quote_id, comment.comment_id, user, "Indeed"
        )

        assert parent.id == comment.comment_id
        assert parent.user_id == comment.user_id
        assert reply.comment_id == comment.comment_id
        assert reply.quote_id == comment.quote_id
        assert session.calls("INSERT INTO ks.replies_by_id")

    @pytest.mark.asyncio
    async def test_owner_deletes_reply(self, session, service, memberships) -> None:
        user = make_user()
        reply = stored_reply(session, user_id=user.id)

        deleted = await service.delete_reply(reply.reply_id, user)

        assert deleted.id == reply.reply_id
        assert session.calls("DELETE FROM ks.comment_replies WHERE comment_id = ? AND") == [
            [reply.comment_id, reply.created_at, reply.reply_id]
        ]
        memberships.clear.assert_awaited_once_with(MembershipKind.REPLY_LIKE, reply.reply_id)

    @pytest.mark.asyncio
    async def test_stranger_cannot_edit_reply(self, session, service) -> None:
        reply = stored_reply(session)
        with pytest.raises(ForbiddenError, match="update this reply"):
            await service.update_reply(reply.reply_id, make_user(), "Mine now")

    @pytest.mark.asyncio
    async def test_author_edits_any_reply(self, session, service) -> None:
        reply = stored_reply(session)

        updated = await service.update_reply(reply.reply_id, make_user(UserRole.AUTHOR), "Tidy")

        assert updated.content == "Tidy"
        assert updated.is_edited is True
