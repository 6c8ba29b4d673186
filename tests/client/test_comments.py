"""Tests for the client-side comment thread state."""

from unittest.mock import AsyncMock, Mock

import pytest

from gulfquotes.client import ApiError, CommentThread
from gulfquotes.client.comments import (
    CONFIRM_DELETE_COMMENT,
    MSG_COMMENT_DELETE_FAILED,
    MSG_LOAD_FAILED,
    MSG_REPLY_DELETED,
    MSG_REPLY_EMPTY,
    MSG_REPLY_POSTED,
)


def comment(cid: str, likes: int = 0, replies: int = 0, **extra) -> dict:
    return {
        "id": cid,
        "content": f"comment {cid}",
        "likes": likes,
        "isLiked": False,
        "_count": {"replies": replies},
        **extra,
    }


def reply(rid: str, likes: int = 0) -> dict:
    return {"id": rid, "content": f"reply {rid}", "likes": likes, "isLiked": False}


def page(*items, has_more: bool = False) -> dict:
    return {"items": list(items), "hasMore": has_more, "total": len(items)}


@pytest.fixture
def client() -> AsyncMock:
    client = AsyncMock()
    client.is_authenticated = True
    client.list_comments.return_value = page(comment("c1", replies=1), comment("c2"), has_more=True)
    return client


@pytest.fixture
def notifier() -> Mock:
    notifier = Mock()
    notifier.confirm.return_value = True
    return notifier


@pytest.fixture
def thread(client, notifier) -> CommentThread:
    return CommentThread(client, "be-kind", notifier)


class TestLoading:
    @pytest.mark.asyncio
    async def test_load_first_page(self, thread, client) -> None:
        assert await thread.load() is True

        assert [c.id for c in thread.comments] == ["c1", "c2"]
        assert thread.get_comment("c1").reply_count == 1
        assert thread.has_more is True
        assert thread.is_loading is False
        client.list_comments.assert_awaited_once_with(
            "be-kind", page=1, limit=10, sort_by="recent"
        )

    @pytest.mark.asyncio
    async def test_load_more_appends_without_duplicates(self, thread, client) -> None:
        await thread.load()
        client.list_comments.return_value = page(comment("c2"), comment("c3"))

        assert await thread.load_more() is True

        assert [c.id for c in thread.comments] == ["c1", "c2", "c3"]
        assert thread.page == 2
        assert thread.has_more is False

    @pytest.mark.asyncio
    async def test_load_more_keeps_loaded_replies(self, thread, client) -> None:
        await thread.load()
        client.list_replies.return_value = page(reply("r1"))
        await thread.load_replies("c1")
        client.list_comments.return_value = page(comment("c1", replies=1), comment("c3"))

        await thread.load_more()

        assert [c.id for c in thread.comments] == ["c1", "c2", "c3"]
        assert [r.id for r in thread.replies("c1")] == ["r1"]
        assert thread.get_reply("r1").comment_id == "c1"

    @pytest.mark.asyncio
    async def test_sort_change_reloads(self, thread, client) -> None:
        await thread.load()
        client.list_comments.return_value = page(comment("c9", likes=5))

        await thread.load(sort_by="popular")

        assert [c.id for c in thread.comments] == ["c9"]
        assert thread.sort_by == "popular"
        assert client.list_comments.await_args.kwargs["sort_by"] == "popular"

    @pytest.mark.asyncio
    async def test_load_failure_notifies(self, thread, client, notifier) -> None:
        client.list_comments.side_effect = ApiError("INTERNAL_ERROR", "down")

        assert await thread.load() is False

        notifier.error.assert_called_once_with(MSG_LOAD_FAILED)
        assert thread.comments == []
        assert thread.is_loading is False

    @pytest.mark.asyncio
    async def test_response_after_close_is_discarded(self, thread, client, notifier) -> None:
        async def slow_list(*args, **kwargs):
            thread.close()
            return page(comment("c1"))

        client.list_comments.side_effect = slow_list

        assert await thread.load() is False
        assert thread.comments == []
        assert thread.is_closed is True

    @pytest.mark.asyncio
    async def test_error_after_close_is_silent(self, thread, client, notifier) -> None:
        async def failing_list(*args, **kwargs):
            thread.close()
            raise ApiError("INTERNAL_ERROR", "down")

        client.list_comments.side_effect = failing_list

        await thread.load()

        notifier.error.assert_not_called()

    @pytest.mark.asyncio
    async def test_older_load_loses_to_newer(self, thread, client) -> None:
        async def superseded(*args, **kwargs):
            client.list_comments.side_effect = None
            client.list_comments.return_value = page(comment("new"))
            await thread.load()
            return page(comment("old"))

        client.list_comments.side_effect = superseded

        assert await thread.load() is False
        assert [c.id for c in thread.comments] == ["new"]


class TestComments:
    @pytest.mark.asyncio
    async def test_add_comment_prepends(self, thread) -> None:
        await thread.load()

        thread.add_comment(comment("c0"))

        assert [c.id for c in thread.comments] == ["c0", "c1", "c2"]

    @pytest.mark.asyncio
    async def test_update_comment_merges(self, thread) -> None:
        await thread.load()

        state = thread.update_comment({"id": "c2", "content": "edited", "likes": 3})

        assert state.data["content"] == "edited"
        assert state.likes == 3
        assert thread.update_comment({"id": "missing"}) is None

    @pytest.mark.asyncio
    async def test_delete_needs_confirmation(self, thread, client, notifier) -> None:
        await thread.load()
        notifier.confirm.return_value = False

        assert await thread.delete_comment("c1") is False

        notifier.confirm.assert_called_once_with(CONFIRM_DELETE_COMMENT)
        client.delete_comment.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_removes_comment_and_replies(self, thread, client) -> None:
        await thread.load()
        client.list_replies.return_value = page(reply("r1"))
        await thread.load_replies("c1")

        assert await thread.delete_comment("c1") is True

        assert [c.id for c in thread.comments] == ["c2"]
        assert thread.get_reply("r1") is None

    @pytest.mark.asyncio
    async def test_failed_delete_keeps_state(self, thread, client, notifier) -> None:
        await thread.load()
        client.delete_comment.side_effect = ApiError("FORBIDDEN", "no", 403)

        assert await thread.delete_comment("c1") is False

        notifier.error.assert_called_once_with(MSG_COMMENT_DELETE_FAILED)
        assert [c.id for c in thread.comments] == ["c1", "c2"]


class TestReplies:
    @pytest.mark.asyncio
    async def test_post_reply(self, thread, client, notifier) -> None:
        await thread.load()
        client.create_reply.return_value = reply("r9")

        state = await thread.post_reply("c2", "Well said")

        assert state.id == "r9"
        assert [r.id for r in thread.replies("c2")] == ["r9"]
        assert thread.get_comment("c2").reply_count == 1
        notifier.success.assert_called_once_with(MSG_REPLY_POSTED)

    @pytest.mark.asyncio
    async def test_blank_reply_is_rejected(self, thread, client, notifier) -> None:
        assert await thread.post_reply("c1", "   ") is None

        notifier.error.assert_called_once_with(MSG_REPLY_EMPTY)
        client.create_reply.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_anonymous_reply_prompts_login(self, client, notifier) -> None:
        thread = CommentThread(client, "be-kind", notifier, is_authenticated=False)

        assert await thread.post_reply("c1", "Hi") is None

        notifier.prompt_login.assert_called_once()
        client.create_reply.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_load_replies_replaces_list(self, thread, client) -> None:
        await thread.load()
        client.list_replies.return_value = page(reply("r1"), reply("r2"))

        replies = await thread.load_replies("c1")

        assert [r.id for r in replies] == ["r1", "r2"]
        assert thread.get_comment("c1").reply_count == 2

        client.list_replies.return_value = page(reply("r2"))
        await thread.load_replies("c1")
        assert thread.get_reply("r1") is None

    @pytest.mark.asyncio
    async def test_edit_reply(self, thread, client) -> None:
        await thread.load()
        client.list_replies.return_value = page(reply("r1"))
        await thread.load_replies("c1")
        client.update_reply.return_value = {"id": "r1", "content": "better"}

        state = await thread.edit_reply("r1", "better")

        assert state.data["content"] == "better"

    @pytest.mark.asyncio
    async def test_delete_reply_decrements_parent(self, thread, client, notifier) -> None:
        await thread.load()
        client.list_replies.return_value = page(reply("r1"))
        await thread.load_replies("c1")

        assert await thread.delete_reply("r1") is True

        assert thread.replies("c1") == []
        assert thread.get_comment("c1").reply_count == 0
        notifier.success.assert_called_with(MSG_REPLY_DELETED)

    @pytest.mark.asyncio
    async def test_reply_count_never_negative(self, thread, client) -> None:
        await thread.load()
        client.create_reply.return_value = reply("r1")
        await thread.post_reply("c2", "hi")
        thread.get_comment("c2").reply_count = 0

        await thread.delete_reply("r1")

        assert thread.get_comment("c2").reply_count == 0


class TestLikes:
    @pytest.mark.asyncio
    async def test_toggle_comment_like(self, thread) -> None:
        await thread.load()

        assert thread.toggle_like("c1") is True
        assert thread.get_comment("c1").likes == 1
        assert thread.toggle_like("c1") is False
        assert thread.get_comment("c1").likes == 0

    @pytest.mark.asyncio
    async def test_toggle_unknown_item(self, thread) -> None:
        await thread.load()
        assert thread.toggle_like("nope") is None

    def test_anonymous_like_prompts_login(self, client, notifier) -> None:
        thread = CommentThread(client, "be-kind", notifier, is_authenticated=False)

        assert thread.toggle_like("c1") is None
        notifier.prompt_login.assert_called_once()
