"""Client-side state for a quote's comment thread.

``CommentThread`` keeps an indexed view of comments and their replies for
one quote and applies server-confirmed mutations to it. The server is the
source of truth; the thread is a disposable cache that can be rebuilt with
``load()`` at any time.

Comments are stored by id with an ordered list of ids for display order.
Each comment holds the ordered ids of its loaded replies, so every mutation
is a dictionary lookup instead of a tree walk.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol

from gulfquotes.core.logging import get_logger

from .api import ApiError, GulfquotesClient


logger = get_logger(__name__)

PAGE_SIZE = 10

SORT_RECENT = "recent"
SORT_POPULAR = "popular"

MSG_LOAD_FAILED = "Failed to load comments"
MSG_LOAD_MORE_FAILED = "Failed to load more comments"
MSG_COMMENT_DELETED = "Comment deleted successfully"
MSG_COMMENT_DELETE_FAILED = "Failed to delete comment"
MSG_COMMENT_UPDATED = "Comment updated successfully"
MSG_COMMENT_UPDATE_FAILED = "Failed to update comment"
MSG_REPLY_POSTED = "Reply posted successfully"
MSG_REPLY_POST_FAILED = "Failed to post reply"
MSG_REPLY_EMPTY = "Reply cannot be empty"
MSG_REPLIES_LOAD_FAILED = "Failed to load replies"
MSG_REPLY_DELETED = "Reply deleted successfully"
MSG_REPLY_DELETE_FAILED = "Failed to delete reply"
MSG_REPLY_UPDATED = "Reply updated successfully"
MSG_REPLY_UPDATE_FAILED = "Failed to update reply"

CONFIRM_DELETE_COMMENT = "Are you sure you want to delete this comment?"


class Notifier(Protocol):
    """User-facing feedback surface (toasts, dialogs)."""

    def error(self, message: str) -> None: ...

    def success(self, message: str) -> None: ...

    def prompt_login(self) -> None: ...

    def confirm(self, message: str) -> bool: ...


@dataclass
class ReplyState:
    id: str
    comment_id: str
    data: dict[str, Any]
    liked: bool = False
    likes: int = 0

    @classmethod
    def from_payload(cls, payload: dict[str, Any], comment_id: str) -> "ReplyState":
        return cls(
            id=str(payload["id"]),
            comment_id=comment_id,
            data=dict(payload),
            liked=bool(payload.get("isLiked", False)),
            likes=int(payload.get("likes", 0)),
        )

    def merge(self, payload: dict[str, Any]) -> None:
        self.data.update(payload)
        if "likes" in payload:
            self.likes = int(payload["likes"])
        if "isLiked" in payload:
            self.liked = bool(payload["isLiked"])


@dataclass
class CommentState:
    id: str
    data: dict[str, Any]
    liked: bool = False
    likes: int = 0
    reply_count: int = 0
    reply_ids: list[str] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "CommentState":
        count = payload.get("_count") or {}
        return cls(
            id=str(payload["id"]),
            data=dict(payload),
            liked=bool(payload.get("isLiked", False)),
            likes=int(payload.get("likes", 0)),
            reply_count=int(count.get("replies", 0)),
        )

    def merge(self, payload: dict[str, Any]) -> None:
        self.data.update(payload)
        if "likes" in payload:
            self.likes = int(payload["likes"])
        if "isLiked" in payload:
            self.liked = bool(payload["isLiked"])
        if "_count" in payload:
            self.reply_count = int((payload["_count"] or {}).get("replies", 0))


class CommentThread:
    """Comments and replies of one quote, as shown to one viewer."""

    def __init__(
        self,
        client: GulfquotesClient,
        quote_slug: str,
        notifier: Notifier,
        is_authenticated: bool | None = None,
        page_size: int = PAGE_SIZE,
    ):
        self.client = client
        self.quote_slug = quote_slug
        self.notifier = notifier
        self.page_size = page_size
        self._authenticated = (
            client.is_authenticated if is_authenticated is None else is_authenticated
        )

        self._order: list[str] = []
        self._comments: dict[str, CommentState] = {}
        self._replies: dict[str, ReplyState] = {}
        self._sort_by = SORT_RECENT
        self._page = 1
        self._has_more = False
        self._loading = False
        self._closed = False
        # Bumped by load() and close(); responses from older generations are dropped
        self._generation = 0

    # ==========================================================================
    # Read views
    # ==========================================================================

    @property
    def comments(self) -> list[CommentState]:
        return [self._comments[cid] for cid in self._order]

    def replies(self, comment_id: str) -> list[ReplyState]:
        comment = self._comments.get(str(comment_id))
        if comment is None:
            return []
        return [self._replies[rid] for rid in comment.reply_ids]

    def get_comment(self, comment_id: str) -> CommentState | None:
        return self._comments.get(str(comment_id))

    def get_reply(self, reply_id: str) -> ReplyState | None:
        return self._replies.get(str(reply_id))

    @property
    def has_more(self) -> bool:
        return self._has_more

    @property
    def page(self) -> int:
        return self._page

    @property
    def sort_by(self) -> str:
        return self._sort_by

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def is_authenticated(self) -> bool:
        return self._authenticated

    @property
    def is_closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Tear down the view; responses arriving later are discarded."""
        self._closed = True
        self._generation += 1

    def _stale(self, generation: int) -> bool:
        return self._closed or generation != self._generation

    # ==========================================================================
    # Pages
    # ==========================================================================

    def _index(self, payload: dict[str, Any]) -> CommentState:
        comment = CommentState.from_payload(payload)
        self._comments[comment.id] = comment
        return comment

    async def load(self, sort_by: str | None = None) -> bool:
        """Load the first page, replacing the local state.

        Returns:
            True when the state was replaced.
        """
        if sort_by is not None:
            self._sort_by = sort_by
        self._generation += 1
        generation = self._generation
        self._loading = True

        try:
            data = await self.client.list_comments(
                self.quote_slug, page=1, limit=self.page_size, sort_by=self._sort_by
            )
        except ApiError as e:
            if not self._stale(generation):
                self._loading = False
                logger.warning("comments_load_failed", slug=self.quote_slug, error=str(e))
                self.notifier.error(MSG_LOAD_FAILED)
            return False

        if self._stale(generation):
            logger.debug("comments_load_discarded", slug=self.quote_slug)
            return False

        self._order = []
        self._comments = {}
        self._replies = {}
        for payload in data.get("items", []):
            self._order.append(self._index(payload).id)
        self._has_more = bool(data.get("hasMore", False))
        self._page = 1
        self._loading = False
        return True

    async def load_more(self) -> bool:
        """Append the next page to the end of the current order."""
        generation = self._generation
        next_page = self._page + 1

        try:
            data = await self.client.list_comments(
                self.quote_slug,
                page=next_page,
                limit=self.page_size,
                sort_by=self._sort_by,
            )
        except ApiError as e:
            if not self._stale(generation):
                logger.warning("comments_load_more_failed", slug=self.quote_slug, error=str(e))
                self.notifier.error(MSG_LOAD_MORE_FAILED)
            return False

        if self._stale(generation):
            return False

        for payload in data.get("items", []):
            # keep the known state so loaded replies stay attached
            if str(payload["id"]) in self._comments:
                continue
            self._order.append(self._index(payload).id)
        self._has_more = bool(data.get("hasMore", False))
        self._page = next_page
        return True

    # ==========================================================================
    # Comments
    # ==========================================================================

    def add_comment(self, comment: dict[str, Any]) -> CommentState:
        """Prepend a comment the server has already created."""
        state = self._index(comment)
        if state.id in self._order:
            self._order.remove(state.id)
        self._order.insert(0, state.id)
        return state

    def update_comment(self, comment: dict[str, Any]) -> CommentState | None:
        """Merge the server's updated representation into the local comment."""
        state = self._comments.get(str(comment.get("id")))
        if state is not None:
            state.merge(comment)
        return state

    async def edit_comment(self, comment_id: str, content: str) -> CommentState | None:
        generation = self._generation
        try:
            data = await self.client.update_comment(comment_id, content)
        except ApiError as e:
            if not self._stale(generation):
                logger.warning("comment_update_failed", comment_id=comment_id, error=str(e))
                self.notifier.error(MSG_COMMENT_UPDATE_FAILED)
            return None

        if self._stale(generation):
            return None
        state = self.update_comment(data)
        self.notifier.success(MSG_COMMENT_UPDATED)
        return state

    async def delete_comment(self, comment_id: str) -> bool:
        """Delete after user confirmation; local state changes only on success."""
        comment_id = str(comment_id)
        if not self.notifier.confirm(CONFIRM_DELETE_COMMENT):
            return False

        generation = self._generation
        try:
            await self.client.delete_comment(comment_id)
        except ApiError as e:
            if not self._stale(generation):
                logger.warning("comment_delete_failed", comment_id=comment_id, error=str(e))
                self.notifier.error(MSG_COMMENT_DELETE_FAILED)
            return False

        if self._stale(generation):
            return False

        comment = self._comments.pop(comment_id, None)
        if comment is not None:
            for reply_id in comment.reply_ids:
                self._replies.pop(reply_id, None)
        if comment_id in self._order:
            self._order.remove(comment_id)
        self.notifier.success(MSG_COMMENT_DELETED)
        return True

    # ==========================================================================
    # Replies
    # ==========================================================================

    async def post_reply(self, comment_id: str, content: str) -> ReplyState | None:
        comment_id = str(comment_id)
        if not self._authenticated:
            self.notifier.prompt_login()
            return None
        if not content.strip():
            self.notifier.error(MSG_REPLY_EMPTY)
            return None

        generation = self._generation
        try:
            data = await self.client.create_reply(self.quote_slug, comment_id, content)
        except ApiError as e:
            if not self._stale(generation):
                logger.warning("reply_post_failed", comment_id=comment_id, error=str(e))
                self.notifier.error(MSG_REPLY_POST_FAILED)
            return None

        if self._stale(generation):
            return None

        comment = self._comments.get(comment_id)
        reply = ReplyState.from_payload(data, comment_id)
        self._replies[reply.id] = reply
        if comment is not None:
            comment.reply_ids.append(reply.id)
            comment.reply_count += 1
        self.notifier.success(MSG_REPLY_POSTED)
        return reply

    async def load_replies(self, comment_id: str) -> list[ReplyState] | None:
        """Replace the comment's replies with the server's list."""
        comment_id = str(comment_id)
        generation = self._generation
        try:
            data = await self.client.list_replies(self.quote_slug, comment_id)
        except ApiError as e:
            if not self._stale(generation):
                logger.warning("replies_load_failed", comment_id=comment_id, error=str(e))
                self.notifier.error(MSG_REPLIES_LOAD_FAILED)
            return None

        comment = self._comments.get(comment_id)
        if self._stale(generation) or comment is None:
            return None

        for reply_id in comment.reply_ids:
            self._replies.pop(reply_id, None)
        comment.reply_ids = []
        for payload in data.get("items", []):
            reply = ReplyState.from_payload(payload, comment_id)
            self._replies[reply.id] = reply
            comment.reply_ids.append(reply.id)
        comment.reply_count = int(data.get("total", len(comment.reply_ids)))
        return self.replies(comment_id)

    def update_reply(self, reply: dict[str, Any]) -> ReplyState | None:
        """Replace the local reply's fields with the server's representation."""
        state = self._replies.get(str(reply.get("id")))
        if state is not None:
            state.merge(reply)
        return state

    async def edit_reply(self, reply_id: str, content: str) -> ReplyState | None:
        generation = self._generation
        try:
            data = await self.client.update_reply(reply_id, content)
        except ApiError as e:
            if not self._stale(generation):
                logger.warning("reply_update_failed", reply_id=reply_id, error=str(e))
                self.notifier.error(MSG_REPLY_UPDATE_FAILED)
            return None

        if self._stale(generation):
            return None
        state = self.update_reply(data)
        self.notifier.success(MSG_REPLY_UPDATED)
        return state

    async def delete_reply(self, reply_id: str) -> bool:
        reply_id = str(reply_id)
        generation = self._generation
        try:
            await self.client.delete_reply(reply_id)
        except ApiError as e:
            if not self._stale(generation):
                logger.warning("reply_delete_failed", reply_id=reply_id, error=str(e))
                self.notifier.error(MSG_REPLY_DELETE_FAILED)
            return False

        if self._stale(generation):
            return False

        reply = self._replies.pop(reply_id, None)
        if reply is not None:
            comment = self._comments.get(reply.comment_id)
            if comment is not None:
                if reply_id in comment.reply_ids:
                    comment.reply_ids.remove(reply_id)
                comment.reply_count = max(0, comment.reply_count - 1)
        self.notifier.success(MSG_REPLY_DELETED)
        return True

    # ==========================================================================
    # Likes
    # ==========================================================================

    def toggle_like(self, item_id: str) -> bool | None:
        """Flip the liked flag of a comment or reply locally.

        Returns:
            The new liked flag, or None when nothing was toggled.
        """
        # TODO: call client.toggle_comment_like / toggle_reply_like and
        # reconcile with the returned count once the UI wires it up.
        if not self._authenticated:
            self.notifier.prompt_login()
            return None

        item_id = str(item_id)
        item: CommentState | ReplyState | None = self._comments.get(item_id) or self._replies.get(item_id)
        if item is None:
            return None

        item.liked = not item.liked
        item.likes = item.likes + 1 if item.liked else max(0, item.likes - 1)
        return item.liked
