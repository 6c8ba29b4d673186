# ruff: noqa: S608 - All CQL queries use keyspace from config, not user input
"""Comment and reply service.

Business logic for:
- Comment listing (recent or popular) and CRUD
- Reply listing and CRUD under a comment
- Like toggles for comments and replies
- Owner-or-moderator access checks
"""

from typing import TYPE_CHECKING
from uuid import UUID

from gulfquotes.auth.permissions import can_modify_content
from gulfquotes.core.errors import ForbiddenError, NotFoundError, translate_errors
from gulfquotes.core.logging import get_logger
from gulfquotes.core.pagination import Page, paginate
from gulfquotes.engagement import MembershipKind, ToggleResult
from gulfquotes.utils.dates import utc_now

from .models import Comment, Reply
from .schemas import CommentResponse, CommentSortBy, CommentUser, ReplyCount, ReplyResponse


if TYPE_CHECKING:
    from cassandra.cluster import Session

    from gulfquotes.auth.schemas import UserResponse
    from gulfquotes.engagement import MembershipService


logger = get_logger(__name__)


class CommentService:
    """Service for comments and replies."""

    def __init__(
        self,
        session: "Session",
        keyspace: str,
        memberships: "MembershipService",
    ):
        self.session = session
        self.keyspace = keyspace
        self.memberships = memberships
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements."""
        # Comments
        self._insert_comment = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.comments
            (quote_id, created_at, comment_id, user_id, user_name, user_image,
             content, is_edited, edited_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._insert_comment_by_id = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.comments_by_id (comment_id, quote_id, created_at)
            VALUES (?, ?, ?)
        """)

        self._get_comment_ref = self.session.prepare(f"""
            SELECT quote_id, created_at FROM {self.keyspace}.comments_by_id
            WHERE comment_id = ?
        """)

        self._get_comment = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.comments
            WHERE quote_id = ? AND created_at = ? AND comment_id = ?
        """)

        self._get_comments = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.comments WHERE quote_id = ?
        """)

        self._update_comment = self.session.prepare(f"""
            UPDATE {self.keyspace}.comments
            SET content = ?, is_edited = true, edited_at = ?, updated_at = ?
            WHERE quote_id = ? AND created_at = ? AND comment_id = ?
        """)

        self._delete_comment = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.comments
            WHERE quote_id = ? AND created_at = ? AND comment_id = ?
        """)

        self._delete_comment_by_id = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.comments_by_id WHERE comment_id = ?
        """)

        # Replies
        self._insert_reply = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.comment_replies
            (comment_id, created_at, reply_id, quote_id, user_id, user_name,
             user_image, content, is_edited, edited_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._insert_reply_by_id = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.replies_by_id
            (reply_id, comment_id, quote_id, created_at)
            VALUES (?, ?, ?, ?)
        """)

        self._get_reply_ref = self.session.prepare(f"""
            SELECT comment_id, created_at FROM {self.keyspace}.replies_by_id
            WHERE reply_id = ?
        """)

        self._get_reply = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.comment_replies
            WHERE comment_id = ? AND created_at = ? AND reply_id = ?
        """)

        self._get_replies = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.comment_replies WHERE comment_id = ?
        """)

        self._count_replies = self.session.prepare(f"""
            SELECT COUNT(*) FROM {self.keyspace}.comment_replies WHERE comment_id = ?
        """)

        self._update_reply = self.session.prepare(f"""
            UPDATE {self.keyspace}.comment_replies
            SET content = ?, is_edited = true, edited_at = ?, updated_at = ?
            WHERE comment_id = ? AND created_at = ? AND reply_id = ?
        """)

        self._delete_reply = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.comment_replies
            WHERE comment_id = ? AND created_at = ? AND reply_id = ?
        """)

        self._delete_reply_by_id = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.replies_by_id WHERE reply_id = ?
        """)

        self._delete_replies = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.comment_replies WHERE comment_id = ?
        """)

    # ==========================================================================
    # Lookups
    # ==========================================================================

    async def get_comment(self, comment_id: UUID) -> Comment | None:
        result = await self.session.aexecute(self._get_comment_ref, [comment_id])
        ref = result.one()
        if not ref:
            return None
        result = await self.session.aexecute(
            self._get_comment, [ref.quote_id, ref.created_at, comment_id]
        )
        row = result.one()
        return Comment.from_row(row) if row else None

    async def require_comment(self, comment_id: UUID) -> Comment:
        comment = await self.get_comment(comment_id)
        if not comment:
            raise NotFoundError("Comment not found")
        return comment

    async def get_reply(self, reply_id: UUID) -> Reply | None:
        result = await self.session.aexecute(self._get_reply_ref, [reply_id])
        ref = result.one()
        if not ref:
            return None
        result = await self.session.aexecute(
            self._get_reply, [ref.comment_id, ref.created_at, reply_id]
        )
        row = result.one()
        return Reply.from_row(row) if row else None

    async def require_reply(self, reply_id: UUID) -> Reply:
        reply = await self.get_reply(reply_id)
        if not reply:
            raise NotFoundError("Reply not found")
        return reply

    async def count_replies(self, comment_id: UUID) -> int:
        result = await self.session.aexecute(self._count_replies, [comment_id])
        row = result.one()
        return row.count if row else 0

    def _check_access(self, owner_id: UUID, user: "UserResponse", action: str) -> None:
        if not can_modify_content(owner_id, user.id, user.role):
            raise ForbiddenError(f"You don't have permission to {action}")

    # ==========================================================================
    # Comments
    # ==========================================================================

    async def list_comments(
        self,
        quote_id: UUID,
        page: int = 1,
        limit: int = 10,
        sort_by: CommentSortBy = CommentSortBy.RECENT,
        viewer_id: UUID | None = None,
    ) -> Page[CommentResponse]:
        """Comments of a quote.

        ``recent`` orders by creation time, newest first. ``popular`` orders
        by like count, then newest first.
        """
        with translate_errors("comments_list_failed", "Failed to fetch comments"):
            result = await self.session.aexecute(self._get_comments, [quote_id])
            comments = [Comment.from_row(row) for row in result]

            likes = await self.memberships.counts(
                MembershipKind.COMMENT_LIKE, [c.id for c in comments]
            )
            comments.sort(key=lambda c: c.created_at, reverse=True)
            if sort_by == CommentSortBy.POPULAR:
                comments.sort(key=lambda c: likes[c.id], reverse=True)

            page_result = paginate(comments, page, limit)
            liked = await self.memberships.active_for_user(
                MembershipKind.COMMENT_LIKE,
                viewer_id,
                [c.id for c in page_result.items],
            )
            items = [
                await self._comment_response(c, likes[c.id], c.id in liked)
                for c in page_result.items
            ]

        return Page(
            items=items,
            total=page_result.total,
            page=page_result.page,
            limit=page_result.limit,
        )

    async def create_comment(
        self, quote_id: UUID, user: "UserResponse", content: str
    ) -> CommentResponse:
        now = utc_now()
        comment = Comment(
            quote_id=quote_id,
            user_id=user.id,
            user_name=user.name,
            user_image=user.image,
            content=content,
            created_at=now,
            updated_at=now,
        )

        with translate_errors("comment_create_failed", "Failed to create comment"):
            await self.session.aexecute(
                self._insert_comment,
                [
                    comment.quote_id,
                    comment.created_at,
                    comment.id,
                    comment.user_id,
                    comment.user_name,
                    comment.user_image,
                    comment.content,
                    comment.is_edited,
                    comment.edited_at,
                    comment.updated_at,
                ],
            )
            await self.session.aexecute(
                self._insert_comment_by_id,
                [comment.id, comment.quote_id, comment.created_at],
            )

        logger.info("comment_created", comment_id=str(comment.id), quote_id=str(quote_id))
        return await self._comment_response(comment, likes=0, is_liked=False, replies=0)

    async def update_comment(
        self, comment_id: UUID, user: "UserResponse", content: str
    ) -> CommentResponse:
        comment = await self.require_comment(comment_id)
        self._check_access(comment.user_id, user, "update this comment")

        now = utc_now()
        with translate_errors("comment_update_failed", "Failed to update comment"):
            await self.session.aexecute(
                self._update_comment,
                [content, now, now, comment.quote_id, comment.created_at, comment.id],
            )
            comment.content = content
            comment.is_edited = True
            comment.edited_at = now
            comment.updated_at = now
            like = await self.memberships.status(
                MembershipKind.COMMENT_LIKE, comment.id, user.id
            )

        logger.info("comment_updated", comment_id=str(comment.id))
        return await self._comment_response(comment, like.count, like.active)

    async def delete_comment(
        self, comment_id: UUID, user: "UserResponse"
    ) -> CommentResponse:
        """Delete a comment together with its replies."""
        comment = await self.require_comment(comment_id)
        self._check_access(comment.user_id, user, "delete this comment")

        with translate_errors("comment_delete_failed", "Failed to delete comment"):
            response = await self._comment_response(comment, likes=0, is_liked=False)
            await self._remove_comment(comment)

        logger.info("comment_deleted", comment_id=str(comment.id))
        return response

    async def delete_for_quote(self, quote_id: UUID) -> int:
        """Delete every comment (and reply) of a deleted quote."""
        with translate_errors("comments_cleanup_failed", "Failed to delete comments"):
            result = await self.session.aexecute(self._get_comments, [quote_id])
            comments = [Comment.from_row(row) for row in result]
            for comment in comments:
                await self._remove_comment(comment)

        logger.info("quote_comments_deleted", quote_id=str(quote_id), count=len(comments))
        return len(comments)

    async def _remove_comment(self, comment: Comment) -> None:
        result = await self.session.aexecute(self._get_replies, [comment.id])
        for reply in (Reply.from_row(row) for row in result):
            await self.session.aexecute(self._delete_reply_by_id, [reply.id])
            await self.memberships.clear(MembershipKind.REPLY_LIKE, reply.id)
        await self.session.aexecute(self._delete_replies, [comment.id])

        await self.session.aexecute(
            self._delete_comment, [comment.quote_id, comment.created_at, comment.id]
        )
        await self.session.aexecute(self._delete_comment_by_id, [comment.id])
        await self.memberships.clear(MembershipKind.COMMENT_LIKE, comment.id)

    async def toggle_comment_like(self, comment_id: UUID, user_id: UUID) -> ToggleResult:
        comment = await self.require_comment(comment_id)
        return await self.memberships.toggle(
            MembershipKind.COMMENT_LIKE, comment.id, user_id
        )

    # ==========================================================================
    # Replies
    # ==========================================================================

    async def require_comment_of_quote(self, comment_id: UUID, quote_id: UUID) -> Comment:
        """The comment, which must belong to ``quote_id``."""
        comment = await self.get_comment(comment_id)
        if not comment or comment.quote_id != quote_id:
            raise NotFoundError("Comment not found")
        return comment

    async def list_replies(
        self,
        quote_id: UUID,
        comment_id: UUID,
        page: int = 1,
        limit: int = 50,
        viewer_id: UUID | None = None,
    ) -> Page[ReplyResponse]:
        """Replies of a comment, oldest first."""
        await self.require_comment_of_quote(comment_id, quote_id)

        with translate_errors("replies_list_failed", "Failed to list replies"):
            result = await self.session.aexecute(self._get_replies, [comment_id])
            replies = sorted(
                (Reply.from_row(row) for row in result), key=lambda r: r.created_at
            )
            page_result = paginate(replies, page, limit)
            reply_ids = [r.id for r in page_result.items]
            likes = await self.memberships.counts(MembershipKind.REPLY_LIKE, reply_ids)
            liked = await self.memberships.active_for_user(
                MembershipKind.REPLY_LIKE, viewer_id, reply_ids
            )
            items = [
                self._reply_response(r, likes[r.id], r.id in liked)
                for r in page_result.items
            ]

        return Page(
            items=items,
            total=page_result.total,
            page=page_result.page,
            limit=page_result.limit,
        )

    async def create_reply(
        self,
        quote_id: UUID,
        comment_id: UUID,
        user: "UserResponse",
        content: str,
    ) -> tuple[ReplyResponse, Comment]:
        """Create a reply; returns it with the parent comment."""
        comment = await self.require_comment_of_quote(comment_id, quote_id)
        now = utc_now()
        reply = Reply(
            comment_id=comment.id,
            quote_id=quote_id,
            user_id=user.id,
            user_name=user.name,
            user_image=user.image,
            content=content,
            created_at=now,
            updated_at=now,
        )

        with translate_errors("reply_create_failed", "Failed to create reply"):
            await self.session.aexecute(
                self._insert_reply,
                [
                    reply.comment_id,
                    reply.created_at,
                    reply.id,
                    reply.quote_id,
                    reply.user_id,
                    reply.user_name,
                    reply.user_image,
                    reply.content,
                    reply.is_edited,
                    reply.edited_at,
                    reply.updated_at,
                ],
            )
            await self.session.aexecute(
                self._insert_reply_by_id,
                [reply.id, reply.comment_id, reply.quote_id, reply.created_at],
            )

        logger.info("reply_created", reply_id=str(reply.id), comment_id=str(comment.id))
        return self._reply_response(reply, likes=0, is_liked=False), comment

    async def update_reply(
        self, reply_id: UUID, user: "UserResponse", content: str
    ) -> ReplyResponse:
        reply = await self.require_reply(reply_id)
        self._check_access(reply.user_id, user, "update this reply")

        now = utc_now()
        with translate_errors("reply_update_failed", "Failed to update reply"):
            await self.session.aexecute(
                self._update_reply,
                [content, now, now, reply.comment_id, reply.created_at, reply.id],
            )
            reply.content = content
            reply.is_edited = True
            reply.edited_at = now
            reply.updated_at = now
            like = await self.memberships.status(
                MembershipKind.REPLY_LIKE, reply.id, user.id
            )

        logger.info("reply_updated", reply_id=str(reply.id))
        return self._reply_response(reply, like.count, like.active)

    async def delete_reply(self, reply_id: UUID, user: "UserResponse") -> ReplyResponse:
        reply = await self.require_reply(reply_id)
        self._check_access(reply.user_id, user, "delete this reply")

        with translate_errors("reply_delete_failed", "Failed to delete reply"):
            await self.session.aexecute(
                self._delete_reply, [reply.comment_id, reply.created_at, reply.id]
            )
            await self.session.aexecute(self._delete_reply_by_id, [reply.id])
            await self.memberships.clear(MembershipKind.REPLY_LIKE, reply.id)

        logger.info("reply_deleted", reply_id=str(reply.id))
        return self._reply_response(reply, likes=0, is_liked=False)

    async def toggle_reply_like(self, reply_id: UUID, user_id: UUID) -> ToggleResult:
        reply = await self.require_reply(reply_id)
        return await self.memberships.toggle(MembershipKind.REPLY_LIKE, reply.id, user_id)

    # ==========================================================================
    # Serialization
    # ==========================================================================

    async def _comment_response(
        self,
        comment: Comment,
        likes: int,
        is_liked: bool,
        replies: int | None = None,
    ) -> CommentResponse:
        return CommentResponse(
            id=comment.id,
            quote_id=comment.quote_id,
            user_id=comment.user_id,
            content=comment.content,
            is_edited=comment.is_edited,
            edited_at=comment.edited_at,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
            user=CommentUser(
                id=comment.user_id, name=comment.user_name, image=comment.user_image
            ),
            likes=likes,
            is_liked=is_liked,
            reply_count=ReplyCount(
                replies=await self.count_replies(comment.id)
                if replies is None
                else replies
            ),
        )

    def _reply_response(self, reply: Reply, likes: int, is_liked: bool) -> ReplyResponse:
        return ReplyResponse(
            id=reply.id,
            comment_id=reply.comment_id,
            quote_id=reply.quote_id,
            user_id=reply.user_id,
            content=reply.content,
            is_edited=reply.is_edited,
            edited_at=reply.edited_at,
            created_at=reply.created_at,
            updated_at=reply.updated_at,
            user=CommentUser(id=reply.user_id, name=reply.user_name, image=reply.user_image),
            likes=likes,
            is_liked=is_liked,
        )
