# ruff: noqa: S608 - All CQL queries use keyspace from config, not user input
"""Notification service layer.

Business logic for:
- Creating single notifications (replies, system messages)
- Fanning out NEW_QUOTE notifications to an author profile's followers
- Listing user notifications with pagination and read filters
- Marking notifications as read and deleting them
"""

from typing import TYPE_CHECKING
from uuid import UUID

from cassandra.query import BatchStatement, BatchType

from gulfquotes.core.context import get_request_id
from gulfquotes.core.errors import (
    ForbiddenError,
    InternalError,
    NotFoundError,
    translate_errors,
)
from gulfquotes.core.logging import get_logger
from gulfquotes.utils.dates import utc_now

from .models import NewQuoteEmailJob, Notification, NotificationFilter, NotificationType
from .schemas import NotificationPage, NotificationResponse


if TYPE_CHECKING:
    from cassandra.cluster import Session

    from gulfquotes.authors.service import AuthorService

    from .dispatcher import NotificationEmailDispatcher


logger = get_logger(__name__)

# Rows fetched per page when reading a user's partition
NOTIFICATION_PAGE_SIZE = 500

# Followers per logged batch; each follower adds two statements
NOTIFICATION_BATCH_SIZE = 50

NEW_QUOTE_TITLE = "New Quote Posted"


class NotificationService:
    """Service for notification management."""

    def __init__(
        self,
        session: "Session",
        keyspace: str,
        author_service: "AuthorService",
        dispatcher: "NotificationEmailDispatcher | None" = None,
    ):
        self.session = session
        self.keyspace = keyspace
        self.author_service = author_service
        self.dispatcher = dispatcher
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient queries."""
        self._insert_notification = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.notifications
            (user_id, created_at, notification_id, type, title, message,
             quote_id, author_profile_id, actor_id, is_read, read_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._insert_by_id = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.notifications_by_id
            (notification_id, user_id, created_at)
            VALUES (?, ?, ?)
        """)

        self._get_by_id = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.notifications_by_id
            WHERE notification_id = ?
        """)

        self._get_notifications = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.notifications
            WHERE user_id = ?
        """)
        self._get_notifications.fetch_size = NOTIFICATION_PAGE_SIZE

        self._mark_read = self.session.prepare(f"""
            UPDATE {self.keyspace}.notifications
            SET is_read = true, read_at = ?
            WHERE user_id = ? AND created_at = ? AND notification_id = ?
        """)

        self._delete_notification = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.notifications
            WHERE user_id = ? AND created_at = ? AND notification_id = ?
        """)

        self._delete_by_id = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.notifications_by_id
            WHERE notification_id = ?
        """)

    # ==========================================================================
    # Creation
    # ==========================================================================

    def _add_rows(self, batch: BatchStatement, notification: Notification) -> None:
        batch.add(
            self._insert_notification,
            (
                notification.user_id,
                notification.created_at,
                notification.id,
                notification.type.value,
                notification.title,
                notification.message,
                notification.quote_id,
                notification.author_profile_id,
                notification.actor_id,
                notification.read,
                notification.read_at,
            ),
        )
        batch.add(
            self._insert_by_id,
            (notification.id, notification.user_id, notification.created_at),
        )

    async def create(
        self,
        user_id: UUID,
        notification_type: NotificationType,
        title: str,
        message: str,
        quote_id: UUID | None = None,
        author_profile_id: UUID | None = None,
        actor_id: UUID | None = None,
    ) -> Notification:
        """Create a single notification."""
        notification = Notification(
            user_id=user_id,
            type=notification_type,
            title=title,
            message=message,
            quote_id=quote_id,
            author_profile_id=author_profile_id,
            actor_id=actor_id,
        )

        try:
            batch = BatchStatement(batch_type=BatchType.LOGGED)
            self._add_rows(batch, notification)
            await self.session.aexecute(batch)
        except Exception as e:
            logger.exception(
                "notification_create_failed",
                user_id=str(user_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise InternalError("Failed to create notification") from e

        logger.info(
            "notification_created",
            notification_id=str(notification.id),
            user_id=str(user_id),
            type=notification_type.value,
        )
        return notification

    async def create_quote_notifications_for_followers(
        self,
        quote_id: UUID,
        author_profile_id: UUID,
        actor_id: UUID | None = None,
    ) -> int:
        """Notify every follower of an author profile about a new quote.

        Rows are written in logged batches of ``NOTIFICATION_BATCH_SIZE``
        followers so large audiences stay under the server's batch size
        limit. The email job is queued only after every batch succeeds and
        is never awaited.

        Returns:
            Number of notifications written.
        """
        with translate_errors(
            "quote_notifications_failed", "Failed to create quote notifications"
        ):
            followers = await self.author_service.get_followers(author_profile_id)
            if not followers:
                logger.debug(
                    "quote_notifications_no_followers",
                    author_profile_id=str(author_profile_id),
                )
                return 0

            profile = await self.author_service.get_by_id(author_profile_id)
            author_name = profile.name if profile else "An author"
            now = utc_now()

            for start in range(0, len(followers), NOTIFICATION_BATCH_SIZE):
                batch = BatchStatement(batch_type=BatchType.LOGGED)
                for follower in followers[start : start + NOTIFICATION_BATCH_SIZE]:
                    self._add_rows(
                        batch,
                        Notification(
                            user_id=follower.id,
                            type=NotificationType.NEW_QUOTE,
                            title=NEW_QUOTE_TITLE,
                            message=f"{author_name} has posted a new quote",
                            quote_id=quote_id,
                            author_profile_id=author_profile_id,
                            actor_id=actor_id,
                            created_at=now,
                        ),
                    )
                await self.session.aexecute(batch)

        logger.info(
            "quote_notifications_created",
            quote_id=str(quote_id),
            author_profile_id=str(author_profile_id),
            count=len(followers),
        )

        if self.dispatcher is not None:
            self.dispatcher.enqueue(
                NewQuoteEmailJob(
                    quote_id=quote_id,
                    author_profile_id=author_profile_id,
                    author_name=author_name,
                    followers=followers,
                    request_id=get_request_id() or None,
                )
            )

        return len(followers)

    # ==========================================================================
    # Reads
    # ==========================================================================

    async def _load(self, user_id: UUID) -> list[Notification]:
        """Read the whole partition one driver page at a time."""
        notifications: list[Notification] = []
        paging_state = None
        while True:
            result = await self.session.aexecute(
                self._get_notifications, (user_id,), paging_state=paging_state
            )
            # iterating the result itself would fetch later pages synchronously
            notifications.extend(Notification.from_row(row) for row in result.current_rows)
            paging_state = result.paging_state
            if not paging_state:
                return notifications

    async def list_notifications(
        self,
        user_id: UUID,
        page: int = 1,
        limit: int = 10,
        filter: NotificationFilter = NotificationFilter.ALL,
    ) -> NotificationPage:
        """List a user's notifications, most recent first."""
        notifications = await self._load(user_id)
        unread_count = sum(1 for n in notifications if not n.read)

        if filter == NotificationFilter.UNREAD:
            notifications = [n for n in notifications if not n.read]
        elif filter == NotificationFilter.READ:
            notifications = [n for n in notifications if n.read]

        notifications.sort(key=lambda n: n.created_at, reverse=True)

        page = max(page, 1)
        skip = (page - 1) * limit
        return NotificationPage(
            items=[
                NotificationResponse.from_notification(n)
                for n in notifications[skip : skip + limit]
            ],
            total=len(notifications),
            page=page,
            limit=limit,
            unread_count=unread_count,
        )

    async def unread_count(self, user_id: UUID) -> int:
        notifications = await self._load(user_id)
        return sum(1 for n in notifications if not n.read)

    async def _require_owned(self, notification_id: UUID, user_id: UUID):
        """Load the id row, enforcing that ``user_id`` is the recipient."""
        result = await self.session.aexecute(self._get_by_id, (notification_id,))
        row = result.one()
        if not row:
            raise NotFoundError("Notification not found")
        if row.user_id != user_id:
            raise ForbiddenError("Cannot access another user's notification")
        return row

    # ==========================================================================
    # Updates
    # ==========================================================================

    async def mark_as_read(self, notification_id: UUID, user_id: UUID) -> None:
        row = await self._require_owned(notification_id, user_id)
        await self.session.aexecute(
            self._mark_read, (utc_now(), user_id, row.created_at, notification_id)
        )

    async def mark_all_as_read(self, user_id: UUID) -> int:
        """Mark every unread notification as read.

        Returns:
            Number of notifications that changed. A second call returns 0.
        """
        unread = [n for n in await self._load(user_id) if not n.read]
        if not unread:
            return 0

        now = utc_now()
        for start in range(0, len(unread), NOTIFICATION_PAGE_SIZE):
            batch = BatchStatement(batch_type=BatchType.UNLOGGED)
            for notification in unread[start : start + NOTIFICATION_PAGE_SIZE]:
                batch.add(
                    self._mark_read,
                    (now, user_id, notification.created_at, notification.id),
                )
            await self.session.aexecute(batch)

        logger.info("notifications_marked_read", user_id=str(user_id), count=len(unread))
        return len(unread)

    async def delete(self, notification_id: UUID, user_id: UUID) -> None:
        row = await self._require_owned(notification_id, user_id)
        await self.session.aexecute(
            self._delete_notification, (user_id, row.created_at, notification_id)
        )
        await self.session.aexecute(self._delete_by_id, (notification_id,))
