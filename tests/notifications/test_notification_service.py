"""Tests for in-app notifications and the new-quote fan-out."""

from datetime import timedelta
from unittest.mock import AsyncMock, Mock, patch
from uuid import uuid4

import pytest
from cassandra.query import BatchType

from gulfquotes.auth.models import User
from gulfquotes.authors.models import AuthorProfile
from gulfquotes.core.context import RequestContext
from gulfquotes.core.errors import DatabaseError, ForbiddenError, InternalError, NotFoundError
from gulfquotes.notifications.models import NotificationFilter, NotificationType
from gulfquotes.notifications.service import (
    NOTIFICATION_BATCH_SIZE,
    NOTIFICATION_PAGE_SIZE,
    NotificationService,
)
from gulfquotes.utils.dates import utc_now
from tests.fakes import RecordingBatch, notification_row, row, rows


@pytest.fixture(autouse=True)
def recording_batches():
    with patch("gulfquotes.notifications.service.BatchStatement", RecordingBatch):
        yield


@pytest.fixture
def author_service() -> AsyncMock:
    author_service = AsyncMock()
    author_service.get_by_id.return_value = AuthorProfile(id=uuid4(), name="Rumi", slug="rumi")
    return author_service


@pytest.fixture
def dispatcher() -> Mock:
    return Mock()


@pytest.fixture
def service(session, author_service, dispatcher) -> NotificationService:
    return NotificationService(session, "ks", author_service, dispatcher)


def executed_batches(session) -> list[RecordingBatch]:
    return [
        call.args[0]
        for call in session.aexecute.await_args_list
        if isinstance(call.args[0], RecordingBatch)
    ]


def executed_batch(session) -> RecordingBatch:
    [batch] = executed_batches(session)
    return batch


class TestCreate:
    @pytest.mark.asyncio
    async def test_writes_both_rows_in_one_batch(self, session, service) -> None:
        user_id, quote_id = uuid4(), uuid4()

        notification = await service.create(
            user_id=user_id,
            notification_type=NotificationType.COMMENT_REPLY,
            title="New Reply",
            message="Sam replied to your comment",
            quote_id=quote_id,
        )

        batch = executed_batch(session)
        assert batch.batch_type == BatchType.LOGGED
        [main] = batch.queries("INSERT INTO ks.notifications (")
        assert main[0] == user_id
        assert main[3] == "COMMENT_REPLY"
        assert main[9] is False
        assert batch.queries("INSERT INTO ks.notifications_by_id") == [
            (notification.id, user_id, notification.created_at)
        ]

    @pytest.mark.asyncio
    async def test_storage_failure_is_internal_error(self, session, service) -> None:
        from cassandra import DriverException

        session.aexecute.side_effect = DriverException("write timeout")

        with pytest.raises(InternalError, match="Failed to create notification"):
            await service.create(
                user_id=uuid4(),
                notification_type=NotificationType.SYSTEM,
                title="Welcome",
                message="Hello",
            )


class TestQuoteFanOut:
    @pytest.mark.asyncio
    async def test_no_followers(self, session, service, author_service, dispatcher) -> None:
        author_service.get_followers.return_value = []

        count = await service.create_quote_notifications_for_followers(uuid4(), uuid4())

        assert count == 0
        session.aexecute.assert_not_called()
        dispatcher.enqueue.assert_not_called()

    @pytest.mark.asyncio
    async def test_one_row_per_follower(self, session, service, author_service, dispatcher) -> None:
        followers = [User(id=uuid4(), email=f"f{i}@example.com") for i in range(3)]
        author_service.get_followers.return_value = followers
        quote_id, profile_id, actor_id = uuid4(), uuid4(), uuid4()

        count = await service.create_quote_notifications_for_followers(
            quote_id, profile_id, actor_id=actor_id
        )

        assert count == 3
        batch = executed_batch(session)
        assert batch.batch_type == BatchType.LOGGED
        inserts = batch.queries("INSERT INTO ks.notifications (")
        assert [p[0] for p in inserts] == [f.id for f in followers]
        assert {p[4] for p in inserts} == {"New Quote Posted"}
        assert {p[5] for p in inserts} == {"Rumi has posted a new quote"}
        assert {p[6] for p in inserts} == {quote_id}
        assert {p[8] for p in inserts} == {actor_id}
        assert len(batch.queries("notifications_by_id")) == 3

    @pytest.mark.asyncio
    async def test_large_audience_split_into_batches(
        self, session, service, author_service, dispatcher
    ) -> None:
        followers = [User(id=uuid4()) for _ in range(2 * NOTIFICATION_BATCH_SIZE + 20)]
        author_service.get_followers.return_value = followers

        count = await service.create_quote_notifications_for_followers(uuid4(), uuid4())

        assert count == len(followers)
        batches = executed_batches(session)
        assert len(batches) == 3
        assert {b.batch_type for b in batches} == {BatchType.LOGGED}
        assert [len(b.queries("INSERT INTO ks.notifications (")) for b in batches] == [
            NOTIFICATION_BATCH_SIZE,
            NOTIFICATION_BATCH_SIZE,
            20,
        ]
        written = [p[0] for b in batches for p in b.queries("INSERT INTO ks.notifications (")]
        assert written == [f.id for f in followers]
        dispatcher.enqueue.assert_called_once()

    @pytest.mark.asyncio
    async def test_email_job_queued_after_batch(
        self, session, service, author_service, dispatcher
    ) -> None:
        followers = [User(id=uuid4(), email="fan@example.com")]
        author_service.get_followers.return_value = followers
        quote_id, profile_id = uuid4(), uuid4()

        with RequestContext(request_id="req-42"):
            await service.create_quote_notifications_for_followers(quote_id, profile_id)

        [call] = dispatcher.enqueue.call_args_list
        job = call.args[0]
        assert job.quote_id == quote_id
        assert job.author_profile_id == profile_id
        assert job.author_name == "Rumi"
        assert job.followers == followers
        assert job.request_id == "req-42"

    @pytest.mark.asyncio
    async def test_failed_batch_queues_no_email(
        self, session, service, author_service, dispatcher
    ) -> None:
        from cassandra import DriverException

        author_service.get_followers.return_value = [User(id=uuid4(), email="a@b.co")]
        session.aexecute.side_effect = DriverException("batch too large")

        with pytest.raises(DatabaseError):
            await service.create_quote_notifications_for_followers(uuid4(), uuid4())
        dispatcher.enqueue.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_author_name(self, session, service, author_service) -> None:
        author_service.get_followers.return_value = [User(id=uuid4())]
        author_service.get_by_id.return_value = None

        await service.create_quote_notifications_for_followers(uuid4(), uuid4())

        [insert] = executed_batch(session).queries("INSERT INTO ks.notifications (")
        assert insert[5] == "An author has posted a new quote"

    @pytest.mark.asyncio
    async def test_works_without_dispatcher(self, session, author_service) -> None:
        author_service.get_followers.return_value = [User(id=uuid4())]
        service = NotificationService(session, "ks", author_service)

        assert await service.create_quote_notifications_for_followers(uuid4(), uuid4()) == 1


class TestList:
    @pytest.mark.asyncio
    async def test_unread_count_ignores_filter(self, session, service) -> None:
        user_id = uuid4()
        now = utc_now()
        session.on(
            "SELECT * FROM ks.notifications WHERE user_id = ?",
            rows(
                notification_row(user_id=user_id, created_at=now - timedelta(hours=2)),
                notification_row(user_id=user_id, created_at=now, is_read=True),
                notification_row(user_id=user_id, created_at=now - timedelta(hours=1)),
            ),
        )

        page = await service.list_notifications(user_id, filter=NotificationFilter.READ)

        body = page.to_dict()
        assert body["total"] == 1
        assert body["unreadCount"] == 2
        assert body["items"][0]["read"] is True

    @pytest.mark.asyncio
    async def test_newest_first_and_paged(self, session, service) -> None:
        user_id = uuid4()
        now = utc_now()
        items = [
            notification_row(user_id=user_id, created_at=now - timedelta(minutes=i))
            for i in (3, 1, 2)
        ]
        session.on("SELECT * FROM ks.notifications WHERE user_id = ?", rows(*items))

        page = await service.list_notifications(user_id, page=1, limit=2)

        assert [n.id for n in page.items] == [items[1].notification_id, items[2].notification_id]
        assert page.has_more is True
        assert page.unread_count == 3

    @pytest.mark.asyncio
    async def test_reads_every_page(self, session, service) -> None:
        user_id = uuid4()
        first = [notification_row(user_id=user_id) for _ in range(3)]
        second = [notification_row(user_id=user_id, is_read=True) for _ in range(2)]
        session.on(
            "SELECT * FROM ks.notifications WHERE user_id = ?",
            rows(*first, paging_state=b"page-2"),
            rows(*second),
        )

        page = await service.list_notifications(user_id, limit=2)

        assert page.total == 5
        assert page.unread_count == 3
        assert page.has_more is True
        assert session.paging_states == [None, b"page-2"]

    @pytest.mark.asyncio
    async def test_unread_count(self, session, service) -> None:
        session.on(
            "SELECT * FROM ks.notifications WHERE user_id = ?",
            rows(notification_row(), notification_row(is_read=True)),
        )
        assert await service.unread_count(uuid4()) == 1


class TestOwnership:
    @pytest.mark.asyncio
    async def test_missing_notification(self, service) -> None:
        with pytest.raises(NotFoundError, match="Notification not found"):
            await service.mark_as_read(uuid4(), uuid4())

    @pytest.mark.asyncio
    async def test_other_users_notification(self, session, service) -> None:
        notification_id = uuid4()
        session.on(
            "FROM ks.notifications_by_id",
            rows(row(notification_id=notification_id, user_id=uuid4(), created_at=utc_now())),
        )

        with pytest.raises(ForbiddenError):
            await service.delete(notification_id, uuid4())
        assert not session.calls("DELETE FROM")

    @pytest.mark.asyncio
    async def test_mark_as_read(self, session, service) -> None:
        notification_id, user_id, created_at = uuid4(), uuid4(), utc_now()
        session.on(
            "FROM ks.notifications_by_id",
            rows(row(notification_id=notification_id, user_id=user_id, created_at=created_at)),
        )

        await service.mark_as_read(notification_id, user_id)

        [params] = session.calls("SET is_read = true")
        assert params[1:] == (user_id, created_at, notification_id)

    @pytest.mark.asyncio
    async def test_delete_removes_both_rows(self, session, service) -> None:
        notification_id, user_id, created_at = uuid4(), uuid4(), utc_now()
        session.on(
            "FROM ks.notifications_by_id",
            rows(row(notification_id=notification_id, user_id=user_id, created_at=created_at)),
        )

        await service.delete(notification_id, user_id)

        assert session.calls("DELETE FROM ks.notifications WHERE") == [
            (user_id, created_at, notification_id)
        ]
        assert session.calls("DELETE FROM ks.notifications_by_id") == [(notification_id,)]


class TestMarkAllRead:
    @pytest.mark.asyncio
    async def test_marks_only_unread(self, session, service) -> None:
        user_id = uuid4()
        unread = notification_row(user_id=user_id)
        session.on(
            "SELECT * FROM ks.notifications WHERE user_id = ?",
            rows(unread, notification_row(user_id=user_id, is_read=True)),
        )

        assert await service.mark_all_as_read(user_id) == 1

        batch = executed_batch(session)
        assert batch.batch_type == BatchType.UNLOGGED
        [params] = batch.queries("SET is_read = true")
        assert params[1:] == (user_id, unread.created_at, unread.notification_id)

    @pytest.mark.asyncio
    async def test_marks_every_page(self, session, service) -> None:
        user_id = uuid4()
        first = [notification_row(user_id=user_id) for _ in range(NOTIFICATION_PAGE_SIZE)]
        second = [notification_row(user_id=user_id) for _ in range(100)]
        session.on(
            "SELECT * FROM ks.notifications WHERE user_id = ?",
            rows(*first, paging_state=b"page-2"),
            rows(*second),
        )

        assert await service.mark_all_as_read(user_id) == NOTIFICATION_PAGE_SIZE + 100

        batches = executed_batches(session)
        assert {b.batch_type for b in batches} == {BatchType.UNLOGGED}
        marked = [p[3] for b in batches for p in b.queries("SET is_read = true")]
        assert marked == [n.notification_id for n in (*first, *second)]

    @pytest.mark.asyncio
    async def test_second_call_is_noop(self, session, service) -> None:
        session.on(
            "SELECT * FROM ks.notifications WHERE user_id = ?",
            rows(notification_row(is_read=True)),
        )

        assert await service.mark_all_as_read(uuid4()) == 0
        assert not session.calls("SET is_read")
