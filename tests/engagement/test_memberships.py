"""Tests for membership toggles (likes, bookmarks, follows)."""

from datetime import timedelta
from uuid import uuid4

import pytest

from gulfquotes.core.errors import DatabaseError
from gulfquotes.engagement import MembershipKind, MembershipService
from gulfquotes.utils.dates import utc_now
from tests.fakes import not_applied, row, rows


@pytest.fixture
def service(session) -> MembershipService:
    return MembershipService(session, "ks")


class TestToggle:
    @pytest.mark.asyncio
    async def test_first_toggle_joins(self, session, service) -> None:
        """Applied insert adds the reverse row and increments the counter."""
        target, user = uuid4(), uuid4()
        session.on("SELECT total FROM", rows(row(total=1)))

        result = await service.toggle(MembershipKind.QUOTE_LIKE, target, user)

        assert result.active is True
        assert result.count == 1
        assert session.calls("INSERT INTO ks.memberships_by_user")
        assert session.calls("SET total = total + 1") == [
            [MembershipKind.QUOTE_LIKE.value, target]
        ]
        assert not session.calls("DELETE FROM ks.memberships WHERE")

    @pytest.mark.asyncio
    async def test_second_toggle_leaves(self, session, service) -> None:
        """A rejected insert means the user was a member: delete and decrement."""
        target, user = uuid4(), uuid4()
        session.on("IF NOT EXISTS", not_applied())
        session.on("SELECT total FROM", rows(row(total=0)))

        result = await service.toggle(MembershipKind.AUTHOR_FOLLOW, target, user)

        assert result.active is False
        assert result.count == 0
        assert session.calls("DELETE FROM ks.memberships_by_user")
        assert session.calls("SET total = total - 1")

    @pytest.mark.asyncio
    async def test_lost_race_does_not_decrement(self, session, service) -> None:
        """Both conditional writes rejected: nothing changes, user is not a member."""
        session.on("IF NOT EXISTS", not_applied())
        session.on("IF EXISTS", not_applied())

        result = await service.toggle(MembershipKind.QUOTE_BOOKMARK, uuid4(), uuid4())

        assert result.active is False
        assert not session.calls("SET total = total - 1")
        assert not session.calls("SET total = total + 1")

    @pytest.mark.asyncio
    async def test_negative_counter_reported_as_zero(self, session, service) -> None:
        session.on("IF NOT EXISTS", not_applied())
        session.on("SELECT total FROM", rows(row(total=-2)))

        result = await service.toggle(MembershipKind.COMMENT_LIKE, uuid4(), uuid4())

        assert result.count == 0

    @pytest.mark.asyncio
    async def test_driver_failure_becomes_database_error(self, session, service) -> None:
        from cassandra import DriverException

        session.aexecute.side_effect = DriverException("timeout")
        with pytest.raises(DatabaseError):
            await service.toggle(MembershipKind.QUOTE_LIKE, uuid4(), uuid4())


class TestReads:
    @pytest.mark.asyncio
    async def test_status_anonymous(self, session, service) -> None:
        session.on("SELECT total FROM", rows(row(total=4)))

        result = await service.status(MembershipKind.QUOTE_LIKE, uuid4(), None)

        assert result.active is False
        assert result.count == 4
        assert not session.calls("SELECT user_id FROM")

    @pytest.mark.asyncio
    async def test_status_member(self, session, service) -> None:
        user = uuid4()
        session.on("SELECT user_id FROM", rows(row(user_id=user)))

        result = await service.status(MembershipKind.QUOTE_LIKE, uuid4(), user)

        assert result.active is True
        assert result.count == 0

    @pytest.mark.asyncio
    async def test_targets_for_user_most_recent_first(self, session, service) -> None:
        user, old, new = uuid4(), uuid4(), uuid4()
        now = utc_now()
        session.on(
            "memberships_by_user WHERE user_id = ? AND kind = ?",
            rows(
                row(kind="quote_bookmark", target_id=old, user_id=user,
                    created_at=now - timedelta(days=1)),
                row(kind="quote_bookmark", target_id=new, user_id=user, created_at=now),
            ),
        )

        targets = await service.targets_for_user(MembershipKind.QUOTE_BOOKMARK, user)

        assert [m.target_id for m in targets] == [new, old]

    @pytest.mark.asyncio
    async def test_active_for_user_filters_to_requested(self, session, service) -> None:
        user, liked, other = uuid4(), uuid4(), uuid4()
        session.on(
            "memberships_by_user",
            rows(row(kind="comment_like", target_id=liked, user_id=user,
                     created_at=utc_now())),
        )

        active = await service.active_for_user(
            MembershipKind.COMMENT_LIKE, user, [liked, other]
        )

        assert active == {liked}

    @pytest.mark.asyncio
    async def test_clear_removes_reverse_rows_and_counter(self, session, service) -> None:
        target, user = uuid4(), uuid4()
        session.on(
            "SELECT kind, target_id, user_id, created_at FROM ks.memberships ",
            rows(row(kind="quote_like", target_id=target, user_id=user,
                     created_at=utc_now())),
        )

        await service.clear(MembershipKind.QUOTE_LIKE, target)

        assert session.calls("DELETE FROM ks.memberships_by_user") == [
            [user, MembershipKind.QUOTE_LIKE.value, target]
        ]
        assert session.calls("DELETE FROM ks.membership_counts")
