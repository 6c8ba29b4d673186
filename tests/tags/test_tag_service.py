"""Tests for tags."""

from datetime import timedelta
from uuid import uuid4

import pytest

from gulfquotes.core.errors import InvalidReferenceError, NotFoundError
from gulfquotes.tags.schemas import SortOrder, TagSortBy
from gulfquotes.tags.service import TagService
from gulfquotes.utils.dates import utc_now
from tests.fakes import row, rows, tag_row


@pytest.fixture
def service(session) -> TagService:
    return TagService(session, "ks")


class TestValidateIds:
    @pytest.mark.asyncio
    async def test_all_known(self, session, service) -> None:
        tag = tag_row()
        session.on("WHERE id IN ?", rows(tag))
        await service.validate_ids([tag.id])

    @pytest.mark.asyncio
    async def test_missing_reported(self, session, service) -> None:
        tag, missing = tag_row(), uuid4()
        session.on("WHERE id IN ?", rows(tag))

        with pytest.raises(InvalidReferenceError) as exc_info:
            await service.validate_ids([tag.id, missing])

        assert exc_info.value.details == {"tagIds": [str(missing)]}

    @pytest.mark.asyncio
    async def test_empty_is_valid(self, session, service) -> None:
        await service.validate_ids([])
        session.aexecute.assert_not_called()


class TestListTags:
    @pytest.mark.asyncio
    async def test_default_sort_by_name(self, session, service) -> None:
        session.on(
            "SELECT * FROM ks.tags LIMIT",
            rows(tag_row(name="wisdom"), tag_row(name="Courage"), tag_row(name="love")),
        )

        page = await service.list_tags()

        assert [t.name for t in page.items] == ["Courage", "love", "wisdom"]

    @pytest.mark.asyncio
    async def test_search_and_popular_desc(self, session, service) -> None:
        hope, hopeful, grief = tag_row(name="Hope"), tag_row(name="Hopeful"), tag_row(name="Grief")
        session.on("SELECT * FROM ks.tags LIMIT", rows(hope, hopeful, grief))
        # Counted in scan order after the search filter: Hope, then Hopeful
        session.on("SELECT COUNT(*) FROM ks.quotes_by_tag", rows(row(count=2)), rows(row(count=7)))

        page = await service.list_tags(
            search=" hope ", sort_by=TagSortBy.POPULAR, order=SortOrder.DESC
        )

        assert [(t.name, t.quote_count) for t in page.items] == [("Hopeful", 7), ("Hope", 2)]

    @pytest.mark.asyncio
    async def test_recent_ascending(self, session, service) -> None:
        now = utc_now()
        new, old = tag_row(name="New", created_at=now), tag_row(
            name="Old", created_at=now - timedelta(days=3)
        )
        session.on("SELECT * FROM ks.tags LIMIT", rows(new, old))

        page = await service.list_tags(sort_by=TagSortBy.RECENT, order=SortOrder.ASC)

        assert [t.name for t in page.items] == ["Old", "New"]

    @pytest.mark.asyncio
    async def test_popular_skips_unused_tags(self, session, service) -> None:
        used, unused = tag_row(name="Used"), tag_row(name="Unused")
        session.on("SELECT * FROM ks.tags LIMIT", rows(used, unused))
        session.on("SELECT COUNT(*) FROM ks.quotes_by_tag", rows(row(count=3)), rows(row(count=0)))

        popular = await service.popular(limit=10)

        assert [t.name for t in popular] == ["Used"]


class TestQuoteTagging:
    @pytest.mark.asyncio
    async def test_set_quote_tags_diffs(self, session, service) -> None:
        quote_id, keep, add, drop = uuid4(), uuid4(), uuid4(), uuid4()
        created_at = utc_now()

        await service.set_quote_tags(quote_id, created_at, {keep, add}, {keep, drop})

        assert session.calls("INSERT INTO ks.quotes_by_tag") == [[add, quote_id, created_at]]
        assert session.calls("DELETE FROM ks.quotes_by_tag") == [[drop, quote_id]]

    @pytest.mark.asyncio
    async def test_quote_ids_most_recent_first(self, session, service) -> None:
        now = utc_now()
        old_id, new_id = uuid4(), uuid4()
        session.on(
            "SELECT quote_id, created_at FROM ks.quotes_by_tag",
            rows(
                row(quote_id=old_id, created_at=now - timedelta(days=1)),
                row(quote_id=new_id, created_at=now),
            ),
        )

        assert await service.quote_ids(uuid4()) == [new_id, old_id]

    @pytest.mark.asyncio
    async def test_unknown_slug(self, service) -> None:
        with pytest.raises(NotFoundError, match="Tag not found"):
            await service.require_by_slug("nope")
