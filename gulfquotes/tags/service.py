# ruff: noqa: S608 - All CQL queries use keyspace from config, not user input
"""Tag service.

Business logic for:
- Tag listing with search and name/popular/recent sorting
- Popular tags by quote count
- Maintaining the quote-to-tag relation
"""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from gulfquotes.core.errors import InvalidReferenceError, NotFoundError, translate_errors
from gulfquotes.core.logging import get_logger
from gulfquotes.core.pagination import Page, paginate

from .models import Tag
from .schemas import SortOrder, TagResponse, TagSortBy


if TYPE_CHECKING:
    from cassandra.cluster import Session


logger = get_logger(__name__)

TAG_SCAN_LIMIT = 5000


class TagService:
    """Service for tags and quote tagging."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self._get_tag = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.tags WHERE id = ?
        """)

        self._get_tags = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.tags WHERE id IN ?
        """)

        self._get_id_by_slug = self.session.prepare(f"""
            SELECT tag_id FROM {self.keyspace}.tags_by_slug WHERE slug = ?
        """)

        self._scan_tags = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.tags LIMIT {TAG_SCAN_LIMIT}
        """)

        self._count_quotes = self.session.prepare(f"""
            SELECT COUNT(*) FROM {self.keyspace}.quotes_by_tag WHERE tag_id = ?
        """)

        self._get_quote_ids = self.session.prepare(f"""
            SELECT quote_id, created_at FROM {self.keyspace}.quotes_by_tag
            WHERE tag_id = ?
        """)

        self._attach = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.quotes_by_tag (tag_id, quote_id, created_at)
            VALUES (?, ?, ?)
        """)

        self._detach = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.quotes_by_tag WHERE tag_id = ? AND quote_id = ?
        """)

    # ==========================================================================
    # Lookups
    # ==========================================================================

    async def get_by_slug(self, slug: str) -> Tag | None:
        result = await self.session.aexecute(self._get_id_by_slug, [slug])
        row = result.one()
        if not row:
            return None
        result = await self.session.aexecute(self._get_tag, [row.tag_id])
        tag_row = result.one()
        return Tag.from_row(tag_row) if tag_row else None

    async def require_by_slug(self, slug: str) -> Tag:
        tag = await self.get_by_slug(slug)
        if not tag:
            raise NotFoundError("Tag not found")
        return tag

    async def get_many(self, tag_ids: list[UUID]) -> list[Tag]:
        """Tags for the given ids, ordered by name."""
        if not tag_ids:
            return []
        result = await self.session.aexecute(self._get_tags, [list(set(tag_ids))])
        return sorted((Tag.from_row(row) for row in result), key=lambda t: t.name.lower())

    async def validate_ids(self, tag_ids: list[UUID]) -> None:
        """Raise InvalidReferenceError unless every id names an existing tag."""
        found = {tag.id for tag in await self.get_many(tag_ids)}
        missing = set(tag_ids) - found
        if missing:
            raise InvalidReferenceError(
                "Unknown tag reference",
                details={"tagIds": sorted(str(t) for t in missing)},
            )

    async def count_quotes(self, tag_id: UUID) -> int:
        result = await self.session.aexecute(self._count_quotes, [tag_id])
        row = result.one()
        return row.count if row else 0

    async def quote_ids(self, tag_id: UUID) -> list[UUID]:
        """Ids of quotes carrying the tag, most recent first."""
        result = await self.session.aexecute(self._get_quote_ids, [tag_id])
        rows = sorted(result, key=lambda r: r.created_at or datetime.min, reverse=True)
        return [row.quote_id for row in rows]

    async def to_response(self, tag: Tag, quote_count: int | None = None) -> TagResponse:
        return TagResponse(
            id=tag.id,
            name=tag.name,
            slug=tag.slug,
            quote_count=await self.count_quotes(tag.id)
            if quote_count is None
            else quote_count,
            created_at=tag.created_at,
        )

    # ==========================================================================
    # Listing
    # ==========================================================================

    async def list_tags(
        self,
        page: int = 1,
        limit: int = 20,
        search: str | None = None,
        sort_by: TagSortBy = TagSortBy.NAME,
        order: SortOrder = SortOrder.ASC,
    ) -> Page[TagResponse]:
        with translate_errors("tags_list_failed", "Failed to fetch tags"):
            result = await self.session.aexecute(self._scan_tags)
            tags = [Tag.from_row(row) for row in result]

            if search:
                needle = search.strip().lower()
                tags = [t for t in tags if needle in t.name.lower()]

            counts = {t.id: await self.count_quotes(t.id) for t in tags}
            reverse = order == SortOrder.DESC
            if sort_by == TagSortBy.POPULAR:
                tags.sort(key=lambda t: (counts[t.id], t.name.lower()), reverse=reverse)
            elif sort_by == TagSortBy.RECENT:
                tags.sort(key=lambda t: t.created_at, reverse=reverse)
            else:
                tags.sort(key=lambda t: t.name.lower(), reverse=reverse)

            page_result = paginate(tags, page, limit)
            items = [
                await self.to_response(t, counts[t.id]) for t in page_result.items
            ]

        return Page(
            items=items,
            total=page_result.total,
            page=page_result.page,
            limit=page_result.limit,
        )

    async def popular(self, limit: int = 10) -> list[TagResponse]:
        """Tags with the most quotes."""
        page = await self.list_tags(
            page=1, limit=limit, sort_by=TagSortBy.POPULAR, order=SortOrder.DESC
        )
        return [t for t in page.items if t.quote_count > 0]

    # ==========================================================================
    # Quote tagging
    # ==========================================================================

    async def set_quote_tags(
        self,
        quote_id: UUID,
        created_at: datetime,
        new_tag_ids: set[UUID],
        old_tag_ids: set[UUID] | None = None,
    ) -> None:
        """Sync ``quotes_by_tag`` with a quote's tag set."""
        old_tag_ids = old_tag_ids or set()
        for tag_id in new_tag_ids - old_tag_ids:
            await self.session.aexecute(self._attach, [tag_id, quote_id, created_at])
        for tag_id in old_tag_ids - new_tag_ids:
            await self.session.aexecute(self._detach, [tag_id, quote_id])
