# ruff: noqa: S608 - All CQL queries use keyspace from config, not user input
"""Gallery service: register uploaded images and list them."""

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from gulfquotes.core.errors import BadRequestError, translate_errors
from gulfquotes.core.logging import get_logger
from gulfquotes.core.pagination import Page, paginate

from .models import GalleryItem
from .schemas import (
    CreateGalleryRequest,
    GalleryResponse,
    GallerySortField,
    SortDirection,
)


if TYPE_CHECKING:
    from cassandra.cluster import Session


logger = get_logger(__name__)

GALLERY_SCAN_LIMIT = 5000


class GalleryService:
    """Service for gallery items."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self._insert_item = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.gallery
            (id, url, public_id, title, description, alt_text, format, width, height,
             bytes, is_global, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._claim_public_id = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.gallery_by_public_id (public_id, gallery_id)
            VALUES (?, ?)
            IF NOT EXISTS
        """)

        self._get_item = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.gallery WHERE id = ?
        """)

        self._get_id_by_public_id = self.session.prepare(f"""
            SELECT gallery_id FROM {self.keyspace}.gallery_by_public_id
            WHERE public_id = ?
        """)

        self._scan_items = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.gallery LIMIT {GALLERY_SCAN_LIMIT}
        """)

        self._count_usage = self.session.prepare(f"""
            SELECT COUNT(*) FROM {self.keyspace}.quotes_by_gallery WHERE gallery_id = ?
        """)

        self._link_quote = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.quotes_by_gallery (gallery_id, quote_id)
            VALUES (?, ?)
        """)

        self._unlink_quote = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.quotes_by_gallery
            WHERE gallery_id = ? AND quote_id = ?
        """)

    async def create(self, data: CreateGalleryRequest) -> GalleryResponse:
        """Register a new gallery item.

        Raises:
            BadRequestError: If ``public_id`` is already registered
        """
        now = datetime.now(UTC)
        item = GalleryItem(
            id=uuid4(),
            url=str(data.url),
            public_id=data.public_id,
            title=data.title,
            description=data.description,
            alt_text=data.alt_text,
            format=data.format,
            width=data.width,
            height=data.height,
            bytes=data.bytes,
            is_global=data.is_global,
            created_at=now,
            updated_at=now,
        )

        with translate_errors("gallery_create_failed", "Failed to create gallery item"):
            claimed = await self.session.aexecute(
                self._claim_public_id, [item.public_id, item.id]
            )
            if not claimed.was_applied:
                raise BadRequestError("Image already exists in gallery")

            await self.session.aexecute(
                self._insert_item,
                [
                    item.id,
                    item.url,
                    item.public_id,
                    item.title,
                    item.description,
                    item.alt_text,
                    item.format,
                    item.width,
                    item.height,
                    item.bytes,
                    item.is_global,
                    item.created_at,
                    item.updated_at,
                ],
            )

        logger.info("gallery_item_created", gallery_id=str(item.id))
        return self._to_response(item, usage_count=0)

    async def get(self, gallery_id: UUID) -> GalleryItem | None:
        result = await self.session.aexecute(self._get_item, [gallery_id])
        row = result.one()
        return GalleryItem.from_row(row) if row else None

    async def get_by_public_id(self, public_id: str) -> GalleryItem | None:
        result = await self.session.aexecute(self._get_id_by_public_id, [public_id])
        row = result.one()
        return await self.get(row.gallery_id) if row else None

    async def usage_count(self, gallery_id: UUID) -> int:
        result = await self.session.aexecute(self._count_usage, [gallery_id])
        row = result.one()
        return row.count if row else 0

    async def link_quote(self, gallery_id: UUID, quote_id: UUID) -> None:
        await self.session.aexecute(self._link_quote, [gallery_id, quote_id])

    async def unlink_quote(self, gallery_id: UUID, quote_id: UUID) -> None:
        await self.session.aexecute(self._unlink_quote, [gallery_id, quote_id])

    async def list_items(
        self,
        page: int = 1,
        limit: int = 20,
        search: str | None = None,
        is_global: bool | None = None,
        formats: list[str] | None = None,
        sort_field: GallerySortField = GallerySortField.CREATED_AT,
        sort_direction: SortDirection = SortDirection.DESC,
    ) -> Page[GalleryResponse]:
        """List gallery items with filters and sorting."""
        with translate_errors("gallery_list_failed", "Failed to fetch gallery items"):
            result = await self.session.aexecute(self._scan_items)
            items = [GalleryItem.from_row(row) for row in result]

            if search:
                items = [i for i in items if i.matches(search.strip())]
            if is_global is not None:
                items = [i for i in items if i.is_global == is_global]
            if formats:
                wanted = {f.strip().lower() for f in formats if f.strip()}
                items = [i for i in items if (i.format or "").lower() in wanted]

            usage: dict[UUID, int] = {}
            if sort_field == GallerySortField.USAGE_COUNT:
                usage = {i.id: await self.usage_count(i.id) for i in items}

            reverse = sort_direction == SortDirection.DESC
            if sort_field == GallerySortField.TITLE:
                items.sort(key=lambda i: (i.title or "").lower(), reverse=reverse)
            elif sort_field == GallerySortField.USAGE_COUNT:
                items.sort(key=lambda i: (usage[i.id], i.created_at), reverse=reverse)
            else:
                items.sort(key=lambda i: i.created_at, reverse=reverse)

            page_result = paginate(items, page, limit)
            responses = [
                self._to_response(
                    item,
                    usage_count=usage[item.id]
                    if item.id in usage
                    else await self.usage_count(item.id),
                )
                for item in page_result.items
            ]

        return Page(
            items=responses,
            total=page_result.total,
            page=page_result.page,
            limit=page_result.limit,
        )

    def _to_response(self, item: GalleryItem, usage_count: int) -> GalleryResponse:
        return GalleryResponse(
            id=item.id,
            url=item.url,
            public_id=item.public_id,
            title=item.title,
            description=item.description,
            alt_text=item.alt_text,
            format=item.format,
            width=item.width,
            height=item.height,
            bytes=item.bytes,
            is_global=item.is_global,
            usage_count=usage_count,
            created_at=item.created_at,
            updated_at=item.updated_at,
        )
