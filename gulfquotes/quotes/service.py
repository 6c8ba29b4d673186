# ruff: noqa: S608 - All CQL queries use keyspace from config, not user input
"""Quote service.

Business logic for:
- Quote creation with slug claims and reference validation
- Listing with filters, most recent first
- Updates guarded by an optimistic lock on ``updated_at``
- Likes, bookmarks and gallery images
"""

from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from gulfquotes.auth.permissions import UserRole, is_admin
from gulfquotes.core.errors import (
    CategoryNotFoundError,
    ConcurrentDeleteError,
    ConcurrentModificationError,
    DuplicateSlugError,
    ForbiddenError,
    InvalidReferenceError,
    NotFoundError,
    translate_errors,
)
from gulfquotes.core.logging import get_logger
from gulfquotes.core.pagination import Page, paginate
from gulfquotes.engagement import MembershipKind, ToggleResult
from gulfquotes.utils.dates import utc_now
from gulfquotes.utils.text import sanitize_content, slug_from_content

from .models import Category, Quote, QuoteImage
from .schemas import (
    AuthorProfileSummary,
    CategoryResponse,
    CreateQuoteRequest,
    QuoteImageInput,
    QuoteImageResponse,
    QuoteResponse,
    TagSummary,
    UpdateQuoteRequest,
)


if TYPE_CHECKING:
    from cassandra.cluster import Session

    from gulfquotes.auth.schemas import UserResponse
    from gulfquotes.authors.service import AuthorService
    from gulfquotes.engagement import MembershipService
    from gulfquotes.gallery.service import GalleryService
    from gulfquotes.search.service import SearchService
    from gulfquotes.tags.service import TagService


logger = get_logger(__name__)

# Upper bound for list scans
QUOTE_SCAN_LIMIT = 5000


class QuoteService:
    """Service for quotes."""

    def __init__(
        self,
        session: "Session",
        keyspace: str,
        memberships: "MembershipService",
        author_service: "AuthorService",
        gallery_service: "GalleryService",
        tag_service: "TagService",
        search_service: "SearchService | None" = None,
    ):
        self.session = session
        self.keyspace = keyspace
        self.memberships = memberships
        self.author_service = author_service
        self.gallery_service = gallery_service
        self.tag_service = tag_service
        self.search_service = search_service
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements."""
        # Quotes
        self._insert_quote = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.quotes
            (id, content, slug, author_id, author_profile_id, category_id,
             background_image, featured, tag_ids, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._get_quote = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.quotes WHERE id = ?
        """)

        self._get_quotes = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.quotes WHERE id IN ?
        """)

        self._scan_quotes = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.quotes LIMIT {QUOTE_SCAN_LIMIT}
        """)

        self._update_quote = self.session.prepare(f"""
            UPDATE {self.keyspace}.quotes
            SET content = ?, slug = ?, author_profile_id = ?, category_id = ?,
                background_image = ?, featured = ?, tag_ids = ?, updated_at = ?
            WHERE id = ?
            IF updated_at = ?
        """)

        self._delete_quote = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.quotes WHERE id = ?
        """)

        # Slugs
        self._claim_slug = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.quotes_by_slug (slug, quote_id)
            VALUES (?, ?)
            IF NOT EXISTS
        """)

        self._release_slug = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.quotes_by_slug WHERE slug = ?
            IF quote_id = ?
        """)

        self._get_id_by_slug = self.session.prepare(f"""
            SELECT quote_id FROM {self.keyspace}.quotes_by_slug WHERE slug = ?
        """)

        # Author profile index
        self._insert_by_author_profile = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.quotes_by_author_profile
            (author_profile_id, created_at, quote_id)
            VALUES (?, ?, ?)
        """)

        self._delete_by_author_profile = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.quotes_by_author_profile
            WHERE author_profile_id = ? AND created_at = ? AND quote_id = ?
        """)

        # Images
        self._upsert_image = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.quote_images
            (quote_id, gallery_id, is_active, is_background, created_at)
            VALUES (?, ?, ?, ?, ?)
        """)

        self._clear_background = self.session.prepare(f"""
            UPDATE {self.keyspace}.quote_images SET is_background = false
            WHERE quote_id = ? AND gallery_id = ?
        """)

        self._get_images = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.quote_images WHERE quote_id = ?
        """)

        self._delete_image = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.quote_images
            WHERE quote_id = ? AND gallery_id = ?
        """)

        # Categories
        self._get_category = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.categories WHERE id = ?
        """)

    # ==========================================================================
    # Lookups
    # ==========================================================================

    async def get_by_id(self, quote_id: UUID) -> Quote | None:
        result = await self.session.aexecute(self._get_quote, [quote_id])
        row = result.one()
        return Quote.from_row(row) if row else None

    async def get_by_slug(self, slug: str) -> Quote | None:
        result = await self.session.aexecute(self._get_id_by_slug, [slug])
        row = result.one()
        if not row:
            return None
        return await self.get_by_id(row.quote_id)

    async def require_by_slug(self, slug: str) -> Quote:
        quote = await self.get_by_slug(slug)
        if not quote:
            raise NotFoundError("Quote not found")
        return quote

    async def get_many(self, quote_ids: list[UUID]) -> list[Quote]:
        """Quotes for ``quote_ids`` in the given order, skipping missing ones."""
        if not quote_ids:
            return []
        result = await self.session.aexecute(self._get_quotes, [list(set(quote_ids))])
        by_id = {row.id: Quote.from_row(row) for row in result}
        return [by_id[qid] for qid in quote_ids if qid in by_id]

    async def get_category(self, category_id: UUID) -> Category | None:
        result = await self.session.aexecute(self._get_category, [category_id])
        row = result.one()
        return Category.from_row(row) if row else None

    async def get_images(self, quote_id: UUID) -> list[QuoteImage]:
        result = await self.session.aexecute(self._get_images, [quote_id])
        images = [QuoteImage.from_row(row) for row in result]
        images.sort(key=lambda i: i.created_at)
        return images

    def check_access(self, quote: Quote, user: "UserResponse") -> None:
        """ADMIN may modify any quote, AUTHOR only their own.

        Raises:
            ForbiddenError: For every other caller
        """
        if is_admin(user.role):
            return
        if user.role == UserRole.AUTHOR.value and str(quote.author_id) == str(user.id):
            return
        raise ForbiddenError("Permission denied")

    # ==========================================================================
    # Reference validation
    # ==========================================================================

    async def _validate_category(self, category_id: UUID) -> None:
        if not await self.get_category(category_id):
            raise CategoryNotFoundError()

    async def _validate_author_profile(self, author_profile_id: UUID) -> None:
        if not await self.author_service.get_by_id(author_profile_id):
            raise InvalidReferenceError(
                "Author profile not found",
                details={"authorProfileId": str(author_profile_id)},
            )

    async def _validate_images(self, images: list[QuoteImageInput]) -> None:
        for image in images:
            if not await self.gallery_service.get(image.gallery_id):
                raise NotFoundError("Gallery item not found")

    async def _claim(self, slug: str, quote_id: UUID) -> None:
        """Claim ``slug`` for ``quote_id``.

        Raises:
            DuplicateSlugError: If another quote owns the slug
        """
        claimed = await self.session.aexecute(self._claim_slug, [slug, quote_id])
        if claimed.was_applied:
            return
        result = await self.session.aexecute(self._get_id_by_slug, [slug])
        row = result.one()
        if row and row.quote_id == quote_id:
            return
        raise DuplicateSlugError(details={"slug": slug})

    # ==========================================================================
    # Create
    # ==========================================================================

    async def create(self, data: CreateQuoteRequest, author_id: UUID) -> Quote:
        """Create a quote.

        Raises:
            CategoryNotFoundError: Unknown category
            InvalidReferenceError: Unknown author profile or tag
            NotFoundError: Unknown gallery item
            DuplicateSlugError: Slug already taken
        """
        content = sanitize_content(data.content)
        slug = data.slug or slug_from_content(content)
        now = utc_now()

        quote = Quote(
            id=uuid4(),
            content=content,
            slug=slug,
            author_id=author_id,
            author_profile_id=data.author_profile_id,
            category_id=data.category_id,
            background_image=data.background_image,
            featured=data.featured,
            tag_ids=set(data.tag_ids),
            created_at=now,
            updated_at=now,
        )

        with translate_errors("quote_create_failed", "Failed to create quote"):
            await self._validate_category(quote.category_id)
            await self._validate_author_profile(quote.author_profile_id)
            await self.tag_service.validate_ids(list(quote.tag_ids))
            await self._validate_images(data.images)
            await self._claim(slug, quote.id)

            await self.session.aexecute(
                self._insert_quote,
                [
                    quote.id,
                    quote.content,
                    quote.slug,
                    quote.author_id,
                    quote.author_profile_id,
                    quote.category_id,
                    quote.background_image,
                    quote.featured,
                    quote.tag_ids,
                    quote.created_at,
                    quote.updated_at,
                ],
            )
            await self.session.aexecute(
                self._insert_by_author_profile,
                [quote.author_profile_id, quote.created_at, quote.id],
            )
            await self.tag_service.set_quote_tags(quote.id, quote.created_at, quote.tag_ids)
            await self._attach_images(quote.id, data.images, existing=[])

        logger.info(
            "quote_created",
            quote_id=str(quote.id),
            slug=quote.slug,
            author_profile_id=str(quote.author_profile_id),
        )
        return quote

    # ==========================================================================
    # List
    # ==========================================================================

    async def list_quotes(
        self,
        page: int = 1,
        limit: int = 10,
        search: str | None = None,
        author_id: UUID | None = None,
        category_id: UUID | None = None,
        author_profile_id: UUID | None = None,
        viewer_id: UUID | None = None,
    ) -> Page[QuoteResponse]:
        """List quotes, most recent first."""
        with translate_errors("quotes_list_failed", "Failed to fetch quotes"):
            result = await self.session.aexecute(self._scan_quotes)
            quotes = [Quote.from_row(row) for row in result]

            if search:
                needle = search.lower()
                quotes = [q for q in quotes if needle in q.content.lower()]
            if author_id:
                quotes = [q for q in quotes if q.author_id == author_id]
            if category_id:
                quotes = [q for q in quotes if q.category_id == category_id]
            if author_profile_id:
                quotes = [q for q in quotes if q.author_profile_id == author_profile_id]

            quotes.sort(key=lambda q: q.created_at, reverse=True)
            page_result = paginate(quotes, page, limit)
            items = [await self.to_response(q, viewer_id) for q in page_result.items]

        if search:
            await self._record_search(search)

        return Page(
            items=items,
            total=page_result.total,
            page=page_result.page,
            limit=page_result.limit,
        )

    async def list_by_ids(
        self,
        quote_ids: list[UUID],
        page: int = 1,
        limit: int = 10,
        viewer_id: UUID | None = None,
    ) -> Page[QuoteResponse]:
        """Page through an ordered id list (bookmarks, tag pages)."""
        id_page = paginate(quote_ids, page, limit)
        quotes = await self.get_many(id_page.items)
        return Page(
            items=[await self.to_response(q, viewer_id) for q in quotes],
            total=id_page.total,
            page=id_page.page,
            limit=id_page.limit,
        )

    async def _record_search(self, query: str) -> None:
        if self.search_service is None:
            return
        try:
            await self.search_service.record(query)
        except Exception as e:
            logger.warning("search_record_failed", error=str(e))

    # ==========================================================================
    # Update / delete
    # ==========================================================================

    async def update(
        self, slug: str, data: UpdateQuoteRequest, user: "UserResponse"
    ) -> Quote:
        """Apply a partial update under an optimistic lock.

        Raises:
            NotFoundError: Quote does not exist
            ForbiddenError: Caller may not modify the quote
            DuplicateSlugError: New slug belongs to another quote
            ConcurrentDeleteError: Quote vanished before the write
            ConcurrentModificationError: Quote changed since ``updated_at``
        """
        quote = await self.require_by_slug(slug)
        self.check_access(quote, user)
        fields = data.model_fields_set

        with translate_errors("quote_update_failed", "Failed to update quote"):
            content = quote.content
            if data.content is not None:
                content = sanitize_content(data.content)

            new_slug = quote.slug
            if data.slug:
                new_slug = data.slug
            elif content != quote.content:
                new_slug = slug_from_content(content)

            category_id = data.category_id or quote.category_id
            if data.category_id and data.category_id != quote.category_id:
                await self._validate_category(data.category_id)

            author_profile_id = data.author_profile_id or quote.author_profile_id
            if author_profile_id != quote.author_profile_id:
                await self._validate_author_profile(author_profile_id)

            tag_ids = quote.tag_ids
            if data.tag_ids is not None:
                tag_ids = set(data.tag_ids)
                await self.tag_service.validate_ids(list(tag_ids))

            background_image = (
                data.background_image
                if "background_image" in fields
                else quote.background_image
            )
            featured = quote.featured if data.featured is None else data.featured

            slug_changed = new_slug != quote.slug
            if slug_changed:
                await self._claim(new_slug, quote.id)

            expected = data.updated_at or quote.updated_at
            now = utc_now()
            result = await self.session.aexecute(
                self._update_quote,
                [
                    content,
                    new_slug,
                    author_profile_id,
                    category_id,
                    background_image,
                    featured,
                    tag_ids,
                    now,
                    quote.id,
                    expected,
                ],
            )

            if not result.was_applied:
                if slug_changed:
                    await self.session.aexecute(self._release_slug, [new_slug, quote.id])
                if await self.get_by_id(quote.id) is None:
                    raise ConcurrentDeleteError("Quote was deleted")
                raise ConcurrentModificationError(
                    "Quote was modified by another user"
                )

            if slug_changed:
                await self.session.aexecute(self._release_slug, [quote.slug, quote.id])
            if author_profile_id != quote.author_profile_id:
                await self.session.aexecute(
                    self._delete_by_author_profile,
                    [quote.author_profile_id, quote.created_at, quote.id],
                )
                await self.session.aexecute(
                    self._insert_by_author_profile,
                    [author_profile_id, quote.created_at, quote.id],
                )
            if tag_ids != quote.tag_ids:
                await self.tag_service.set_quote_tags(
                    quote.id, quote.created_at, tag_ids, quote.tag_ids
                )

        updated = Quote(
            id=quote.id,
            content=content,
            slug=new_slug,
            author_id=quote.author_id,
            author_profile_id=author_profile_id,
            category_id=category_id,
            background_image=background_image,
            featured=featured,
            tag_ids=tag_ids,
            created_at=quote.created_at,
            updated_at=now,
        )
        logger.info("quote_updated", quote_id=str(quote.id), slug=new_slug)
        return updated

    async def delete(self, slug: str, user: "UserResponse") -> Quote:
        """Delete a quote with its indexes, images and engagement."""
        quote = await self.require_by_slug(slug)
        self.check_access(quote, user)

        with translate_errors("quote_delete_failed", "Failed to delete quote"):
            await self.session.aexecute(self._delete_quote, [quote.id])
            await self.session.aexecute(self._release_slug, [quote.slug, quote.id])
            await self.session.aexecute(
                self._delete_by_author_profile,
                [quote.author_profile_id, quote.created_at, quote.id],
            )
            await self.tag_service.set_quote_tags(
                quote.id, quote.created_at, set(), quote.tag_ids
            )
            for image in await self.get_images(quote.id):
                await self.session.aexecute(
                    self._delete_image, [quote.id, image.gallery_id]
                )
                await self.gallery_service.unlink_quote(image.gallery_id, quote.id)
            await self.memberships.clear(MembershipKind.QUOTE_LIKE, quote.id)
            await self.memberships.clear(MembershipKind.QUOTE_BOOKMARK, quote.id)

        logger.info("quote_deleted", quote_id=str(quote.id), slug=quote.slug)
        return quote

    # ==========================================================================
    # Images
    # ==========================================================================

    async def _attach_images(
        self,
        quote_id: UUID,
        images: list[QuoteImageInput],
        existing: list[QuoteImage],
    ) -> None:
        if any(image.is_background for image in images):
            for current in existing:
                if current.is_background:
                    await self.session.aexecute(
                        self._clear_background, [quote_id, current.gallery_id]
                    )
        now = utc_now()
        for image in images:
            await self.session.aexecute(
                self._upsert_image,
                [quote_id, image.gallery_id, image.is_active, image.is_background, now],
            )
            await self.gallery_service.link_quote(image.gallery_id, quote_id)

    async def add_images(
        self, slug: str, images: list[QuoteImageInput], user: "UserResponse"
    ) -> list[QuoteImageResponse]:
        """Attach gallery images; a new background replaces the old one."""
        quote = await self.require_by_slug(slug)
        self.check_access(quote, user)

        with translate_errors("quote_images_add_failed", "Failed to add images"):
            await self._validate_images(images)
            await self._attach_images(quote.id, images, await self.get_images(quote.id))
            responses = await self._image_responses(quote.id)

        logger.info("quote_images_added", quote_id=str(quote.id), count=len(images))
        return responses

    async def remove_image(
        self, slug: str, public_id: str, user: "UserResponse"
    ) -> list[QuoteImageResponse]:
        quote = await self.require_by_slug(slug)
        self.check_access(quote, user)

        with translate_errors("quote_image_remove_failed", "Failed to remove image"):
            item = await self.gallery_service.get_by_public_id(public_id)
            if not item:
                raise NotFoundError("Gallery item not found")
            attached = {i.gallery_id for i in await self.get_images(quote.id)}
            if item.id not in attached:
                raise NotFoundError("Image is not attached to this quote")

            await self.session.aexecute(self._delete_image, [quote.id, item.id])
            await self.gallery_service.unlink_quote(item.id, quote.id)
            responses = await self._image_responses(quote.id)

        logger.info("quote_image_removed", quote_id=str(quote.id), gallery_id=str(item.id))
        return responses

    async def _image_responses(self, quote_id: UUID) -> list[QuoteImageResponse]:
        responses = []
        for image in await self.get_images(quote_id):
            item = await self.gallery_service.get(image.gallery_id)
            if not item:
                continue
            responses.append(
                QuoteImageResponse(
                    gallery_id=item.id,
                    url=item.url,
                    public_id=item.public_id,
                    alt_text=item.alt_text,
                    is_active=image.is_active,
                    is_background=image.is_background,
                )
            )
        return responses

    # ==========================================================================
    # Likes / bookmarks
    # ==========================================================================

    async def toggle_like(self, slug: str, user_id: UUID) -> ToggleResult:
        quote = await self.require_by_slug(slug)
        return await self.memberships.toggle(MembershipKind.QUOTE_LIKE, quote.id, user_id)

    async def like_status(self, slug: str, user_id: UUID) -> ToggleResult:
        quote = await self.require_by_slug(slug)
        return await self.memberships.status(MembershipKind.QUOTE_LIKE, quote.id, user_id)

    async def toggle_bookmark(self, slug: str, user_id: UUID) -> ToggleResult:
        quote = await self.require_by_slug(slug)
        return await self.memberships.toggle(
            MembershipKind.QUOTE_BOOKMARK, quote.id, user_id
        )

    async def bookmark_status(self, slug: str, user_id: UUID) -> ToggleResult:
        quote = await self.require_by_slug(slug)
        return await self.memberships.status(
            MembershipKind.QUOTE_BOOKMARK, quote.id, user_id
        )

    async def list_bookmarks(
        self, user_id: UUID, page: int = 1, limit: int = 10
    ) -> Page[QuoteResponse]:
        """The user's bookmarked quotes, most recently bookmarked first."""
        bookmarks = await self.memberships.targets_for_user(
            MembershipKind.QUOTE_BOOKMARK, user_id
        )
        return await self.list_by_ids(
            [b.target_id for b in bookmarks], page, limit, viewer_id=user_id
        )

    # ==========================================================================
    # Serialization
    # ==========================================================================

    async def to_response(
        self, quote: Quote, viewer_id: UUID | None = None
    ) -> QuoteResponse:
        """Quote with author profile, category, tags, images and counts."""
        profile = await self.author_service.get_by_id(quote.author_profile_id)
        category = await self.get_category(quote.category_id)
        tags = await self.tag_service.get_many(list(quote.tag_ids))
        like = await self.memberships.status(
            MembershipKind.QUOTE_LIKE, quote.id, viewer_id
        )
        bookmark = await self.memberships.status(
            MembershipKind.QUOTE_BOOKMARK, quote.id, viewer_id
        )

        return QuoteResponse(
            id=quote.id,
            content=quote.content,
            slug=quote.slug,
            author_id=quote.author_id,
            author_profile_id=quote.author_profile_id,
            category_id=quote.category_id,
            background_image=quote.background_image,
            featured=quote.featured,
            author_profile=AuthorProfileSummary(
                id=profile.id, name=profile.name, slug=profile.slug, image=profile.image
            )
            if profile
            else None,
            category=CategoryResponse(id=category.id, name=category.name, slug=category.slug)
            if category
            else None,
            tags=[TagSummary(id=t.id, name=t.name, slug=t.slug) for t in tags],
            images=await self._image_responses(quote.id),
            likes=like.count,
            bookmarks=bookmark.count,
            is_liked=like.active,
            is_bookmarked=bookmark.active,
            created_at=quote.created_at,
            updated_at=quote.updated_at,
        )
