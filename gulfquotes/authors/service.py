# ruff: noqa: S608 - All CQL queries use keyspace from config, not user input
"""Author profile service.

Business logic for:
- Author directory listing (search and A-Z letter filter)
- Profile lookup by id or slug
- Follow toggling and follower reads for notification fan-out
"""

from typing import TYPE_CHECKING
from uuid import UUID

from gulfquotes.auth.models import User
from gulfquotes.core.errors import NotFoundError, translate_errors
from gulfquotes.core.logging import get_logger
from gulfquotes.core.pagination import Page, paginate
from gulfquotes.engagement import MembershipKind, ToggleResult

from .models import AuthorProfile
from .schemas import AuthorProfileResponse


if TYPE_CHECKING:
    from cassandra.cluster import Session

    from gulfquotes.auth.service import UserService
    from gulfquotes.engagement import MembershipService


logger = get_logger(__name__)

# Upper bound for directory scans
AUTHOR_SCAN_LIMIT = 5000


class AuthorService:
    """Service for author profiles and follows."""

    def __init__(
        self,
        session: "Session",
        keyspace: str,
        memberships: "MembershipService",
        user_service: "UserService",
    ):
        self.session = session
        self.keyspace = keyspace
        self.memberships = memberships
        self.user_service = user_service
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self._get_by_id = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.author_profiles WHERE id = ?
        """)

        self._get_id_by_slug = self.session.prepare(f"""
            SELECT author_profile_id FROM {self.keyspace}.author_profiles_by_slug
            WHERE slug = ?
        """)

        self._scan_profiles = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.author_profiles LIMIT {AUTHOR_SCAN_LIMIT}
        """)

        self._count_quotes = self.session.prepare(f"""
            SELECT COUNT(*) FROM {self.keyspace}.quotes_by_author_profile
            WHERE author_profile_id = ?
        """)

    # ==========================================================================
    # Lookups
    # ==========================================================================

    async def get_by_id(self, author_profile_id: UUID) -> AuthorProfile | None:
        result = await self.session.aexecute(self._get_by_id, [author_profile_id])
        row = result.one()
        return AuthorProfile.from_row(row) if row else None

    async def get_by_slug(self, slug: str) -> AuthorProfile | None:
        result = await self.session.aexecute(self._get_id_by_slug, [slug])
        row = result.one()
        if not row:
            return None
        return await self.get_by_id(row.author_profile_id)

    async def require_by_slug(self, slug: str) -> AuthorProfile:
        profile = await self.get_by_slug(slug)
        if not profile:
            raise NotFoundError("Author not found")
        return profile

    async def count_quotes(self, author_profile_id: UUID) -> int:
        result = await self.session.aexecute(self._count_quotes, [author_profile_id])
        row = result.one()
        return row.count if row else 0

    async def to_response(self, profile: AuthorProfile) -> AuthorProfileResponse:
        return AuthorProfileResponse(
            id=profile.id,
            name=profile.name,
            slug=profile.slug,
            bio=profile.bio,
            born=profile.born,
            died=profile.died,
            influences=profile.influences,
            image=profile.image,
            quote_count=await self.count_quotes(profile.id),
            follower_count=await self.memberships.count(
                MembershipKind.AUTHOR_FOLLOW, profile.id
            ),
            created_at=profile.created_at,
        )

    # ==========================================================================
    # Directory
    # ==========================================================================

    async def list_authors(
        self,
        page: int = 1,
        limit: int = 12,
        search: str | None = None,
        letter: str | None = None,
    ) -> Page[AuthorProfileResponse]:
        """List author profiles ordered by name.

        Args:
            page: 1-based page number
            limit: Page size
            search: Case-insensitive substring of the name
            letter: First letter filter (case-insensitive)
        """
        with translate_errors("authors_list_failed", "Failed to fetch authors"):
            result = await self.session.aexecute(self._scan_profiles)
            profiles = [AuthorProfile.from_row(row) for row in result]

            if search:
                needle = search.strip().lower()
                profiles = [p for p in profiles if needle in p.name.lower()]
            if letter:
                initial = letter.strip()[:1].upper()
                profiles = [p for p in profiles if p.initial == initial]

            profiles.sort(key=lambda p: p.name.lower())
            page_result = paginate(profiles, page, limit)

            items = [await self.to_response(p) for p in page_result.items]

        return Page(
            items=items,
            total=page_result.total,
            page=page_result.page,
            limit=page_result.limit,
        )

    # ==========================================================================
    # Follows
    # ==========================================================================

    async def toggle_follow(self, slug: str, user_id: UUID) -> ToggleResult:
        profile = await self.require_by_slug(slug)
        result = await self.memberships.toggle(
            MembershipKind.AUTHOR_FOLLOW, profile.id, user_id
        )
        logger.info(
            "author_follow_toggled",
            author_profile_id=str(profile.id),
            followed=result.active,
        )
        return result

    async def follow_status(self, slug: str, user_id: UUID) -> ToggleResult:
        profile = await self.require_by_slug(slug)
        return await self.memberships.status(
            MembershipKind.AUTHOR_FOLLOW, profile.id, user_id
        )

    async def get_followers(self, author_profile_id: UUID) -> list[User]:
        """Followers of an author profile with their email preferences.

        Follows whose user has no stored profile are returned as bare users
        without an email address, so they still get an in-app notification.
        """
        memberships = await self.memberships.members(
            MembershipKind.AUTHOR_FOLLOW, author_profile_id
        )
        if not memberships:
            return []

        user_ids = [m.user_id for m in memberships]
        users = await self.user_service.get_users(user_ids)
        return [
            users.get(user_id) or User(id=user_id, email_notifications=False)
            for user_id in user_ids
        ]
