# ruff: noqa: S608 - All CQL queries use keyspace from config, not user input
"""User profile service.

Reads user profiles and email notification preferences. Profiles are
created by the identity provider sync, so there is no registration here.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID

from gulfquotes.auth.models import User
from gulfquotes.auth.schemas import UpdateNotificationPreferencesRequest
from gulfquotes.core.errors import NotFoundError, translate_errors
from gulfquotes.core.logging import get_logger


if TYPE_CHECKING:
    from cassandra.cluster import Session


logger = get_logger(__name__)


class UserService:
    """Service for user profile lookups and preference updates."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self._get_user = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.users WHERE id = ?
        """)

        self._get_users = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.users WHERE id IN ?
        """)

        self._update_preferences = self.session.prepare(f"""
            UPDATE {self.keyspace}.users
            SET email_notifications = ?, email_notification_types = ?, updated_at = ?
            WHERE id = ?
        """)

    async def get_user(self, user_id: UUID) -> User | None:
        result = await self.session.aexecute(self._get_user, [user_id])
        row = result.one()
        return User.from_row(row) if row else None

    async def get_users(self, user_ids: list[UUID]) -> dict[UUID, User]:
        """Fetch several users keyed by id. Unknown ids are omitted."""
        if not user_ids:
            return {}
        result = await self.session.aexecute(self._get_users, [list(set(user_ids))])
        return {row.id: User.from_row(row) for row in result}

    async def update_notification_preferences(
        self,
        user_id: UUID,
        request: UpdateNotificationPreferencesRequest,
    ) -> User:
        """Apply a partial preference update and return the stored profile.

        Raises:
            NotFoundError: If the user has no stored profile
        """
        with translate_errors(
            "notification_preferences_update_failed",
            "Failed to update notification preferences",
        ):
            user = await self.get_user(user_id)
            if not user:
                raise NotFoundError("User not found")

            if request.email_notifications is not None:
                user.email_notifications = request.email_notifications
            if request.email_notification_types is not None:
                user.email_notification_types = set(request.email_notification_types)
            user.updated_at = datetime.now(UTC)

            await self.session.aexecute(
                self._update_preferences,
                [
                    user.email_notifications,
                    user.email_notification_types,
                    user.updated_at,
                    user_id,
                ],
            )

        logger.info(
            "notification_preferences_updated",
            user_id=str(user_id),
            email_notifications=user.email_notifications,
        )
        return user
