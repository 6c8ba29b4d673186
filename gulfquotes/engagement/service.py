# ruff: noqa: S608 - All CQL queries use keyspace from config, not user input
"""Membership service: likes, bookmarks and follows.

Toggle flow:
1. ``INSERT ... IF NOT EXISTS``. Applied means the user was not a member:
   add the reverse-lookup row and increment the counter.
2. Otherwise ``DELETE ... IF EXISTS``. Applied means the user was a member:
   remove the reverse-lookup row and decrement the counter.

Counters are read back after the write and never reported below zero.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID

from gulfquotes.core.errors import translate_errors
from gulfquotes.core.logging import get_logger

from .models import Membership, MembershipKind, ToggleResult


if TYPE_CHECKING:
    from cassandra.cluster import Session


logger = get_logger(__name__)


class MembershipService:
    """Idempotent membership toggles with atomic counters."""

    def __init__(self, session: "Session", keyspace: str):
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        self._insert_if_absent = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.memberships (kind, target_id, user_id, created_at)
            VALUES (?, ?, ?, ?)
            IF NOT EXISTS
        """)

        self._delete_if_present = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.memberships
            WHERE kind = ? AND target_id = ? AND user_id = ?
            IF EXISTS
        """)

        self._insert_by_user = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.memberships_by_user (user_id, kind, target_id, created_at)
            VALUES (?, ?, ?, ?)
        """)

        self._delete_by_user = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.memberships_by_user
            WHERE user_id = ? AND kind = ? AND target_id = ?
        """)

        self._incr_count = self.session.prepare(f"""
            UPDATE {self.keyspace}.membership_counts SET total = total + 1
            WHERE kind = ? AND target_id = ?
        """)

        self._decr_count = self.session.prepare(f"""
            UPDATE {self.keyspace}.membership_counts SET total = total - 1
            WHERE kind = ? AND target_id = ?
        """)

        self._get_count = self.session.prepare(f"""
            SELECT total FROM {self.keyspace}.membership_counts
            WHERE kind = ? AND target_id = ?
        """)

        self._get_member = self.session.prepare(f"""
            SELECT user_id FROM {self.keyspace}.memberships
            WHERE kind = ? AND target_id = ? AND user_id = ?
        """)

        self._get_members = self.session.prepare(f"""
            SELECT kind, target_id, user_id, created_at FROM {self.keyspace}.memberships
            WHERE kind = ? AND target_id = ?
        """)

        self._get_user_targets = self.session.prepare(f"""
            SELECT kind, target_id, user_id, created_at FROM {self.keyspace}.memberships_by_user
            WHERE user_id = ? AND kind = ?
        """)

        self._delete_members = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.memberships WHERE kind = ? AND target_id = ?
        """)

        self._delete_count = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.membership_counts WHERE kind = ? AND target_id = ?
        """)

    # ==========================================================================
    # Toggle / status
    # ==========================================================================

    async def toggle(
        self,
        kind: MembershipKind,
        target_id: UUID,
        user_id: UUID,
    ) -> ToggleResult:
        """Flip the user's membership of ``target_id``."""
        now = datetime.now(UTC)

        with translate_errors("membership_toggle_failed", "Failed to update"):
            inserted = await self.session.aexecute(
                self._insert_if_absent, [kind.value, target_id, user_id, now]
            )
            if inserted.was_applied:
                await self.session.aexecute(
                    self._insert_by_user, [user_id, kind.value, target_id, now]
                )
                await self.session.aexecute(self._incr_count, [kind.value, target_id])
                active = True
            else:
                deleted = await self.session.aexecute(
                    self._delete_if_present, [kind.value, target_id, user_id]
                )
                if deleted.was_applied:
                    await self.session.aexecute(
                        self._delete_by_user, [user_id, kind.value, target_id]
                    )
                    await self.session.aexecute(
                        self._decr_count, [kind.value, target_id]
                    )
                # A concurrent toggle removed the row first; either way the
                # user is no longer a member.
                active = False

            count = await self.count(kind, target_id)

        logger.debug(
            "membership_toggled",
            kind=kind.value,
            target_id=str(target_id),
            active=active,
            count=count,
        )
        return ToggleResult(active=active, count=count)

    async def status(
        self,
        kind: MembershipKind,
        target_id: UUID,
        user_id: UUID | None,
    ) -> ToggleResult:
        """Current membership and count without changing anything."""
        active = False
        if user_id is not None:
            result = await self.session.aexecute(
                self._get_member, [kind.value, target_id, user_id]
            )
            active = result.one() is not None
        return ToggleResult(active=active, count=await self.count(kind, target_id))

    # ==========================================================================
    # Reads
    # ==========================================================================

    async def count(self, kind: MembershipKind, target_id: UUID) -> int:
        result = await self.session.aexecute(self._get_count, [kind.value, target_id])
        row = result.one()
        return max(0, row.total or 0) if row else 0

    async def counts(
        self, kind: MembershipKind, target_ids: list[UUID]
    ) -> dict[UUID, int]:
        """Counts for several targets (missing targets count as 0)."""
        return {target_id: await self.count(kind, target_id) for target_id in target_ids}

    async def members(self, kind: MembershipKind, target_id: UUID) -> list[Membership]:
        """All members of a target (followers of an author, likers of a quote)."""
        result = await self.session.aexecute(self._get_members, [kind.value, target_id])
        return [Membership.from_row(row) for row in result]

    async def targets_for_user(
        self, kind: MembershipKind, user_id: UUID
    ) -> list[Membership]:
        """Targets the user joined, most recent first."""
        result = await self.session.aexecute(
            self._get_user_targets, [user_id, kind.value]
        )
        memberships = [Membership.from_row(row) for row in result]
        memberships.sort(key=lambda m: m.created_at, reverse=True)
        return memberships

    async def active_for_user(
        self,
        kind: MembershipKind,
        user_id: UUID | None,
        target_ids: list[UUID],
    ) -> set[UUID]:
        """Subset of ``target_ids`` the user is a member of."""
        if user_id is None or not target_ids:
            return set()
        wanted = set(target_ids)
        return {
            m.target_id
            for m in await self.targets_for_user(kind, user_id)
            if m.target_id in wanted
        }

    # ==========================================================================
    # Cleanup
    # ==========================================================================

    async def clear(self, kind: MembershipKind, target_id: UUID) -> None:
        """Drop every membership of a deleted target."""
        for membership in await self.members(kind, target_id):
            await self.session.aexecute(
                self._delete_by_user, [membership.user_id, kind.value, target_id]
            )
        await self.session.aexecute(self._delete_members, [kind.value, target_id])
        await self.session.aexecute(self._delete_count, [kind.value, target_id])
