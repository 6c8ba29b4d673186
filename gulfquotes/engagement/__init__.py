"""Likes, bookmarks and follows."""

from .models import ENGAGEMENT_TABLES_CQL, Membership, MembershipKind, ToggleResult
from .service import MembershipService


__all__ = [
    "ENGAGEMENT_TABLES_CQL",
    "Membership",
    "MembershipKind",
    "MembershipService",
    "ToggleResult",
]
