"""Role-based access control for Gulfquotes.

Hierarchical roles:
- ADMIN (level 2): Full access, may edit any quote or comment
- AUTHOR (level 1): Publishes quotes, edits own quotes, moderates comments
- USER (level 0): Reads, comments, likes, bookmarks, follows
"""

from enum import Enum


class UserRole(str, Enum):
    """User roles with hierarchical levels."""

    USER = "USER"
    AUTHOR = "AUTHOR"
    ADMIN = "ADMIN"


ROLE_HIERARCHY: dict[UserRole, int] = {
    UserRole.USER: 0,
    UserRole.AUTHOR: 1,
    UserRole.ADMIN: 2,
}


def get_role_level(role: UserRole | str) -> int:
    """Get the permission level for a role (0 for unknown roles)."""
    if isinstance(role, str):
        try:
            role = UserRole(role.upper())
        except ValueError:
            return 0
    return ROLE_HIERARCHY.get(role, 0)


def has_permission(user_role: UserRole | str, required_role: UserRole | str) -> bool:
    """Check if user has at least the required permission level.

    Examples:
        >>> has_permission(UserRole.ADMIN, UserRole.AUTHOR)
        True
        >>> has_permission("USER", "AUTHOR")
        False
    """
    return get_role_level(user_role) >= get_role_level(required_role)


def is_admin(role: UserRole | str) -> bool:
    """Check if role is ADMIN."""
    return get_role_level(role) == ROLE_HIERARCHY[UserRole.ADMIN]


def is_elevated(role: UserRole | str) -> bool:
    """AUTHOR or ADMIN, the roles allowed to moderate any comment or reply."""
    return has_permission(role, UserRole.AUTHOR)


def can_modify_content(
    owner_id: object, user_id: object, role: UserRole | str
) -> bool:
    """Comment/reply edit and delete rule: the owner or an elevated role."""
    return str(owner_id) == str(user_id) or is_elevated(role)
