"""Tests for auth permissions."""

from uuid import uuid4

import pytest

from gulfquotes.auth.permissions import (
    ROLE_HIERARCHY,
    UserRole,
    can_modify_content,
    get_role_level,
    has_permission,
    is_admin,
    is_elevated,
)


class TestUserRole:
    """Tests for UserRole enum."""

    def test_role_values(self) -> None:
        """Roles use their uppercase wire names."""
        assert UserRole.USER.value == "USER"
        assert UserRole.AUTHOR.value == "AUTHOR"
        assert UserRole.ADMIN.value == "ADMIN"

    def test_role_hierarchy(self) -> None:
        assert ROLE_HIERARCHY[UserRole.USER] == 0
        assert ROLE_HIERARCHY[UserRole.AUTHOR] == 1
        assert ROLE_HIERARCHY[UserRole.ADMIN] == 2

    def test_all_roles_have_levels(self) -> None:
        for role in UserRole:
            assert role in ROLE_HIERARCHY


class TestGetRoleLevel:
    """Tests for get_role_level function."""

    @pytest.mark.parametrize(
        "role,expected_level",
        [
            (UserRole.USER, 0),
            (UserRole.AUTHOR, 1),
            (UserRole.ADMIN, 2),
            ("user", 0),
            ("Author", 1),
            ("ADMIN", 2),
        ],
    )
    def test_known_roles(self, role, expected_level: int) -> None:
        """Enum members and strings in any case resolve to a level."""
        assert get_role_level(role) == expected_level

    def test_unknown_role_is_lowest(self) -> None:
        assert get_role_level("superuser") == 0


class TestHasPermission:
    """Tests for has_permission function."""

    def test_higher_role_has_lower_permission(self) -> None:
        assert has_permission(UserRole.ADMIN, UserRole.AUTHOR) is True
        assert has_permission(UserRole.AUTHOR, UserRole.USER) is True

    def test_same_role(self) -> None:
        assert has_permission("AUTHOR", "AUTHOR") is True

    def test_lower_role_lacks_permission(self) -> None:
        assert has_permission("USER", "AUTHOR") is False
        assert has_permission(UserRole.AUTHOR, UserRole.ADMIN) is False


class TestRoleHelpers:
    def test_is_admin(self) -> None:
        assert is_admin("ADMIN") is True
        assert is_admin(UserRole.AUTHOR) is False

    def test_is_elevated(self) -> None:
        assert is_elevated("AUTHOR") is True
        assert is_elevated("ADMIN") is True
        assert is_elevated("USER") is False


class TestCanModifyContent:
    """Owner-or-moderator rule for comments and replies."""

    def test_owner_can_modify(self) -> None:
        owner = uuid4()
        assert can_modify_content(owner, str(owner), "USER") is True

    def test_other_user_cannot_modify(self) -> None:
        assert can_modify_content(uuid4(), uuid4(), "USER") is False

    @pytest.mark.parametrize("role", ["AUTHOR", "ADMIN"])
    def test_elevated_roles_can_modify_any(self, role: str) -> None:
        assert can_modify_content(uuid4(), uuid4(), role) is True
