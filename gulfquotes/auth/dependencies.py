"""FastAPI dependencies for authentication.

Provides dependency injection for:
- Current user extraction from the Bearer JWT
- Role-based access control
- The user profile service
"""

from typing import Annotated

from fastapi import Depends, Request
from jose import JWTError

from gulfquotes.auth.permissions import UserRole, has_permission
from gulfquotes.auth.schemas import UserResponse
from gulfquotes.auth.security import decode_access_token
from gulfquotes.auth.service import UserService
from gulfquotes.core.context import set_user_id
from gulfquotes.core.dependencies import service_from_state
from gulfquotes.core.errors import ForbiddenError, UnauthorizedError


def get_token_from_header(request: Request) -> str | None:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None

    expected_parts = 2
    parts = auth_header.split()
    if len(parts) != expected_parts or parts[0].lower() != "bearer":
        return None

    return parts[1]


def _user_from_payload(payload: dict) -> UserResponse:
    user_id = payload["sub"]
    set_user_id(user_id)
    return UserResponse(
        id=user_id,
        email=payload.get("email"),
        name=payload.get("name"),
        image=payload.get("image"),
        role=str(payload.get("role") or UserRole.USER.value).upper(),
    )


async def get_current_user(
    token: Annotated[str | None, Depends(get_token_from_header)],
) -> UserResponse:
    """Get the authenticated user from the access token.

    Raises:
        UnauthorizedError: If the token is missing, invalid, or expired
    """
    if not token:
        raise UnauthorizedError("Not authenticated")

    try:
        payload = decode_access_token(token)
    except JWTError as e:
        raise UnauthorizedError("Invalid or expired token") from e

    return _user_from_payload(payload)


async def get_current_user_optional(
    token: Annotated[str | None, Depends(get_token_from_header)],
) -> UserResponse | None:
    """Get current user if authenticated, None otherwise."""
    if not token:
        return None

    try:
        return _user_from_payload(decode_access_token(token))
    except JWTError:
        return None


def require_role(*allowed_roles: UserRole):
    """Create dependency requiring one of the given roles (exact match).

    Example:
        @router.post("")
        async def create(user: Annotated[UserResponse, Depends(require_role(UserRole.ADMIN))]):
            ...
    """

    async def role_checker(
        user: Annotated[UserResponse, Depends(get_current_user)],
    ) -> UserResponse:
        if user.role not in {role.value for role in allowed_roles}:
            raise ForbiddenError("Permission denied")
        return user

    return role_checker


def require_permission(required_role: UserRole):
    """Create dependency requiring at least a permission level."""

    async def permission_checker(
        user: Annotated[UserResponse, Depends(get_current_user)],
    ) -> UserResponse:
        if not has_permission(user.role, required_role):
            raise ForbiddenError("Permission denied")
        return user

    return permission_checker


def get_user_service(request: Request) -> UserService:
    """Get UserService from app state."""
    return service_from_state(request, "user_service")


# ==============================================================================
# Type Aliases for Cleaner Code
# ==============================================================================

CurrentUser = Annotated[UserResponse, Depends(get_current_user)]

OptionalUser = Annotated[UserResponse | None, Depends(get_current_user_optional)]

AdminUser = Annotated[UserResponse, Depends(require_role(UserRole.ADMIN))]

# ADMIN or AUTHOR, the roles allowed to publish quotes
AuthorUser = Annotated[
    UserResponse, Depends(require_role(UserRole.ADMIN, UserRole.AUTHOR))
]

UserServiceDep = Annotated[UserService, Depends(get_user_service)]
