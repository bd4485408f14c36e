"""FastAPI dependencies for authentication.

Provides dependency injection for:
- Current user extraction from JWT
- Role-based access control
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError
from pydantic import ValidationError

from learnhub.core.context import set_user_id

from .permissions import UserRole, has_permission
from .schemas import AuthenticatedUser
from .security import decode_access_token


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


async def get_current_user(
    token: Annotated[str | None, Depends(get_token_from_header)],
) -> AuthenticatedUser:
    """Get current authenticated user from JWT token.

    Raises:
        HTTPException(401): If token is missing, invalid, or expired
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token not provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = decode_access_token(token)
        user = AuthenticatedUser(
            id=payload["sub"],
            email=payload.get("email"),
            role=payload["role"],
        )
    except (JWTError, ValidationError) as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    # Set user_id in context for logging
    set_user_id(str(user.id))

    return user


async def get_current_user_optional(
    token: Annotated[str | None, Depends(get_token_from_header)],
) -> AuthenticatedUser | None:
    """Get current user if authenticated, None otherwise.

    Use this for endpoints that work for both authenticated and anonymous users.
    """
    if not token:
        return None

    try:
        payload = decode_access_token(token)
        user = AuthenticatedUser(
            id=payload["sub"],
            email=payload.get("email"),
            role=payload["role"],
        )
    except (JWTError, ValidationError):
        return None

    set_user_id(str(user.id))
    return user


def require_permission(required_role: UserRole):
    """Create dependency requiring at least a permission level.

    Uses hierarchical comparison: ADMIN >= TEACHER >= STUDENT
    """

    async def permission_checker(
        user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    ) -> AuthenticatedUser:
        if not has_permission(user.role, required_role):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )

        return user

    return permission_checker


# ==============================================================================
# Type Aliases for Cleaner Code
# ==============================================================================

CurrentUser = Annotated[AuthenticatedUser, Depends(get_current_user)]
OptionalUser = Annotated[
    AuthenticatedUser | None, Depends(get_current_user_optional)
]
TeacherUser = Annotated[
    AuthenticatedUser, Depends(require_permission(UserRole.TEACHER))
]
StudentUser = Annotated[
    AuthenticatedUser, Depends(require_permission(UserRole.STUDENT))
]
AdminUser = Annotated[AuthenticatedUser, Depends(require_permission(UserRole.ADMIN))]
