"""Authentication and authorization utilities.

Access tokens are issued by the platform's auth service; this API only
verifies them and checks permissions against the caller's admin profile.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from jood_api.config import get_settings
from jood_api.database import get_db
from jood_api.models.domain.profile import ProfileKind
from jood_api.models.domain.user import CurrentUser
from jood_api.repositories.user_repository import UserRepository
from jood_api.services.resolution_service import ResolutionService

logger = logging.getLogger(__name__)


def decode_token(token: str) -> dict:
    """Decode and verify a JWT token.

    Args:
        token: JWT token string

    Returns:
        Token payload

    Raises:
        HTTPException: If token is invalid or expired
    """
    settings = get_settings()

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
        )
        return payload
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        ) from e


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


async def get_current_user(
    db: Annotated[AsyncSession, Depends(get_db)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(HTTPBearer(auto_error=False))] = None,
) -> CurrentUser:
    """Get the current authenticated user from the JWT token.

    Args:
        db: Database session
        credentials: HTTP Bearer credentials

    Returns:
        CurrentUser domain model

    Raises:
        HTTPException: If authentication fails
    """
    if credentials is None:
        raise _unauthorized("Authentication required")

    payload = decode_token(credentials.credentials)

    try:
        user_id = UUID(str(payload.get("sub")))
    except ValueError as e:
        raise _unauthorized("Invalid or expired token") from e

    user = await UserRepository(db).get(user_id)
    if user is None or not user.is_active:
        raise _unauthorized("User not found or inactive")

    return CurrentUser(
        id=user.id,
        email=user.email,
        name=user.display_name,
        is_active=user.is_active,
        legacy_roles=list(user.legacy_roles or []),
    )


def require_permission(permission: str) -> Callable[..., Awaitable[CurrentUser]]:
    """Create a dependency that requires an effective permission.

    The caller's admin profile is resolved with all three grant sources, so a
    ``super_admin`` account passes every check.

    Args:
        permission: Permission name

    Returns:
        Dependency function returning the current user
    """

    async def check_permission(
        current_user: Annotated[CurrentUser, Depends(get_current_user)],
        db: Annotated[AsyncSession, Depends(get_db)],
    ) -> CurrentUser:
        allowed = await ResolutionService(db).user_has_permission(
            current_user.id, permission, ProfileKind.ADMIN
        )
        if not allowed:
            logger.warning("User %s denied permission %s", current_user.id, permission)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return current_user

    return check_permission
