"""API Dependencies"""

from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.core.security import decode_token
from app.services.user_service import UserService
from app.models.user import User

# Security scheme for bearer token
security = HTTPBearer()

__all__ = ["get_db", "get_current_user", "require_admin"]


def _credentials_error(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> User:
    """
    Get current authenticated user from JWT token.

    Args:
        db: Database session
        credentials: HTTP authorization credentials

    Returns:
        Current user

    Raises:
        HTTPException: If token is invalid or user not found
    """
    payload = decode_token(credentials.credentials)
    if not payload:
        raise _credentials_error()

    if payload.get("type") != "access":
        raise _credentials_error("Invalid token type")

    user_id_str: Optional[str] = payload.get("sub")
    if not user_id_str:
        raise _credentials_error()

    try:
        user_id = UUID(user_id_str)
    except ValueError:
        raise _credentials_error("Invalid user ID")

    user = await UserService.get_user_by_id(db, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive user"
        )

    return user


async def require_admin(
    current_user: User = Depends(get_current_user)
) -> User:
    """Only admins get past this dependency."""
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions"
        )
    return current_user
