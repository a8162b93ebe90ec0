from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.core import security
from app.core.rate_limit import limiter, LOGIN_LIMIT, REGISTER_LIMIT
from app.services.user_service import UserService
from app.schemas.auth import LoginRequest, RegisterRequest, RefreshRequest, Token
from app.schemas.responses import SuccessResponse

router = APIRouter()


def _issue_tokens(user) -> Token:
    claims = {"sub": str(user.id), "role": user.role.value}
    return Token(
        access_token=security.create_access_token(data=claims),
        refresh_token=security.create_refresh_token(data=claims),
        token_type="bearer",
        role=user.role.value,
        user_id=str(user.id),
    )


@router.post("/register", response_model=SuccessResponse)
@limiter.limit(REGISTER_LIMIT)
async def register(
    request: Request,
    register_in: RegisterRequest,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """Create a regular user account."""
    try:
        user = await UserService.create_user(
            db,
            email=register_in.email,
            password=register_in.password,
            name=register_in.name,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    return SuccessResponse(
        data={"user_id": str(user.id)},
        message="Account created successfully"
    )


@router.post("/login", response_model=SuccessResponse[Token])
@limiter.limit(LOGIN_LIMIT)
async def login(
    request: Request,
    login_data: LoginRequest,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Login for all users.
    Returns JWT access token, refresh token, and user role.
    """
    user = await UserService.authenticate_user(db, email=login_data.email, password=login_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
        )

    return SuccessResponse(data=_issue_tokens(user), message="Login successful")


@router.post("/refresh", response_model=SuccessResponse[Token])
async def refresh(
    refresh_in: RefreshRequest,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """Exchange a refresh token for a new access token."""
    payload = security.decode_token(refresh_in.refresh_token)
    if not payload or payload.get("type") != "refresh" or not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token",
        )

    from uuid import UUID
    try:
        user_id = UUID(payload["sub"])
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")

    user = await UserService.get_user_by_id(db, user_id)
    if not user or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")

    token = _issue_tokens(user)
    token.refresh_token = None
    return SuccessResponse(data=token, message="Token refreshed")
