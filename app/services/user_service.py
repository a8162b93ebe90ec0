"""User Service - Business Logic Layer"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import get_password_hash, verify_password
from app.models.enums import UserRole
from app.models.user import User

logger = logging.getLogger(__name__)


class UserService:
    """Service layer for user-related operations"""

    @staticmethod
    async def create_user(
        db: AsyncSession,
        email: str,
        password: str,
        name: str,
        role: UserRole = UserRole.USER,
        is_active: bool = True,
    ) -> User:
        """
        Create a new user.

        Raises:
            ValueError: if the email is already registered
        """
        email = email.strip().lower()
        if await UserService.get_user_by_email(db, email):
            raise ValueError("A user with this email already exists")

        db_user = User(
            email=email,
            name=name.strip(),
            hashed_password=get_password_hash(password),
            role=role,
            is_active=is_active,
        )
        db.add(db_user)
        await db.commit()
        await db.refresh(db_user)
        logger.info("User created", extra={"user_id": str(db_user.id), "role": role.value})
        return db_user

    @staticmethod
    async def get_user_by_id(db: AsyncSession, user_id: UUID) -> Optional[User]:
        """
        Get user by ID.

        Args:
            db: Database session
            user_id: User ID

        Returns:
            User or None if not found
        """
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()

    @staticmethod
    async def authenticate_user(db: AsyncSession, email: str, password: str) -> Optional[User]:
        """
        Authenticate user with email and password.

        Returns:
            The user, or None when the email is unknown, the password is wrong
            or the account is disabled
        """
        user = await UserService.get_user_by_email(db, email)
        if not user or not user.is_active:
            return None
        if not verify_password(password, user.hashed_password):
            return None
        return user
