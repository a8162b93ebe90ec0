"""Database Connection and Session Management"""

import re
import ssl
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

from app.config import settings


def build_async_url(url: str) -> str:
    """Return the asyncpg flavour of a postgres URL, without libpq-only options."""
    url = re.sub(r"^postgres(ql)?://", "postgresql+asyncpg://", url)
    url = re.sub(r"[?&]sslmode=[^&]+", "", url, flags=re.I)
    if "?" not in url and "&" in url:
        url = url.replace("&", "?", 1)
    return url


def build_connect_args(url: str) -> dict:
    """asyncpg takes an SSLContext instead of sslmode; managed hosts need encryption without verification."""
    if not re.search(r"[?&]sslmode=(require|required|verify-full)", url, re.I):
        return {}
    ctx = ssl.create_default_context()
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return {"ssl": ctx}


engine = create_async_engine(
    build_async_url(settings.DATABASE_URL),
    connect_args=build_connect_args(settings.DATABASE_URL),
    pool_pre_ping=True,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_timeout=settings.DB_POOL_TIMEOUT,
    pool_recycle=settings.DB_POOL_RECYCLE,
    echo=False,
    future=True,
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

# Base class for declarative models
Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function to get database session.

    The session commits when the request finishes cleanly and rolls back
    on any exception, so services that need an all-or-nothing unit of
    work can simply raise.

    Yields:
        AsyncSession: Database session
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db() -> None:
    """Initialize database tables (for development only)"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections"""
    await engine.dispose()
