"""
Database engine, session factory and connection helpers.

Store and cache work for one dataset run each take a session from
``async_session_maker``. NullPool hands every session a fresh connection,
so concurrent dataset runs never share one.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from core.config import settings
import logging

logger = logging.getLogger(__name__)


def build_engine(url: str = None) -> AsyncEngine:
    """Create the async engine for ``url`` (defaults to ``DATABASE_URL``)."""
    return create_async_engine(
        url or settings.DATABASE_URL,
        echo=settings.ENVIRONMENT == "development",
        poolclass=NullPool,
        future=True
    )


engine = build_engine()

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
)


async def check_connection(session: AsyncSession) -> bool:
    """Return True when ``session`` can run a trivial query."""
    try:
        await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False
    return True


async def dispose_engine(target: AsyncEngine = None):
    """Close every connection held by ``target`` (defaults to the shared engine)."""
    target = target or engine
    await target.dispose()
    logger.info("Database engine disposed")
