"""
Shared FastAPI dependencies
"""

from typing import Optional

from fastapi import Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.database import async_session_maker


async def get_db() -> AsyncSession:
    """Yield a database session for one request"""
    async with async_session_maker() as session:
        yield session


async def verify_api_key(x_api_key: Optional[str] = Header(None)):
    """
    Require ``X-API-Key`` on write endpoints when ``API_KEY`` is configured.
    """
    if settings.API_KEY and x_api_key != settings.API_KEY:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key"
        )
