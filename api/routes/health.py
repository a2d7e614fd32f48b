"""
Health check endpoint with database and per-table update status
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from api.dependencies import get_db
from core.database import check_connection
from core.exceptions import CacheError
from schemas.api import HealthCheckResponse, TableUpdateInfo
from updater.cache import KeyValueStore, TableCacheInvalidator
from updater.datasets import DATASETS
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Health check endpoint.

    Returns:
    - Database connectivity status
    - Last update marker for every destination table
    """

    db_connected = await check_connection(db)

    tables = []
    cache_available = db_connected

    if db_connected:
        invalidator = TableCacheInvalidator(KeyValueStore(db))
        try:
            for table in sorted({d.table for d in DATASETS.values()}):
                tables.append(TableUpdateInfo(
                    table=table,
                    last_updated=await invalidator.last_updated(table)
                ))
        except CacheError as e:
            cache_available = False
            logger.error(f"Failed to read table update markers: {e.message}")

    return HealthCheckResponse(
        status="healthy",  # Recomputed by the validator
        database_connected=db_connected,
        cache_available=cache_available,
        tables=tables
    )
