"""
Change cache: remembers the last processed checksum per source file and
marks destination tables as updated for downstream read caches.

The cache is part of correctness, not an optimisation. Any error reading or
writing it fails the run with ``CacheError`` instead of carrying on without
change detection.
"""

import re
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import CacheError
from models.cache_entry import CacheEntry
import logging

logger = logging.getLogger(__name__)

CHECKSUM_NAMESPACE = "checksum"
LAST_UPDATED_NAMESPACE = "last_updated"


def slugify(value: str) -> str:
    """Lowercase and replace runs of whitespace with a hyphen."""
    return re.sub(r"\s+", "-", value.strip().lower())


class ChangeCache(ABC):
    """Last-seen checksum per extracted file name."""

    @abstractmethod
    async def get_cached_checksum(self, file_name: str) -> Optional[str]:
        pass

    @abstractmethod
    async def cache_checksum(self, file_name: str, checksum: str) -> None:
        pass


class CacheInvalidator(ABC):
    """Signals downstream read caches that a table received new rows."""

    @abstractmethod
    async def invalidate(self, table: str) -> None:
        pass


class KeyValueStore:
    """
    String key/value store on the ``cache_entries`` table.

    Writes are committed immediately so a cache entry never depends on the
    outcome of an unrelated transaction.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def get(self, key: str) -> Optional[str]:
        try:
            result = await self.db.execute(
                select(CacheEntry.value).where(CacheEntry.key == key)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            await self._rollback()
            raise CacheError(
                "Failed to read cache entry",
                context={"key": key, "operation": "get"},
                original_exception=e
            )

    async def set(self, key: str, value: str) -> None:
        now = datetime.now(timezone.utc).replace(tzinfo=None)
        stmt = insert(CacheEntry).values(key=key, value=value, created_at=now, updated_at=now)
        stmt = stmt.on_conflict_do_update(
            index_elements=["key"],
            set_={"value": stmt.excluded.value, "updated_at": stmt.excluded.updated_at}
        )
        try:
            await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self._rollback()
            raise CacheError(
                "Failed to write cache entry",
                context={"key": key, "operation": "set"},
                original_exception=e
            )

    async def _rollback(self):
        try:
            await self.db.rollback()
        except SQLAlchemyError:
            logger.exception("Rollback after cache failure also failed")


class ChecksumCache(ChangeCache):
    """Checksums stored under ``checksum:<file name>``."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    @staticmethod
    def key_for(file_name: str) -> str:
        return f"{CHECKSUM_NAMESPACE}:{slugify(file_name)}"

    async def get_cached_checksum(self, file_name: str) -> Optional[str]:
        return await self.store.get(self.key_for(file_name))

    async def cache_checksum(self, file_name: str, checksum: str) -> None:
        await self.store.set(self.key_for(file_name), checksum)
        logger.info(f"Cached checksum for {file_name}")


class TableCacheInvalidator(CacheInvalidator):
    """Records ``last_updated:<table>`` so read caches can refresh."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    @staticmethod
    def key_for(table: str) -> str:
        return f"{LAST_UPDATED_NAMESPACE}:{table}"

    async def invalidate(self, table: str) -> None:
        timestamp = datetime.now(timezone.utc).isoformat()
        await self.store.set(self.key_for(table), timestamp)
        logger.info(f"Invalidated read caches for {table} at {timestamp}")

    async def last_updated(self, table: str) -> Optional[str]:
        return await self.store.get(self.key_for(table))
