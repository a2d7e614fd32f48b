from sqlalchemy import Column, Integer, String, DateTime, Text
from datetime import datetime, timezone
from models.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class CacheEntry(Base):
    """
    Key/value entries backing the change cache.

    Purpose:
    - Remember the last processed checksum per extracted file
      (key ``checksum:<file>``)
    - Mark when a destination table last received rows
      (key ``last_updated:<table>``) so read caches know to refresh

    Design:
    - One row per key, overwritten in place
    - Entries are never deleted; a stale checksum only causes a reprocessing pass
    """
    __tablename__ = "cache_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    key = Column(String(255), nullable=False, unique=True, index=True)
    value = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False, default=_utcnow)
    updated_at = Column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)
