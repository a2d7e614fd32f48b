"""
PostgreSQL destination store with conflict-safe inserts
"""

from typing import Any, Dict, List, Sequence, Tuple
from sqlalchemy import Table, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from core.exceptions import StoreError
from models.base import Base
from updater.loaders.base import DestinationStore
import logging

logger = logging.getLogger(__name__)


class PostgresStore(DestinationStore):
    """
    Destination store backed by the SQLAlchemy models in ``models``.

    Ensures:
    - Tables are addressed by name and resolved from the shared metadata
    - Inserts use ON CONFLICT DO NOTHING, so the returned rows are only the
      rows PostgreSQL actually wrote
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    def _table(self, table_name: str) -> Table:
        table = Base.metadata.tables.get(table_name)
        if table is None:
            raise StoreError(
                f"Unknown destination table: {table_name}",
                context={"table_name": table_name}
            )
        return table

    async def fetch_key_projection(self, table: str, key_fields: Sequence[str]) -> List[Tuple]:
        target = self._table(table)
        missing = [f for f in key_fields if f not in target.c]
        if missing:
            raise StoreError(
                f"Key fields not found in {table}: {', '.join(missing)}",
                context={"table_name": table, "operation": "SELECT"}
            )

        try:
            result = await self.db.execute(
                select(*[target.c[f] for f in key_fields]).distinct()
            )
            keys = [tuple(row) for row in result.all()]
        except SQLAlchemyError as e:
            raise StoreError(
                "Failed to query existing keys",
                context={"table_name": table, "operation": "SELECT"},
                original_exception=e
            )

        logger.debug(f"Fetched {len(keys)} existing keys from {table}")
        return keys

    async def insert_rows(self, table: str, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        if not rows:
            return []

        target = self._table(table)
        stmt = insert(target).on_conflict_do_nothing().returning(*target.primary_key.columns)

        try:
            result = await self.db.execute(stmt, rows)
            inserted = [dict(row._mapping) for row in result.all()]
        except SQLAlchemyError as e:
            raise StoreError(
                "Failed to insert rows",
                context={"table_name": table, "operation": "INSERT", "rows": len(rows)},
                original_exception=e
            )

        if len(inserted) < len(rows):
            logger.warning(
                f"{len(rows) - len(inserted)} row(s) already present in {table} were skipped"
            )
        return inserted

    async def commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            raise StoreError(
                "Failed to commit",
                context={"operation": "COMMIT"},
                original_exception=e
            )

    async def rollback(self) -> None:
        await self.db.rollback()
