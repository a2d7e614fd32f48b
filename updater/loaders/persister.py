"""
Write new records to the destination store in fixed-size batches
"""

from typing import Any, Dict, List, Optional
import time

from core.config import settings
from core.exceptions import StoreError
from updater.cache import CacheInvalidator
from updater.loaders.base import DestinationStore
import logging

logger = logging.getLogger(__name__)


class BatchedPersister:
    """
    Insert records batch by batch.

    By default each batch is committed on its own: a failure in batch N
    leaves batches 1..N-1 committed. Re-running the update is safe because
    the deduplication planner skips rows that are already stored.

    With ``atomic=True`` all batches share one transaction that is committed
    after the last batch and rolled back entirely on failure.
    """

    def __init__(
        self,
        store: DestinationStore,
        invalidator: Optional[CacheInvalidator] = None,
        batch_size: Optional[int] = None,
        atomic: Optional[bool] = None
    ):
        batch_size = batch_size if batch_size is not None else settings.UPDATER_BATCH_SIZE
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.store = store
        self.invalidator = invalidator
        self.batch_size = batch_size
        self.atomic = atomic if atomic is not None else settings.UPDATER_ATOMIC_BATCHES

    async def persist(self, table: str, records: List[Dict[str, Any]]) -> int:
        """
        Insert ``records`` into ``table``, then mark the table as updated.

        The marker is refreshed even when ``records`` is empty so that a run
        whose invalidation failed after committing can repair it on retry.

        Returns:
            Number of rows the store reported as inserted

        Raises:
            StoreError: If any batch fails; the original error is chained
        """
        total_inserted = 0
        batch_index = 0
        start = time.perf_counter()

        try:
            for batch_index, offset in enumerate(range(0, len(records), self.batch_size)):
                batch = records[offset:offset + self.batch_size]
                inserted = await self.store.insert_rows(table, batch)
                if not self.atomic:
                    await self.store.commit()
                total_inserted += len(inserted)
                logger.info(
                    f"Inserted batch of {len(inserted)} records. Total: {total_inserted}"
                )

            if self.atomic:
                await self.store.commit()

        except Exception as e:
            await self.store.rollback()
            committed = 0 if self.atomic else total_inserted
            logger.error(
                f"Batch {batch_index + 1} failed for {table}; "
                f"{committed} record(s) committed before the failure"
            )
            if isinstance(e, StoreError):
                e.context.update({"batch_index": batch_index, "records_committed": committed})
                raise
            raise StoreError(
                "Failed to insert batch",
                context={
                    "table_name": table,
                    "operation": "INSERT",
                    "batch_index": batch_index,
                    "records_committed": committed
                },
                original_exception=e
            )

        elapsed_ms = round((time.perf_counter() - start) * 1000)
        logger.info(f"Inserted {total_inserted} record(s) in {elapsed_ms}ms")

        if self.invalidator is not None:
            await self.invalidator.invalidate(table)

        return total_inserted
