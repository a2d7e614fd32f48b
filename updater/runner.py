"""
Updater - orchestrates one dataset refresh.

Pipeline:
    fetch archive or workbook -> fingerprint -> (unchanged? stop) -> parse rows
    -> deduplicate against stored keys -> persist in batches -> cache checksum

The checksum is cached only after persisting succeeded. If a run dies
between the two, the next run reprocesses the file and the planner finds
nothing new to insert.
"""

import asyncio
from pathlib import Path
from typing import Optional, Union

from core.config import settings
from core.exceptions import UpdaterError
from models.base import UpdaterState
from schemas.descriptor import SourceDescriptor
from schemas.result import (
    NO_NEW_RECORDS_MESSAGE,
    UNCHANGED_MESSAGE,
    UpdaterResult,
    inserted_message,
)
from updater.cache import CacheInvalidator, ChangeCache
from updater.checksum import compute_checksum
from updater.fetcher import ArchiveFetcher
from updater.loaders.base import DestinationStore
from updater.loaders.persister import BatchedPersister
from updater.planner import DeduplicationPlanner
from updater.transformers import get_transformer
import logging

logger = logging.getLogger(__name__)


class Updater:
    """
    Dataset updater.

    Responsibilities:
    - Skip all work when the source file is byte-identical to the last run
    - Insert only records whose key is not stored yet
    - Keep the checksum cache consistent with what was persisted
    - Surface every failure to the caller with its original cause
    """

    def __init__(
        self,
        store: DestinationStore,
        change_cache: ChangeCache,
        invalidator: Optional[CacheInvalidator] = None,
        fetcher: Optional[ArchiveFetcher] = None,
        batch_size: Optional[int] = None,
        atomic: Optional[bool] = None,
        scratch_dir: Optional[Union[str, Path]] = None
    ):
        self.store = store
        self.change_cache = change_cache
        self.fetcher = fetcher or ArchiveFetcher()
        self.planner = DeduplicationPlanner(store)
        self.persister = BatchedPersister(
            store,
            invalidator=invalidator,
            batch_size=batch_size,
            atomic=atomic
        )
        self.scratch_dir = Path(scratch_dir or settings.UPDATER_SCRATCH_DIR)
        self.state = UpdaterState.IDLE

    def _transition(self, state: UpdaterState, descriptor: SourceDescriptor):
        logger.info(f"[{descriptor.name}] {self.state.value} -> {state.value}")
        self.state = state

    async def update(self, descriptor: SourceDescriptor) -> UpdaterResult:
        """
        Run the full pipeline for ``descriptor``.

        Returns:
            UpdaterResult with the number of rows actually inserted

        Raises:
            UpdaterError: Any failure; non-updater exceptions are wrapped
        """
        self.state = UpdaterState.IDLE

        try:
            # --------------------------------------------------
            # FETCH
            # --------------------------------------------------
            self._transition(UpdaterState.FETCHING, descriptor)
            destination = self.scratch_dir / descriptor.name
            if descriptor.source_format == "xlsx":
                archive = await self.fetcher.fetch_document(descriptor.url, destination=destination)
            else:
                archive = await self.fetcher.fetch(
                    descriptor.url,
                    target_file=descriptor.csv_file,
                    destination=destination
                )
            cache_key = descriptor.checksum_key or archive.selected

            # --------------------------------------------------
            # FINGERPRINT
            # --------------------------------------------------
            self._transition(UpdaterState.FINGERPRINTING, descriptor)
            checksum = await asyncio.to_thread(compute_checksum, archive.path)
            cached_checksum = await self.change_cache.get_cached_checksum(cache_key)

            if cached_checksum == checksum:
                self._transition(UpdaterState.UNCHANGED, descriptor)
                logger.info(f"[{descriptor.name}] {UNCHANGED_MESSAGE}. Skipping update.")
                return UpdaterResult(
                    table=descriptor.table,
                    records_processed=0,
                    message=UNCHANGED_MESSAGE,
                    checksum=checksum
                )

            # --------------------------------------------------
            # TRANSFORM
            # --------------------------------------------------
            self._transition(UpdaterState.TRANSFORMING, descriptor)
            transformer = get_transformer(descriptor)
            records = await asyncio.to_thread(transformer.transform, archive.path)
            logger.info(f"[{descriptor.name}] Parsed {len(records)} record(s) from {archive.selected}")

            # --------------------------------------------------
            # DEDUPLICATE
            # --------------------------------------------------
            self._transition(UpdaterState.DEDUPLICATING, descriptor)
            plan = await self.planner.plan(descriptor.table, descriptor.key_fields, records)

            # --------------------------------------------------
            # PERSIST
            # --------------------------------------------------
            self._transition(UpdaterState.PERSISTING, descriptor)
            inserted = await self.persister.persist(descriptor.table, plan.new_records)

            await self.change_cache.cache_checksum(cache_key, checksum)

            message = inserted_message(inserted) if plan.new_records else NO_NEW_RECORDS_MESSAGE
            self._transition(UpdaterState.DONE, descriptor)
            logger.info(f"[{descriptor.name}] {message}")

            return UpdaterResult(
                table=descriptor.table,
                records_processed=inserted,
                message=message,
                checksum=checksum
            )

        except UpdaterError as e:
            self._transition(UpdaterState.FAILED, descriptor)
            logger.error(
                f"[{descriptor.name}] Update failed: {e.message}",
                extra={"error_context": e.to_dict()}
            )
            raise

        except Exception as e:
            failed_in = self.state
            self._transition(UpdaterState.FAILED, descriptor)
            logger.exception(f"[{descriptor.name}] Unexpected error in updater")
            raise UpdaterError(
                "Unexpected error in updater",
                context={
                    "dataset": descriptor.name,
                    "table_name": descriptor.table,
                    "state": failed_in.value
                },
                original_exception=e
            )
