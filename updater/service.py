"""
Wire updaters to database sessions and run datasets.

Used by the scheduler, the CLI and the HTTP trigger.
"""

import asyncio
from typing import List, Optional, Sequence, Union

from sqlalchemy.ext.asyncio import async_sessionmaker

from core.database import async_session_maker
from schemas.descriptor import SourceDescriptor
from schemas.result import UpdaterResult
from updater.cache import ChecksumCache, KeyValueStore, TableCacheInvalidator
from updater.fetcher import ArchiveFetcher
from updater.loaders.postgres_loader import PostgresStore
from updater.runner import Updater
import logging

logger = logging.getLogger(__name__)


async def run_dataset(
    descriptor: SourceDescriptor,
    session_maker: Optional[async_sessionmaker] = None,
    fetcher: Optional[ArchiveFetcher] = None
) -> UpdaterResult:
    """
    Run one dataset with its own sessions.

    The destination store and the change cache use separate sessions so cache
    writes never commit or roll back pending batch work.
    """
    session_maker = session_maker or async_session_maker

    async with session_maker() as store_session, session_maker() as cache_session:
        cache = KeyValueStore(cache_session)
        updater = Updater(
            store=PostgresStore(store_session),
            change_cache=ChecksumCache(cache),
            invalidator=TableCacheInvalidator(cache),
            fetcher=fetcher
        )
        return await updater.update(descriptor)


async def run_datasets(
    descriptors: Sequence[SourceDescriptor],
    session_maker: Optional[async_sessionmaker] = None
) -> List[Union[UpdaterResult, BaseException]]:
    """
    Run datasets concurrently.

    Returns results and exceptions in the order of ``descriptors``; one
    failing dataset does not cancel the others.
    """
    outcomes = await asyncio.gather(
        *(run_dataset(descriptor, session_maker) for descriptor in descriptors),
        return_exceptions=True
    )

    for descriptor, outcome in zip(descriptors, outcomes):
        if isinstance(outcome, BaseException):
            logger.error(f"Dataset {descriptor.name} failed: {outcome}")
        else:
            logger.info(
                f"Dataset {descriptor.name}: {outcome.message} "
                f"({outcome.records_processed} record(s))"
            )

    return outcomes

