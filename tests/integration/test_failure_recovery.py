"""
Failure and recovery behaviour of the updater pipeline
"""

import pytest
from core.exceptions import CacheError, FetchError, ParseError, StoreError, UpdaterError
from models.base import UpdaterState
from updater.runner import Updater
from tests.helpers import FakeInvalidator, FakeStore, InMemoryChangeCache, make_zip


def cars_csv(rows):
    lines = ["month,make,number"] + [f"2024-01,MAKE{i},{i}" for i in range(rows)]
    return "\n".join(lines) + "\n"


def make_updater(store, cache, fetcher, tmp_path, batch_size=2, invalidator=None):
    return Updater(
        store=store,
        change_cache=cache,
        invalidator=invalidator,
        fetcher=fetcher,
        batch_size=batch_size,
        atomic=False,
        scratch_dir=tmp_path
    )


@pytest.mark.asyncio
async def test_mid_persist_failure_leaves_checksum_uncached(fetcher, archive_server,
                                                            cars_descriptor, tmp_path):
    archive_server.content = make_zip({"cars.csv": cars_csv(5)})
    store = FakeStore(fail_on_call=2)
    cache = InMemoryChangeCache({"cars.csv": "previous-checksum"})
    invalidator = FakeInvalidator()
    updater = make_updater(store, cache, fetcher, tmp_path, invalidator=invalidator)

    with pytest.raises(StoreError):
        await updater.update(cars_descriptor)

    assert updater.state == UpdaterState.FAILED
    assert len(store.tables["cars"]) == 2
    assert cache.checksums == {"cars.csv": "previous-checksum"}
    assert cache.writes == []
    assert invalidator.invalidated == []


@pytest.mark.asyncio
async def test_rerun_after_failure_inserts_remaining_rows(fetcher, archive_server,
                                                          cars_descriptor, tmp_path):
    archive_server.content = make_zip({"cars.csv": cars_csv(5)})
    store = FakeStore(fail_on_call=2)
    cache = InMemoryChangeCache()

    with pytest.raises(StoreError):
        await make_updater(store, cache, fetcher, tmp_path).update(cars_descriptor)

    store.fail_on_call = None
    result = await make_updater(store, cache, fetcher, tmp_path).update(cars_descriptor)

    assert result.records_processed == 3
    assert sorted(r["make"] for r in store.tables["cars"]) == [f"MAKE{i}" for i in range(5)]
    assert cache.checksums["cars.csv"] == result.checksum


@pytest.mark.asyncio
async def test_crash_between_persist_and_cache_is_harmless(fetcher, archive_server,
                                                           cars_descriptor, tmp_path):
    archive_server.content = make_zip({"cars.csv": cars_csv(3)})
    store = FakeStore()
    cache = InMemoryChangeCache()

    async def broken_cache_write(file_name, checksum):
        raise CacheError("Failed to write cache entry")

    failing_cache = InMemoryChangeCache()
    failing_cache.cache_checksum = broken_cache_write
    with pytest.raises(CacheError):
        await make_updater(store, failing_cache, fetcher, tmp_path).update(cars_descriptor)
    assert len(store.tables["cars"]) == 3

    result = await make_updater(store, cache, fetcher, tmp_path).update(cars_descriptor)

    assert result.records_processed == 0
    assert len(store.tables["cars"]) == 3


@pytest.mark.asyncio
async def test_failed_invalidation_is_repaired_by_rerun(fetcher, archive_server,
                                                       cars_descriptor, tmp_path):
    archive_server.content = make_zip({"cars.csv": cars_csv(3)})
    store = FakeStore()
    cache = InMemoryChangeCache()

    class BrokenInvalidator(FakeInvalidator):
        async def invalidate(self, table):
            raise CacheError("Failed to write cache entry", context={"table_name": table})

    with pytest.raises(CacheError):
        await make_updater(store, cache, fetcher, tmp_path,
                           invalidator=BrokenInvalidator()).update(cars_descriptor)
    assert len(store.tables["cars"]) == 3
    assert cache.writes == []

    invalidator = FakeInvalidator()
    result = await make_updater(store, cache, fetcher, tmp_path,
                                invalidator=invalidator).update(cars_descriptor)

    assert result.records_processed == 0
    assert invalidator.invalidated == ["cars"]
    assert cache.checksums["cars.csv"] == result.checksum


@pytest.mark.asyncio
async def test_fetch_failure_touches_nothing(fetcher, archive_server, cars_descriptor, tmp_path):
    archive_server.status_code = 503
    archive_server.content = b"Service Unavailable"
    store = FakeStore()
    cache = InMemoryChangeCache()

    with pytest.raises(FetchError) as exc_info:
        await make_updater(store, cache, fetcher, tmp_path).update(cars_descriptor)

    assert exc_info.value.status_code == 503
    assert store.projection_calls == 0
    assert cache.writes == []


@pytest.mark.asyncio
async def test_malformed_csv_fails_whole_run(fetcher, archive_server, cars_descriptor, tmp_path):
    archive_server.content = make_zip({"cars.csv": "month,make,number\n2024-01,BMW,10\n2024-02,Audi,5,9\n"})
    store = FakeStore()

    with pytest.raises(ParseError):
        await make_updater(store, InMemoryChangeCache(), fetcher, tmp_path).update(cars_descriptor)

    assert store.insert_calls == []


@pytest.mark.asyncio
async def test_cache_read_failure_fails_run(fetcher, archive_server, cars_descriptor, tmp_path):
    archive_server.content = make_zip({"cars.csv": cars_csv(1)})
    cache = InMemoryChangeCache()

    async def unavailable(file_name):
        raise CacheError("Failed to read cache entry")

    cache.get_cached_checksum = unavailable
    store = FakeStore()

    with pytest.raises(CacheError):
        await make_updater(store, cache, fetcher, tmp_path).update(cars_descriptor)

    assert store.insert_calls == []


@pytest.mark.asyncio
async def test_unexpected_error_is_wrapped(fetcher, archive_server, cars_descriptor, tmp_path):
    archive_server.content = make_zip({"cars.csv": cars_csv(1)})
    store = FakeStore()

    async def broken_projection(table, key_fields):
        raise RuntimeError("driver crashed")

    store.fetch_key_projection = broken_projection
    updater = make_updater(store, InMemoryChangeCache(), fetcher, tmp_path)

    with pytest.raises(UpdaterError) as exc_info:
        await updater.update(cars_descriptor)

    assert type(exc_info.value) is UpdaterError
    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert exc_info.value.context["state"] == "deduplicating"
    assert updater.state == UpdaterState.FAILED
