import asyncio
import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from core.exceptions import StoreError
from schemas.result import UpdaterResult
from updater.cache import ChecksumCache, TableCacheInvalidator
from updater.datasets import get_dataset
from updater.loaders.postgres_loader import PostgresStore
from updater.service import run_dataset, run_datasets


def make_session_maker():
    sessions = []

    def factory():
        session = AsyncMock()
        sessions.append(session)
        context = MagicMock()
        context.__aenter__ = AsyncMock(return_value=session)
        context.__aexit__ = AsyncMock(return_value=False)
        return context

    return factory, sessions


@pytest.mark.asyncio
async def test_run_dataset_wires_store_and_cache_sessions():
    factory, sessions = make_session_maker()
    result = UpdaterResult(table="cars", records_processed=1, message="1 record(s) inserted")

    with patch("updater.service.Updater") as mock_updater_cls:
        mock_updater_cls.return_value.update = AsyncMock(return_value=result)

        outcome = await run_dataset(get_dataset("cars"), factory)

    assert outcome is result
    kwargs = mock_updater_cls.call_args.kwargs
    assert isinstance(kwargs["store"], PostgresStore)
    assert isinstance(kwargs["change_cache"], ChecksumCache)
    assert isinstance(kwargs["invalidator"], TableCacheInvalidator)
    assert len(sessions) == 2
    assert kwargs["store"].db is sessions[0]
    assert kwargs["change_cache"].store.db is sessions[1]


@pytest.mark.asyncio
async def test_run_datasets_returns_outcomes_in_order():
    cars, coe, pqp = get_dataset("cars"), get_dataset("coe"), get_dataset("pqp")
    error = StoreError("Failed to insert rows")

    async def fake_run(descriptor, session_maker=None):
        if descriptor is coe:
            raise error
        return UpdaterResult(table=descriptor.table, records_processed=0, message="ok")

    with patch("updater.service.run_dataset", new=fake_run):
        outcomes = await run_datasets([cars, coe, pqp])

    assert outcomes[0].table == "cars"
    assert outcomes[1] is error
    assert outcomes[2].table == "pqp"


@pytest.mark.asyncio
async def test_run_datasets_overlaps_runs():
    cars, coe = get_dataset("cars"), get_dataset("coe")
    started = {name: asyncio.Event() for name in ("cars", "coe")}

    async def fake_run(descriptor, session_maker=None):
        started[descriptor.name].set()
        other = "coe" if descriptor.name == "cars" else "cars"
        await asyncio.wait_for(started[other].wait(), timeout=1)
        return UpdaterResult(table=descriptor.table, records_processed=0, message="ok")

    with patch("updater.service.run_dataset", new=fake_run):
        outcomes = await run_datasets([cars, coe])

    assert [outcome.table for outcome in outcomes] == ["cars", "coe"]
