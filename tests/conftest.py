"""
Pytest configuration and fixtures
"""

import httpx
import pytest
import pytest_asyncio

from schemas.descriptor import NumericTransform, SourceDescriptor, TransformConfig
from updater.fetcher import ArchiveFetcher
from tests.helpers import (
    ARCHIVE_URL,
    ArchiveServer,
    FakeInvalidator,
    FakeStore,
    InMemoryChangeCache,
)


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def change_cache():
    return InMemoryChangeCache()


@pytest.fixture
def invalidator():
    return FakeInvalidator()


@pytest.fixture
def archive_server():
    return ArchiveServer()


@pytest_asyncio.fixture
async def http_client(archive_server):
    """httpx client answering every request from ``archive_server``"""
    client = httpx.AsyncClient(transport=httpx.MockTransport(archive_server))
    yield client
    await client.aclose()


@pytest.fixture
def fetcher(http_client):
    return ArchiveFetcher(client=http_client, timeout=5.0, require_target=False)


@pytest.fixture
def cars_descriptor():
    return SourceDescriptor(
        name="cars",
        url=ARCHIVE_URL,
        table="cars",
        key_fields=["month", "make"],
        transform=TransformConfig(fields={"number": NumericTransform()})
    )
