"""
Test doubles shared across the suite
"""

import io
import zipfile
from collections import defaultdict
from typing import Dict, List, Optional

import httpx
from openpyxl import Workbook

from core.exceptions import StoreError
from updater.cache import CacheInvalidator, ChangeCache
from updater.loaders.base import DestinationStore

ARCHIVE_URL = "https://datamall.example.test/datasets/cars.zip"


def make_zip(files: Dict[str, str]) -> bytes:
    """Build an in-memory ZIP archive from ``{name: text}``."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, text in files.items():
            archive.writestr(name, text)
    return buffer.getvalue()


def make_workbook(sheet_name: str, rows: List[list]) -> bytes:
    """Build an in-memory XLSX workbook whose first sheet holds ``rows``."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = sheet_name
    for row in rows:
        sheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


class FakeStore(DestinationStore):
    """
    In-memory destination store.

    Inserted rows stay pending until ``commit``; ``rollback`` discards them.
    ``fail_on_call`` makes the n-th ``insert_rows`` call (1-based) raise.
    """

    def __init__(self, fail_on_call: Optional[int] = None):
        self.tables = defaultdict(list)
        self.pending = []
        self.insert_calls = []
        self.projection_calls = 0
        self.commits = 0
        self.rollbacks = 0
        self.fail_on_call = fail_on_call

    async def fetch_key_projection(self, table, key_fields):
        self.projection_calls += 1
        return list({tuple(row[f] for f in key_fields) for row in self.tables[table]})

    async def insert_rows(self, table, rows):
        self.insert_calls.append((table, len(rows)))
        if self.fail_on_call == len(self.insert_calls):
            raise StoreError("Failed to insert rows", context={"table_name": table})
        start = len(self.tables[table]) + len(self.pending)
        self.pending.extend((table, dict(row)) for row in rows)
        return [{"id": start + i + 1} for i in range(len(rows))]

    async def commit(self):
        self.commits += 1
        for table, row in self.pending:
            self.tables[table].append(row)
        self.pending = []

    async def rollback(self):
        self.rollbacks += 1
        self.pending = []


class InMemoryChangeCache(ChangeCache):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.checksums = dict(initial or {})
        self.writes = []

    async def get_cached_checksum(self, file_name):
        return self.checksums.get(file_name)

    async def cache_checksum(self, file_name, checksum):
        self.writes.append((file_name, checksum))
        self.checksums[file_name] = checksum


class FakeInvalidator(CacheInvalidator):
    def __init__(self):
        self.invalidated = []

    async def invalidate(self, table):
        self.invalidated.append(table)


class ArchiveServer:
    """MockTransport handler serving whatever archive is currently set."""

    def __init__(self, content: bytes = b"", status_code: int = 200):
        self.content = content
        self.status_code = status_code
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, content=self.content)


