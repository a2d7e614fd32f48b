"""
Destination store contract, PostgreSQL implementation and batched persister.
"""

from updater.loaders.base import DestinationStore
from updater.loaders.persister import BatchedPersister
from updater.loaders.postgres_loader import PostgresStore

__all__ = ["DestinationStore", "PostgresStore", "BatchedPersister"]
