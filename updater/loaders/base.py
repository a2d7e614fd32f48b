"""
Destination store contract used by the updater
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence, Tuple


class DestinationStore(ABC):
    """
    Relational store the updater writes into.

    Implementations must not commit inside ``insert_rows``; the persister
    decides when batches are committed.
    """

    @abstractmethod
    async def fetch_key_projection(self, table: str, key_fields: Sequence[str]) -> List[Tuple]:
        """Distinct values of ``key_fields`` across every row of ``table``."""
        pass

    @abstractmethod
    async def insert_rows(self, table: str, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Insert ``rows`` and return the rows the store actually inserted."""
        pass

    @abstractmethod
    async def commit(self) -> None:
        pass

    @abstractmethod
    async def rollback(self) -> None:
        pass
