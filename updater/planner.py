"""
Deduplication planner: decide which parsed records are new to the destination.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Sequence, Set

from core.exceptions import TransformationError
from updater.loaders.base import DestinationStore
import logging

logger = logging.getLogger(__name__)

KEY_SEPARATOR = "|"


def create_unique_key(record: Dict[str, Any], key_fields: Sequence[str]) -> str:
    """
    Join the record's key-field values in declared order.

    Raises:
        TransformationError: If the record lacks one of the key fields
    """
    try:
        return KEY_SEPARATOR.join(str(record[f]) for f in key_fields)
    except KeyError as e:
        raise TransformationError(
            f"Record is missing key field {e.args[0]}",
            context={"key_fields": list(key_fields), "record_fields": list(record)},
            original_exception=e
        )


def filter_new_records(
    existing_keys: Set[str],
    records: Iterable[Dict[str, Any]],
    key_fields: Sequence[str]
) -> List[Dict[str, Any]]:
    """
    Keep records whose key is neither stored already nor seen earlier in
    ``records``. The first record carrying a key wins.
    """
    seen = set(existing_keys)
    new_records = []
    for record in records:
        key = create_unique_key(record, key_fields)
        if key in seen:
            continue
        seen.add(key)
        new_records.append(record)
    return new_records


@dataclass
class DedupPlan:
    """Outcome of planning one table's inserts."""

    new_records: List[Dict[str, Any]] = field(default_factory=list)
    existing_keys: int = 0
    skipped: int = 0


class DeduplicationPlanner:
    """
    Compare parsed records against every row already stored.

    The destination tables hold tens of thousands of rows, so the whole key
    projection is loaded once per run.
    """

    def __init__(self, store: DestinationStore):
        self.store = store

    async def existing_keys(self, table: str, key_fields: Sequence[str]) -> Set[str]:
        rows = await self.store.fetch_key_projection(table, key_fields)
        return {
            KEY_SEPARATOR.join(str(value) for value in row)
            for row in rows
        }

    async def plan(
        self,
        table: str,
        key_fields: Sequence[str],
        records: List[Dict[str, Any]]
    ) -> DedupPlan:
        existing = await self.existing_keys(table, key_fields)
        new_records = filter_new_records(existing, records, key_fields)

        plan = DedupPlan(
            new_records=new_records,
            existing_keys=len(existing),
            skipped=len(records) - len(new_records)
        )
        logger.info(
            f"Planned {len(plan.new_records)} new record(s) for {table}; "
            f"{plan.skipped} skipped against {plan.existing_keys} stored key(s)"
        )
        return plan
