"""
Pydantic schema for the outcome of one updater run
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, Optional
from datetime import datetime, timezone

UNCHANGED_MESSAGE = "File has not changed since last update"
NO_NEW_RECORDS_MESSAGE = "No new data to insert. The provided data matches the existing records."


def inserted_message(count: int) -> str:
    return f"{count} record(s) inserted"


class UpdaterResult(BaseModel):
    """
    Result returned by ``Updater.update``.

    Serialised for logs and HTTP callers as
    ``{table, recordsProcessed, message, timestamp, checksum?}``.
    """
    table: str
    records_processed: int = Field(0, ge=0, alias="recordsProcessed")
    message: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    checksum: Optional[str] = None

    def to_json_dict(self) -> Dict[str, Any]:
        """JSON-ready dict using the camelCase wire names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "table": "cars",
                "recordsProcessed": 1250,
                "message": "1250 record(s) inserted",
                "timestamp": "2024-02-05T01:00:00+00:00",
                "checksum": "9f86d081884c7d659a2feaa0c55ad015a3bf4f1b2b0b822cd15d6c15b0f00a08"
            }
        }
