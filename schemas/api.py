"""
Pydantic schemas for API request/response models
"""

from pydantic import BaseModel, Field, validator
from typing import Optional, List
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Health Check Schemas
# ============================================================================

class TableUpdateInfo(BaseModel):
    """Last update marker for one destination table"""
    table: str
    last_updated: Optional[str] = None


class HealthCheckResponse(BaseModel):
    """Health check response model"""
    timestamp: datetime = Field(default_factory=_utcnow)
    database_connected: bool
    cache_available: bool = True
    tables: List[TableUpdateInfo] = Field(default_factory=list)
    status: str = Field("healthy", description="Overall system status: healthy, degraded, unhealthy")

    @validator("status", pre=True, always=True)
    def determine_status(cls, v, values):
        """Determine overall health status"""
        if not values.get("database_connected", False):
            return "unhealthy"
        if not values.get("cache_available", True):
            return "degraded"
        return "healthy"

    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "timestamp": "2024-01-15T10:30:00Z",
                "database_connected": True,
                "cache_available": True,
                "tables": [
                    {"table": "cars", "last_updated": "2024-01-15T10:00:00+00:00"}
                ]
            }
        }


# ============================================================================
# Dataset Schemas
# ============================================================================

class DatasetInfo(BaseModel):
    """A registered dataset updater"""
    name: str
    table: str
    url: str
    source_format: str = "zip_csv"
    csv_file: Optional[str] = None
    key_fields: List[str]


class DatasetListResponse(BaseModel):
    """Registered datasets"""
    datasets: List[DatasetInfo]
    total: int
