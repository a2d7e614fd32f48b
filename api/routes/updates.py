"""
Dataset update endpoints: list registered datasets and trigger a run
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from core.exceptions import UpdaterError
from schemas.api import DatasetInfo, DatasetListResponse
from schemas.result import UpdaterResult
from updater.datasets import DATASETS, get_dataset
from updater.service import run_dataset
from api.dependencies import verify_api_key
import uuid
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/updates", tags=["Updates"])


@router.get("", response_model=DatasetListResponse)
async def list_datasets():
    """List the datasets the updater knows about."""
    datasets = [
        DatasetInfo(
            name=d.name,
            table=d.table,
            url=d.url,
            source_format=d.source_format,
            csv_file=d.csv_file,
            key_fields=list(d.key_fields)
        )
        for d in DATASETS.values()
    ]
    return DatasetListResponse(datasets=datasets, total=len(datasets))


@router.post(
    "/{name}",
    response_model=UpdaterResult,
    response_model_by_alias=True,
    response_model_exclude_none=True,
    dependencies=[Depends(verify_api_key)]
)
async def trigger_update(name: str, request: Request):
    """
    Run one dataset update now.

    Returns the run result. A failed run answers 502 with the error details.
    """
    request_id = getattr(request.state, "request_id", f"req_{uuid.uuid4().hex[:12]}")

    try:
        descriptor = get_dataset(name)
    except KeyError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown dataset: {name}")

    logger.info(f"[{request_id}] POST /updates/{name}")

    try:
        result = await run_dataset(descriptor)
    except UpdaterError as e:
        logger.error(f"[{request_id}] Update of {name} failed: {e.message}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.to_dict())

    logger.info(f"[{request_id}] {name}: {result.message}")
    return result
