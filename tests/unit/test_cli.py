import json
import pytest
from unittest.mock import AsyncMock, patch
from core.exceptions import FetchError
from schemas.result import UpdaterResult
from scripts import run_updater


def test_parse_args_requires_datasets_or_all():
    with pytest.raises(SystemExit):
        run_updater.parse_args([])


def test_parse_args_rejects_unknown_dataset():
    with pytest.raises(SystemExit):
        run_updater.parse_args(["bikes"])


def test_parse_args_accepts_all():
    assert run_updater.parse_args(["--all"]).all is True


@pytest.mark.asyncio
async def test_run_updates_prints_results(capsys):
    outcomes = [UpdaterResult(table="cars", records_processed=4, message="4 record(s) inserted")]

    with patch.object(run_updater, "run_datasets", new=AsyncMock(return_value=outcomes)), \
            patch.object(run_updater, "dispose_engine", new=AsyncMock()) as mock_dispose:
        exit_code = await run_updater.run_updates(["cars"])

    assert exit_code == 0
    mock_dispose.assert_awaited_once()
    line = json.loads(capsys.readouterr().out.strip())
    assert line["dataset"] == "cars"
    assert line["recordsProcessed"] == 4


@pytest.mark.asyncio
async def test_run_updates_fails_when_any_dataset_fails(capsys):
    outcomes = [
        UpdaterResult(table="cars", records_processed=0, message="File has not changed since last update"),
        FetchError("HTTP error! status: 500", status_code=500),
    ]

    with patch.object(run_updater, "run_datasets", new=AsyncMock(return_value=outcomes)), \
            patch.object(run_updater, "dispose_engine", new=AsyncMock()) as mock_dispose:
        exit_code = await run_updater.run_updates(["cars", "coe"])

    assert exit_code == 1
    mock_dispose.assert_awaited_once()
    lines = [json.loads(line) for line in capsys.readouterr().out.strip().splitlines()]
    assert lines[1]["dataset"] == "coe"
    assert lines[1]["error"]["error_type"] == "FetchError"
