"""
API endpoint tests
"""

import logging

import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from api.main import app
from api.dependencies import get_db
from core.config import settings
from core.exceptions import FetchError
from schemas.result import UpdaterResult
from updater.datasets import DATASETS


def make_session(marker="2024-02-05T01:00:00+00:00"):
    session = AsyncMock()
    result = MagicMock()
    result.scalar_one_or_none.return_value = marker
    session.execute = AsyncMock(return_value=result)
    return session


@pytest.fixture
def db_session():
    return make_session()


@pytest.fixture
def client(db_session):
    """Create test client with database override"""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    # Used without a context manager so the scheduler is not started
    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setattr(settings, "API_KEY", "test-key")
    return "test-key"


def test_root_endpoint(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["endpoints"]["updates"] == "/updates"


def test_health_endpoint_database_connected(client):
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()

    assert data["status"] == "healthy"
    assert data["database_connected"] is True
    tables = {t["table"]: t["last_updated"] for t in data["tables"]}
    assert set(tables) == {d.table for d in DATASETS.values()}
    assert tables["cars"] == "2024-02-05T01:00:00+00:00"


def test_health_endpoint_database_down(client, db_session):
    db_session.execute.side_effect = OperationalError("SELECT 1", {}, Exception("down"))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "unhealthy"
    assert response.json()["tables"] == []


def test_request_id_headers(client):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"
    assert "X-API-Latency-ms" in response.headers


def test_requests_are_logged_with_request_id(client, caplog):
    caplog.set_level(logging.INFO, logger="api.middleware")

    client.get("/health", headers={"X-Request-ID": "req-456"})

    assert "[req-456] GET /health -> 200" in caplog.text


def test_request_id_is_generated_when_missing(client):
    response = client.get("/")

    assert len(response.headers["X-Request-ID"]) == 32


def test_failed_trigger_is_logged_as_warning(client, caplog):
    caplog.set_level(logging.INFO, logger="api.middleware")
    error = FetchError("HTTP error! status: 503", status_code=503)

    with patch("api.routes.updates.run_dataset", new=AsyncMock(side_effect=error)):
        client.post("/updates/coe")

    records = [r for r in caplog.records if r.name == "api.middleware"]
    assert records[-1].levelname == "WARNING"
    assert "POST /updates/coe -> 502" in records[-1].getMessage()


def test_list_datasets(client):
    response = client.get("/updates")

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == len(DATASETS)
    names = [d["name"] for d in data["datasets"]]
    assert names == list(DATASETS)


def test_trigger_update_returns_result(client):
    result = UpdaterResult(table="cars", records_processed=12, message="12 record(s) inserted", checksum="abc")

    with patch("api.routes.updates.run_dataset", new=AsyncMock(return_value=result)) as mock_run:
        response = client.post("/updates/cars")

    assert response.status_code == 200
    data = response.json()
    assert data["table"] == "cars"
    assert data["recordsProcessed"] == 12
    assert data["message"] == "12 record(s) inserted"
    assert data["checksum"] == "abc"
    assert mock_run.call_args.args[0] is DATASETS["cars"]


def test_trigger_unknown_dataset_returns_404(client):
    with patch("api.routes.updates.run_dataset", new=AsyncMock()) as mock_run:
        response = client.post("/updates/bikes")

    assert response.status_code == 404
    mock_run.assert_not_called()


def test_trigger_failed_update_returns_502(client):
    error = FetchError("HTTP error! status: 503", context={"url": "https://x"}, status_code=503)

    with patch("api.routes.updates.run_dataset", new=AsyncMock(side_effect=error)):
        response = client.post("/updates/coe")

    assert response.status_code == 502
    detail = response.json()["detail"]
    assert detail["error_type"] == "FetchError"
    assert detail["context"]["status_code"] == 503


def test_trigger_requires_api_key_when_configured(client, api_key):
    with patch("api.routes.updates.run_dataset", new=AsyncMock()) as mock_run:
        missing = client.post("/updates/cars")
        wrong = client.post("/updates/cars", headers={"X-API-Key": "nope"})

    assert missing.status_code == 401
    assert wrong.status_code == 401
    mock_run.assert_not_called()


def test_trigger_with_valid_api_key(client, api_key):
    result = UpdaterResult(table="cars", records_processed=0, message="File has not changed since last update")

    with patch("api.routes.updates.run_dataset", new=AsyncMock(return_value=result)):
        response = client.post("/updates/cars", headers={"X-API-Key": api_key})

    assert response.status_code == 200
    assert response.json()["recordsProcessed"] == 0
