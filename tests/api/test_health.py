"""
Test suite for health endpoints.

System role: Verification of liveness and database checks
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from backend.api.main import create_app
from backend.boundary.db import get_async_db


@pytest.fixture
def client():
    return TestClient(create_app())


def _session_override(session):
    async def _get_db():
        yield session

    return _get_db


def test_health_check(client) -> None:
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "message": "Server Healthy"}
    assert "X-Correlation-ID" in response.headers


def test_health_check_db(client) -> None:
    session = AsyncMock()
    client.app.dependency_overrides[get_async_db] = _session_override(session)

    response = client.get("/api/v1/health/db")

    assert response.status_code == 200
    assert response.json()["message"] == "Database connection OK"
    session.execute.assert_awaited_once()


def test_health_check_db_unreachable(client) -> None:
    session = AsyncMock()
    session.execute.side_effect = ConnectionRefusedError("connection refused")
    client.app.dependency_overrides[get_async_db] = _session_override(session)

    response = client.get("/api/v1/health/db")

    assert response.status_code == 503
    assert response.json() == {"status": "unhealthy", "message": "Database unreachable"}


def test_correlation_id_is_echoed(client) -> None:
    response = client.get("/api/v1/health", headers={"X-Correlation-ID": "req-123"})

    assert response.headers["X-Correlation-ID"] == "req-123"
