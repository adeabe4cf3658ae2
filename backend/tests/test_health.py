"""Tests for health endpoints and degraded (no database) mode."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.main import app


@pytest.mark.asyncio
class TestHealth:

    async def test_health(self, client: AsyncClient):
        response = await client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    async def test_ready_with_database(self, client: AsyncClient):
        response = await client.get("/api/health/ready")

        assert response.status_code == 200
        body = response.json()
        assert body["checks"]["database"] == "ok"
        assert body["checks"]["redis"] == "disabled"


@pytest.mark.asyncio
class TestDegradedMode:

    @pytest_asyncio.fixture
    async def bare_client(self):
        app.state.db = None
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            yield client

    async def test_ready_reports_unavailable(self, bare_client: AsyncClient):
        response = await bare_client.get("/api/health/ready")

        assert response.status_code == 503
        assert response.json()["checks"]["database"] == "not configured"

    async def test_data_endpoints_answer_503(self, bare_client: AsyncClient):
        response = await bare_client.get("/api/packages")

        assert response.status_code == 503
        assert response.json() == {
            "error": "Database not available",
            "code": "SERVICE_UNAVAILABLE",
        }

    async def test_liveness_still_ok(self, bare_client: AsyncClient):
        assert (await bare_client.get("/api/health")).status_code == 200
