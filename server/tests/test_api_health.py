"""Simple API health tests against the default application database."""

import pytest
from httpx import ASGITransport, AsyncClient

from shuttle_booking.main import create_app


@pytest.mark.asyncio
async def test_api_health_endpoints():
    """Test the health endpoints without dependency overrides."""
    app = create_app()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

        # Test settings point at an in-memory SQLite database
        response = await client.get("/ready")
        assert response.status_code == 200
        assert response.json()["status"] == "ready"

        response = await client.get("/info")
        assert response.status_code == 200
        data = response.json()
        assert "service" in data
        assert "version" in data


@pytest.mark.asyncio
async def test_metrics_endpoint():
    """Test the metrics endpoint exposes booking counters."""
    app = create_app()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/metrics")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "bookings_confirmed_total" in response.text
        assert "inventory_version_conflicts_total" in response.text


@pytest.mark.asyncio
async def test_openapi_docs_disabled_outside_development():
    """Docs are only served in development."""
    app = create_app()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/docs")
        assert response.status_code == 404
