"""Tests for health endpoint."""


async def test_health_returns_ok(client):
    """Health check reports ok with the service name."""
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "PharmaForecast"}
