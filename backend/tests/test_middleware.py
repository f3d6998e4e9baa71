import logging

import pytest
from httpx import ASGITransport, AsyncClient

from app.config import settings
from app.core import rate_limit
from app.main import app


@pytest.mark.asyncio
async def test_request_id_in_response():
    """All responses include X-Request-ID header."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/health")
    assert response.status_code == 200
    assert "X-Request-ID" in response.headers
    # UUID format: 8-4-4-4-12
    request_id = response.headers["X-Request-ID"]
    assert len(request_id) == 36


@pytest.mark.asyncio
async def test_inbound_request_id_is_echoed():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        good = await client.get("/health", headers={"X-Request-ID": "trace-abc-12345"})
        bad = await client.get("/health", headers={"X-Request-ID": "no spaces allowed!"})
    assert good.headers["X-Request-ID"] == "trace-abc-12345"
    assert bad.headers["X-Request-ID"] != "no spaces allowed!"
    assert len(bad.headers["X-Request-ID"]) == 36


@pytest.mark.asyncio
async def test_404_returns_structured_json():
    """Non-existent endpoint returns structured JSON error with request_id."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/nonexistent")
    assert response.status_code == 404
    data = response.json()
    assert data["error"] is True
    assert data["status_code"] == 404
    assert data["request_id"] == response.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_access_log_line(client: AsyncClient, staff_headers, caplog):
    with caplog.at_level(logging.INFO, logger="credmapping.access"):
        await client.get("/dashboard/summary", headers=staff_headers)
        await client.get("/health")

    lines = [r.getMessage() for r in caplog.records if r.name == "credmapping.access"]
    assert len(lines) == 1
    assert "path=/dashboard/summary" in lines[0]
    assert "status=200" in lines[0]
    assert "staff@vestatelemed.com" not in lines[0]


@pytest.mark.asyncio
async def test_auth_routes_rate_limited_in_production(client: AsyncClient, monkeypatch):
    monkeypatch.setattr(settings, "app_env", "production")
    rate_limit._ip_counter.reset()
    try:
        statuses = [(await client.get("/auth/me")).status_code for _ in range(11)]
    finally:
        rate_limit._ip_counter.reset()

    assert statuses[:10] == [401] * 10
    assert statuses[10] == 429


def test_sliding_window_counter():
    counter = rate_limit.SlidingWindowCounter()
    assert all(counter.is_allowed("k", 3, 60) for _ in range(3))
    assert counter.is_allowed("k", 3, 60) is False
    assert counter.is_allowed("other", 3, 60) is True
    counter.reset()
    assert counter.is_allowed("k", 3, 60) is True
