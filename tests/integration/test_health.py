import httpx
import pytest

from daily_git_brief.api.main import create_fastapi_app
from daily_git_brief.core.config import Settings


@pytest.mark.asyncio
async def test_health_endpoint():
    settings = Settings(_env_file=None)
    app = create_fastapi_app(settings, data_app=None)

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert "timestamp" in data


@pytest.mark.asyncio
async def test_metrics_disabled_without_registry():
    app = create_fastapi_app(Settings(_env_file=None), data_app=None)

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get("/metrics")
        assert resp.status_code == 404
