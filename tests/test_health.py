import pytest

pytest.importorskip("loguru")

from httpx import ASGITransport, AsyncClient

from layout_maker.settings import Settings, StorageSettings
from layout_maker.storage.memory import MemoryStorage
from services.api.main import create_app


@pytest.mark.asyncio()
async def test_health_endpoint() -> None:
    app = create_app(Settings(storage=StorageSettings(backend="memory")), MemoryStorage())
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/healthz")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
