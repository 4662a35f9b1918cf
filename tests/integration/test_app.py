"""Integration tests for the FastAPI host application.

Uses the real app through httpx AsyncClient and ASGITransport, with the
lifespan run against a test environment.
"""

from unittest.mock import patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from pydantic import ValidationError

from src.agent.config import ChatConfig
from src.api.app import create_app


class TestLifespan:
    """Tests for configuration loading at startup."""

    async def test_startup_stores_config(self, started_app: FastAPI) -> None:
        config = started_app.state.config

        assert isinstance(config, ChatConfig)
        assert config.api_key == "AIza-test-key"

    async def test_startup_fails_without_api_key(self) -> None:
        """A missing key stops startup instead of failing on the first send."""
        application = create_app()

        with (
            patch.dict("os.environ", {}, clear=True),
            pytest.raises(ValidationError) as exc_info,
        ):
            async with application.router.lifespan_context(application):
                pass

        assert "API key required" in str(exc_info.value)

    async def test_startup_rejects_invalid_throttle(self) -> None:
        application = create_app()
        env = {"GEMINI_API_KEY": "AIza-test-key", "FLUSH_CHUNK_THRESHOLD": "0"}

        with patch.dict("os.environ", env, clear=True), pytest.raises(ValidationError):
            async with application.router.lifespan_context(application):
                pass


class TestHealthEndpoint:
    """Tests for GET /health."""

    async def test_health_reports_configured_model(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {
            "status": "healthy",
            "service": "gemini-chat",
            "model": "gemini-2.5-flash",
            "mode": "streaming",
        }

    async def test_health_reports_single_completion_mode(self, started_app: FastAPI) -> None:
        started_app.state.config = ChatConfig(api_key="AIza-test-key", streaming=False)
        transport = ASGITransport(app=started_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/health")

        assert response.json()["mode"] == "single"

    async def test_wrong_http_method_returns_405(self, async_client: AsyncClient) -> None:
        response = await async_client.post("/health")

        assert response.status_code == 405


class TestOpenApi:
    async def test_schema_lists_health_route(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/openapi.json")

        assert response.status_code == 200
        assert response.json()["info"]["title"] == "Gemini Chat"
        assert "/health" in response.json()["paths"]
