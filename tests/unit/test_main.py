"""Tests for the FastAPI application factory module."""

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from influence_api.core.config import Settings
from influence_api.lib.sway_client import TokenCache
from influence_api.main import create_app, lifespan


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)  # type: ignore[call-arg]


class TestCreateApp:
    """Tests for create_app."""

    @pytest.fixture
    def app(self):
        with patch("influence_api.main.get_settings", return_value=_settings()):
            return create_app()

    def test_app_is_created(self, app) -> None:
        assert app is not None
        assert app.title == "Influence API"

    def test_app_has_openapi_schema(self, app) -> None:
        client = TestClient(app, raise_server_exceptions=False)
        response = client.get("/openapi.json")
        assert response.status_code == 200
        schema = response.json()
        assert schema["info"]["title"] == "Influence API"
        assert "/api/v1/dashboard/topic-opportunities" in schema["paths"]

    def test_value_error_handler_registered(self, app) -> None:
        handler = app.exception_handlers.get(ValueError)
        assert handler is not None


class TestAppLifespan:
    """Tests for lifespan management."""

    @pytest.mark.asyncio
    async def test_lifespan_installs_and_clears_token_cache(self) -> None:
        """Lifespan sets up logging and owns the shared token cache."""
        mock_app = MagicMock()

        with (
            patch("influence_api.main.get_settings", return_value=_settings(sway_api_key="key")),
            patch("influence_api.main.setup_logging") as mock_setup_logging,
        ):
            async with lifespan(mock_app):
                mock_setup_logging.assert_called_once()
                cache = mock_app.state.token_cache
                assert isinstance(cache, TokenCache)
                cache.store("token")
                assert cache.token == "token"

            assert cache.token is None
