"""Integration tests for the dashboard API."""

from unittest.mock import AsyncMock, patch

from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from influence_api.api.v1.dashboard import dashboard_router
from influence_api.core.config import Settings, get_settings
from influence_api.lib.snapshot import SnapshotLoadError
from influence_api.main import create_app


def _make_app(settings: Settings) -> FastAPI:
    app = FastAPI()
    app.include_router(dashboard_router, prefix="/api/v1")
    app.dependency_overrides[get_settings] = lambda: settings
    return app


def _seed(factory, data_dir) -> None:
    factory.jurisdiction("j1", "Austin", state="TX")
    factory.supporters(40, verified=True, jurisdictions=["j1"])
    factory.supporters(60)
    factory.race("j1", 20, office="City Council")
    factory.measure("j1", 40, title="Affordable Housing Bond")
    factory.group("g2", "Housing")
    factory.write(data_dir)


class TestDashboardEndpoint:
    async def test_returns_core_metrics(self, live_factory, settings, tmp_path):
        _seed(live_factory, tmp_path)
        app = _make_app(settings)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            resp = await c.get("/api/v1/dashboard")

        assert resp.status_code == 200
        data = resp.json()
        assert data["summary"]["verifiedVoters"] == 40
        assert data["summary"]["verificationRate"] == 40.0
        assert data["verifiedVoters"]["current"] == 40
        assert data["jurisdictions"]["concentrationIndex"] == 1.0
        assert data["focusThisWeek"][0]["priority"] == 1
        assert data["supporterEngagement"]["totalSupporters"] == 100
        assert data["electoralLandscape"] is None
        assert data["leaderComparison"] is None

    async def test_empty_data_dir(self, settings):
        app = _make_app(settings)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            resp = await c.get("/api/v1/dashboard")

        assert resp.status_code == 200
        data = resp.json()
        assert data["summary"]["verifiedVoters"] == 0
        assert data["focusThisWeek"] == []

    async def test_failure_returns_metrics_error(self, settings):
        app = _make_app(settings)

        with patch(
            "influence_api.api.v1.dashboard.load_and_build_dashboard",
            new_callable=AsyncMock,
            side_effect=SnapshotLoadError("profiles.json must contain a JSON array, got dict"),
        ):
            async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
                resp = await c.get("/api/v1/dashboard")

        assert resp.status_code == 500
        assert resp.json() == {
            "error": "Failed to compute metrics",
            "message": "profiles.json must contain a JSON array, got dict",
        }

    async def test_failure_without_message(self, settings):
        app = _make_app(settings)

        with patch(
            "influence_api.api.v1.dashboard.load_and_build_dashboard",
            new_callable=AsyncMock,
            side_effect=RuntimeError(),
        ):
            async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
                resp = await c.get("/api/v1/dashboard")

        assert resp.status_code == 500
        assert resp.json()["message"] == "Unknown error"

    async def test_token_cache_shared_across_requests(self, settings):
        app = _make_app(settings)
        mock_build = AsyncMock(side_effect=RuntimeError("stop"))

        with patch("influence_api.api.v1.dashboard.load_and_build_dashboard", mock_build):
            async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
                await c.get("/api/v1/dashboard")
                await c.get("/api/v1/dashboard")

        first = mock_build.await_args_list[0].kwargs["token_cache"]
        second = mock_build.await_args_list[1].kwargs["token_cache"]
        assert first is second
        assert first is app.state.token_cache


class TestTopicOpportunitiesEndpoint:
    async def test_returns_ranked_opportunities(self, live_factory, settings, tmp_path):
        _seed(live_factory, tmp_path)
        app = _make_app(settings)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            resp = await c.get("/api/v1/dashboard/topic-opportunities")

        assert resp.status_code == 200
        data = resp.json()
        assert data["total"] == 1
        item = data["items"][0]
        assert item["topic"] == "Housing"
        assert item["ballotItem"]["title"] == "Affordable Housing Bond"
        assert 0 < item["relevanceScore"] <= 1

    async def test_limit_validation(self, settings):
        app = _make_app(settings)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            resp = await c.get("/api/v1/dashboard/topic-opportunities", params={"limit": 0})

        assert resp.status_code == 422


class TestApplication:
    async def test_security_and_timing_headers(self, settings):
        app = create_app()
        app.dependency_overrides[get_settings] = lambda: settings

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            resp = await c.get("/api/v1/dashboard")

        assert resp.status_code == 200
        assert resp.headers["X-Content-Type-Options"] == "nosniff"
        assert resp.headers["X-Frame-Options"] == "DENY"
        assert resp.headers["X-Process-Time"].endswith("ms")

    def test_openapi_metadata(self):
        app = create_app()
        assert app.title == "Influence API"
        assert "/api/v1/dashboard" in app.openapi()["paths"]
