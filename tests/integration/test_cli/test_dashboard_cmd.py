"""Integration tests for the dashboard CLI commands."""

import json
from unittest.mock import AsyncMock, patch

from typer.testing import CliRunner

from influence_api.cli.app import app

runner = CliRunner()


def _seed(factory, data_dir) -> None:
    factory.jurisdiction("j1", "Austin", state="TX")
    factory.supporters(40, verified=True, jurisdictions=["j1"])
    factory.supporters(60)
    factory.race("j1", 20, office="City Council")
    factory.write(data_dir)


def _args(command: str, data_dir, *extra: str) -> list[str]:
    return ["dashboard", command, "--offline", "--data-dir", str(data_dir), "--group-id", "main-group", *extra]


class TestDashboardBuild:
    """Tests for `dashboard build`."""

    def test_writes_json_file(self, live_factory, tmp_path):
        data_dir = tmp_path / "snapshot"
        _seed(live_factory, data_dir)
        output = tmp_path / "out" / "dashboard.json"

        result = runner.invoke(app, _args("build", data_dir, "--output", str(output)))

        assert result.exit_code == 0, result.output
        assert "Dashboard written to" in result.output
        payload = json.loads(output.read_text())
        assert payload["summary"]["verifiedVoters"] == 40
        assert payload["summary"]["verificationRate"] == 40.0
        assert payload["focusThisWeek"][0]["title"] == "Focus on City Council"

    def test_blank_group_id(self, tmp_path):
        result = runner.invoke(
            app, ["dashboard", "build", "--offline", "--data-dir", str(tmp_path), "--group-id", "  "]
        )

        assert result.exit_code == 1
        assert "--group-id must not be blank" in result.output

    def test_failure_reports_metrics_error(self, tmp_path):
        with patch(
            "influence_api.services.dashboard_service.load_and_build_dashboard",
            new_callable=AsyncMock,
            side_effect=ValueError("profiles.json is malformed"),
        ):
            result = runner.invoke(app, _args("build", tmp_path))

        assert result.exit_code == 1
        assert "Error: Failed to compute metrics: profiles.json is malformed" in result.output

    def test_offline_flag_passed_through(self, tmp_path):
        mock_build = AsyncMock(side_effect=RuntimeError("stop"))

        with patch("influence_api.services.dashboard_service.load_and_build_dashboard", mock_build):
            runner.invoke(app, _args("build", tmp_path))

        settings = mock_build.await_args.args[0]
        assert settings.data_dir == str(tmp_path)
        assert settings.main_group_id == "main-group"
        assert mock_build.await_args.kwargs["offline"] is True


class TestDashboardSummary:
    """Tests for `dashboard summary`."""

    def test_prints_headline_and_focus(self, live_factory, tmp_path):
        _seed(live_factory, tmp_path)

        result = runner.invoke(app, _args("summary", tmp_path))

        assert result.exit_code == 0, result.output
        assert "Group: main-group" in result.output
        assert "Verified voters: 40 (40.0% of supporters)" in result.output
        assert "Upcoming ballot exposures: 1" in result.output
        assert "Focus this week:" in result.output
        assert "1. [high] Focus on City Council" in result.output

    def test_no_actions(self, tmp_path):
        result = runner.invoke(app, _args("summary", tmp_path))

        assert result.exit_code == 0, result.output
        assert "Verified voters: 0 (0.0% of supporters)" in result.output
        assert "No recommended actions this week." in result.output
