"""CLI commands for computing the dashboard from a snapshot directory.

Provides build (full JSON payload) and summary (human-readable headline)
commands, both optionally enriched from the Sway API.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from loguru import logger

if TYPE_CHECKING:
    from influence_api.core.config import Settings
    from influence_api.schemas.dashboard import DashboardModel

dashboard_app = typer.Typer()


def _resolve_settings(data_dir: Path | None, group_id: str | None) -> Settings:
    from influence_api.core.config import get_settings

    settings = get_settings()
    update: dict[str, str] = {}
    if data_dir is not None:
        update["data_dir"] = str(data_dir)
    if group_id is not None:
        if not group_id.strip():
            typer.echo("Error: --group-id must not be blank")
            raise typer.Exit(code=1)
        update["main_group_id"] = group_id.strip()
    return settings.model_copy(update=update) if update else settings


async def _build(settings: Settings, offline: bool) -> DashboardModel:
    from influence_api.services.dashboard_service import load_and_build_dashboard

    return await load_and_build_dashboard(settings, offline=offline)


@dashboard_app.command("build")
def build(
    data_dir: Annotated[
        Path | None, typer.Option("--data-dir", help="Snapshot directory (defaults to DATA_DIR)")
    ] = None,
    group_id: Annotated[
        str | None, typer.Option("--group-id", help="Viewpoint group id (defaults to MAIN_GROUP_ID)")
    ] = None,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Write JSON here instead of stdout")] = None,
    offline: Annotated[bool, typer.Option("--offline", help="Skip Sway API enhancements")] = False,
) -> None:
    """Compute the full dashboard and emit it as JSON."""
    settings = _resolve_settings(data_dir, group_id)
    try:
        dashboard = asyncio.run(_build(settings, offline))
    except Exception as e:
        logger.exception("Dashboard computation failed")
        typer.echo(f"Error: Failed to compute metrics: {e}")
        raise typer.Exit(code=1) from e

    payload = dashboard.model_dump_json(by_alias=True, indent=2)
    if output is None:
        typer.echo(payload)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(payload + "\n", encoding="utf-8")
    typer.echo(f"Dashboard written to {output}")


@dashboard_app.command("summary")
def summary(
    data_dir: Annotated[
        Path | None, typer.Option("--data-dir", help="Snapshot directory (defaults to DATA_DIR)")
    ] = None,
    group_id: Annotated[
        str | None, typer.Option("--group-id", help="Viewpoint group id (defaults to MAIN_GROUP_ID)")
    ] = None,
    offline: Annotated[bool, typer.Option("--offline", help="Skip Sway API enhancements")] = False,
) -> None:
    """Print the headline numbers and this week's focus."""
    settings = _resolve_settings(data_dir, group_id)
    try:
        dashboard = asyncio.run(_build(settings, offline))
    except Exception as e:
        logger.exception("Dashboard computation failed")
        typer.echo(f"Error: Failed to compute metrics: {e}")
        raise typer.Exit(code=1) from e

    headline = dashboard.summary
    typer.echo(
        f"Group: {settings.main_group_id}\n"
        f"  Verified voters: {headline.verified_voters} ({headline.verification_rate:.1f}% of supporters)\n"
        f"  Weekly growth: {headline.growth_rate:.1f}%\n"
        f"  Connected leaders: {headline.connected_leaders}\n"
        f"  Concentration index: {dashboard.jurisdictions.concentration_index:.2f} "
        f"across {dashboard.jurisdictions.total_jurisdictions} jurisdictions\n"
        f"  Upcoming ballot exposures: {len(dashboard.ballot_exposure)}"
    )

    if not dashboard.focus_this_week:
        typer.echo("No recommended actions this week.")
        return

    typer.echo("Focus this week:")
    for insight in dashboard.focus_this_week:
        typer.echo(f"  {insight.priority}. [{insight.impact}] {insight.title}")
        typer.echo(f"     {insight.description}")
        typer.echo(f"     -> {insight.action}")
