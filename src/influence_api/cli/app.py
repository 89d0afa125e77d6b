"""Typer CLI root application with serve command."""

import typer

from influence_api.core.config import get_settings
from influence_api.core.logging import setup_logging

app = typer.Typer(name="influence-api", help="Leader influence metrics CLI")


@app.callback()
def _main_callback() -> None:
    """Initialize logging for all CLI commands."""
    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir)


@app.command()
def serve(
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload for development"),
    host: str = typer.Option("0.0.0.0", "--host", help="Bind host"),  # noqa: S104
    port: int = typer.Option(8000, "--port", help="Bind port"),
) -> None:
    """Start the API server."""
    import uvicorn

    uvicorn.run(
        "influence_api.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


def _register_subcommands() -> None:
    """Register all CLI subcommand groups."""
    from influence_api.cli.dashboard_cmd import dashboard_app

    app.add_typer(dashboard_app, name="dashboard", help="Dashboard computation commands")


_register_subcommands()
