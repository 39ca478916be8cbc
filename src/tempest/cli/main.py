"""
Main CLI application using Typer with router-based command dispatch.

Command groups are registered through the CliRouter; global options are
stored on the Typer context and read by the commands.
"""

from __future__ import annotations

import typer

from ..infra.logging import configure_logging
from .commands import catalog, schedule
from .context import get_services, get_state
from .router import get_router

app = typer.Typer(help="Tempest channel scheduling CLI")

router = get_router(app)

router.register(
    "schedule",
    schedule.app,
    help_text="Channel schedule and program guide operations",
)

router.register(
    "catalog",
    catalog.app,
    help_text="Video library operations",
)


@app.command("serve")
def serve(
    ctx: typer.Context,
    host: str = typer.Option("0.0.0.0", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="HTTP port"),
) -> None:
    """Serve the schedule API and keep schedules fresh in the background."""
    from ..web.server import run_server

    run_server(host=host, port=port, services=get_services(ctx))


@app.callback()
def main(
    ctx: typer.Context,
    json: bool = typer.Option(False, "--json", help="Output in JSON format"),
    catalog_path: str = typer.Option(None, "--catalog", help="JSON asset catalog (instead of the database)"),
    channels_path: str = typer.Option(None, "--channels", help="YAML channel list"),
    snapshot_path: str = typer.Option(None, "--snapshot", help="Catalog snapshot file"),
    seed: int = typer.Option(None, "--seed", help="Random seed for reproducible schedules"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level for diagnostics on stderr"),
):
    """Tempest - 24/7 channel scheduling."""
    configure_logging(level=log_level)
    state = get_state(ctx)
    state.update(
        json=json,
        catalog=catalog_path,
        channels=channels_path,
        snapshot=snapshot_path,
        seed=seed,
        services=None,
    )


def cli():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    cli()
