"""
Catalog CLI commands.

Browse the video library, see which channel an asset lands on, and pull new
assets from the configured sources.
"""

from __future__ import annotations

import typer

from ..context import echo_json, get_services, wants_json

app = typer.Typer(name="catalog", help="Video library operations")


def _print_assets(library, assets, title: str) -> None:
    from rich.console import Console
    from rich.table import Table

    table = Table(title=title)
    table.add_column("ID", style="cyan")
    table.add_column("Channel", style="magenta")
    table.add_column("Minutes", justify="right", style="yellow")
    table.add_column("Title", style="green")
    for asset in assets:
        table.add_row(
            asset.id,
            library.get_asset_channel(asset.id) or "-",
            str(asset.duration_seconds // 60),
            asset.title,
        )
    Console().print(table)


@app.command("list")
def list_cmd(
    ctx: typer.Context,
    channel: str = typer.Option(None, "--channel", "-c", help="Only assets on this channel"),
) -> None:
    """List catalog assets and their channel."""
    library = get_services(ctx).library
    assets = library.get_channel_assets(channel) if channel else library.get_all_assets()
    if wants_json(ctx):
        echo_json(
            [{**a.to_dict(), "channel_id": library.get_asset_channel(a.id)} for a in assets]
        )
        return
    _print_assets(library, assets, f"Assets ({len(assets)})")


@app.command("search")
def search_cmd(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Text to match in title, description or tags"),
) -> None:
    """Search the catalog."""
    library = get_services(ctx).library
    results = library.search_assets(query)
    if wants_json(ctx):
        echo_json([a.to_dict() for a in results])
        return
    _print_assets(library, results, f"{len(results)} match(es) for '{query}'")


@app.command("classify")
def classify_cmd(
    ctx: typer.Context,
    asset_id: str = typer.Argument(None, help="Asset to classify (all assets if omitted)"),
) -> None:
    """Show the channel keyword classification would pick for assets."""
    library = get_services(ctx).library
    if asset_id:
        asset = library.get_asset(asset_id)
        if asset is None:
            typer.echo(f"Error: asset not found: {asset_id}", err=True)
            raise typer.Exit(1)
        assets = [asset]
    else:
        assets = library.get_all_assets()

    picks = {a.id: library.classify_channel(a) for a in assets}
    if wants_json(ctx):
        echo_json(picks)
        return
    for asset in assets:
        typer.echo(f"{asset.id:<24} → {picks[asset.id]}")


@app.command("sync")
def sync_cmd(ctx: typer.Context) -> None:
    """Pull unseen assets from every configured source."""
    library = get_services(ctx).library
    reports = library.force_sync()
    if wants_json(ctx):
        echo_json([r.to_dict() for r in reports])
        return
    for report in reports:
        typer.echo(
            f"{report.source}: {len(report.added)} added, "
            f"{len(report.skipped)} skipped, {len(report.failed)} failed"
        )


@app.command("stats")
def stats_cmd(ctx: typer.Context) -> None:
    """Summarize the library."""
    library = get_services(ctx).library
    stats = library.get_library_stats()
    if wants_json(ctx):
        echo_json({**stats, "sync": library.get_sync_status()})
        return
    typer.echo(f"Assets: {stats['total_assets']}")
    typer.echo(f"Total duration: {stats['total_duration_seconds'] // 60} min")
    for name, count in stats["channel_stats"].items():
        typer.echo(f"  {name:<16} {count}")
