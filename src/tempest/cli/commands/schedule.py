"""
Schedule CLI commands.

Inspect what is on air, the program guide and per-day listings, and force a
regeneration.
"""

from __future__ import annotations

from datetime import datetime

import typer

from ...infra.exceptions import InvalidInputError
from ...runtime.grid import grid_start
from ..context import echo_json, format_program, get_services, wants_json

app = typer.Typer(name="schedule", help="Channel schedule and program guide operations")


def _parse_start(value: str | None) -> datetime | None:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        typer.echo(f"Error: invalid timestamp: {value}", err=True)
        raise typer.Exit(1)


def _programs_by_channel(ctx: typer.Context, programs: dict, label: str) -> None:
    services = get_services(ctx)
    if wants_json(ctx):
        echo_json({cid: item.to_dict() if item else None for cid, item in programs.items()})
        return
    for channel in services.epg.list_channels():
        item = programs.get(channel.channel_id)
        line = format_program(item) if item else f"(nothing {label})"
        typer.echo(f"{channel.name:<16} {line}")


@app.command("now")
def now_cmd(
    ctx: typer.Context,
    channel: str = typer.Option(None, "--channel", "-c", help="Only this channel"),
) -> None:
    """Show what is airing right now."""
    epg = get_services(ctx).epg
    if channel:
        programs = {channel: epg.current_program(channel)}
    else:
        programs = epg.current_programs()
    _programs_by_channel(ctx, programs, "airing")


@app.command("next")
def next_cmd(
    ctx: typer.Context,
    channel: str = typer.Option(None, "--channel", "-c", help="Only this channel"),
) -> None:
    """Show what airs next."""
    epg = get_services(ctx).epg
    if channel:
        programs = {channel: epg.next_program(channel)}
    else:
        programs = epg.next_programs()
    _programs_by_channel(ctx, programs, "scheduled")


@app.command("guide")
def guide_cmd(
    ctx: typer.Context,
    start: str = typer.Option(None, "--start", help="ISO-8601 start with offset (default: now)"),
    hours: int = typer.Option(None, "--hours", help="Hours to show (default: 12)"),
    align: bool = typer.Option(True, "--align/--no-align", help="Start at the current half-hour when --start is omitted"),
) -> None:
    """Print the program guide grid."""
    services = get_services(ctx)
    start_at = _parse_start(start)
    if start_at is None and align:
        start_at = grid_start(services.engine.clock.now_utc())
    try:
        guide = services.epg.guide(start_at, hours)
    except InvalidInputError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if wants_json(ctx):
        echo_json(guide.to_dict())
        return

    typer.echo(f"Guide {guide.start.isoformat()} → {guide.end.isoformat()} ({len(guide.time_slots)} slots)")
    for channel in guide.channels:
        typer.echo(f"\n{channel.name}")
        for item in guide.programs_by_channel.get(channel.channel_id, []):
            typer.echo(f"  {format_program(item)}")


@app.command("day")
def day_cmd(
    ctx: typer.Context,
    channel: str = typer.Argument(..., help="Channel ID"),
    offset: int = typer.Option(0, "--offset", "-d", help="Days from today (0-6)"),
) -> None:
    """List one channel's programs for a calendar day."""
    services = get_services(ctx)
    if services.epg.get_channel(channel) is None:
        typer.echo(f"Error: unknown channel: {channel}", err=True)
        raise typer.Exit(1)
    try:
        items = services.epg.day_schedule(channel, offset)
    except InvalidInputError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if wants_json(ctx):
        echo_json([i.to_dict() for i in items])
        return
    if not items:
        typer.echo("No programs scheduled")
    for item in items:
        typer.echo(format_program(item))


@app.command("search")
def search_cmd(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Text to match in titles and descriptions"),
    limit: int = typer.Option(50, "--limit", "-n", help="Maximum results to print"),
) -> None:
    """Search scheduled programs across every channel."""
    results = get_services(ctx).epg.search(query)
    if wants_json(ctx):
        echo_json([i.to_dict() for i in results[:limit]])
        return
    typer.echo(f"{len(results)} match(es)")
    for item in results[:limit]:
        typer.echo(f"{item.channel_id:<16} {format_program(item)}")


@app.command("stats")
def stats_cmd(ctx: typer.Context) -> None:
    """Summarize the generated schedules."""
    stats = get_services(ctx).epg.stats()
    if wants_json(ctx):
        echo_json(stats.to_dict())
        return
    from rich.console import Console
    from rich.table import Table

    console = Console()
    console.print(f"[bold]Total programs:[/bold] {stats.total_programs}")
    console.print(f"Average length: {stats.average_program_length_minutes} min")

    kinds = Table(title="Content Kinds")
    kinds.add_column("Kind", style="cyan")
    kinds.add_column("Programs", justify="right", style="yellow")
    for kind, count in stats.content_kind_distribution.items():
        kinds.add_row(kind, str(count))
    console.print(kinds)

    per_channel = Table(title="Programs per Channel")
    per_channel.add_column("Channel", style="magenta")
    per_channel.add_column("Programs", justify="right", style="yellow")
    for channel_id, count in stats.per_channel_counts.items():
        per_channel.add_row(channel_id, str(count))
    console.print(per_channel)


@app.command("regenerate")
def regenerate_cmd(ctx: typer.Context) -> None:
    """Rebuild every channel's schedule from the start of today."""
    engine = get_services(ctx).engine
    ok = engine.regenerate()
    if wants_json(ctx):
        echo_json({"success": ok, "generated_at": engine.last_regenerated_at})
    elif ok:
        typer.echo(f"✓ Regenerated at {engine.last_regenerated_at.isoformat()}")
    else:
        typer.echo("Regeneration failed; previous schedule kept", err=True)
    if not ok:
        raise typer.Exit(1)
