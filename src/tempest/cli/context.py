"""
Shared state for CLI commands.

The root callback stores global options in ``ctx.obj``; commands build the
service graph lazily from them, once per invocation.
"""

from __future__ import annotations

import json
from typing import Any

import typer

from ..bootstrap import Services, build_services


def get_state(ctx: typer.Context) -> dict[str, Any]:
    root = ctx.find_root()
    root.ensure_object(dict)
    return root.obj


def get_services(ctx: typer.Context) -> Services:
    state = get_state(ctx)
    if state.get("services") is None:
        state["services"] = build_services(
            catalog_path=state.get("catalog"),
            channels_path=state.get("channels"),
            snapshot_path=state.get("snapshot"),
            seed=state.get("seed"),
        )
    return state["services"]


def wants_json(ctx: typer.Context) -> bool:
    return bool(get_state(ctx).get("json"))


def echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, default=str))


def format_program(item) -> str:
    start = item.start_time.strftime("%Y-%m-%d %H:%M")
    end = item.end_time.strftime("%H:%M")
    flags = " [LIVE]" if item.is_live else ""
    return f"{start}-{end}  {item.title} ({item.content_kind.value}){flags}"
