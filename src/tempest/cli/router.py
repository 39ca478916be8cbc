"""
CLI Router: explicit registration of command groups.

Each command group is a Typer app that owns its own subcommands; the router
adds it to the root app and remembers what was registered.
"""

from __future__ import annotations

from typing import Any

import typer


class CliRouter:
    """Registers command groups on a root Typer application."""

    def __init__(self, root_app: typer.Typer) -> None:
        self.root_app = root_app
        self._registered_groups: dict[str, dict[str, Any]] = {}

    def register(
        self,
        name: str,
        command_group: typer.Typer,
        *,
        help_text: str | None = None,
    ) -> None:
        """
        Register a command group with the router.

        Args:
            name: Command group name (e.g., "schedule", "catalog")
            command_group: Typer app instance for this command group
            help_text: Help text for the command group

        Raises:
            ValueError: if ``name`` is already registered
        """
        if name in self._registered_groups:
            raise ValueError(f"Command group '{name}' is already registered")

        self.root_app.add_typer(command_group, name=name, help=help_text)
        self._registered_groups[name] = {
            "name": name,
            "help": help_text,
            "command_group": command_group,
        }

    def list_registered_groups(self) -> list[str]:
        """Registered command group names in registration order."""
        return list(self._registered_groups.keys())


# Global router instance
_router: CliRouter | None = None


def get_router(root_app: typer.Typer) -> CliRouter:
    global _router
    if _router is None or _router.root_app is not root_app:
        _router = CliRouter(root_app)
    return _router
