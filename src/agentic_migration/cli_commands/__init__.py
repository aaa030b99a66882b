"""CLI subcommand registration."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all subcommands on the CLI group."""
    from agentic_migration.cli_commands.play import play
    from agentic_migration.cli_commands.scenes import scenes

    cli.add_command(play)
    cli.add_command(scenes)
