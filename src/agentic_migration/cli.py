"""Agentic Migration CLI entrypoint."""

from __future__ import annotations

import click

from agentic_migration import __version__


@click.group()
@click.version_option(version=__version__, prog_name="amig")
def main() -> None:
    """amig — scripted agentic migration walkthrough."""


# Register subcommands
from agentic_migration.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
