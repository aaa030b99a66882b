"""``amig scenes`` — list and inspect the scene table."""

from __future__ import annotations

import json
import sys

import click

from agentic_migration.cli_commands._output import console, print_scenes_table


@click.group()
def scenes() -> None:
    """Inspect walkthrough scenes."""


@scenes.command("list")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format.",
)
def list_scenes(fmt: str) -> None:
    """List every scene in narrative order."""
    from agentic_migration.scenes.registry import default_registry

    registry = default_registry()

    if fmt == "json":
        data = [
            {
                "scene_id": recipe.scene_id,
                "title": recipe.title,
                "canvas": recipe.canvas.type if recipe.canvas else None,
                "next_states": recipe.next_states,
            }
            for recipe in registry
        ]
        console.print_json(json.dumps(data))
    else:
        print_scenes_table(registry)


@scenes.command("show")
@click.argument("scene_id")
def show_scene(scene_id: str) -> None:
    """Show the full recipe of SCENE_ID as JSON."""
    from agentic_migration.errors import UnknownSceneError
    from agentic_migration.scenes.registry import default_registry

    registry = default_registry()
    try:
        recipe = registry.get(scene_id)
    except UnknownSceneError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)

    console.print_json(recipe.model_dump_json(exclude_none=True))
