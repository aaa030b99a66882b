"""Shared CLI output formatters."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from agentic_migration.core.models import ChatMessage, OrchestratorSnapshot  # noqa: TC001
from agentic_migration.scenes.registry import SceneRegistry  # noqa: TC001

console = Console()


def print_message(message: ChatMessage) -> None:
    """Print one chat message and its buttons."""
    speaker = message.agent_name or message.role
    stamp = f"{message.timestamp / 1000:7.2f}s"
    console.print(f"  [dim]{stamp}[/dim] [cyan]{speaker}[/cyan]: {message.content}")
    for action in message.actions or []:
        target = action.next_state or action.effect or "-"
        console.print(f"      [dim]\\[{action.label}] -> {target}[/dim]")


def print_snapshot(snapshot: OrchestratorSnapshot, *, as_json: bool = False) -> None:
    """Pretty-print a snapshot summary."""
    if as_json:
        console.print_json(snapshot.model_dump_json())
        return

    mission = snapshot.mission
    console.print("\n[bold]Snapshot[/bold]")
    console.print(f"  Scene: {snapshot.scene_id}")
    console.print(
        f"  Mission: {mission.phase} — {mission.progress}% "
        f"(parity {mission.parity or '-'}, jobs {mission.jobs_running}, "
        f"needs confirmation {mission.needs_confirmation})"
    )
    if snapshot.canvas is not None:
        console.print(f"  Canvas: {snapshot.canvas.type} — {snapshot.canvas.title}")
    else:
        console.print("  Canvas: (none)")
    if snapshot.task is not None:
        task = snapshot.task
        console.print(f"  Task: {task.title} [{task.status}]")
        for step in task.steps:
            console.print(f"    - {step.text}: {step.status.value}")
    console.print(f"  Messages: {len(snapshot.messages)}")
    if snapshot.notices:
        console.print(f"  Notices: {', '.join(snapshot.notices)}")


def print_scenes_table(registry: SceneRegistry) -> None:
    """Pretty-print the scene table."""
    table = Table(title="Scenes")
    table.add_column("Scene", style="cyan")
    table.add_column("Title")
    table.add_column("Canvas")
    table.add_column("Task")
    table.add_column("Next")

    for recipe in registry:
        table.add_row(
            recipe.scene_id,
            recipe.title,
            recipe.canvas.type if recipe.canvas else "-",
            recipe.task.task.title if recipe.task else "-",
            ", ".join(recipe.next_states) or "-",
        )

    console.print(table)
