"""``amig play`` — run the walkthrough from the terminal."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

from agentic_migration.cli_commands._output import console, print_message, print_snapshot

if TYPE_CHECKING:
    from agentic_migration.core.models import ActionButton
    from agentic_migration.orchestrator import Orchestrator

# Upper bound on followed transitions; the canonical path needs 14.
MAX_STEPS = 64


class _Transcript:
    """Prints messages as they land, each one once."""

    def __init__(self, orchestrator: Orchestrator, *, enabled: bool) -> None:
        self._orchestrator = orchestrator
        self._enabled = enabled
        self._printed = 0

    def flush(self) -> None:
        messages = self._orchestrator.store.messages
        if self._enabled:
            for message in messages[self._printed :]:
                print_message(message)
        self._printed = len(messages)


@click.command()
@click.option(
    "--path",
    "scene_path",
    default=None,
    help="Comma-separated scene ids to visit after the start scene, e.g. S2,S4,S5.",
)
@click.option("--until", "until", default=None, help="Stop following once this scene is reached.")
@click.option(
    "--config",
    "config_file",
    default=None,
    type=click.Path(exists=True),
    help="Settings YAML file.",
)
@click.option("--json", "as_json", is_flag=True, help="Print only the final snapshot as JSON.")
@click.option("--realtime", is_flag=True, help="Pace the walkthrough against the wall clock.")
@click.option("--speed", default=1.0, type=float, help="Realtime speed multiplier.")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.option("--telemetry", is_flag=True, help="Export tracing spans to the console.")
def play(
    scene_path: str | None,
    until: str | None,
    config_file: str | None,
    as_json: bool,
    realtime: bool,
    speed: float,
    verbose: bool,
    telemetry: bool,
) -> None:
    """Play the walkthrough and print the transcript and final snapshot.

    Without --path, the first navigable button of the newest message is
    followed until no such button remains.
    """
    from agentic_migration.config import OrchestratorSettings, SettingsLoader
    from agentic_migration.errors import ConfigError
    from agentic_migration.orchestrator import Orchestrator

    if verbose:
        _configure_logging()

    if config_file:
        try:
            settings = SettingsLoader(Path(config_file)).load()
        except ConfigError as exc:
            console.print(f"[red]Configuration error:[/red] {exc}")
            sys.exit(1)
    else:
        settings = OrchestratorSettings()

    if telemetry:
        settings.telemetry.enabled = True

    if settings.telemetry.enabled:
        from agentic_migration.utils.telemetry import configure_telemetry

        try:
            configure_telemetry(settings.telemetry)
        except ImportError as exc:
            console.print(f"[red]Telemetry error:[/red] {exc}")
            sys.exit(1)

    if speed <= 0:
        console.print("[red]Error:[/red] --speed must be greater than 0")
        sys.exit(1)

    orchestrator = Orchestrator(settings, autostart=False)
    targets = [s.strip() for s in scene_path.split(",") if s.strip()] if scene_path else None

    requested = [settings.start_scene, *(targets or []), until]
    unknown = [s for s in requested if s and s not in orchestrator.registry]
    if unknown:
        console.print(f"[red]Unknown scene(s):[/red] {', '.join(unknown)}")
        sys.exit(1)

    transcript = _Transcript(orchestrator, enabled=not as_json)
    if not as_json:
        console.print("[bold]Conversation[/bold]")

    def settle() -> None:
        if realtime:
            from agentic_migration.core.scheduler import RealtimeDriver

            driver = RealtimeDriver(orchestrator.scheduler, speed=speed)
            asyncio.run(driver.run(on_tick=transcript.flush))
        else:
            orchestrator.run_until_idle()
        transcript.flush()

    orchestrator.start()
    settle()

    pending = list(targets) if targets is not None else None
    for _ in range(MAX_STEPS):
        if until and until in _entered_scenes(orchestrator):
            break
        if pending is not None:
            if not pending:
                break
            target = pending.pop(0)
            if target == orchestrator.store.scene_id:
                continue
            _go_to(orchestrator, target)
        else:
            button = _next_button(orchestrator)
            if button is None:
                break
            orchestrator.dispatch_action(button.action_id)
        settle()

    print_snapshot(orchestrator.get_snapshot(), as_json=as_json)


def _configure_logging() -> None:
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _entered_scenes(orchestrator: Orchestrator) -> list[str]:
    return [e.data["scene_id"] for e in orchestrator.store.journal if e.op == "enter_scene"]


def _next_button(orchestrator: Orchestrator) -> ActionButton | None:
    """First button of the newest message that leads to another scene."""
    messages = orchestrator.store.messages
    if not messages:
        return None
    for action in messages[-1].actions or []:
        if action.next_state:
            return action
    return None


def _go_to(orchestrator: Orchestrator, target: str) -> None:
    """Press a button leading to *target* if one is on screen, else jump there."""
    for message in reversed(orchestrator.store.messages):
        for action in message.actions or []:
            if action.next_state == target:
                orchestrator.dispatch_action(action.action_id)
                return
    orchestrator.advance_to_scene(target)
