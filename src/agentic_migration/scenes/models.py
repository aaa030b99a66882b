"""Scene recipe models — the declarative scene table rows.

A :class:`SceneRecipe` says everything entering a scene does: the mission
patch, the canvas published on entry, the utterances to deliver, and an
optional :class:`TaskPlan` whose cues fire at fixed offsets from the
moment the scene was entered.

Example (YAML form of one row)::

    scene_id: S10
    title: Replay running
    mission: {progress: 60, parity: Running, jobs_running: 1}
    messages:
      - agent: Parity Prover Agent
        text: Running parity replays now.
    task:
      task: {id: task_verify_01, title: Running Parity Replays, status: Initializing...}
      cues:
        - {at_ms: 2000, status: Comparing results..., steps: {"1": completed}}
        - {at_ms: 4000, status: Complete, complete_all: true}
      advance: {at_ms: 4000, scene_id: S11}
"""

from pydantic import BaseModel, ConfigDict, model_validator

from agentic_migration.core.models import (
    AgentTask,
    CanvasState,
    MissionPatch,
    StepStatus,
    Utterance,
)


class TaskCue(BaseModel):
    """A scheduled task mutation, optionally paired with a canvas replacement."""

    model_config = ConfigDict(frozen=True)

    at_ms: float
    status: str | None = None
    steps: dict[str, StepStatus] = {}
    complete_all: bool = False
    canvas: CanvasState | None = None


class AutoAdvance(BaseModel):
    """Transition to ``scene_id`` once ``at_ms`` has elapsed and messages drained."""

    model_config = ConfigDict(frozen=True)

    at_ms: float
    scene_id: str


class TaskPlan(BaseModel):
    """A task descriptor plus its timed choreography."""

    task: AgentTask
    cues: list[TaskCue] = []
    advance: AutoAdvance | None = None

    @model_validator(mode="after")
    def _validate_cues(self) -> "TaskPlan":
        step_ids = {s.id for s in self.task.steps}
        for cue in self.cues:
            unknown = set(cue.steps) - step_ids
            if unknown:
                msg = f"cue at {cue.at_ms}ms references unknown steps {sorted(unknown)}"
                raise ValueError(msg)
        return self


class SceneRecipe(BaseModel):
    """One row of the scene table."""

    scene_id: str
    title: str = ""
    mission: MissionPatch | None = None
    reset_mission: bool = False
    messages: list[Utterance] = []
    spacing_ms: float | None = None
    canvas: CanvasState | None = None
    clear_canvas: bool = False
    task: TaskPlan | None = None

    @property
    def canvases(self) -> list[CanvasState]:
        """Every canvas this scene can publish: the entry canvas, then cue canvases."""
        found = [self.canvas] if self.canvas is not None else []
        if self.task is not None:
            found.extend(cue.canvas for cue in self.task.cues if cue.canvas is not None)
        return found

    @property
    def next_states(self) -> list[str]:
        """Scene ids reachable from this scene via buttons or auto-advance."""
        targets: list[str] = []
        for utterance in self.messages:
            for action in utterance.actions or []:
                if action.next_state and action.next_state not in targets:
                    targets.append(action.next_state)
        if self.task and self.task.advance and self.task.advance.scene_id not in targets:
            targets.append(self.task.advance.scene_id)
        return targets
