"""Walkthrough data models — the state published to external renderers.

Chat messages, action buttons, the active agent task, the canvas payload
and the mission summary, plus the read-only :class:`OrchestratorSnapshot`
that bundles them.
"""

from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

AgentRole = Literal["system", "assistant", "user"]


class StepStatus(StrEnum):
    """Progress of a single task step.  Only ever moves forward."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"

    @property
    def rank(self) -> int:
        return _STEP_RANK[self]


_STEP_RANK = {StepStatus.PENDING: 0, StepStatus.RUNNING: 1, StepStatus.COMPLETED: 2}


class ActionButton(BaseModel):
    """A declarative affordance attached to a chat message."""

    model_config = ConfigDict(frozen=True)

    label: str
    action_id: str
    next_state: str | None = None
    effect: str | None = None
    params: list[Any] | None = None


class MessageMeta(BaseModel):
    """Background-job marker rendered next to a message."""

    model_config = ConfigDict(frozen=True)

    job_id: str | None = None
    status: Literal["running", "completed", "failed"] | None = None


class ChatMessage(BaseModel):
    """One entry of the conversation history.  Immutable once appended."""

    model_config = ConfigDict(frozen=True)

    id: str
    role: AgentRole
    agent_name: str | None = None
    content: str
    actions: list[ActionButton] | None = None
    reasoning: list[str] | None = None
    meta: MessageMeta | None = None
    timestamp: float


class Utterance(BaseModel):
    """A scripted line waiting to be delivered as a :class:`ChatMessage`."""

    model_config = ConfigDict(frozen=True)

    agent: str
    role: AgentRole = "assistant"
    text: str
    actions: list[ActionButton] | None = None
    reasoning: list[str] | None = None
    meta: MessageMeta | None = None


class TaskStep(BaseModel):
    id: str
    text: str
    status: StepStatus = StepStatus.PENDING


class AgentTask(BaseModel):
    """A simulated background job with ordered steps."""

    id: str
    title: str
    status: str
    steps: list[TaskStep] = []
    start_time: float = 0.0

    def step(self, step_id: str) -> TaskStep | None:
        for step in self.steps:
            if step.id == step_id:
                return step
        return None

    @property
    def is_complete(self) -> bool:
        return all(s.status == StepStatus.COMPLETED for s in self.steps)


class CanvasState(BaseModel):
    """The single current workspace view, tagged by ``type``."""

    model_config = ConfigDict(frozen=True)

    type: str
    title: str
    data: dict[str, Any] = {}


class MissionState(BaseModel):
    """Cumulative migration-narrative progress."""

    phase: str = "CPQ Reality"
    progress: int = 0
    parity: str | None = "—"
    needs_confirmation: int = 0
    jobs_running: int = 0


class MissionPatch(BaseModel):
    """Partial :class:`MissionState` update.  Only explicitly set fields merge."""

    phase: str | None = None
    progress: int | None = None
    parity: str | None = None
    needs_confirmation: int | None = None
    jobs_running: int | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class ExpertOutput(BaseModel):
    """A deliverable produced by the expert desk."""

    model_config = ConfigDict(frozen=True)

    id: str
    action_id: str
    title: str
    created_at: float


class Inconsistency(BaseModel):
    """A non-fatal violation detected while applying scripted data."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["progress_out_of_range", "step_regression"]
    detail: str
    scene_id: str
    at: float


class OrchestratorSnapshot(BaseModel):
    """The single externally observable state of the orchestrator."""

    model_config = ConfigDict(frozen=True)

    scene_id: str
    messages: list[ChatMessage]
    canvas: CanvasState | None
    mission: MissionState
    task: AgentTask | None
    is_typing: bool
    typing_label: str | None
    expert_outputs: list[ExpertOutput] = Field(default_factory=list)
    notices: list[str] = Field(default_factory=list)
