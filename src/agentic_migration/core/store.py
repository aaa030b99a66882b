"""Orchestrator store — the single owner of walkthrough state.

Components never assign store fields directly; every mutation goes through
one of the named operations below, and each operation appends a
:class:`JournalEntry` so the sequence of changes can be audited after the
fact.  External consumers only ever see :meth:`StateStore.snapshot` copies.
"""

from copy import deepcopy
from typing import Any

from pydantic import BaseModel, Field

from agentic_migration.core.models import (
    AgentTask,
    CanvasState,
    ChatMessage,
    ExpertOutput,
    Inconsistency,
    MissionState,
    OrchestratorSnapshot,
)


class JournalEntry(BaseModel):
    """One applied store operation."""

    op: str
    at: float
    generation: int
    data: dict[str, Any] = {}


class StateStore(BaseModel):
    """Mutable walkthrough state with reducer-style named operations."""

    scene_id: str = ""
    generation: int = 0
    messages: list[ChatMessage] = []
    canvas: CanvasState | None = None
    mission: MissionState = Field(default_factory=MissionState)
    task: AgentTask | None = None
    typing: dict[str, str] = {}
    expert_outputs: list[ExpertOutput] = []
    notices: list[str] = []
    inconsistencies: list[Inconsistency] = []
    journal: list[JournalEntry] = []

    # ------------------------------------------------------------------
    # Named operations
    # ------------------------------------------------------------------

    def enter_scene(self, scene_id: str, generation: int, at: float) -> None:
        self.scene_id = scene_id
        self.generation = generation
        self._record("enter_scene", at, scene_id=scene_id)

    def append_message(self, message: ChatMessage) -> None:
        self.messages.append(message)
        self._record("append_message", message.timestamp, id=message.id, role=message.role)

    def begin_typing(self, token: str, label: str, at: float) -> None:
        self.typing[token] = label
        self._record("begin_typing", at, token=token, label=label)

    def end_typing(self, token: str, at: float) -> None:
        if self.typing.pop(token, None) is not None:
            self._record("end_typing", at, token=token)

    def set_mission(self, mission: MissionState, at: float) -> None:
        self.mission = mission
        self._record("set_mission", at, **mission.model_dump())

    def set_canvas(self, canvas: CanvasState | None, at: float) -> None:
        self.canvas = canvas
        self._record("set_canvas", at, type=canvas.type if canvas else None)

    def set_task(self, task: AgentTask | None, at: float) -> None:
        self.task = task
        self._record("set_task", at, id=task.id if task else None)

    def add_expert_output(self, output: ExpertOutput) -> None:
        self.expert_outputs.append(output)
        self._record("add_expert_output", output.created_at, id=output.id)

    def add_notice(self, notice: str, at: float) -> None:
        self.notices.append(notice)
        self._record("add_notice", at, notice=notice)

    def report(self, inconsistency: Inconsistency) -> None:
        self.inconsistencies.append(inconsistency)
        self._record("report", inconsistency.at, kind=inconsistency.kind)

    def note(self, op: str, at: float, **data: Any) -> None:
        """Journal an event that does not change published state."""
        self._record(op, at, **data)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def is_typing(self) -> bool:
        return bool(self.typing)

    @property
    def typing_label(self) -> str | None:
        if not self.typing:
            return None
        return next(reversed(self.typing.values()))

    def snapshot(self) -> OrchestratorSnapshot:
        """Return a deep, read-only copy of the observable state."""
        snapshot = OrchestratorSnapshot(
            scene_id=self.scene_id,
            messages=list(self.messages),
            canvas=self.canvas,
            mission=self.mission.model_copy(),
            task=self.task.model_copy(deep=True) if self.task else None,
            is_typing=self.is_typing,
            typing_label=self.typing_label,
            expert_outputs=list(self.expert_outputs),
            notices=list(self.notices),
        )
        return snapshot.model_copy(deep=True)

    def checkpoint(self) -> "StateStore":
        """Deep copy of every field except the journal, which restore never rolls back."""
        fields = {
            name: deepcopy(getattr(self, name))
            for name in type(self).model_fields
            if name != "journal"
        }
        return type(self).model_construct(**fields)

    def restore(self, checkpoint: "StateStore", *, keep: tuple[str, ...] = ()) -> None:
        """Roll fields back to *checkpoint*.

        The journal and any field named in *keep* retain their current values.
        """
        fresh = checkpoint.model_copy(deep=True)
        for name in type(self).model_fields:
            if name != "journal" and name not in keep:
                setattr(self, name, getattr(fresh, name))
        self._record("restore", self.journal[-1].at if self.journal else 0.0)

    def _record(self, op: str, at: float, **data: Any) -> None:
        self.journal.append(JournalEntry(op=op, at=at, generation=self.generation, data=data))
