"""Core state components — scheduler, store, and the four effect channels."""

from agentic_migration.core.canvas import CANVAS_TYPES, CanvasPublisher, is_renderable
from agentic_migration.core.mission import MissionAggregator
from agentic_migration.core.models import (
    ActionButton,
    AgentTask,
    CanvasState,
    ChatMessage,
    ExpertOutput,
    Inconsistency,
    MessageMeta,
    MissionPatch,
    MissionState,
    OrchestratorSnapshot,
    StepStatus,
    TaskStep,
    Utterance,
)
from agentic_migration.core.scheduler import ManualClock, RealtimeDriver, ScheduledCall, Scheduler
from agentic_migration.core.sequencer import MessageSequencer
from agentic_migration.core.store import JournalEntry, StateStore
from agentic_migration.core.tasks import TaskTracker

__all__ = [
    "CANVAS_TYPES",
    "ActionButton",
    "AgentTask",
    "CanvasPublisher",
    "CanvasState",
    "ChatMessage",
    "ExpertOutput",
    "Inconsistency",
    "JournalEntry",
    "ManualClock",
    "MessageMeta",
    "MessageSequencer",
    "MissionAggregator",
    "MissionPatch",
    "MissionState",
    "OrchestratorSnapshot",
    "RealtimeDriver",
    "ScheduledCall",
    "Scheduler",
    "StateStore",
    "StepStatus",
    "TaskStep",
    "TaskTracker",
    "Utterance",
    "is_renderable",
]
