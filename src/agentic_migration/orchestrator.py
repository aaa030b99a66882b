"""Orchestrator facade — the object external consumers hold.

Renderers read :meth:`Orchestrator.get_snapshot` and call back through
three entry points:

* :meth:`Orchestrator.advance_to_scene` — enter a scene (also used by
  auto-advance chains).
* :meth:`Orchestrator.submit_user_message` — free-text chat input.
* :meth:`Orchestrator.dispatch_action` — every button and tool action.
  The facade owns all scene transitions: it resolves an action's
  ``next_state`` itself, so renderers never navigate on their own.

Usage::

    orchestrator = Orchestrator()          # enters S0
    orchestrator.run_until_idle()
    orchestrator.dispatch_action("start_scan")
    orchestrator.advance(2500)
    snapshot = orchestrator.get_snapshot()
"""

from __future__ import annotations

import logging
from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel

from agentic_migration.config import OrchestratorSettings
from agentic_migration.core.canvas import CanvasPublisher
from agentic_migration.core.mission import MissionAggregator
from agentic_migration.core.models import (
    ActionButton,
    ChatMessage,
    Inconsistency,
    OrchestratorSnapshot,
    Utterance,
)
from agentic_migration.core.scheduler import Scheduler
from agentic_migration.core.sequencer import MessageSequencer
from agentic_migration.core.store import StateStore
from agentic_migration.core.tasks import TaskTracker
from agentic_migration.errors import InvalidCanvasError, UnknownSceneError
from agentic_migration.expert import ExpertDesk
from agentic_migration.scenes.engine import SceneEngine
from agentic_migration.scenes.registry import SceneRegistry, default_registry
from agentic_migration.utils.telemetry import (
    ATTR_ACTION_ID,
    ATTR_ACTION_KIND,
    ATTR_NEXT_STATE,
    get_tracer,
)

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

# Actions raised by canvas widgets rather than chat buttons.
ACTION_ROUTES: dict[str, str] = {
    "run_scan": "S2",
    "confirm_intent": "S9",
}

USER_REPLY_TEXT = (
    "I'm tracking the migration progress. I can help you modify the scope, explain the RCA "
    "logic, or run specific scenarios. usage-based prioritization is currently active."
)
USER_REPLY_REASONING = [
    "Analyzing user intent...",
    "Checking Mission Context...",
    "Formulating helpful response based on current phase.",
]


class ActionOutcome(BaseModel):
    """How :meth:`Orchestrator.dispatch_action` resolved an action."""

    action_id: str
    kind: Literal["transition", "effect", "expert", "ignored"]
    next_state: str | None = None
    effect: str | None = None
    accepted: bool = True


class Orchestrator:
    """Owns the store and wires the scene engine to its channels."""

    def __init__(
        self,
        settings: OrchestratorSettings | None = None,
        *,
        registry: SceneRegistry | None = None,
        scheduler: Scheduler | None = None,
        autostart: bool = True,
    ) -> None:
        self.settings = settings or OrchestratorSettings()
        self.registry = registry or default_registry()
        self.scheduler = scheduler or Scheduler()
        self.store = StateStore()

        timing = self.settings.timing
        self.mission = MissionAggregator(self.store, self.scheduler)
        self.canvas = CanvasPublisher(self.store, self.scheduler)
        self.sequencer = MessageSequencer(self.store, self.scheduler, timing)
        self.tasks = TaskTracker(self.store, self.scheduler)
        self.expert = ExpertDesk(self.store, self.sequencer, timing)
        self.engine = SceneEngine(
            self.registry,
            self.store,
            self.scheduler,
            sequencer=self.sequencer,
            tracker=self.tasks,
            mission=self.mission,
            canvas=self.canvas,
            on_advance=self.advance_to_scene,
        )

        self._started = False
        if autostart:
            self.start()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """Enter the configured start scene.  Only the first call has an effect."""
        if self._started:
            return False
        self._started = True
        return self.advance_to_scene(self.settings.start_scene)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def advance_to_scene(self, scene_id: str) -> bool:
        """Enter *scene_id*.

        Returns ``False`` without changing state when the scene is unknown
        or its recipe is rejected; the current scene keeps running.  If the
        recipe fails midway, its pending callbacks are cancelled and the
        last good state is restored.
        """
        checkpoint = self.store.checkpoint()
        try:
            self.engine.enter(scene_id)
        except UnknownSceneError:
            logger.warning("Unknown scene %r, staying on %r", scene_id, self.store.scene_id)
            return False
        except InvalidCanvasError as exc:
            logger.warning(
                "Scene %r rejected, staying on %r: %s", scene_id, self.store.scene_id, exc
            )
            return False
        except Exception:
            logger.exception("Entering scene %r failed, restoring last good state", scene_id)
            failed = self.scheduler.generation
            self.scheduler.cancel_generation(lambda g: g == failed)
            self.sequencer.supersede()
            self.store.restore(checkpoint, keep=("typing",))
            return False
        return True

    def submit_user_message(self, text: str) -> ChatMessage:
        """Append a user message now and schedule the fixed assistant reply.

        The text is recorded as given; filtering empty input is the
        renderer's job.
        """
        with _tracer.start_as_current_span("user.message"):
            message = ChatMessage(
                id=uuid4().hex[:12],
                role="user",
                content=text,
                timestamp=self.scheduler.now,
            )
            self.store.append_message(message)
            self.sequencer.reply(
                Utterance(
                    agent=self.settings.reply_agent,
                    role="assistant",
                    text=USER_REPLY_TEXT,
                    reasoning=list(USER_REPLY_REASONING),
                ),
                self.settings.timing.reply_delay_ms,
            )
        return message

    def dispatch_action(
        self, action_id: str, params: dict[str, Any] | None = None
    ) -> ActionOutcome:
        """Resolve and perform an action.

        Resolution order:

        1. Built-in routes (:data:`ACTION_ROUTES`).
        2. An explicit ``params["next_state"]``.
        3. Expert-desk actions.
        4. The newest :class:`ActionButton` with this id in the history:
           its ``next_state`` transitions, its ``effect`` becomes a notice.

        Anything else is recorded and ignored.
        """
        with _tracer.start_as_current_span("action.dispatch") as span:
            span.set_attribute(ATTR_ACTION_ID, action_id)
            outcome = self._resolve_action(action_id, params or {})
            span.set_attribute(ATTR_ACTION_KIND, outcome.kind)
            if outcome.next_state:
                span.set_attribute(ATTR_NEXT_STATE, outcome.next_state)

        self.store.note(
            "dispatch_action",
            self.scheduler.now,
            action_id=action_id,
            kind=outcome.kind,
            accepted=outcome.accepted,
        )
        return outcome

    def _resolve_action(self, action_id: str, params: dict[str, Any]) -> ActionOutcome:
        target = ACTION_ROUTES.get(action_id) or params.get("next_state")
        if target:
            return self._transition(action_id, str(target))

        if self.expert.handles(action_id):
            return ActionOutcome(
                action_id=action_id, kind="expert", accepted=self.expert.handle(action_id)
            )

        button = self.find_action(action_id)
        if button is not None and button.next_state:
            return self._transition(action_id, button.next_state)
        if button is not None and button.effect:
            self.store.add_notice(f"{button.effect}: {button.label}", self.scheduler.now)
            return ActionOutcome(action_id=action_id, kind="effect", effect=button.effect)

        logger.info("Action %r has no handler, ignoring", action_id)
        return ActionOutcome(action_id=action_id, kind="ignored", accepted=False)

    def _transition(self, action_id: str, target: str) -> ActionOutcome:
        accepted = self.advance_to_scene(target)
        return ActionOutcome(
            action_id=action_id, kind="transition", next_state=target, accepted=accepted
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_snapshot(self) -> OrchestratorSnapshot:
        return self.store.snapshot()

    def find_action(self, action_id: str) -> ActionButton | None:
        """Return the newest button with *action_id* in the history."""
        for message in reversed(self.store.messages):
            for action in message.actions or []:
                if action.action_id == action_id:
                    return action
        return None

    @property
    def inconsistencies(self) -> list[Inconsistency]:
        return list(self.store.inconsistencies)

    # ------------------------------------------------------------------
    # Time
    # ------------------------------------------------------------------

    def advance(self, ms: float) -> int:
        """Advance virtual time by *ms* milliseconds."""
        return self.scheduler.advance(ms)

    def run_until_idle(self) -> int:
        """Fire every pending callback, following auto-advance chains."""
        return self.scheduler.run_until_idle()
