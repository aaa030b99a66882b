"""Scene engine — interprets :class:`SceneRecipe` rows.

Entering a scene opens a new scheduler generation, so every callback still
pending from the previous scene (typing, cues, auto-advance) is cancelled
before the new recipe's effects are issued.  Synchronous effects (mission
patch, canvas) land immediately; messages and task cues are scheduled
relative to the entry time.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import partial
from typing import TYPE_CHECKING

from agentic_migration.core.canvas import validate_canvas
from agentic_migration.utils.telemetry import (
    ATTR_GENERATION,
    ATTR_MESSAGE_COUNT,
    ATTR_SCENE_ID,
    ATTR_TASK_ID,
    get_tracer,
)

if TYPE_CHECKING:
    from agentic_migration.core.canvas import CanvasPublisher
    from agentic_migration.core.mission import MissionAggregator
    from agentic_migration.core.scheduler import Scheduler
    from agentic_migration.core.sequencer import MessageSequencer
    from agentic_migration.core.store import StateStore
    from agentic_migration.core.tasks import TaskTracker
    from agentic_migration.scenes.models import SceneRecipe, TaskCue, TaskPlan
    from agentic_migration.scenes.registry import SceneRegistry

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)


class SceneEngine:
    """Issues a recipe's effects across the store's channels."""

    def __init__(
        self,
        registry: SceneRegistry,
        store: StateStore,
        scheduler: Scheduler,
        *,
        sequencer: MessageSequencer,
        tracker: TaskTracker,
        mission: MissionAggregator,
        canvas: CanvasPublisher,
        on_advance: Callable[[str], object],
    ) -> None:
        self.registry = registry
        self._store = store
        self._scheduler = scheduler
        self._sequencer = sequencer
        self._tracker = tracker
        self._mission = mission
        self._canvas = canvas
        self._on_advance = on_advance

    def enter(self, scene_id: str) -> SceneRecipe:
        """Run *scene_id*'s recipe from scratch.

        Every canvas the recipe can publish is validated before the previous
        scene is superseded, so a rejected recipe leaves the running scene
        and its pending callbacks untouched.

        Raises:
            UnknownSceneError: If *scene_id* is not registered.
            InvalidCanvasError: If one of the recipe's canvases breaks the
                rendering contract.  Nothing has changed when either is raised.
        """
        recipe = self.registry.get(scene_id)
        for canvas in recipe.canvases:
            validate_canvas(canvas)

        with _tracer.start_as_current_span("scene.enter") as span:
            generation = self._scheduler.new_generation()
            span.set_attribute(ATTR_SCENE_ID, scene_id)
            span.set_attribute(ATTR_GENERATION, generation)
            span.set_attribute(ATTR_MESSAGE_COUNT, len(recipe.messages))
            logger.info("Entering scene %s (generation %d)", scene_id, generation)

            self._sequencer.supersede()
            self._store.enter_scene(scene_id, generation, self._scheduler.now)

            if recipe.reset_mission:
                self._mission.reset()
            if recipe.mission is not None:
                self._mission.patch(recipe.mission)

            if recipe.clear_canvas:
                self._canvas.publish(None)
            elif recipe.canvas is not None:
                self._canvas.publish(recipe.canvas)

            if recipe.task is not None:
                span.set_attribute(ATTR_TASK_ID, recipe.task.task.id)
                self._run_plan(scene_id, recipe.task, generation)

            self._sequencer.deliver(
                recipe.messages, generation=generation, spacing_ms=recipe.spacing_ms
            )
        return recipe

    # ------------------------------------------------------------------
    # Task choreography
    # ------------------------------------------------------------------

    def _run_plan(self, scene_id: str, plan: TaskPlan, generation: int) -> None:
        self._tracker.start(plan.task)
        for cue in plan.cues:
            self._scheduler.call_later(
                cue.at_ms,
                partial(self._apply_cue, plan.task.id, cue),
                generation=generation,
                label=f"{scene_id}:cue@{cue.at_ms:g}",
            )
        if plan.advance is not None:
            self._scheduler.call_later(
                plan.advance.at_ms,
                partial(self._auto_advance, plan.advance.scene_id, generation),
                generation=generation,
                label=f"{scene_id}:advance->{plan.advance.scene_id}",
            )

    def _apply_cue(self, task_id: str, cue: TaskCue) -> None:
        applied = self._tracker.mutate(
            task_id,
            status=cue.status,
            steps=dict(cue.steps),
            complete_all=cue.complete_all,
        )
        if applied and cue.canvas is not None:
            self._canvas.publish(cue.canvas)

    def _auto_advance(self, target: str, generation: int) -> None:
        if generation != self._scheduler.generation:
            return
        if self._sequencer.busy:
            logger.debug("Auto-advance to %s waits for the delivery chain", target)
        self._sequencer.when_idle(partial(self._advance_if_current, target, generation))

    def _advance_if_current(self, target: str, generation: int) -> None:
        if generation == self._scheduler.generation:
            self._on_advance(target)
