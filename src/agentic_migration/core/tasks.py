"""Task tracker — the single active background job and its step progress."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from agentic_migration.core.models import AgentTask, Inconsistency, StepStatus

if TYPE_CHECKING:
    from agentic_migration.core.scheduler import Scheduler
    from agentic_migration.core.store import StateStore

logger = logging.getLogger(__name__)


class TaskTracker:
    """Installs and mutates the store's active :class:`AgentTask`.

    * :meth:`start` replaces any previous task, finished or not.
    * :meth:`mutate` targets a task by id; a mutation for a task that is no
      longer active is an orphan and is ignored.
    * Step statuses only move ``pending -> running -> completed``.  A change
      that would move a step backwards is rejected and reported; the rest
      of the mutation still applies.
    """

    def __init__(self, store: StateStore, scheduler: Scheduler) -> None:
        self._store = store
        self._scheduler = scheduler

    @property
    def active(self) -> AgentTask | None:
        return self._store.task

    def start(self, task: AgentTask) -> AgentTask:
        installed = task.model_copy(deep=True, update={"start_time": self._scheduler.now})
        previous = self._store.task
        if previous is not None and not previous.is_complete:
            logger.debug("Task %s replaced before completion by %s", previous.id, installed.id)
        self._store.set_task(installed, self._scheduler.now)
        return installed

    def mutate(
        self,
        task_id: str,
        *,
        status: str | None = None,
        steps: dict[str, StepStatus] | None = None,
        complete_all: bool = False,
    ) -> bool:
        """Apply a status/step patch to the active task.

        Returns ``False`` when *task_id* is not the active task.
        """
        current = self._store.task
        if current is None or current.id != task_id:
            logger.debug("Ignoring orphaned mutation for task %s", task_id)
            return False

        task = current.model_copy(deep=True)
        if status is not None:
            task.status = status

        targets = dict(steps or {})
        if complete_all:
            targets = {s.id: StepStatus.COMPLETED for s in task.steps}

        for step_id, new_status in targets.items():
            step = task.step(step_id)
            if step is None:
                logger.warning("Task %s has no step %r", task_id, step_id)
                continue
            new_status = StepStatus(new_status)
            if new_status.rank < step.status.rank:
                self._report_regression(task_id, step_id, step.status, new_status)
                continue
            step.status = new_status

        self._store.set_task(task, self._scheduler.now)
        return True

    def clear(self) -> None:
        self._store.set_task(None, self._scheduler.now)

    def _report_regression(
        self, task_id: str, step_id: str, old: StepStatus, new: StepStatus
    ) -> None:
        detail = f"task {task_id} step {step_id}: {old.value} -> {new.value} rejected"
        logger.warning("Step regression: %s", detail)
        self._store.report(
            Inconsistency(
                kind="step_regression",
                detail=detail,
                scene_id=self._store.scene_id,
                at=self._scheduler.now,
            )
        )
