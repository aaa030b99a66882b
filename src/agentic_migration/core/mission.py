"""Mission aggregator — partial-patch merges into the mission summary."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from agentic_migration.core.models import Inconsistency, MissionPatch, MissionState

if TYPE_CHECKING:
    from agentic_migration.core.scheduler import Scheduler
    from agentic_migration.core.store import StateStore

logger = logging.getLogger(__name__)

PROGRESS_MIN = 0
PROGRESS_MAX = 100


class MissionAggregator:
    """Merges :class:`MissionPatch` objects into the store's mission.

    Fields not set on a patch keep their prior values.  A progress value
    outside ``[0, 100]`` is reported as an :class:`Inconsistency` and
    clamped into range.
    """

    def __init__(self, store: StateStore, scheduler: Scheduler) -> None:
        self._store = store
        self._scheduler = scheduler

    @property
    def current(self) -> MissionState:
        return self._store.mission

    def patch(self, partial: MissionPatch) -> MissionState:
        changes = partial.changes()
        progress = changes.get("progress")
        if progress is not None and not PROGRESS_MIN <= progress <= PROGRESS_MAX:
            clamped = max(PROGRESS_MIN, min(PROGRESS_MAX, progress))
            detail = (
                f"progress {progress} outside [{PROGRESS_MIN}, {PROGRESS_MAX}], "
                f"clamped to {clamped}"
            )
            logger.warning("Mission patch in scene %s: %s", self._store.scene_id, detail)
            self._store.report(
                Inconsistency(
                    kind="progress_out_of_range",
                    detail=detail,
                    scene_id=self._store.scene_id,
                    at=self._scheduler.now,
                )
            )
            changes["progress"] = clamped

        merged = self._store.mission.model_copy(update=changes)
        self._store.set_mission(merged, self._scheduler.now)
        return merged

    def reset(self) -> MissionState:
        initial = MissionState()
        self._store.set_mission(initial, self._scheduler.now)
        return initial
