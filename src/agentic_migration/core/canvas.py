"""Canvas publisher — holds exactly one current workspace payload.

Renderers pattern-match on ``CanvasState.type`` and on the field names of
``data``, so the set of type tags is closed and the required keys per tag
are checked on every publish.  Publishing replaces the whole payload; no
field of a previous payload survives a publish.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from agentic_migration.errors import InvalidCanvasError

if TYPE_CHECKING:
    from agentic_migration.core.models import CanvasState
    from agentic_migration.core.scheduler import Scheduler
    from agentic_migration.core.store import StateStore

logger = logging.getLogger(__name__)

# type tag -> groups of required data keys; any one group satisfies the tag.
CANVAS_CONTRACT: dict[str, tuple[frozenset[str], ...]] = {
    "scan_scope": (frozenset({"connection_status", "window", "scope"}),),
    "scan_progress": (frozenset({"stepper", "current_step", "progress", "counters"}),),
    "usage_radar": (
        frozenset(
            {
                "tabs",
                "summary",
                "quotes",
                "products",
                "bundles",
                "pricing",
                "approvals",
                "documents",
            }
        ),
    ),
    "dependency_map": (frozenset({"nodes"}),),
    "phase_scope_proposal": (frozenset({"coverage", "included"}),),
    "stakeholder_confirm": (frozenset({"teams"}),),
    "translation_canvas": (
        frozenset({"cpq_side", "rca_side", "confirmations", "test_plan_preview"}),
    ),
    "replay_progress": (frozenset({"suite_name", "scenarios", "status"}),),
    "diff_viewer": (frozenset({"summary", "diffs"}),),
    "run_summary": (frozenset({"metrics"}), frozenset({"status"})),
    "run_timeline": (frozenset({"current_step"}),),
}

CANVAS_TYPES = frozenset(CANVAS_CONTRACT)


def validate_canvas(canvas: CanvasState) -> None:
    """Raise :class:`InvalidCanvasError` if *canvas* breaks the contract.

    Empty ``data`` is accepted for every known type (placeholder views).
    """
    groups = CANVAS_CONTRACT.get(canvas.type)
    if groups is None:
        raise InvalidCanvasError(canvas.type, "unknown type tag")
    if not canvas.data:
        return
    keys = set(canvas.data)
    if not any(group <= keys for group in groups):
        missing = sorted(min(groups, key=lambda g: len(g - keys)) - keys)
        raise InvalidCanvasError(canvas.type, f"missing data keys {missing}")


def is_renderable(canvas: CanvasState | None) -> bool:
    """Return ``True`` when a renderer has something to show for *canvas*.

    Unknown type tags render as nothing; they are never an error for the
    consumer.
    """
    return canvas is not None and canvas.type in CANVAS_TYPES


class CanvasPublisher:
    """Validates and publishes the current canvas into the store."""

    def __init__(self, store: StateStore, scheduler: Scheduler) -> None:
        self._store = store
        self._scheduler = scheduler

    @property
    def current(self) -> CanvasState | None:
        return self._store.canvas

    def publish(self, canvas: CanvasState | None) -> None:
        if canvas is not None:
            validate_canvas(canvas)
        logger.debug("Publishing canvas %s", canvas.type if canvas else None)
        self._store.set_canvas(canvas, self._scheduler.now)
