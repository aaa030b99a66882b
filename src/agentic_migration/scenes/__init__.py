"""Scenes — the declarative scene table and the engine that interprets it."""

from agentic_migration.scenes.catalog import build_catalog
from agentic_migration.scenes.engine import SceneEngine
from agentic_migration.scenes.models import AutoAdvance, SceneRecipe, TaskCue, TaskPlan
from agentic_migration.scenes.registry import SceneRegistry, default_registry

__all__ = [
    "AutoAdvance",
    "SceneEngine",
    "SceneRecipe",
    "SceneRegistry",
    "TaskCue",
    "TaskPlan",
    "build_catalog",
    "default_registry",
]
