"""Scene registry — maps opaque scene ids to their recipes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from agentic_migration.core.canvas import validate_canvas
from agentic_migration.errors import InvalidCanvasError, SceneRegistryError, UnknownSceneError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from agentic_migration.scenes.models import SceneRecipe


class SceneRegistry:
    """Holds the scene table.

    Scene ids are opaque tokens (``"S6_80"`` is as valid as ``"S7"``); the
    registry never orders or parses them beyond registration order.
    """

    def __init__(self, recipes: Iterable[SceneRecipe] = ()) -> None:
        self._recipes: dict[str, SceneRecipe] = {}
        for recipe in recipes:
            self.register(recipe)

    def register(self, recipe: SceneRecipe) -> None:
        if recipe.scene_id in self._recipes:
            msg = f"duplicate scene id {recipe.scene_id!r}"
            raise SceneRegistryError(msg)
        self._recipes[recipe.scene_id] = recipe

    def get(self, scene_id: str) -> SceneRecipe:
        try:
            return self._recipes[scene_id]
        except KeyError:
            raise UnknownSceneError(scene_id) from None

    def ids(self) -> list[str]:
        return list(self._recipes)

    def validate(self) -> None:
        """Raise :class:`SceneRegistryError` on a dangling transition or a bad canvas."""
        for recipe in self._recipes.values():
            for target in recipe.next_states:
                if target not in self._recipes:
                    msg = f"scene {recipe.scene_id!r} transitions to unknown scene {target!r}"
                    raise SceneRegistryError(msg)
            for canvas in recipe.canvases:
                try:
                    validate_canvas(canvas)
                except InvalidCanvasError as exc:
                    msg = f"scene {recipe.scene_id!r}: {exc}"
                    raise SceneRegistryError(msg) from exc

    def __contains__(self, scene_id: object) -> bool:
        return scene_id in self._recipes

    def __iter__(self) -> Iterator[SceneRecipe]:
        return iter(self._recipes.values())

    def __len__(self) -> int:
        return len(self._recipes)


def default_registry() -> SceneRegistry:
    """Build and validate the registry for the CPQ-to-RCA walkthrough."""
    from agentic_migration.scenes.catalog import build_catalog

    registry = SceneRegistry(build_catalog())
    registry.validate()
    return registry
