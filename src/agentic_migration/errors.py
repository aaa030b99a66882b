"""Shared error types for the walkthrough orchestrator."""


class OrchestrationError(Exception):
    """Base error for all orchestrator failures."""


class UnknownSceneError(OrchestrationError):
    """A scene id has no recipe in the registry."""

    def __init__(self, scene_id: str) -> None:
        self.scene_id = scene_id
        super().__init__(f"Unknown scene: {scene_id!r}")


class SceneRegistryError(OrchestrationError):
    """The scene table is malformed (duplicate ids, dangling references)."""


class InvalidCanvasError(OrchestrationError):
    """A canvas payload violates the closed rendering contract."""

    def __init__(self, canvas_type: str, detail: str = "") -> None:
        self.canvas_type = canvas_type
        self.detail = detail
        msg = f"Invalid canvas payload of type {canvas_type!r}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class ConfigError(OrchestrationError):
    """Raised when a settings file fails to read, parse, or validate."""
