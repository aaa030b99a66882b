"""Agentic Migration — scripted walkthrough orchestrator for a CPQ-to-RCA migration assistant."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from agentic_migration.config import OrchestratorSettings as OrchestratorSettings
    from agentic_migration.orchestrator import Orchestrator as Orchestrator

_LAZY_EXPORTS = {
    "Orchestrator": "agentic_migration.orchestrator",
    "OrchestratorSettings": "agentic_migration.config",
}


def __getattr__(name: str) -> object:
    module_path = _LAZY_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'agentic_migration' has no attribute {name!r}")
