"""Orchestrator settings and their YAML loader.

Example YAML::

    start_scene: S0
    reply_agent: Gemini 3
    timing:
      lead_in_ms: 100
      spacing_ms: 2000
      typing_min_ms: 1000
      typing_max_ms: 2500
      typing_ms_per_char: 15
      reply_delay_ms: ${AMIG_REPLY_DELAY_MS}
    telemetry:
      enabled: false
      otlp_endpoint: http://localhost:4317
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from agentic_migration.errors import ConfigError


class TimingSettings(BaseModel):
    """Virtual-time constants, all in milliseconds."""

    lead_in_ms: float = Field(default=100, ge=0)
    spacing_ms: float = Field(default=2000, ge=0)
    typing_min_ms: float = Field(default=1000, ge=0)
    typing_max_ms: float = Field(default=2500, ge=0)
    typing_ms_per_char: float = Field(default=15, ge=0)
    reply_delay_ms: float = Field(default=2000, ge=0)

    @model_validator(mode="after")
    def _validate_window(self) -> TimingSettings:
        if self.typing_min_ms > self.typing_max_ms:
            msg = "typing_min_ms must not exceed typing_max_ms"
            raise ValueError(msg)
        return self

    def typing_duration(self, text: str) -> float:
        """Typing time for *text*: per-char cost clamped to the window."""
        return min(self.typing_max_ms, max(self.typing_min_ms, len(text) * self.typing_ms_per_char))


class TelemetrySettings(BaseModel):
    """Span export for ``amig play``; off unless enabled here or by ``--telemetry``."""

    enabled: bool = False
    service_name: str = "agentic-migration"
    export_to_console: bool = True
    otlp_endpoint: str | None = None


class OrchestratorSettings(BaseModel):
    """Top-level orchestrator configuration."""

    start_scene: str = "S0"
    reply_agent: str = "Gemini 3"
    timing: TimingSettings = Field(default_factory=TimingSettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)


class SettingsLoader:
    """Load and validate a settings YAML file into :class:`OrchestratorSettings`."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def load(self) -> OrchestratorSettings:
        """Read YAML, interpolate env vars, and validate.

        Raises:
            ConfigError: On read errors, YAML parse errors, or validation failures.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read {self._path}: {exc}") from exc

        expanded = os.path.expandvars(raw)

        try:
            data: Any = yaml.safe_load(expanded)
        except yaml.YAMLError as exc:
            raise ConfigError(f"YAML parse error: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError("Settings YAML must be a mapping")

        try:
            return OrchestratorSettings.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc
