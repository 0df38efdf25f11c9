"""
Configuration management for racetracker.

Handles:
- Validation of a participant's settings (limits, increment, delay)
- Config file loading from a YAML file
- RACETRACKER_CONFIG environment variable override for the file location
"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator


class InvalidConfiguration(ValueError):
    """Raised when participant settings are rejected."""


def _describe(error: ValidationError) -> str:
    """Flatten a pydantic ValidationError into a single readable line."""
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        msg = err.get("msg", "invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts)


class RunnerConfig(BaseModel):
    """Immutable settings for a single race participant."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = "Racer"
    max_progress: int = Field(default=100, gt=0, strict=True)
    progress_increment: int = Field(default=1, gt=0, strict=True)
    progress_delay: float = Field(
        default=0.5,
        ge=0,
        description="Seconds to wait before each increment.",
    )
    initial_progress: int = Field(default=0, ge=0, strict=True)

    @model_validator(mode="after")
    def _initial_within_max(self) -> "RunnerConfig":
        if self.initial_progress > self.max_progress:
            raise ValueError(
                f"initial_progress={self.initial_progress} exceeds "
                f"max_progress={self.max_progress}"
            )
        return self

    @classmethod
    def build(cls, data: Optional[dict[str, Any]] = None, **overrides: Any) -> "RunnerConfig":
        """
        Validate settings and return a config.

        Values in ``overrides`` win over those in ``data``. Any validation
        failure is reported as InvalidConfiguration.
        """
        values = {**(data or {}), **overrides}
        try:
            return cls.model_validate(values)
        except ValidationError as e:
            raise InvalidConfiguration(_describe(e)) from e


class ConfigManager:
    """Manages configuration loading and access."""

    def __init__(self, config_path: Optional[Path] = None):
        self._explicit_path: Optional[Path] = Path(config_path) if config_path else None
        self._config: Optional[RunnerConfig] = None

    @property
    def config_path(self) -> Optional[Path]:
        """Get the config file path (environment variable wins)."""
        env_path = os.environ.get("RACETRACKER_CONFIG")
        if env_path:
            return Path(env_path)
        return self._explicit_path

    def load(self) -> RunnerConfig:
        """Load configuration from file, or return defaults."""
        if self._config is not None:
            return self._config

        path = self.config_path
        if path and path.exists():
            try:
                with open(path, 'r') as f:
                    data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise InvalidConfiguration(f"{path}: {e}") from e
            if not isinstance(data, dict):
                raise InvalidConfiguration(f"{path}: expected a mapping of participant settings")
            self._config = RunnerConfig.build(data)
        else:
            self._config = RunnerConfig()

        return self._config

    def save(self, config: RunnerConfig) -> None:
        """Save configuration to file."""
        path = self.config_path
        if path is None:
            raise ValueError("Cannot save config: no config path set")

        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w') as f:
            yaml.dump(config.model_dump(), f, default_flow_style=False, sort_keys=False)

        self._config = config

    @property
    def config(self) -> RunnerConfig:
        """Get the current configuration (loads if needed)."""
        return self.load()
