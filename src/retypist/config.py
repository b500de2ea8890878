"""Configuration management for retypist."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, model_validator

from retypist.cargo import DEFAULT_RUSTFLAGS
from retypist.exceptions import ConfigError
from retypist.git import DEFAULT_COMMIT_MESSAGE
from retypist.process import WAIT_POLL_INTERVAL

CONFIG_FILE = "retypist.json"


class RunConfig(BaseModel):
    """Settings for one campaign."""

    cargo_args: list[str] = Field(default_factory=list)
    rustflags: str = DEFAULT_RUSTFLAGS
    min_batch: int = Field(default=1, ge=1)
    max_batch: int = Field(default=15, ge=1)
    poll_interval: float = Field(default=WAIT_POLL_INTERVAL, gt=0)
    format: bool = True  # cargo fmt before committing
    commit_message: str = DEFAULT_COMMIT_MESSAGE
    max_iterations: int | None = Field(default=None, ge=1)  # None = until interrupted
    seed: int | None = None

    @model_validator(mode="after")
    def _check_batch_range(self) -> RunConfig:
        if self.min_batch > self.max_batch:
            raise ValueError(
                f"min_batch ({self.min_batch}) exceeds max_batch ({self.max_batch})"
            )
        return self


def load_config(root: Path) -> RunConfig:
    """Load configuration from retypist.json in the crate root, if present."""
    config_path = Path(root) / CONFIG_FILE
    if not config_path.exists():
        return RunConfig()
    try:
        data = json.loads(config_path.read_text())
        return RunConfig(**data)
    except (json.JSONDecodeError, ValidationError, TypeError) as e:
        raise ConfigError(f"invalid {config_path}: {e}") from e


def save_config(root: Path, config: RunConfig) -> None:
    """Save configuration to retypist.json in the crate root."""
    config_path = Path(root) / CONFIG_FILE
    config_path.write_text(json.dumps(config.model_dump(), indent=2))


def apply_overrides(config: RunConfig, **overrides: Any) -> RunConfig:
    """Return a copy of ``config`` with every non-None override applied."""
    data = config.model_dump()
    for key, value in overrides.items():
        if key not in data:
            raise KeyError(f"Invalid config key: {key}")
        if value is not None:
            data[key] = value
    try:
        return RunConfig(**data)
    except ValidationError as e:
        raise ConfigError(str(e)) from e
