# src/bgrotate/config.py: Pydantic models for configuration.
# This module defines the schema of the 'config.yaml' file: which workspaces
# rotate, which directories feed each of them, how often the rotation runs,
# and how images are listed and applied. It loads and validates the file and
# turns every failure into a ConfigError.

from __future__ import annotations

import yaml
from pathlib import Path
from pydantic import BaseModel, Field, ValidationError, field_validator
from typing import List, Literal, Optional

from .util.paths import get_default_config_path, expand_path
from .util.errors import ConfigError

# --- Pydantic Models for Configuration Schema ---

class ListerConfig(BaseModel):
    mode: Literal["directory", "query"] = "directory"
    include: List[str] = Field(default_factory=list)
    query_command: str = "query"

class SetterConfig(BaseModel):
    command: str = "bgswitch"
    args: List[str] = Field(
        default_factory=lambda: ["-w", "{workspace}", "set", "-f", "{image}"]
    )
    timeout_sec: int = Field(60, gt=0)

class LoggingConfig(BaseModel):
    level: str = "INFO"
    json_format: bool = Field(False, alias="json")
    file: Optional[Path] = None

    @field_validator("file")
    @classmethod
    def _expand_file(cls, value: Optional[Path]) -> Optional[Path]:
        return expand_path(value) if value is not None else None

class Workspace(BaseModel):
    id: int = Field(ge=1)
    dirs: List[Path] = Field(min_length=1)

    @field_validator("dirs")
    @classmethod
    def _expand_dirs(cls, value: List[Path]) -> List[Path]:
        return [expand_path(d) for d in value]

class Config(BaseModel):
    version: int
    interval_sec: int = Field(3600, gt=0)
    workspaces: List[Workspace] = Field(min_length=1)
    lister: ListerConfig = Field(default_factory=ListerConfig)
    setter: SetterConfig = Field(default_factory=SetterConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("workspaces")
    @classmethod
    def _unique_ids(cls, value: List[Workspace]) -> List[Workspace]:
        ids = [ws.id for ws in value]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValueError(f"duplicate workspace ids: {duplicates}")
        return value


# --- Configuration Loading ---

def load_config(path: Optional[Path] = None) -> Config:
    """
    Loads, validates, and returns the configuration.

    Args:
        path: The configuration file. Defaults to $BGROTATE_CONFIG or the
            XDG config location.

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid.
    """
    config_path = path or get_default_config_path()
    if not config_path.is_file():
        raise ConfigError(
            f"Configuration file not found. Please create it at '{config_path}'."
        )

    try:
        with open(config_path, "r") as f:
            raw_config = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Failed to read configuration file '{config_path}': {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing YAML configuration: {e}") from e

    try:
        return Config.model_validate(raw_config or {})
    except ValidationError as e:
        raise ConfigError(f"Configuration validation failed: {e}") from e
