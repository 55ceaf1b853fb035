"""
Pydantic configuration schemas for arbor.

Describes which trees a forest plants and how their sinks are built, so an
application can set up logging from a YAML file instead of code.

Usage:
    config = ForestConfig.from_yaml("logging.yaml")
    Forest.instance().configure(config)

Minimal YAML:
    trees:
      console:
        type: debug
        sink: terminal
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from arbor.debug_tree import MAX_LOG_LENGTH
from arbor.records import Priority


class TreeConfig(BaseModel):
    type: Literal["debug"] = "debug"
    sink: Literal["logging", "terminal", "memory"] = "logging"
    min_priority: Optional[int | str] = None
    max_chunk_length: int = Field(MAX_LOG_LENGTH, gt=0)
    max_tag_length: Optional[int] = Field(None, gt=0)
    color: Optional[bool] = None                                # terminal
    formatter: Optional[Literal["compact", "detailed"]] = None  # terminal
    logger_prefix: Optional[str] = None                         # logging
    capacity: Optional[int] = Field(None, gt=0)                 # memory

    @field_validator("min_priority")
    @classmethod
    def validate_min_priority(cls, value: int | str | None) -> int | None:
        """Accept a priority name or value; store the numeric value."""
        if value is None:
            return None
        return Priority.from_value(value).value


class ForestConfig(BaseModel):
    """
    Top-level logging configuration.

    `isolate_tree_errors` decides what happens when one tree raises during
    dispatch: report it and keep delivering to the remaining trees (true),
    or propagate to the caller (false).
    """

    isolate_tree_errors: bool = True
    trees: dict[str, TreeConfig] = Field(default_factory=dict)

    @classmethod
    def from_yaml(cls, path: str | Path) -> ForestConfig:
        """Load and validate from a YAML file."""
        path = Path(path)
        return cls.from_yaml_string(path.read_text(encoding="utf-8"))

    @classmethod
    def from_yaml_string(cls, yaml_string: str) -> ForestConfig:
        """Load and validate from a YAML string. An empty document is the default config."""
        data = yaml.safe_load(yaml_string) or {}
        return cls.model_validate(data)

    @classmethod
    def from_dict(cls, data: dict) -> ForestConfig:
        """Load and validate from a dict."""
        return cls.model_validate(data)

    def to_dict(self, exclude_none: bool = True) -> dict:
        """Export as dict, suitable for serialization."""
        return self.model_dump(exclude_none=exclude_none)
