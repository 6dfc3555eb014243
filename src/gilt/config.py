"""Configuration for gilt.

Settings come from an optional ``gilt.yaml``:

- base_dir: directory for template paths that are neither ``./``-relative nor absolute
- extension: template file extension (default ``.gilt``)
- cache: keep compiled templates and parsed includes in memory
- variable_start / variable_end: Jinja2 output delimiters
- block_start / block_end: Jinja2 statement delimiters
- autoescape / strict_undefined: Jinja2 environment switches

``GILT_BASE_DIR`` in the environment overrides ``base_dir``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Tuple

import yaml
from pydantic import BaseModel, Field, field_validator

CONFIG_FILENAME = "gilt.yaml"
BASE_DIR_ENV = "GILT_BASE_DIR"


class GiltConfig(BaseModel):
    """Compiler and Jinja2 environment settings."""

    base_dir: str = Field(default="", description="Base directory for template paths")
    extension: str = Field(default=".gilt", description="Template file extension")
    cache: bool = Field(default=False, description="Cache compiled templates")
    variable_start: str = Field(default="{{", description="Output delimiter start")
    variable_end: str = Field(default="}}", description="Output delimiter end")
    block_start: str = Field(default="{%", description="Statement delimiter start")
    block_end: str = Field(default="%}", description="Statement delimiter end")
    autoescape: bool = Field(default=False, description="HTML-escape output values")
    strict_undefined: bool = Field(
        default=False, description="Fail on undefined variables at render time"
    )

    @field_validator("variable_start", "variable_end", "block_start", "block_end")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("delimiters must not be empty")
        return value

    @property
    def expression_marks(self) -> Tuple[Tuple[str, str], ...]:
        """Delimiter pairs that turn a whole line into an action line."""
        return (
            (self.variable_start, self.variable_end),
            (self.block_start, self.block_end),
        )

    @classmethod
    def load(cls, path: Path | None = None) -> "GiltConfig":
        """Load config from a yaml file; defaults if the file does not exist."""
        data: dict = {}
        if path is not None and path.exists():
            with open(path) as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ValueError(f"Config file must contain a mapping: {path}")

        base_dir = os.environ.get(BASE_DIR_ENV)
        if base_dir:
            data["base_dir"] = base_dir

        return cls.model_validate(data)


def find_config_file(start: Path | None = None) -> Path | None:
    """Find gilt.yaml in ``start`` (default: cwd) or its parents."""
    cwd = start or Path.cwd()
    for parent in [cwd] + list(cwd.parents):
        candidate = parent / CONFIG_FILENAME
        if candidate.exists():
            return candidate
    return None
