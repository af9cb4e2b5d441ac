"""Formatter configuration, read from templ.yaml"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from templ.exceptions import ConfigError
from templ.nodes import BLOCK_ELEMENTS

CONFIG_FILENAME = "templ.yaml"


class FormatConfig(BaseModel):
    """How the formatter lays out output and which files it picks up."""

    indent: str = "\t"
    block_elements: frozenset[str] = BLOCK_ELEMENTS
    extensions: list[str] = [".templ"]

    @field_validator("indent")
    @classmethod
    def indent_is_whitespace(cls, v: str) -> str:
        if not v or not v.isspace():
            raise ValueError("indent must be non-empty whitespace")
        return v

    @field_validator("block_elements")
    @classmethod
    def normalize_names(cls, v: frozenset[str]) -> frozenset[str]:
        return frozenset(name.strip().lower() for name in v if name.strip())

    @classmethod
    def load(cls, path: Path | None) -> "FormatConfig":
        """Load config from yaml file; defaults if there is none."""
        if path is None or not path.exists():
            return cls()

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(str(path), str(exc)) from exc

        if not isinstance(data, dict):
            raise ConfigError(str(path), "top level must be a mapping")
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(str(path), str(exc)) from exc


def find_config(start: Path | None = None) -> Path | None:
    """Find templ.yaml in ``start`` (default: cwd) or its parents."""
    cwd = (start or Path.cwd()).resolve()
    for parent in [cwd] + list(cwd.parents):
        candidate = parent / CONFIG_FILENAME
        if candidate.exists():
            return candidate
    return None
