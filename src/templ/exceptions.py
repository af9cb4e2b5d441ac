"""Templ Exceptions

Custom exceptions for the templ document model, parser and tooling.

Failures raised by an output sink while writing are deliberately not
represented here: they reach the caller exactly as the sink raised them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from templ.position import Position


class TemplError(Exception):
    """Base exception for all templ errors."""

    pass


class ParseError(TemplError):
    """Raised when template source does not match the grammar."""

    def __init__(self, message: str, position: Position):
        self.message = message
        self.position = position
        super().__init__(f"{message} at {position}")


class DecodeError(TemplError):
    """Raised when a serialized tree cannot be decoded."""

    def __init__(self, fmt: str, reason: str):
        self.format = fmt
        self.reason = reason
        super().__init__(f"Invalid {fmt} tree: {reason}")


class ConfigError(TemplError):
    """Raised when a templ.yaml file cannot be read or validated."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid config {path}: {reason}")
