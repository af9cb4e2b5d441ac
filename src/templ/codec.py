"""Tree interchange - TemplateFile to and from JSON or YAML.

This is the hand-off format for code generators: every expression keeps its
exact text and source range, and node kinds are tagged by a ``type`` field.
"""

from __future__ import annotations

import msgspec

from templ.document import TemplateFile
from templ.exceptions import DecodeError

FORMATS = ("json", "yaml")


def _check_format(fmt: str) -> None:
    if fmt not in FORMATS:
        raise ValueError(f"Unknown format {fmt!r}, expected one of {FORMATS}")


def encode(tf: TemplateFile, format: str = "json") -> bytes:
    """Serialize a TemplateFile."""
    _check_format(format)
    if format == "yaml":
        return msgspec.yaml.encode(tf)
    return msgspec.json.encode(tf)


def decode(data: bytes | str, format: str = "json") -> TemplateFile:
    """Rebuild a TemplateFile from ``encode`` output.

    Raises:
        DecodeError: If the payload is not a valid tree.
    """
    _check_format(format)
    try:
        if format == "yaml":
            return msgspec.yaml.decode(data, type=TemplateFile)
        return msgspec.json.decode(data, type=TemplateFile)
    except msgspec.DecodeError as exc:
        raise DecodeError(format, str(exc)) from exc
