"""Source location model - positions, ranges and raw expressions.

These values are produced by the scanner while reading a template and are
never mutated afterwards. Ranges are descriptive only: nothing that writes
a tree back out ever looks at them.
"""

from __future__ import annotations

import msgspec


class Position(msgspec.Struct, frozen=True):
    """A point in the source: byte index, 1-based line and column."""

    index: int = 0
    line: int = 1
    col: int = 0

    @classmethod
    def from_values(cls, index: int, line: int, col: int) -> "Position":
        return cls(index=index, line=line, col=col)

    def __str__(self) -> str:
        return f"line {self.line}, col {self.col} (index {self.index})"


class Range(msgspec.Struct, frozen=True):
    """Half-open span [from, to) of source text.

    Callers must supply ``from_.index <= to.index``; it is not checked.
    """

    from_: Position = msgspec.field(name="from", default_factory=Position)
    to: Position = msgspec.field(default_factory=Position)

    @classmethod
    def between(cls, from_: Position, to: Position) -> "Range":
        return cls(from_=from_, to=to)


class Expression(msgspec.Struct, frozen=True):
    """Opaque host-language text together with where it came from."""

    value: str
    range: Range = msgspec.field(default_factory=Range)

    @classmethod
    def of(cls, value: str, from_: Position, to: Position) -> "Expression":
        return cls(value=value, range=Range(from_=from_, to=to))

    @classmethod
    def bare(cls, value: str) -> "Expression":
        """Expression with a zero range, for trees built in code."""
        return cls(value=value)

    def __str__(self) -> str:
        return self.value
