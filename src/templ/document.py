"""Document aggregate: package clause, imports and templates of one file."""

from __future__ import annotations

from typing import TYPE_CHECKING

import msgspec

from templ.nodes import Node
from templ.position import Expression

if TYPE_CHECKING:
    from templ.writer import Sink


class Package(msgspec.Struct, frozen=True):
    """{% package templ %}"""

    expression: Expression

    def write(self, sink: Sink, indent: int = 0) -> None:
        from templ.writer import Writer

        Writer(sink).write_package(self, indent)


class Import(msgspec.Struct, frozen=True):
    """{% import "strings" %} or {% import strs "strings" %}"""

    expression: Expression

    def write(self, sink: Sink, indent: int = 0) -> None:
        from templ.writer import Writer

        Writer(sink).write_import(self, indent)


class Template(msgspec.Struct, frozen=True):
    """A named, parameterized template body.

    {% templ Name(p Parameter) %}
        {% if ... %}
        <Element></Element>
    {% endtempl %}
    """

    name: Expression
    parameters: Expression
    children: tuple[Node, ...] = ()

    def write(self, sink: Sink, indent: int = 0) -> None:
        from templ.writer import Writer

        Writer(sink).write_template(self, indent)


class TemplateFile(msgspec.Struct, frozen=True):
    """Top level of a parsed template file."""

    package: Package
    imports: tuple[Import, ...] = ()
    templates: tuple[Template, ...] = ()

    def write(self, sink: Sink) -> None:
        from templ.writer import Writer

        Writer(sink).write_file(self)
