"""Writer - renders a node tree back to canonical template source.

The output depends only on the tree: whitespace from the original source is
never stored, so every spacing decision is made here. Formatting already
formatted source therefore reproduces it byte for byte.

Indentation is passed down through each call, never kept on the writer, so
a single Writer can be used from several threads at once.
"""

from __future__ import annotations

import io
import logging
from typing import TYPE_CHECKING, Iterable, Protocol

from templ.document import Import, Package, Template, TemplateFile
from templ.nodes import (
    BLOCK_ELEMENTS,
    CallTemplateExpression,
    CaseExpression,
    Element,
    ForExpression,
    IfExpression,
    Node,
    StringExpression,
    SwitchExpression,
    Whitespace,
)

if TYPE_CHECKING:
    from templ.config import FormatConfig

log = logging.getLogger(__name__)


def content(nodes: Iterable[Node]) -> tuple[Node, ...]:
    """Nodes that produce output; Whitespace is dropped."""
    return tuple(n for n in nodes if not isinstance(n, Whitespace))


class Sink(Protocol):
    """Anything text can be written to, e.g. an open file or ``io.StringIO``."""

    def write(self, s: str, /) -> object: ...


class Writer:
    """Serializes nodes into a sink.

    Args:
        sink: Destination for the text. Whatever it raises propagates
            unchanged; text already written is left as is.
        indent_unit: Text emitted once per indentation level.
        block_elements: Element names laid out vertically.
    """

    def __init__(
        self,
        sink: Sink,
        indent_unit: str = "\t",
        block_elements: frozenset[str] = BLOCK_ELEMENTS,
    ) -> None:
        self.sink = sink
        self.indent_unit = indent_unit
        self.block_elements = frozenset(block_elements)

    @classmethod
    def from_config(cls, sink: Sink, config: FormatConfig) -> "Writer":
        return cls(
            sink,
            indent_unit=config.indent,
            block_elements=config.block_elements,
        )

    # -------------------------------------------------------------------------
    # Primitives
    # -------------------------------------------------------------------------

    def _emit(self, s: str) -> None:
        self.sink.write(s)

    def _emit_indented(self, level: int, s: str) -> None:
        self.sink.write(self.indent_unit * level)
        self.sink.write(s)

    # -------------------------------------------------------------------------
    # Nodes
    # -------------------------------------------------------------------------

    def write(self, node: Node, indent: int = 0) -> None:
        """Write one node at the given indentation depth."""
        if indent < 0:
            raise ValueError(f"indent must be >= 0, got {indent}")

        if isinstance(node, Whitespace):
            # Spacing comes from the writer alone.
            return
        if isinstance(node, Element):
            self._write_element(node, indent)
        elif isinstance(node, StringExpression):
            self._emit_indented(indent, "{%= " + node.expression.value + " %}")
        elif isinstance(node, CallTemplateExpression):
            self._emit_indented(
                indent,
                "{% call " + node.name.value + "(" + node.arguments.value + ") %}",
            )
        elif isinstance(node, IfExpression):
            self._write_if(node, indent)
        elif isinstance(node, SwitchExpression):
            self._write_switch(node, indent)
        elif isinstance(node, CaseExpression):
            self._write_case(node, indent)
        elif isinstance(node, ForExpression):
            self._emit_indented(indent, "{% for " + node.expression.value + " %}\n")
            self.write_lines(node.children, indent + 1)
            self._emit_indented(indent, "{% endfor %}\n")
        else:
            raise TypeError(f"Cannot write {type(node).__name__!r} as a template node")

    def write_nodes(self, nodes: Iterable[Node], indent: int) -> None:
        """Write nodes back to back, with no spacing between them."""
        for node in nodes:
            self.write(node, indent)

    def write_lines(self, nodes: Iterable[Node], indent: int) -> None:
        """Write a body where every node finishes its own line.

        Used for template, if, for, case and default bodies.
        """
        for node in content(nodes):
            self.write(node, indent)
            if not self.ends_line(node):
                self._emit("\n")

    def ends_line(self, node: Node) -> bool:
        """Whether the node's own output already ends with a newline."""
        if isinstance(
            node, (IfExpression, SwitchExpression, CaseExpression, ForExpression)
        ):
            return True
        if isinstance(node, Element):
            return not content(node.children) and node.is_block_element(
                self.block_elements
            )
        return False

    def _write_element(self, e: Element, indent: int) -> None:
        block = e.is_block_element(self.block_elements)

        if block:
            self._emit("\n")
            self._emit_indented(indent, "<" + e.name)
        else:
            self._emit("<" + e.name)

        for attr in e.attributes:
            self._emit(" ")
            self._emit(str(attr))

        children = content(e.children)

        # No children, close up and exit.
        if not children:
            self._emit("/>")
            if block:
                self._emit("\n")
            return

        if block:
            self._emit(">\n")
            previous: Node | None = None
            for child in children:
                if previous is not None and not self.ends_line(previous):
                    self._emit("\n")
                self.write(child, indent + 1)
                previous = child
            self._emit("\n")
            self._emit_indented(indent, "</" + e.name + ">")
        else:
            self._emit(">")
            self.write_nodes(children, 0)
            self._emit("</" + e.name + ">")

    def _write_if(self, n: IfExpression, indent: int) -> None:
        self._emit_indented(indent, "{% if " + n.expression.value + " %}\n")
        self.write_lines(n.then, indent + 1)
        if content(n.else_):
            self._emit_indented(indent, "{% else %}\n")
            self.write_lines(n.else_, indent + 1)
        self._emit_indented(indent, "{% endif %}\n")

    def _write_switch(self, n: SwitchExpression, indent: int) -> None:
        self._emit_indented(indent, "{% switch " + n.expression.value + " %}\n")
        for case in n.cases:
            self._write_case(case, indent + 1)
        if content(n.default):
            self._emit_indented(indent + 1, "{% default %}\n")
            self.write_lines(n.default, indent + 2)
            self._emit_indented(indent + 1, "{% enddefault %}\n")
        self._emit_indented(indent, "{% endswitch %}\n")

    def _write_case(self, n: CaseExpression, indent: int) -> None:
        self._emit_indented(indent, "{% case " + n.expression.value + " %}\n")
        self.write_lines(n.children, indent + 1)
        self._emit_indented(indent, "{% endcase %}\n")

    # -------------------------------------------------------------------------
    # Document
    # -------------------------------------------------------------------------

    def write_package(self, p: Package, indent: int = 0) -> None:
        self._emit_indented(indent, "{% package " + p.expression.value + " %}")

    def write_import(self, imp: Import, indent: int = 0) -> None:
        self._emit_indented(indent, "{% import " + imp.expression.value + " %}\n")

    def write_template(self, t: Template, indent: int = 0) -> None:
        log.debug(f"Writing template {t.name.value}")
        self._emit_indented(
            indent,
            "{% templ " + t.name.value + "(" + t.parameters.value + ") %}\n",
        )
        self.write_lines(t.children, indent + 1)
        self._emit_indented(indent, "{% endtempl %}\n\n")

    def write_file(self, tf: TemplateFile) -> None:
        """Package, blank line, imports, blank line, templates.

        Imports and templates are written in list order; nothing is sorted,
        deduplicated or checked.
        """
        self.write_package(tf.package)
        self._emit("\n\n")
        for imp in tf.imports:
            self.write_import(imp)
        self._emit("\n")
        for t in tf.templates:
            self.write_template(t)


def render(obj: Node | TemplateFile, config: FormatConfig | None = None) -> str:
    """Render a node or whole file to a string."""
    buf = io.StringIO()
    if config is None:
        writer = Writer(buf)
    else:
        writer = Writer.from_config(buf, config)
    if isinstance(obj, TemplateFile):
        writer.write_file(obj)
    else:
        writer.write(obj)
    return buf.getvalue()
