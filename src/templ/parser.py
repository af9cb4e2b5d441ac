"""Parser - builds a TemplateFile from template source.

Recognizes:

    {% package <expr> %}
    {% import <expr> %}
    {% templ <name>(<params>) %} ... {% endtempl %}
    {%= <expr> %}
    {% call <name>(<args>) %}
    {% if <expr> %} ... [{% else %} ...] {% endif %}
    {% switch <expr> %} {% case <expr> %} ... {% endcase %} ...
        [{% default %} ... {% enddefault %}] {% endswitch %}
    {% for <expr> %} ... {% endfor %}
    <tag attr="literal" attr={%= expr %} ...>...</tag> | <tag .../>

Whitespace between nodes is dropped unless ``keep_whitespace`` is set, in
which case it is kept as Whitespace nodes (which the writer ignores).
Spacing inside tags is free: ``{%if x%}`` parses like ``{% if x %}``.
"""

from __future__ import annotations

import html
import logging
from pathlib import Path

from templ.document import Import, Package, Template, TemplateFile
from templ.exceptions import ParseError
from templ.nodes import (
    Attribute,
    CallTemplateExpression,
    CaseExpression,
    ConstantAttribute,
    Element,
    ExpressionAttribute,
    ForExpression,
    IfExpression,
    Node,
    StringExpression,
    SwitchExpression,
    Whitespace,
)
from templ.position import Expression
from templ.scanner import SourceInput

log = logging.getLogger(__name__)

# Marker for "a closing tag comes next" in terminator sets.
CLOSE_TAG = "</"


def _is_name_char(ch: str) -> bool:
    return ch.isalnum() or ch in "-_:."


def _is_attr_name_char(ch: str) -> bool:
    return not ch.isspace() and ch not in "=/>\"'"


class Parser:
    """Recursive-descent parser over a SourceInput."""

    def __init__(self, text: str, keep_whitespace: bool = False):
        self.input = SourceInput(text)
        self.keep_whitespace = keep_whitespace

    def _error(self, message: str) -> ParseError:
        return ParseError(message, self.input.position())

    # -------------------------------------------------------------------------
    # Tags
    # -------------------------------------------------------------------------

    def _peek_keyword(self) -> str:
        """Keyword of the {% ... %} tag at the cursor ("=" for {%= %})."""
        raw = self.input.peek_until("%}")
        if raw is None:
            raise self._error("unterminated {% tag")
        inner = raw[2:]
        if inner.startswith("="):
            return "="
        parts = inner.split(None, 1)
        return parts[0] if parts else ""

    def _read_tag(self, keyword: str) -> Expression:
        """Consume a {% keyword ... %} tag and return its argument text."""
        inp = self.input
        if not inp.startswith("{%"):
            raise self._error(f"expected {{% {keyword} %}}")
        found = self._peek_keyword()
        if found != keyword:
            raise self._error(f"expected {{% {keyword} %}}, found {{% {found} %}}")

        inp.advance(2)
        inp.skip_whitespace()
        inp.advance(len(keyword))
        inp.skip_whitespace()
        start = inp.position()
        body = inp.read_until("%}")
        if body is None:
            raise self._error(f"unterminated {{% {keyword} %}}")
        end = inp.position()
        inp.advance(2)
        return Expression.of(body.rstrip(), start, end)

    def _read_bare_tag(self, keyword: str) -> None:
        expr = self._read_tag(keyword)
        if expr.value:
            raise ParseError(
                f"{{% {keyword} %}} takes no argument, got {expr.value!r}",
                expr.range.from_,
            )

    def _split_call(self, expr: Expression, what: str) -> tuple[Expression, Expression]:
        """Split "Name(args)" into name and argument expressions."""
        text = expr.value
        open_at = text.find("(")
        if open_at <= 0 or not text.endswith(")"):
            raise ParseError(f"expected {what} of the form Name(...)", expr.range.from_)
        start = expr.range.from_
        name = Expression.of(text[:open_at].strip(), start, start)
        args = Expression.of(text[open_at + 1 : -1].strip(), start, expr.range.to)
        return name, args

    # -------------------------------------------------------------------------
    # File
    # -------------------------------------------------------------------------

    def parse(self) -> TemplateFile:
        inp = self.input
        inp.skip_whitespace()
        package = Package(expression=self._read_tag("package"))

        imports: list[Import] = []
        inp.skip_whitespace()
        while inp.startswith("{%") and self._peek_keyword() == "import":
            imports.append(Import(expression=self._read_tag("import")))
            inp.skip_whitespace()

        templates: list[Template] = []
        while inp.startswith("{%") and self._peek_keyword() == "templ":
            templates.append(self._parse_template())
            inp.skip_whitespace()

        if not inp.at_end():
            raise self._error(f"unexpected {inp.peek(20)!r}")

        log.debug(f"Parsed {len(imports)} imports and {len(templates)} templates")
        return TemplateFile(
            package=package, imports=tuple(imports), templates=tuple(templates)
        )

    def _parse_template(self) -> Template:
        name, params = self._split_call(self._read_tag("templ"), "template")
        children = self._parse_nodes({"endtempl"})
        self._read_bare_tag("endtempl")
        return Template(name=name, parameters=params, children=children)

    # -------------------------------------------------------------------------
    # Nodes
    # -------------------------------------------------------------------------

    def _parse_nodes(self, terminators: set[str]) -> tuple[Node, ...]:
        """Parse nodes until one of ``terminators`` is next (not consumed)."""
        inp = self.input
        nodes: list[Node] = []
        while True:
            ws = inp.skip_whitespace()
            if ws and self.keep_whitespace:
                nodes.append(Whitespace(value=ws))

            if inp.at_end():
                expected = ", ".join(sorted(terminators))
                raise self._error(f"unexpected end of input, expected {expected}")

            if inp.startswith("{%"):
                keyword = self._peek_keyword()
                if keyword in terminators:
                    return tuple(nodes)
                nodes.append(self._parse_tag_node(keyword))
            elif inp.startswith(CLOSE_TAG):
                if CLOSE_TAG in terminators:
                    return tuple(nodes)
                raise self._error("unexpected closing tag")
            elif inp.startswith("<"):
                nodes.append(self._parse_element())
            else:
                raise self._error(f"unexpected text {inp.peek(20)!r}")

    def _parse_tag_node(self, keyword: str) -> Node:
        if keyword == "=":
            return StringExpression(expression=self._read_tag("="))
        if keyword == "call":
            name, args = self._split_call(self._read_tag("call"), "call")
            return CallTemplateExpression(name=name, arguments=args)
        if keyword == "if":
            return self._parse_if()
        if keyword == "for":
            expr = self._read_tag("for")
            children = self._parse_nodes({"endfor"})
            self._read_bare_tag("endfor")
            return ForExpression(expression=expr, children=children)
        if keyword == "switch":
            return self._parse_switch()
        raise self._error(f"unexpected {{% {keyword} %}}")

    def _parse_if(self) -> IfExpression:
        expr = self._read_tag("if")
        then = self._parse_nodes({"else", "endif"})
        else_: tuple[Node, ...] = ()
        if self._peek_keyword() == "else":
            self._read_bare_tag("else")
            else_ = self._parse_nodes({"endif"})
        self._read_bare_tag("endif")
        return IfExpression(expression=expr, then=then, else_=else_)

    def _parse_switch(self) -> SwitchExpression:
        inp = self.input
        expr = self._read_tag("switch")
        cases: list[CaseExpression] = []
        default: tuple[Node, ...] = ()
        while True:
            inp.skip_whitespace()
            if not inp.startswith("{%"):
                raise self._error("expected {% case %}, {% default %} or {% endswitch %}")
            keyword = self._peek_keyword()
            if keyword == "case":
                case_expr = self._read_tag("case")
                children = self._parse_nodes({"endcase"})
                self._read_bare_tag("endcase")
                cases.append(CaseExpression(expression=case_expr, children=children))
            elif keyword == "default":
                self._read_bare_tag("default")
                default = self._parse_nodes({"enddefault"})
                self._read_bare_tag("enddefault")
            elif keyword == "endswitch":
                self._read_bare_tag("endswitch")
                return SwitchExpression(
                    expression=expr, cases=tuple(cases), default=default
                )
            else:
                raise self._error(f"unexpected {{% {keyword} %}} in switch")

    def _parse_element(self) -> Element:
        inp = self.input
        inp.advance(1)  # <
        name = inp.read_while(_is_name_char)
        if not name:
            raise self._error("expected element name after '<'")

        attributes: list[Attribute] = []
        while True:
            inp.skip_whitespace()
            if inp.startswith("/>"):
                inp.advance(2)
                return Element(name=name, attributes=tuple(attributes))
            if inp.startswith(">"):
                inp.advance(1)
                break
            if inp.at_end():
                raise self._error(f"unterminated <{name}> tag")
            attributes.append(self._parse_attribute())

        children = self._parse_nodes({CLOSE_TAG})
        inp.advance(2)  # </
        closing = inp.read_while(_is_name_char)
        inp.skip_whitespace()
        if closing != name or not inp.startswith(">"):
            raise self._error(f"expected </{name}>, found </{closing}")
        inp.advance(1)
        return Element(name=name, attributes=tuple(attributes), children=children)

    def _parse_attribute(self) -> Attribute:
        inp = self.input
        name = inp.read_while(_is_attr_name_char)
        if not name:
            raise self._error(f"unexpected {inp.peek(1)!r} in element")
        inp.skip_whitespace()
        if not inp.startswith("="):
            raise self._error(f"expected '=' after attribute {name!r}")
        inp.advance(1)
        inp.skip_whitespace()

        if inp.startswith('"'):
            inp.advance(1)
            value = inp.read_until('"')
            if value is None:
                raise self._error(f"unterminated value for attribute {name!r}")
            inp.advance(1)
            return ConstantAttribute(name=name, value=html.unescape(value))
        if inp.startswith("{%") and self._peek_keyword() == "=":
            expr = self._read_tag("=")
            return ExpressionAttribute(name=name, value=StringExpression(expression=expr))
        raise self._error(f"expected a quoted value or {{%= %}} for attribute {name!r}")


def parse(text: str, keep_whitespace: bool = False) -> TemplateFile:
    """Parse template source into a TemplateFile.

    Raises:
        ParseError: If the text does not match the grammar.
    """
    return Parser(text, keep_whitespace=keep_whitespace).parse()


def parse_file(path: str | Path, keep_whitespace: bool = False) -> TemplateFile:
    """Load a template file from disk and parse it."""
    p = Path(path)
    log.debug(f"Parsing {p}")
    return parse(p.read_text(encoding="utf-8"), keep_whitespace=keep_whitespace)
