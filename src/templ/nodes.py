"""Node model for template bodies.

A template body is a tree of nodes. The set of node kinds is closed: every
kind listed in ``Node`` has exactly one serialization rule in
``templ.writer`` and one syntactic form in ``templ.parser``. Adding a kind
means adding it to ``Node`` and teaching both of them about it.

Example::

    {% templ Render(p Person) %}
        <div>
            <a href={%= p.URL %}>{%= strings.ToUpper(p.Name()) %}</a>
            {% if p.Type == "test" %}
                <span>{%= "Test user" %}</span>
            {% else %}
                <span>{%= "Not test user" %}</span>
            {% endif %}
            {% for _, v := range p.Addresses %}
                {% call RenderAddress(v) %}
            {% endfor %}
        </div>
    {% endtempl %}
"""

from __future__ import annotations

import html
from typing import TYPE_CHECKING, Union

import msgspec
import msgspec.structs

from templ.position import Expression

if TYPE_CHECKING:
    from templ.writer import Sink

# Element names laid out on their own lines with indented children.
BLOCK_ELEMENTS: frozenset[str] = frozenset({"br", "hr", "div"})


class NodeBase(msgspec.Struct, frozen=True, tag_field="type"):
    """Common behaviour of every node kind."""

    def is_node(self) -> bool:
        return True

    def write(self, sink: Sink, indent: int = 0) -> None:
        """Write the canonical form of this node to ``sink``."""
        from templ.writer import Writer

        Writer(sink).write(self, indent)


class Whitespace(NodeBase, tag="whitespace"):
    """Whitespace found between nodes. Never written out."""

    value: str = ""


class StringExpression(NodeBase, tag="string"):
    """{%= ... %}"""

    expression: Expression


class CallTemplateExpression(NodeBase, tag="call"):
    """{% call Other(p.First, p.Last) %}"""

    # Name of the template to call.
    name: Expression
    arguments: Expression


class IfExpression(NodeBase, tag="if"):
    """{% if p.Type == "test" %} ... {% else %} ... {% endif %}"""

    expression: Expression
    then: tuple[Node, ...] = ()
    else_: tuple[Node, ...] = msgspec.field(name="else", default=())


class CaseExpression(NodeBase, tag="case"):
    """{% case "Something" %} ... {% endcase %}"""

    expression: Expression
    children: tuple[Node, ...] = ()


class SwitchExpression(NodeBase, tag="switch"):
    """{% switch p.Type %} {% case ... %}...{% endcase %} {% endswitch %}"""

    expression: Expression
    cases: tuple[CaseExpression, ...] = ()
    default: tuple[Node, ...] = ()


class ForExpression(NodeBase, tag="for"):
    """{% for _, v := range p.Addresses %} ... {% endfor %}"""

    expression: Expression
    children: tuple[Node, ...] = ()


class Element(NodeBase, tag="element"):
    """<a .../> or <div ...>...</div>"""

    name: str
    attributes: tuple[Attribute, ...] = ()
    children: tuple[Node, ...] = ()

    def is_block_element(
        self, block_elements: frozenset[str] = BLOCK_ELEMENTS
    ) -> bool:
        return self.name in block_elements


# =============================================================================
# Attributes
# =============================================================================


class AttributeBase(msgspec.Struct, frozen=True, tag_field="type"):
    """Attribute name, stored without its "=".

    The raw `href=` form is accepted and normalized to `href`, so each
    attribute has a single tree shape.
    """

    name: str

    def __post_init__(self) -> None:
        if self.name.endswith("="):
            msgspec.structs.force_setattr(self, "name", self.name.rstrip("="))

    def is_attribute(self) -> bool:
        return True

    def _prefix(self) -> str:
        return self.name + "="


class ConstantAttribute(AttributeBase, tag="constant"):
    """href="..." with a literal, HTML-escaped value."""

    value: str = ""

    def __str__(self) -> str:
        return self._prefix() + '"' + html.escape(self.value, quote=True) + '"'


class ExpressionAttribute(AttributeBase, tag="expression"):
    """href={%= ... %}

    The expression is spliced in as-is; escaping its result is the job of
    whatever eventually evaluates it.
    """

    value: StringExpression

    def __str__(self) -> str:
        return self._prefix() + "{%= " + self.value.expression.value + " %}"


Node = Union[
    Whitespace,
    Element,
    StringExpression,
    CallTemplateExpression,
    IfExpression,
    SwitchExpression,
    CaseExpression,
    ForExpression,
]

Attribute = Union[ConstantAttribute, ExpressionAttribute]

NODE_TYPES: tuple[type, ...] = Node.__args__  # type: ignore[attr-defined]
ATTRIBUTE_TYPES: tuple[type, ...] = Attribute.__args__  # type: ignore[attr-defined]
