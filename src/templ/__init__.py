"""Templ - document model and canonical formatter for templ templates"""

from templ._version import __version__
from templ.codec import decode, encode
from templ.document import Import, Package, Template, TemplateFile
from templ.exceptions import ConfigError, DecodeError, ParseError, TemplError
from templ.nodes import (
    BLOCK_ELEMENTS,
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
from templ.parser import parse, parse_file
from templ.position import Expression, Position, Range
from templ.writer import Writer, render

__all__ = [
    "__version__",
    # source locations
    "Expression",
    "Position",
    "Range",
    # nodes
    "BLOCK_ELEMENTS",
    "Attribute",
    "CallTemplateExpression",
    "CaseExpression",
    "ConstantAttribute",
    "Element",
    "ExpressionAttribute",
    "ForExpression",
    "IfExpression",
    "Node",
    "StringExpression",
    "SwitchExpression",
    "Whitespace",
    # document
    "Import",
    "Package",
    "Template",
    "TemplateFile",
    # io
    "Writer",
    "decode",
    "encode",
    "parse",
    "parse_file",
    "render",
    # errors
    "ConfigError",
    "DecodeError",
    "ParseError",
    "TemplError",
]
