"""Tests for the parser and for format round trips."""

import msgspec
import pytest

from templ.document import Package, Template, TemplateFile
from templ.exceptions import ParseError
from templ.nodes import (
    CallTemplateExpression,
    ConstantAttribute,
    Element,
    ExpressionAttribute,
    ForExpression,
    IfExpression,
    StringExpression,
    SwitchExpression,
    Whitespace,
)
from templ.parser import parse, parse_file
from templ.position import Expression
from templ.writer import render

SAMPLE = """{% package templ %}

{% import "strings" %}
{% import strs "strings" %}

{% templ RenderAddress(addr Address) %}
	<div>{%= addr.Address1 %}</div>
	<div>{%= addr.Address2 %}</div>
{% endtempl %}

{% templ Render(p Person) %}
   <div>
     <div>{%= p.Name() %}</div>
     <a href={%= p.URL %} class="link">{%= strings.ToUpper(p.Name()) %}</a>
     <div>
         {% if p.Type == "test" %}
            <span>{%= "Test user" %}</span>
         {% else %}
	    <span>{%= "Not test user" %}</span>
         {% endif %}
         {% for _, v := range p.Addresses %}
            {% call RenderAddress(v) %}
         {% endfor %}
         {% switch p.Role %}
           {% case "admin" %}
             <hr/>
           {% endcase %}
           {% default %}
             {%= p.Role %}
           {% enddefault %}
         {% endswitch %}
     </div>
   </div>
{% endtempl %}
"""


def shape(obj):
    """Builtin form of a tree with all source ranges removed."""

    def strip(value):
        if isinstance(value, dict):
            return {k: strip(v) for k, v in value.items() if k != "range"}
        if isinstance(value, (list, tuple)):
            return [strip(v) for v in value]
        return value

    return strip(msgspec.to_builtins(obj))


def test_parse_package_and_imports():
    tf = parse(SAMPLE)
    assert tf.package.expression.value == "templ"
    assert [i.expression.value for i in tf.imports] == ['"strings"', 'strs "strings"']
    assert [t.name.value for t in tf.templates] == ["RenderAddress", "Render"]
    assert tf.templates[1].parameters.value == "p Person"


def test_parse_builds_expected_nodes():
    render_tpl = parse(SAMPLE).templates[1]
    (outer,) = render_tpl.children
    assert isinstance(outer, Element) and outer.name == "div"

    first, link, inner = outer.children
    assert first.children == (StringExpression(expression=first.children[0].expression),)

    assert link.name == "a"
    href, cls = link.attributes
    assert isinstance(href, ExpressionAttribute)
    assert href.name == "href"
    assert href.value.expression.value == "p.URL"
    assert cls == ConstantAttribute(name="class", value="link")

    if_node, for_node, switch_node = inner.children
    assert isinstance(if_node, IfExpression)
    assert if_node.expression.value == 'p.Type == "test"'
    assert len(if_node.then) == 1 and len(if_node.else_) == 1

    assert isinstance(for_node, ForExpression)
    (call,) = for_node.children
    assert isinstance(call, CallTemplateExpression)
    assert (call.name.value, call.arguments.value) == ("RenderAddress", "v")

    assert isinstance(switch_node, SwitchExpression)
    assert [c.expression.value for c in switch_node.cases] == ['"admin"']
    assert switch_node.cases[0].children == (Element(name="hr"),)
    assert switch_node.default[0].expression.value == "p.Role"


def test_expression_ranges_point_into_source():
    source = "{% package templ %}"
    expr = parse(source).package.expression
    assert expr.value == "templ"
    assert expr.range.from_.col == len("{% package ")
    assert source[expr.range.from_.index : expr.range.to.index].strip() == "templ"


def test_format_is_idempotent():
    once = render(parse(SAMPLE))
    twice = render(parse(once))
    assert once == twice


def test_round_trip_preserves_structure():
    original = parse(SAMPLE)
    reparsed = parse(render(original))
    assert shape(reparsed) == shape(original)


def test_canonical_output():
    source = """{% package templ %}
{% import "strings" %}
{% templ Render(p Person) %}
   <div>
     <a href={%= p.URL %}>{%= strings.ToUpper(p.Name()) %}</a>
     {% if p.Type == "test" %}
        <span>{%= "Test user" %}</span>
     {% else %}
        <span>{%= "Not test user" %}</span>
     {% endif %}
   </div>
{% endtempl %}"""
    assert render(parse(source)) == (
        "{% package templ %}\n"
        "\n"
        '{% import "strings" %}\n'
        "\n"
        "{% templ Render(p Person) %}\n"
        "\n"
        "\t<div>\n"
        "<a href={%= p.URL %}>{%= strings.ToUpper(p.Name()) %}</a>\n"
        '\t\t{% if p.Type == "test" %}\n'
        '<span>{%= "Test user" %}</span>\n'
        "\t\t{% else %}\n"
        '<span>{%= "Not test user" %}</span>\n'
        "\t\t{% endif %}\n"
        "\n"
        "\t</div>\n"
        "{% endtempl %}\n"
        "\n"
    )


def test_tag_spacing_is_normalized():
    tf = parse("{%package main%}{%templ A()%}{%=x%}{%  if  y  %}{%endif%}{%endtempl%}")
    assert render(tf) == (
        "{% package main %}\n"
        "\n"
        "\n"
        "{% templ A() %}\n"
        "\t{%= x %}\n"
        "\t{% if y %}\n"
        "\t{% endif %}\n"
        "{% endtempl %}\n"
        "\n"
    )


def test_attribute_entities_round_trip():
    tf = parse('{% package main %}{% templ A() %}<a title="a &amp; &quot;b&quot;"/>{% endtempl %}')
    (a,) = tf.templates[0].children
    assert a.attributes[0].value == 'a & "b"'
    assert '<a title="a &amp; &quot;b&quot;"/>' in render(tf)


def test_keep_whitespace_does_not_change_output():
    kept = parse(SAMPLE, keep_whitespace=True)
    assert any(isinstance(n, Whitespace) for n in kept.templates[0].children)
    assert render(kept) == render(parse(SAMPLE))


@pytest.mark.parametrize(
    "body",
    [
        "<div> </div>",
        "<span>\n</span>",
        "{% if x %}{%= y %}{% else %} {% endif %}",
        "{% switch x %}{% case 1 %}{%= y %}{% endcase %}{% default %}\n{% enddefault %}{% endswitch %}",
    ],
)
def test_keep_whitespace_with_whitespace_only_bodies(body):
    source = "{% package main %}{% templ A() %}" + body + "{% endtempl %}"
    assert render(parse(source, keep_whitespace=True)) == render(parse(source))


def test_round_trip_normalizes_attribute_names():
    link = Element(
        name="a",
        attributes=(
            ExpressionAttribute(
                name="href=",
                value=StringExpression(expression=Expression.bare("p.URL")),
            ),
            ConstantAttribute(name="class=", value="link"),
        ),
    )
    tf = TemplateFile(
        package=Package(expression=Expression.bare("main")),
        templates=(
            Template(
                name=Expression.bare("Link"),
                parameters=Expression.bare("p Person"),
                children=(link,),
            ),
        ),
    )
    assert shape(parse(render(tf))) == shape(tf)


def test_parse_file(tmp_path):
    path = tmp_path / "page.templ"
    path.write_text(SAMPLE, encoding="utf-8")
    assert shape(parse_file(path)) == shape(parse(SAMPLE))


def test_missing_package_raises():
    with pytest.raises(ParseError, match="package"):
        parse('{% import "strings" %}')


def test_bare_text_reports_position():
    source = "{% package x %}\n{% templ A() %}\n  hello\n{% endtempl %}"
    with pytest.raises(ParseError) as exc_info:
        parse(source)
    assert exc_info.value.position.line == 3
    assert exc_info.value.position.col == 2
    assert "line 3, col 2" in str(exc_info.value)


def test_mismatched_closing_tag_raises():
    with pytest.raises(ParseError, match="</div>"):
        parse("{% package x %}{% templ A() %}<div></span>{% endtempl %}")


def test_missing_end_tag_raises():
    with pytest.raises(ParseError, match="endtempl"):
        parse("{% package x %}{% templ A() %}{%= y %}")


def test_unterminated_tag_raises():
    with pytest.raises(ParseError, match="unterminated"):
        parse("{% package x %}{% templ A() %}{%= y ")


def test_stray_else_raises():
    with pytest.raises(ParseError, match="else"):
        parse("{% package x %}{% templ A() %}{% else %}{% endtempl %}")


def test_end_tag_with_argument_raises():
    with pytest.raises(ParseError, match="no argument"):
        parse("{% package x %}{% templ A() %}{% endtempl A %}")


def test_template_without_parens_raises():
    with pytest.raises(ParseError, match="Name"):
        parse("{% package x %}{% templ A %}{% endtempl %}")


def test_attribute_without_value_raises():
    with pytest.raises(ParseError, match="'='"):
        parse("{% package x %}{% templ A() %}<input disabled/>{% endtempl %}")


def test_trailing_garbage_raises():
    with pytest.raises(ParseError, match="unexpected"):
        parse("{% package x %}\n{% templ A() %}{% endtempl %}\njunk")
