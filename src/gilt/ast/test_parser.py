"""Tests for building template trees from indented source."""

import pytest

from gilt.ast.node import Kind
from gilt.ast.parser import Parser, indent_of, normalize_newlines
from gilt.errors import CompositionError, GiltError, StructureError, TemplateSyntaxError


def parse(source: str, path: str = "page.gilt"):
    return Parser().parse(source, path)


@pytest.mark.parametrize(
    "line,depth",
    [
        ("a", 0),
        ("\ta", 1),
        ("  a", 1),
        ("    a", 2),
        ("\t  a", 2),
        ("   a", 1),
        (" \ta", 1),
        ("  \t a", 2),
        (" \t \ta", 3),
    ],
)
def test_indent_of(line, depth):
    assert indent_of(line) == depth


def test_space_before_tab_counts_as_indentation():
    tpl = parse("div\n \tp x")
    assert tpl.nodes[0].children[0].text_value == "x"


def test_normalize_newlines():
    assert normalize_newlines("a\r\nb\rc\n") == "a\nb\nc\n"


def test_nesting():
    tpl = parse("div.class\n  p This is a text.\nspan")
    assert [n.tag for n in tpl.nodes] == ["div", "span"]
    div = tpl.nodes[0]
    assert [c.tag for c in div.children] == ["p"]
    assert div.children[0].parent is div
    assert div.children[0].line_no == 2


def test_tabs_and_spaces_are_interchangeable():
    tpl = parse("ul\n\tli a\n  li b")
    assert [c.text_value for c in tpl.nodes[0].children] == ["a", "b"]


def test_blank_lines_are_skipped():
    tpl = parse("\ndiv\n\n   \n  p\n")
    assert len(tpl.nodes) == 1
    assert len(tpl.nodes[0].children) == 1


def test_crlf_source():
    tpl = parse("div\r\n  p x\r\n")
    assert tpl.nodes[0].children[0].text_value == "x"


@pytest.mark.parametrize(
    "source,line_no",
    [
        ("div\n    p", 2),
        ("div\n  p\n      span", 3),
        ("  div", 1),
        ("div\n\n\n\tp\n\t\t\tspan", 5),
    ],
)
def test_child_more_than_one_level_deeper_fails(source, line_no):
    with pytest.raises(StructureError, match="invalid indent") as exc_info:
        parse(source)
    assert exc_info.value.line_no == line_no


def test_raw_content_takes_any_deeper_line():
    tpl = parse("script\n  if (a) {\n      b();\n  }\ndiv")
    script, div = tpl.nodes
    assert div.tag == "div"
    assert [c.kind for c in script.children] == [Kind.CONTENT, Kind.CONTENT]
    first = script.children[0]
    assert first.text == "  if (a) {"
    assert first.children[0].text == "      b();"


def test_block_reference_can_not_have_children():
    with pytest.raises(StructureError, match="block statements can not have child"):
        parse("div\n  block content\n    p")


def test_extends_without_resolver_fails():
    with pytest.raises(CompositionError) as exc_info:
        parse("extends layout\nblock content\n  p")
    assert exc_info.value.line_no == 1
    assert exc_info.value.path == "page.gilt"


def test_extends_header_needs_exactly_one_operand():
    with pytest.raises(StructureError) as exc_info:
        parse("extends")
    assert "expected: 2, actual: 1" in str(exc_info.value)


def test_extends_must_come_first():
    with pytest.raises(StructureError, match="first statement") as exc_info:
        parse("div\nextends layout")
    assert exc_info.value.line_no == 2


def test_line_errors_carry_template_path():
    with pytest.raises(TemplateSyntaxError) as exc_info:
        parse("div\n  p#a#b", path="views/index.gilt")
    err = exc_info.value
    assert isinstance(err, GiltError)
    assert err.line_no == 2
    assert str(err) == (
        "multiple ids are not allowed on one element "
        "(line no: 2) [template: views/index.gilt]"
    )


def test_root_nodes_belong_to_template():
    tpl = parse("div\n  p")
    assert tpl.nodes[0].template is tpl
    assert tpl.nodes[0].children[0].owner_template() is tpl
