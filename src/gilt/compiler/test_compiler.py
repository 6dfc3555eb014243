"""Tests for the compiler: generation, inheritance, includes and Jinja2 handoff."""

import jinja2
import pytest

from gilt.compiler.compiler import Compiler, compile_string, generate_string
from gilt.config import GiltConfig
from gilt.errors import CompileHandoffError, CompositionError

LAYOUT = """
doctype html
html
  head
    title Gilt
  body
    block content
    footer
      block footer
"""

PAGE = """
extends layout

block content
  #container
    | Hello Gilt

block footer
  .footer
    | Copyright XXX
\tinclude inc
"""

TEMPLATES = {
    "layout": LAYOUT,
    "page": PAGE,
    "inc": "p This is an included line.",
}


def test_extends_and_include():
    compiler = Compiler.from_strings(TEMPLATES)
    assert compiler.generate("page") == (
        "<!DOCTYPE html><html><head><title>Gilt</title></head><body>"
        '<div id="container">Hello Gilt</div>'
        '<footer><div class="footer">Copyright XXX</div>'
        "<p>This is an included line.</p></footer>"
        "</body></html>"
    )


def test_layout_alone_renders_empty_blocks():
    compiler = Compiler.from_strings(TEMPLATES)
    assert compiler.generate("layout") == (
        "<!DOCTYPE html><html><head><title>Gilt</title></head><body>"
        "<footer></footer></body></html>"
    )


def test_missing_override_renders_nothing():
    templates = dict(TEMPLATES, page="extends layout\nblock content\n  p only")
    html = Compiler.from_strings(templates).generate("page")
    assert "<p>only</p>" in html
    assert "<footer></footer>" in html


def test_three_level_chain():
    """Each block is resolved one hop down the chain."""
    compiler = Compiler.from_strings(
        {
            "base": "html\n  block content",
            "mid": "extends base\n\nblock content\n  main\n    block inner",
            "leaf": "extends mid\n\nblock inner\n  p leaf",
        }
    )
    assert compiler.generate("leaf") == "<html><main><p>leaf</p></main></html>"


def test_generation_is_idempotent():
    compiler = Compiler.from_strings(TEMPLATES)
    assert compiler.generate("page") == compiler.generate("page")


def test_include_parameters_are_embedded():
    compiler = Compiler.from_strings(
        {"page": 'div\n  include card name=Foo title="A B"', "card": "h2 %{title}\np Hi %{name} %{x}"}
    )
    assert compiler.generate("page") == "<div><h2>A B</h2><p>Hi Foo %{x}</p></div>"


def test_missing_include_reports_include_line():
    compiler = Compiler.from_strings({"page": "div\n  include nope"})
    with pytest.raises(CompositionError, match="template not found: nope") as exc_info:
        compiler.generate("page")
    assert exc_info.value.line_no == 2
    assert exc_info.value.path == "page"


def test_cyclic_include():
    compiler = Compiler.from_strings({"a": "div\n  include b", "b": "include a"})
    with pytest.raises(CompositionError, match="cyclic include: a -> b -> a"):
        compiler.generate("a")


def test_self_include():
    compiler = Compiler.from_strings({"a": "include a"})
    with pytest.raises(CompositionError, match="cyclic include"):
        compiler.generate("a")


def test_block_may_include_its_own_layout():
    """The included copy is parsed fresh, without the child linked under it."""
    compiler = Compiler.from_strings(
        {
            "layout": "html\n  block content",
            "page": "extends layout\nblock content\n  include layout",
        }
    )
    assert compiler.generate("page") == "<html><html></html></html>"


def test_layout_including_its_child_is_a_cycle():
    compiler = Compiler.from_strings(
        {
            "layout": "html\n  include page\n  block content",
            "page": "extends layout\nblock content\n  p",
        }
    )
    with pytest.raises(CompositionError, match="cyclic include: page -> page"):
        compiler.generate("page")


def test_same_include_twice_is_not_a_cycle():
    compiler = Compiler.from_strings({"a": "include b\ninclude b", "b": "br"})
    assert compiler.generate("a") == "<br></br><br></br>"


def test_generate_string():
    assert generate_string("p\n  = name") == "<p>{{name}}</p>"


def test_compile_and_render_loop():
    templates = {
        "list": "ul\n  {% for item in items %}\n    li {{ item }}\n  {% endfor %}"
    }
    compiled = compile_string(templates, "list")
    assert isinstance(compiled, jinja2.Template)
    assert compiled.render(items=[1, 2]) == "<ul>\n<li>1</li>\n<li>2</li>\n</ul>"


def test_render_output_expression():
    compiler = Compiler.from_strings({"hello": "p\n  | Hello,\n  = name"})
    assert compiler.render("hello", {"name": "World"}) == "<p>Hello,World</p>"


def test_helpers_are_exposed():
    compiler = Compiler.from_strings(
        {"p": "p {{ shout('hi') }}"}, helpers={"shout": str.upper}
    )
    assert compiler.render("p") == "<p>HI</p>"


def test_custom_delimiters():
    config = GiltConfig(variable_start="[[", variable_end="]]")
    compiler = Compiler.from_strings({"p": "p\n  = name"}, config=config)
    assert compiler.generate("p") == "<p>[[name]]</p>"
    assert compiler.render("p", {"name": "Ann"}) == "<p>Ann</p>"


def test_autoescape():
    config = GiltConfig(autoescape=True)
    compiler = Compiler.from_strings({"p": "p\n  = text"}, config=config)
    assert compiler.render("p", {"text": "<b>"}) == "<p>&lt;b&gt;</p>"


def test_strict_undefined():
    config = GiltConfig(strict_undefined=True)
    compiler = Compiler.from_strings({"p": "= missing"}, config=config)
    with pytest.raises(jinja2.UndefinedError):
        compiler.render("p")


def test_jinja_syntax_error_becomes_handoff_error():
    compiler = Compiler.from_strings({"broken": "{% if x %}\n  p"})
    with pytest.raises(CompileHandoffError) as exc_info:
        compiler.compile("broken")
    assert exc_info.value.path == "broken"
    assert exc_info.value.line_no is not None


def test_compiled_templates_are_cached():
    compiler = Compiler.from_strings({"p": "p"}, config=GiltConfig(cache=True))
    assert compiler.compile("p") is compiler.compile("p")

    first = compiler.compile("p")
    compiler.clear_cache()
    assert compiler.compile("p") is not first


def test_without_cache_templates_are_recompiled():
    compiler = Compiler.from_strings({"p": "p"})
    assert compiler.compile("p") is not compiler.compile("p")
