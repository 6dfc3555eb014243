"""Renderer - serializes a parsed Template into markup with action placeholders."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, List, Optional, Tuple

from gilt.ast.node import Kind, Node
from gilt.ast.template import Template
from gilt.errors import CompositionError

if TYPE_CHECKING:
    from gilt.compiler.resolver import Resolver


DOCTYPES = {
    "html": "<!DOCTYPE html>",
    "xml": '<?xml version="1.0" encoding="utf-8" ?>',
    "transitional": '<!DOCTYPE html PUBLIC "-//W3C//DTD XHTML 1.0 Transitional//EN" "http://www.w3.org/TR/xhtml1/DTD/xhtml1-transitional.dtd">',
    "strict": '<!DOCTYPE html PUBLIC "-//W3C//DTD XHTML 1.0 Strict//EN" "http://www.w3.org/TR/xhtml1/DTD/xhtml1-strict.dtd">',
    "frameset": '<!DOCTYPE html PUBLIC "-//W3C//DTD XHTML 1.0 Frameset//EN" "http://www.w3.org/TR/xhtml1/DTD/xhtml1-frameset.dtd">',
    "1.1": '<!DOCTYPE html PUBLIC "-//W3C//DTD XHTML 1.1//EN" "http://www.w3.org/TR/xhtml11/DTD/xhtml11.dtd">',
    "basic": '<!DOCTYPE html PUBLIC "-//W3C//DTD XHTML Basic 1.1//EN" "http://www.w3.org/TR/xhtml-basic/xhtml-basic11.dtd">',
    "mobile": '<!DOCTYPE html PUBLIC "-//WAPFORUM//DTD XHTML Mobile 1.2//EN" "http://www.openmobilealliance.org/tech/DTD/xhtml-mobile12.dtd">',
}


class Renderer:
    """Renders Template trees to text.

    Output always comes from the outermost template of an extends chain;
    ``block`` references are replaced by the matching block of the direct
    child template, one hop at a time.

    Args:
        resolver: Loads ``include`` targets. Needed only for templates that
            include others.
        variable_start: Opening delimiter for ``= expr`` output lines.
        variable_end: Closing delimiter for ``= expr`` output lines.
    """

    def __init__(
        self,
        resolver: Optional["Resolver"] = None,
        variable_start: str = "{{",
        variable_end: str = "}}",
    ):
        self.resolver = resolver
        self.variable_start = variable_start
        self.variable_end = variable_end

    def render(self, template: Template) -> str:
        """Render ``template`` (through its parents) to a string."""
        out: List[str] = []
        self._render_template(template, out, (template.path,))
        return "".join(out)

    def render_node(self, node: Node) -> str:
        """Render a single node and its children."""
        out: List[str] = []
        template = node.owner_template()
        self._render_node(node, out, (template.path,) if template else ())
        return "".join(out)

    def _render_template(
        self, template: Template, out: List[str], stack: Tuple[str, ...]
    ) -> None:
        # Parents share the include stack of the template that extends them
        self._render_nodes(template.root.nodes, out, stack)

    def _render_nodes(
        self, nodes: Iterable[Node], out: List[str], stack: Tuple[str, ...]
    ) -> None:
        for node in nodes:
            self._render_node(node, out, stack)

    def _render_node(self, node: Node, out: List[str], stack: Tuple[str, ...]) -> None:
        kind = node.effective_kind

        if kind is Kind.COMMENT:
            return
        if kind in (Kind.CONTENT, Kind.EXPRESSION):
            out.append(node.text + "\n")
            self._render_nodes(node.children, out, stack)
        elif kind is Kind.OUTPUT_EXPRESSION:
            out.append(f"{self.variable_start}{node.literal_value}{self.variable_end}")
            self._render_nodes(node.children, out, stack)
        elif kind is Kind.LITERAL:
            out.append(node.literal_value)
        elif kind is Kind.BLOCK:
            self._render_block(node, out, stack)
        elif kind is Kind.INCLUDE:
            self._render_include(node, out, stack)
        else:
            self._render_tag(node, out, stack)

    def _render_block(self, node: Node, out: List[str], stack: Tuple[str, ...]) -> None:
        template = node.owner_template()
        sub = template.sub if template is not None else None
        override = sub.blocks.get(node.name) if sub is not None else None
        if override is None:
            self._render_nodes(node.children, out, stack)
        else:
            self._render_nodes(override.nodes, out, stack)

    def _render_include(
        self, node: Node, out: List[str], stack: Tuple[str, ...]
    ) -> None:
        current = node.owner_template()
        current_path = current.path if current is not None else None
        if self.resolver is None:
            raise CompositionError(
                f"can not include {node.name!r}: no resolver configured",
                line_no=node.line_no,
                path=current_path,
            )

        try:
            included = self.resolver.resolve_include(node.name, current)
        except CompositionError as exc:
            if exc.line_no is None and exc.path is None:
                exc.line_no = node.line_no
                exc.path = current_path
            raise

        if included.path in stack:
            cycle = " -> ".join(stack + (included.path,))
            raise CompositionError(
                f"cyclic include: {cycle}", line_no=node.line_no, path=current_path
            )

        buf: List[str] = []
        self._render_template(included, buf, stack + (included.path,))
        out.append(node.embed_map.embed("".join(buf)))

    def _render_tag(self, node: Node, out: List[str], stack: Tuple[str, ...]) -> None:
        if node.tag == "doctype":
            text = node.text_value
            out.append(DOCTYPES.get(text, f"<!DOCTYPE {text}>"))
            self._render_nodes(node.children, out, stack)
            return

        out.append(self.open_tag(node))
        if node.text_values:
            out.append(node.text_value)
        self._render_nodes(node.children, out, stack)
        out.append(f"</{node.tag}>")

    @staticmethod
    def open_tag(node: Node) -> str:
        parts = [f"<{node.tag}"]
        if node.id:
            parts.append(f' id="{node.id}"')
        if node.classes:
            classes = " ".join(node.classes)
            parts.append(f' class="{classes}"')
        for key, value in node.attributes.items():
            parts.append(f' {key}="{value}"')
        for attr in node.single_attributes:
            parts.append(f" {attr}")
        parts.append(">")
        return "".join(parts)
