"""Parser - builds a Template tree from indented source lines.

Indentation is the number of leading tabs plus half the leading spaces, in any
order. Nesting follows three rules depending on the enclosing line:

- tags and actions take children exactly one level deeper;
- raw content (``script``, ``style``, ``tag.``) swallows every deeper line;
- ``block`` references take no children at all.

A first line ``extends <name>`` makes the template a child template: its
top-level ``block <name>`` lines then define override bodies.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple, Union

from gilt.ast.node import DEFAULT_EXPRESSION_MARKS, Block, ChildAppendable, Kind, Node
from gilt.ast.template import Template
from gilt.ast.tokenizer import tokenize
from gilt.errors import CompositionError, GiltError, StructureError

if TYPE_CHECKING:
    from gilt.compiler.resolver import Resolver

log = logging.getLogger(__name__)

HEADER_TOKENS = 2


def normalize_newlines(source: str) -> str:
    """Convert CRLF and lone CR line endings to LF."""
    return source.replace("\r\n", "\n").replace("\r", "\n")


def indent_of(line: str) -> int:
    """Count leading indentation units: each tab, and each pair of spaces."""
    tabs = 0
    spaces = 0
    for char in line:
        if char == "\t":
            tabs += 1
        elif char == " ":
            spaces += 1
        else:
            break
    return tabs + spaces // 2


def is_blank(line: str) -> bool:
    return not line.strip()


class _TreeBuilder:
    """Walks the lines of one template once, never backtracking."""

    def __init__(
        self,
        lines: List[str],
        template: Template,
        expression_marks: Sequence[Tuple[str, str]],
    ):
        self.lines = lines
        self.template = template
        self.expression_marks = expression_marks
        self.pos = 0

    def at_end(self) -> bool:
        return self.pos >= len(self.lines)

    def append_child(self, target: ChildAppendable) -> None:
        """Turn the current line into a node under ``target`` and descend."""
        line = self.lines[self.pos]
        parent = target if isinstance(target, Node) else None
        node = Node.create(
            line,
            line_no=self.pos + 1,
            indent=indent_of(line),
            parent=parent,
            template=self.template if parent is None else None,
            block=target if isinstance(target, Block) else None,
            expression_marks=self.expression_marks,
        )
        target.append_child(node)
        self.pos += 1
        self.append_children(node, node.indent, node.raw_content, node.kind)

    def append_children(
        self,
        target: Union[Node, Block],
        depth: int,
        raw_content: bool,
        kind: Kind,
    ) -> None:
        while not self.at_end():
            line = self.lines[self.pos]
            if is_blank(line):
                self.pos += 1
                continue

            indent = indent_of(line)
            if indent <= depth:
                return

            line_no = self.pos + 1
            if raw_content or kind is Kind.CONTENT:
                self.append_child(target)
            elif kind is Kind.BLOCK:
                raise StructureError(
                    "invalid indent: block statements can not have child elements",
                    line_no=line_no,
                )
            elif indent == depth + 1:
                self.append_child(target)
            else:
                raise StructureError("invalid indent", line_no=line_no)


class Parser:
    """Parses template source into a Template.

    Args:
        resolver: Loads the parent template named by an ``extends`` line.
            Without one, templates that extend others can't be parsed.
        expression_marks: Delimiter pairs that mark a whole line as an action.
    """

    def __init__(
        self,
        resolver: Optional["Resolver"] = None,
        expression_marks: Sequence[Tuple[str, str]] = DEFAULT_EXPRESSION_MARKS,
    ):
        self.resolver = resolver
        self.expression_marks = tuple(expression_marks)

    def parse(
        self, source: str, path: str = "", chain: Tuple[str, ...] = ()
    ) -> Template:
        """Parse ``source`` into a Template identified by ``path``.

        Args:
            source: Template text.
            path: Identifier of the template (file path or name).
            chain: Identifiers of the templates currently being extended,
                innermost last. Used to reject cyclic ``extends``.

        Returns:
            The parsed template, linked to its parent if it extends one.

        Raises:
            GiltError: On the first malformed line; ``path`` is filled in.
        """
        template = Template(path=path)
        lines = normalize_newlines(source).split("\n")
        builder = _TreeBuilder(lines, template, self.expression_marks)
        try:
            self._build(builder, chain)
        except GiltError as exc:
            if exc.path is None:
                exc.path = path
            raise
        return template

    def _build(self, builder: _TreeBuilder, chain: Tuple[str, ...]) -> None:
        template = builder.template
        first = True
        while not builder.at_end():
            line = builder.lines[builder.pos]
            if is_blank(line):
                builder.pos += 1
                continue

            line_no = builder.pos + 1
            if indent_of(line) != 0:
                raise StructureError("invalid indent", line_no=line_no)

            tokens = tokenize(line.strip())
            if tokens[0] == "extends":
                if not first:
                    raise StructureError(
                        "extends must be the first statement", line_no=line_no
                    )
                _expect_header(tokens, line_no)
                try:
                    parent = self._resolve_super(tokens[1], template, chain)
                except CompositionError as exc:
                    if exc.line_no is None and exc.path is None:
                        exc.line_no = line_no
                    raise
                template.extend(parent)
                builder.pos += 1
            elif tokens[0] == "block" and template.super is not None:
                _expect_header(tokens, line_no)
                if tokens[1] in template.blocks:
                    raise StructureError(
                        f"block {tokens[1]!r} is defined twice", line_no=line_no
                    )
                block = Block(name=tokens[1])
                template.add_block(block)
                builder.pos += 1
                builder.append_children(block, 0, False, Kind.TAG)
            else:
                if template.super is not None:
                    log.debug(
                        "%s:%d: statement outside of a block is not rendered",
                        template.path,
                        line_no,
                    )
                builder.append_child(template)
            first = False

    def _resolve_super(
        self, name: str, template: Template, chain: Tuple[str, ...]
    ) -> Template:
        if self.resolver is None:
            raise CompositionError(f"can not load {name!r}: no resolver configured")
        return self.resolver.resolve_super(name, template, chain + (template.path,))


def _expect_header(tokens: List[str], line_no: int) -> None:
    if len(tokens) != HEADER_TOKENS:
        raise StructureError(
            "line tokens length is invalid "
            f"(expected: {HEADER_TOKENS}, actual: {len(tokens)})",
            line_no=line_no,
        )
